"""Retry policy for outbound HTTP calls."""

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests


def http_retry(attempts: int = 3, min_wait: float = 0.3, max_wait: float = 3):
    """Retry on transport errors and on 5xx raised via ``raise_for_status``."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(requests.RequestException),
    )
