"""FastAPI application factory."""

from fastapi import FastAPI

from storefront.infrastructure.api.routers import orders, payments
from storefront.utils import settings
from storefront.utils.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Storefront",
        version="1.0.0",
    )

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    # Include routers
    app.include_router(payments.router)
    app.include_router(orders.router)

    return app


app = create_app()
