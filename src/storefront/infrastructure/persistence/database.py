"""Engine, session factory and transaction scope for the SQL repositories."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.domain.exceptions import PersistenceError

Base = declarative_base()


def make_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite files get their directory, ``:memory:`` a shared connection."""
    parsed = make_url(url)
    kwargs = {"echo": echo}

    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    # models must be imported so they register on Base.metadata
    from storefront.infrastructure.persistence import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker, action: str) -> Iterator[Session]:
    """One transaction: commit on success, roll back and raise PersistenceError on failure."""
    try:
        with session_factory.begin() as session:
            yield session
    except SQLAlchemyError as exc:
        raise PersistenceError(f"{action} failed: {exc}") from exc
