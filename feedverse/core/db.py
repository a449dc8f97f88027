from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from feedverse.core.logging import get_logger
from feedverse.core.settings import get_settings

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


# Global engine instance
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def init_db(database_url: str | None = None) -> None:
    """Initialize database engine and session factory, creating tables if needed."""
    global _engine, _SessionLocal

    if _engine is not None:
        return

    settings = get_settings()
    url = database_url or settings.database_url

    engine_kwargs: dict = {"pool_pre_ping": True, "echo": settings.debug}
    if url.startswith("sqlite"):
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
    else:
        engine_kwargs["pool_size"] = settings.database_pool_size
        engine_kwargs["max_overflow"] = settings.database_max_overflow

    _engine = create_engine(url, **engine_kwargs)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    # Register the feeds table before create_all
    from feedverse.models import schema  # noqa: F401

    Base.metadata.create_all(bind=_engine)
    logger.info("Database initialized successfully")


def get_session_factory() -> sessionmaker:
    """Get the session factory, initializing if necessary."""
    if _SessionLocal is None:
        init_db()
    return _SessionLocal
