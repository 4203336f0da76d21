from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from fitadmin.config import get_settings
from fitadmin.errors import BackendError

settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, echo=settings.echo_sql, connect_args=_connect_args)

# Enable WAL mode for better read performance
if settings.database_url.startswith("sqlite") and settings.sqlite_wal:
    with engine.connect() as _conn:
        _conn.exec_driver_sql("PRAGMA journal_mode=WAL")


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(session: Session, operation: str) -> Iterator[None]:
    """Commit everything written inside the block, or nothing.

    SQLAlchemy failures are rolled back and re-raised as ``BackendError``;
    any other exception (e.g. a ``ValidationError`` raised half way through a
    batch) is rolled back and propagated unchanged.
    """
    try:
        yield
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"{operation} failed, transaction rolled back")
        raise BackendError(f"{operation} failed") from exc
    except Exception:
        session.rollback()
        raise
