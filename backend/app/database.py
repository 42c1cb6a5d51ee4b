from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from app.core.config import settings
from app.utils.errors import InternalError
import os
import time
import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

if os.getenv("PYTEST_RUN") == "1":
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
else:
    SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL

is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")


def configure_sqlite_engine(target: Engine) -> Engine:
    """Apply pragmas and explicit transaction control to a SQLite engine.

    Transactions are opened by the "begin" hook below. Plain reads get a
    deferred ``BEGIN``; a connection carrying the ``sqlite_begin`` execution
    option (see ``run_in_transaction``) starts with ``BEGIN IMMEDIATE`` so it
    holds the write lock before its first read. The booking overlap check and
    the insert that follows it therefore run without another writer slipping
    in between.
    """

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-redef]
        # Hand transaction control to SQLAlchemy so the "begin" hook decides
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA busy_timeout=15000;")
        cursor.close()

    @event.listens_for(target, "begin")
    def _begin(conn):  # type: ignore[no-redef]
        mode = conn.get_execution_options().get("sqlite_begin")
        conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")

    return target


pool_kwargs = {
    # Avoid stale idle connections causing first-hit failures after inactivity
    "pool_pre_ping": True,
}
if is_sqlite:
    connect_args = {"check_same_thread": False, "timeout": 15}
else:
    connect_args = {}
    pool_kwargs.update({
        "pool_size": int(os.getenv("DB_POOL_SIZE") or 6),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW") or 6),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE") or 300),
    })

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    **pool_kwargs,
)
if is_sqlite:
    configure_sqlite_engine(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_busy_error(exc: OperationalError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return "database is locked" in message or "database is busy" in message


def run_in_transaction(
    db: Session,
    work: Callable[[Session], T],
    retries: int | None = None,
    backoff: float | None = None,
) -> T:
    """Run ``work`` and commit, retrying transient lock errors.

    Any transaction already open on ``db`` is committed first so the unit
    starts fresh, as a writer. Any exception rolls the whole unit back.
    Busy/locked errors are retried with exponential backoff and surface as
    ``InternalError`` once retries run out; other errors propagate
    immediately.
    """
    retries = retries or settings.DB_BUSY_RETRIES
    backoff = settings.DB_BUSY_BACKOFF_SECONDS if backoff is None else backoff
    for attempt in range(1, retries + 1):
        try:
            if db.in_transaction():
                db.commit()
            db.connection(execution_options={"sqlite_begin": "IMMEDIATE"})
            result = work(db)
            db.commit()
            return result
        except OperationalError as exc:
            db.rollback()
            if not is_busy_error(exc):
                raise
            if attempt == retries:
                logger.error("Database still busy after %s attempts: %s", retries, exc)
                raise InternalError("The database is busy, please try again") from exc
            logger.warning(
                "Database busy on attempt %s/%s, retrying: %s", attempt, retries, exc
            )
            time.sleep(backoff * (2 ** (attempt - 1)))
        except Exception:
            db.rollback()
            raise
    raise RuntimeError("unreachable")  # pragma: no cover
