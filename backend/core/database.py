from __future__ import annotations

import logging
import time
from typing import Iterable, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings


logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """The database could not be reached (DNS, refused connection, timeout)."""


_RETRY_DELAYS_SECONDS: tuple[float, ...] = (0.2, 0.5, 1.0)

_TRANSIENT_MARKERS = (
    # DNS
    "getaddrinfo failed",
    "could not translate host name",
    "name or service not known",
    # refused / reset / closed
    "connection refused",
    "actively refused",
    "connection reset",
    "server closed the connection unexpectedly",
    # timeouts
    "timeout",
    "timed out",
)


def _exception_chain(exc: BaseException) -> Iterable[BaseException]:
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        yield cur
        cur = cur.__cause__ or cur.__context__


def is_transient_db_connectivity_error(exc: BaseException) -> bool:
    """True when any exception in the chain looks like a connectivity blip.

    Constraint violations and SQL errors never count as transient.
    """

    joined = "\n".join(str(e).lower() for e in _exception_chain(exc))
    return any(marker in joined for marker in _TRANSIENT_MARKERS)


def normalize_database_url(raw: str) -> str:
    url = raw.strip()
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg2://" + url.removeprefix(prefix)
    return url


def get_engine(url: str | None = None) -> Engine:
    url = normalize_database_url(url or settings.database_url)
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            # In-memory databases live on one connection.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    # connect_timeout bounds outages for the session retries and /health.
    return create_engine(url, pool_pre_ping=True, connect_args={"connect_timeout": 3})


ENGINE = get_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False)


def open_session() -> Session:
    """Return a session whose connection answered `SELECT 1`.

    Transient connectivity failures are retried with short backoff; anything
    else, or running out of retries, raises DatabaseUnavailableError.
    """

    delays = iter(_RETRY_DELAYS_SECONDS)
    while True:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            return db
        except OperationalError as exc:
            db.close()
            delay = next(delays, None)
            if delay is None or not is_transient_db_connectivity_error(exc):
                raise DatabaseUnavailableError("Database temporarily unavailable") from exc
            logger.warning("Database ping failed; retrying in %.1fs", delay)
            time.sleep(delay)


def get_db() -> Iterator[Session]:
    # Only the ping is retried; errors raised by the endpoint propagate unchanged.
    db = open_session()
    try:
        yield db
    finally:
        db.close()
