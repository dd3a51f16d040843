from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# Logger name -> level relative to the app level (None = follow the app level).
_LOGGER_LEVELS: dict[str, int | None] = {
    "uvicorn": None,
    "uvicorn.access": None,
    "conflicts": None,
    "services": None,
    "sqlalchemy.engine": logging.WARNING,
}


def _resolve_level(environment: str, override: str | None) -> int:
    if override:
        level = logging.getLevelName(override.strip().upper())
        if isinstance(level, int):
            return level
    return logging.INFO if environment == "production" else logging.DEBUG


def _rotating_file(log_dir: Path, formatter: logging.Formatter, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / "schedules.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(*, environment: str, level: str | None = None, log_dir: Path | None = None) -> None:
    """Configure process-wide logging once.

    Development and test log to the console at DEBUG, which includes the
    name of every conflict check that rejects a candidate. Production logs
    at INFO to the console and to a rotating `logs/schedules.log`.
    `level` (LOG_LEVEL) overrides the environment default.
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or "development").strip().lower()
    app_level = _resolve_level(env, level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler()
    console.setLevel(app_level)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if env == "production":
        handlers.append(_rotating_file(log_dir or Path(BACKEND_DIR) / "logs", formatter, app_level))

    logging.basicConfig(level=app_level, handlers=handlers)

    for name, fixed in _LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(app_level if fixed is None else fixed)
