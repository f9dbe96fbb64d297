import logging

import structlog

from app.config import settings


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure structlog once for the whole process."""
    level_name = (level or settings.log_level).strip().upper()
    log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)
    use_json = settings.log_json if json_output is None else json_output

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # aiosqlite logs every proxied call at debug level
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
