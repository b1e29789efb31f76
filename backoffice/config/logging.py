"""
Logging Configuration

Structured logging on top of the standard library, rendered as JSON lines
or as colored console output.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from backoffice.config.settings import Settings, get_settings


def configure_logging(
    log_level: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Configure structlog and the root logger.
    
    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        settings: Settings to read format and level from; the cached
            environment settings when omitted
    """
    settings = settings or get_settings()
    level = log_level or settings.monitoring.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    
    structlog.configure(
        processors=shared_processors + [
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    
    formatter = ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )
    
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    
    # uvicorn installs its own handlers; route them through ours
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
        uvicorn_logger.setLevel(numeric_level)
    
    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
    )
