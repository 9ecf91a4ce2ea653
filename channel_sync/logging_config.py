"""
structlog setup shared by the API and the scripts.

JSON lines at INFO, a colored console at DEBUG. Vendor credentials travel
through many call sites, so any event field named like a secret is masked
before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from channel_sync.config import LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

SECRET_FIELDS = frozenset(
    {"access_token", "refresh_token", "api_key", "client_secret", "secret", "sign", "password"}
)
MASK = "***"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask secret-named fields, including one level down in dict values."""
    for key, value in event_dict.items():
        if key in SECRET_FIELDS and value:
            event_dict[key] = MASK
        elif isinstance(value, dict):
            event_dict[key] = {
                k: MASK if k in SECRET_FIELDS and v else v for k, v in value.items()
            }
    return event_dict


def _renderer() -> Processor:
    if LOG_LEVEL == "INFO":
        return cast(Processor, structlog.processors.JSONRenderer())
    return cast(Processor, structlog.dev.ConsoleRenderer(colors=True))


def setup_logging() -> None:
    """Configure stdlib logging and structlog for the process."""
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )
    # urllib3 logs every pooled vendor request at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.dev.set_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
