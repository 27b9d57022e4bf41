"""Logging setup for authkit.

Records go to stdout, as text or one JSON object per line. ``LOG_LEVEL``
and ``LOG_JSON`` are read straight from the environment so logging can be
configured before settings load.
"""

import json
import logging
import logging.config
import os
import sys
from datetime import UTC, datetime
from typing import Any

# Record attributes copied into JSON output. Passwords and tokens are never
# attached to records, so nothing here needs scrubbing.
LOG_EXTRAS = (
    "provider",
    "uid",
    "error_type",
    "error_code",
    "status_code",
    "method",
    "path",
)

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(
            {key: record.__dict__[key] for key in LOG_EXTRAS if key in record.__dict__}
        )
        return json.dumps(payload, ensure_ascii=False)


def configure_logging() -> None:
    """Install the stdout handler on the root logger.

    Env vars:
    - LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    - LOG_JSON: true/false (default: false)
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_json = os.getenv("LOG_JSON", "false").strip().lower() in {"1", "true", "yes", "on"}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {"format": TEXT_FORMAT},
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if log_json else "text",
                    "stream": sys.stdout,
                }
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                "authkit": {"level": level},
                # HTTP and Google client libraries are chatty at INFO.
                "httpx": {"level": "WARNING"},
                "google": {"level": "WARNING"},
            },
        }
    )
