"""
Logging setup for photojob.

Provides:
    - StructuredFormatter: one JSON object per record, for log shippers.
    - configure_logging: root logger setup used by the command-line runner.

Job lifecycle records carry ``job_id`` and ``metrics`` attributes (passed via
``extra=``); the JSON formatter lifts them into the payload.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Record attributes copied into the JSON payload when present.
STRUCTURED_FIELDS = ("job_id", "metrics")


class StructuredFormatter(logging.Formatter):
    """Serialise a record as a single JSON line.

    Keys: timestamp (UTC, from the record's creation time), level, logger,
    message, plus ``job_id``/``metrics`` when the record carries them and
    ``exception`` when it has exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """Route all records to *stream* (stderr by default), plain or as JSON lines.

    Replaces any handlers already installed on the root logger.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if json_logs:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
