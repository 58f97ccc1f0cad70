"""JSON log lines for OnePasswordItem reconciliation.

Every resource event is one JSON object on stdout. Connect credentials and
vault field values are redacted before the line is written, so the
payload of a derived secret never ends up in the operator's logs.
"""

import json
import logging
import os
import sys
from typing import Any

# Keys whose values are replaced wholesale, at any nesting depth
REDACTED_KEYS = frozenset({
    "token",
    "connect_token",
    "password",
    "value",
    "data",
    "string_data",
})

REDACTED = "***REDACTED***"


def setup_structured_logging(level: int | str | None = None) -> None:
    """Configure the root logger for one JSON message per line.

    Args:
        level: Log level; defaults to the LOG_LEVEL environment variable, then INFO
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured event about one OnePasswordItem."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
        **kwargs,
    }
    logger.log(level, json.dumps(sanitize_secrets(log_data), default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of log_data with credential and payload keys redacted."""
    sanitized: dict[str, Any] = {}
    for key, value in log_data.items():
        if key.lower() in REDACTED_KEYS:
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_secrets(value)
        else:
            sanitized[key] = value
    return sanitized
