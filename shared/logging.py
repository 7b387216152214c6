"""Single-line JSON logging shared by the API, the mixer and the CLI.

Every line carries ``service`` and ``event``. Any field whose name is a
secret setting, or ends in ``api_key``, is replaced with ``[MASKED]``; the
current value of each secret setting is also scrubbed from string fields,
so a key embedded in a URL or an upstream error message never reaches the
log.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from shared.config import settings

SERVICE_NAME = "recitation"
MASK = "[MASKED]"

_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", settings.LOG_LEVEL).upper(), logging.INFO)
logging.basicConfig(level=_LEVEL, format="%(message)s")

# Names of settings whose values must never be logged.
_SECRET_KEYS = ("OPENAI_API_KEY", "GEMINI_API_KEY")


def _is_secret_field(name: str) -> bool:
    return name in _SECRET_KEYS or name.lower().endswith("api_key")


def _secret_values() -> list[str]:
    # Read at call time so rotated or monkeypatched keys are honoured.
    return [value for key in _SECRET_KEYS if (value := getattr(settings, key, None))]


def _scrub(value: Any, secrets: list[str]) -> Any:
    if isinstance(value, str):
        for secret in secrets:
            value = value.replace(secret, MASK)
    return value


def _log(level: int, event: str, **fields: object) -> None:
    secrets = _secret_values()
    data: dict[str, Any] = {"service": SERVICE_NAME, "event": event}
    for key, value in fields.items():
        data[key] = MASK if _is_secret_field(key) else _scrub(value, secrets)
    logging.log(level, json.dumps(data, default=str))


def log_info(event: str, **fields: object) -> None:
    _log(logging.INFO, event, **fields)


def log_warn(event: str, **fields: object) -> None:
    _log(logging.WARNING, event, **fields)


def log_error(event: str, **fields: object) -> None:
    _log(logging.ERROR, event, **fields)


def log_debug(event: str, **fields: object) -> None:
    _log(logging.DEBUG, event, **fields)


__all__ = ["log_info", "log_warn", "log_error", "log_debug", "SERVICE_NAME", "MASK"]
