# filemanager/logging.py
import json
import logging
import re
from typing import Any, Dict

PII_RE = re.compile(r"([\w\.-]+)@([\w\.-]+)")  # naive email redaction
GOOGLE_KEY_RE = re.compile(r"AIza[0-9A-Za-z_\-]{20,}")


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_str(s: str) -> str:
    s = GOOGLE_KEY_RE.sub("[redacted-key]", s)
    return PII_RE.sub("[redacted-email]", s)


def redact_args(args: Dict[str, Any]) -> Dict[str, Any]:
    safe = json.loads(json.dumps(args, default=str))  # shallow copy via JSON
    for k, v in list(safe.items()):
        if isinstance(v, str):
            safe[k] = redact_str(v)
    return safe


def log_action(logger: logging.Logger, operation: str, args: Dict[str, Any]):
    logger.info("action %s %s", operation, redact_args(args))
