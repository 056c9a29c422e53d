import json
import logging
from datetime import datetime, timezone
from typing import Any

BASE_LOGGER = "kjoreskole_admin"


def configure_logging(level: str = "INFO") -> None:
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format="%(message)s")
    # project loggers do not propagate, so the root level never reaches them
    logging.getLogger(BASE_LOGGER).setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    base = logging.getLogger(BASE_LOGGER)
    if base.level == logging.NOTSET:
        base.setLevel(logging.INFO)
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    outcome: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "outcome": outcome,
    }
    payload.update(fields)
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
