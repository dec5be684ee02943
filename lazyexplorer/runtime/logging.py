"""Logging setup for the explorer runtime.

Library modules only call ``logging.getLogger(__name__)``; the CLI decides
where records go through ``configure_logging``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, TextIO

LOG_DIR_ENV = "LAZYEXPLORER_LOG_DIR"
LOG_FILENAME = "lazyexplorer.log"


def configure_logging(
    *,
    level: str = "warning",
    stream: TextIO | None = None,
    log_dir: Path | None = None,
    filename: str = LOG_FILENAME,
) -> None:
    """Install one root handler; a ``NullHandler`` when no sink is configured."""
    normalized = level.strip().upper()
    level_value = getattr(logging, normalized, logging.WARNING)
    formatter = logging.Formatter("%(levelname)s %(name)s %(message)s")

    root = logging.getLogger()
    root.setLevel(level_value)
    if root.handlers:
        return

    if stream is None:
        env_dir = os.environ.get(LOG_DIR_ENV)
        if env_dir:
            log_dir = Path(env_dir)
        if log_dir is None:
            root.addHandler(logging.NullHandler())
            return
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    payload = {"event": event, **fields}
    logger.info(json.dumps(payload, sort_keys=True, default=str))
