"""Logging setup for hosts that have not configured logging themselves."""

from __future__ import annotations

import logging
from typing import Optional

from .config import LOG_LEVEL


def configure_logging(level: Optional[str] = None) -> bool:
    """Attach a stdout handler to the root logger if it has none.

    Returns ``True`` when a handler was installed.
    """

    root = logging.getLogger()
    if root.handlers:
        return False
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    return True
