from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    # stdout belongs to the menu, so log lines go to stderr or a file
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT)
    if log_file is not None:
        logger.add(str(log_file), level="DEBUG", format=_FORMAT, encoding="utf-8")
