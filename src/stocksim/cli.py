from __future__ import annotations
import sys

from .config import SimConfig
from .log import configure_logging
from .session import Session


def main() -> int:
    cfg = SimConfig.from_env()
    configure_logging(cfg.log_level, cfg.log_file)
    return Session(cfg).run()


if __name__ == "__main__":
    sys.exit(main())
