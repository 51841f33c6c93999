from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def setup_logging(level: str, logfile: str = "", console_level: str | None = None):
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)

    # Repeated CLI invocations in one process (tests) must not stack handlers.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(LOG_FORMAT)

    if logfile:
        Path(logfile).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(getattr(logging, (console_level or level).upper(), log_level))
    ch.setFormatter(fmt)
    root.addHandler(ch)

    # urllib3 retries/connection chatter is noise at INFO.
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))

    root.debug("logging initialized")
