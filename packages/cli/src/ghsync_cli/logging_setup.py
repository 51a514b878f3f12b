from __future__ import annotations

import logging
import sys


class _ThirdPartyFilter(logging.Filter):
    """Keep ghsync logs; let PyGithub/urllib3 through only at WARNING and above."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("ghsync_"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger with a single timestamped stderr handler.

    The daemon has no log file of its own: `ghsync start` and the LaunchAgent
    both point stderr at ~/.ghsync/daemon.log.

    Call this once, before the first log line. Existing handlers are replaced
    so repeated CLI invocations in one process (tests) don't duplicate output.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ThirdPartyFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
