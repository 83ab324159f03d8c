# src/taskmaster_ai/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Console floor per logger prefix; first match wins. Anything unlisted is third-party.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("taskmaster_ai.tasks.task_store", logging.WARNING),
    ("taskmaster_ai.llm.", logging.WARNING),
    ("taskmaster_ai.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)
_THIRD_PARTY_FLOOR = logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable: pipeline and command logs pass through, while
    store and oracle chatter (per-call SQL, model attempts) stays in the file log.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name.startswith(prefix):
                return record.levelno >= floor
        return record.levelno >= _THIRD_PARTY_FLOOR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskmaster",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 2_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console handler (filtered, short format) plus a rotating DEBUG file log
    `taskmaster.log` in `log_dir`. Returns the log file path.

    Call once at startup; existing root handlers are replaced.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskmaster.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s [%(threadName)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # The openai SDK logs every HTTP request at INFO through httpx.
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
