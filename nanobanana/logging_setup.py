"""Logging for nanobanana.

Records go to stderr either as bracketed text (``[ts] [INF] message``) or as
one JSON object per line, and can be duplicated to a log file. The file is
rotated by size before a record is written: the current file is renamed to
``<file>.<YYYYmmdd_HHMMSS>`` and only the newest ``rotate_keep`` rotated
files are kept.
"""
from __future__ import annotations

import glob
import json
import logging
import logging.handlers
import os
import time
from dataclasses import dataclass
from typing import Optional

LOGGER_NAME = "nanobanana"

LEVELS = {
    "error": logging.ERROR,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_SHORT = {
    logging.ERROR: "ERR",
    logging.WARNING: "WRN",
    logging.INFO: "INF",
    logging.DEBUG: "DBG",
}


@dataclass
class LogConfig:
    level: str = "info"
    json: bool = False
    file: Optional[str] = None
    rotate_size: int = 0
    rotate_keep: int = 3
    prog: str = "nanobanana"


def _utc_ts(record: logging.LogRecord) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created))


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        lvl = _SHORT.get(record.levelno, record.levelname)
        return f"[{_utc_ts(record)}] [{lvl}] {record.getMessage()}"


class JsonFormatter(logging.Formatter):
    def __init__(self, prog: str):
        super().__init__()
        self.prog = prog

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "ts": _utc_ts(record),
                "level": record.levelname.lower(),
                "pid": record.process,
                "prog": self.prog,
                "msg": record.getMessage(),
            },
            ensure_ascii=False,
        )


class SizeRotatingFileHandler(logging.handlers.BaseRotatingHandler):
    """Append to a file, rotating it by timestamp suffix once it grows past ``max_bytes``.

    ``max_bytes`` of 0 disables rotation. Not safe with several writing processes.
    """

    def __init__(self, filename: str, max_bytes: int = 0, keep: int = 3, encoding: str = "utf-8"):
        d = os.path.dirname(os.path.abspath(filename))
        os.makedirs(d, exist_ok=True)
        super().__init__(filename, mode="a", encoding=encoding, delay=False)
        self.max_bytes = max_bytes
        self.keep = keep

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        if self.max_bytes <= 0:
            return False
        try:
            return os.path.getsize(self.baseFilename) > self.max_bytes
        except OSError:
            return False

    def rotation_target(self) -> str:
        dst = f"{self.baseFilename}.{time.strftime('%Y%m%d_%H%M%S', time.gmtime())}"
        n = 1
        candidate = dst
        while os.path.exists(candidate):
            candidate = f"{dst}_{n}"
            n += 1
        return candidate

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None
        if os.path.exists(self.baseFilename):
            os.rename(self.baseFilename, self.rotation_target())
        self.stream = self._open()
        self.prune()

    def prune(self) -> None:
        rotated = glob.glob(glob.escape(self.baseFilename) + ".*")
        rotated.sort(key=os.path.getmtime, reverse=True)
        for old in rotated[max(self.keep, 0):]:
            os.remove(old)


def setup_logging(cfg: LogConfig) -> logging.Logger:
    """Configure the package logger once for the run and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(LEVELS.get(cfg.level, logging.INFO))
    logger.propagate = False

    fmt: logging.Formatter = JsonFormatter(cfg.prog) if cfg.json else TextFormatter()
    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(fmt)
    logger.addHandler(stderr_handler)

    if cfg.file:
        file_handler = SizeRotatingFileHandler(cfg.file, max_bytes=cfg.rotate_size, keep=cfg.rotate_keep)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
    return logger
