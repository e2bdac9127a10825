from __future__ import annotations

import json
import logging
import os
import threading
import traceback
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from ibancheck.utils.config import Settings
from ibancheck.utils.log_context import get_context_fields


class LineCappedFileHandler(logging.Handler):
    """
    Single log file with "ring buffer" behavior:
    - appends normally
    - once it grows beyond max_lines (+ small chunk), it truncates to last max_lines
    """

    def __init__(self, filename: Path, *, max_lines: int = 5000, encoding: str = "utf-8"):
        super().__init__()
        self._filename = Path(filename)
        self._encoding = encoding
        self.max_lines = int(max_lines)
        # trim every N extra lines to avoid rewriting on every emit
        self._trim_chunk = max(10, self.max_lines // 100)
        self._mtx = threading.RLock()
        self._stream = None
        self._line_count = 0
        self._open_and_count()

    def _open_and_count(self) -> None:
        self._filename.parent.mkdir(parents=True, exist_ok=True)
        if self._filename.exists():
            with open(self._filename, "r", encoding=self._encoding, errors="ignore") as rf:
                self._line_count = sum(1 for _ in rf)
        else:
            self._line_count = 0
        self._stream = open(self._filename, "a", encoding=self._encoding, errors="backslashreplace")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if not msg.endswith("\n"):
                msg += "\n"
            with self._mtx:
                if self._stream is None:
                    self._open_and_count()
                self._stream.write(msg)
                self._stream.flush()
                self._line_count += msg.count("\n")
                if self._line_count >= self.max_lines + self._trim_chunk:
                    self._trim_to_last_max_lines()
        except Exception:
            self.handleError(record)

    def _trim_to_last_max_lines(self) -> None:
        self._stream.close()
        self._stream = None
        with open(self._filename, "r", encoding=self._encoding, errors="ignore") as rf:
            tail = deque(rf, maxlen=self.max_lines)
        with open(self._filename, "w", encoding=self._encoding, errors="backslashreplace") as wf:
            wf.writelines(tail)
        self._line_count = len(tail)
        self._stream = open(self._filename, "a", encoding=self._encoding, errors="backslashreplace")

    def close(self) -> None:
        with self._mtx:
            if self._stream is not None:
                self._stream.close()
            self._stream = None
        super().close()


class ContextFilter(logging.Filter):
    """Doplní do každého záznamu aktuální log context (batch, zdroj, index záznamu)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context_fields()
        return True


class JsonLineFormatter(logging.Formatter):
    """Serializuje log record do JSONL pro strojové čtení."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "threadName": record.threadName,
            "event_name": getattr(record, "event_name", None),
            "context": getattr(record, "context", None) or get_context_fields(),
        }

        extra_obj = getattr(record, "extra_payload", None)
        if extra_obj:
            payload["extra"] = extra_obj

        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, ensure_ascii=False, default=str)


_ROOT_CONFIGURED = False
_ROOT_CONFIG_LOCK = threading.Lock()
_TEXT_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s pid=%(process)d tid=%(threadName)s [%(name)s:%(funcName)s:%(lineno)d] %(message)s"


def setup_logging(settings: Settings, name: str = "ibancheck") -> logging.Logger:
    """
    Configures the ``ibancheck`` logger tree once per process:
      <log_dir>/ibancheck.log     text, capped to the last ``log_max_lines`` lines
      <log_dir>/ibancheck.jsonl   JSON lines, twice the cap
    plus console output when ``log_console`` is set.

    Library code only ever calls ``logging.getLogger(__name__)``; handlers live here.
    """
    global _ROOT_CONFIGURED

    logger = logging.getLogger(name)
    with _ROOT_CONFIG_LOCK:
        if not _ROOT_CONFIGURED:
            fmt = logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            ctx_filter = ContextFilter()

            if settings.log_dir is not None:
                log_dir = Path(settings.log_dir)
                log_dir.mkdir(parents=True, exist_ok=True)

                fh = LineCappedFileHandler(log_dir / "ibancheck.log", max_lines=settings.log_max_lines)
                fh.setFormatter(fmt)
                fh.addFilter(ctx_filter)
                logger.addHandler(fh)

                fh_json = LineCappedFileHandler(log_dir / "ibancheck.jsonl", max_lines=settings.log_max_lines * 2)
                fh_json.setFormatter(JsonLineFormatter())
                fh_json.addFilter(ctx_filter)
                logger.addHandler(fh_json)

            if settings.log_console:
                ch = logging.StreamHandler()
                ch.setFormatter(fmt)
                ch.addFilter(ctx_filter)
                logger.addHandler(ch)

            logger.setLevel(logging.DEBUG)
            setattr(logger, "_ibancheck_log_detail", settings.log_detail)
            _ROOT_CONFIGURED = True

    logger.info(
        "Logging initialized: log_dir=%s pid=%s console=%s max_lines=%s detail=%s",
        settings.log_dir,
        os.getpid(),
        int(settings.log_console),
        settings.log_max_lines,
        int(settings.log_detail),
        extra={"event_name": "logging.start"},
    )
    return logger


def _detail_enabled(logger: logging.Logger) -> bool:
    # the flag sits on the configured package logger, walk up to find it
    cur: logging.Logger | None = logger
    while cur is not None:
        flag = getattr(cur, "_ibancheck_log_detail", None)
        if flag is not None:
            return bool(flag)
        cur = cur.parent
    return True


def log_event(logger: logging.Logger, event_name: str, message: str, *, level: int = logging.INFO, **extra: Any) -> None:
    """
    Helper pro strukturované logování:
    - doplní event_name a extra_payload
    - do textového logu přidá čitelný suffix key=value
    """
    if not logger.isEnabledFor(level):
        return
    extra_payload: Dict[str, Any] = extra or {}
    if not _detail_enabled(logger):
        extra_payload = {k: v for k, v in extra_payload.items() if len(repr(v)) <= 400}

    suffix = ""
    if extra_payload:
        suffix = " | " + " ".join(f"{k}={extra_payload[k]!r}" for k in sorted(extra_payload))
    logger.log(
        level,
        f"{message}{suffix}",
        extra={"event_name": event_name, "extra_payload": extra_payload},
    )
