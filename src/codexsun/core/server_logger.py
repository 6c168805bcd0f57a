"""
Server log formatting.

Log records are serialized to one JSON object per line by JsonLogHandler
and written to a LogStream, which turns each line back into a readable
console line with format_server_log. Anything that is not a JSON object
is printed as-is.
"""
import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional, TextIO

# Attributes passed through logger.*(..., extra={...}) that end up in the record
EXTRA_FIELDS = ("reqId", "req", "res", "responseTime")


def _format_time(value: Any) -> str:
    try:
        moment = datetime.fromtimestamp(float(value) / 1000.0)
    except (TypeError, ValueError, OverflowError, OSError):
        moment = datetime.now()
    return moment.strftime("%H:%M:%S")


def format_server_log(log: Dict[str, Any]) -> str:
    """
    Render a structured log record as a single console line.

    Example:
        [14:02:11] INFO   request completed GET /health -> 200 (1.3ms)
    """
    level = str(log.get("level", "info")).upper()
    parts = [f"[{_format_time(log.get('time'))}]", f"{level:<6}"]

    msg = log.get("msg")
    if msg:
        parts.append(str(msg))

    req = log.get("req") or {}
    res = log.get("res") or {}
    if isinstance(req, dict) and req.get("method"):
        parts.append(f"{req['method']} {req.get('url', '')}")
    if isinstance(res, dict) and res.get("statusCode") is not None:
        parts.append(f"-> {res['statusCode']}")
    if isinstance(log.get("responseTime"), (int, float)):
        parts.append(f"({log['responseTime']:.1f}ms)")

    line = " ".join(parts)

    err = log.get("err")
    if isinstance(err, dict):
        detail = err.get("stack") or f"{err.get('type', 'Error')}: {err.get('message', '')}"
        line += "\n" + "\n".join(f"    {row}" for row in str(detail).rstrip().splitlines())
    return line


def server_logger(message: str, out: Optional[TextIO] = None) -> None:
    """Print a timestamped banner line, e.g. the startup message."""
    stamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{stamp}] {message}", file=out or sys.stdout, flush=True)


class LogStream:
    """Stream adapter that pretty-prints JSON log lines."""

    def __init__(self, out: Optional[TextIO] = None):
        self._out = out

    @property
    def out(self) -> TextIO:
        # Resolved lazily so pytest's capsys/capfd replacement of sys.stdout is honoured
        return self._out or sys.stdout

    def write(self, msg: str) -> None:
        for raw in msg.splitlines():
            text = raw.strip()
            if not text:
                continue
            try:
                log = json.loads(text)
            except ValueError:
                log = None
            if isinstance(log, dict):
                print(format_server_log(log), file=self.out, flush=True)
            else:
                print(text, file=self.out, flush=True)

    def flush(self) -> None:
        self.out.flush()


class JsonLogHandler(logging.Handler):
    """Logging handler that emits each record as a JSON line to a LogStream."""

    def __init__(self, stream: Optional[LogStream] = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.stream = stream or LogStream()

    def to_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "level": record.levelname.lower(),
            "time": int(record.created * 1000),
            "pid": os.getpid(),
            "name": record.name,
            "msg": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["err"] = {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack": self.format_exception(record),
            }
        return payload

    def format_exception(self, record: logging.LogRecord) -> str:
        formatter = self.formatter or logging.Formatter()
        return formatter.formatException(record.exc_info)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.stream.write(json.dumps(self.to_dict(record), default=str) + "\n")
        except Exception:
            self.handleError(record)


def setup_logging(settings=None, stream: Optional[LogStream] = None) -> logging.Logger:
    """Route all logging through a JsonLogHandler at the configured level."""
    level_name = settings.log_level if settings is not None else "INFO"
    handler = JsonLogHandler(stream)
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    # Reduce httpx logging verbosity
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("codexsun")
