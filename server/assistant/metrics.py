"""JSONL event log for conversation metrics."""

import json
import logging
import threading
import time
from pathlib import Path

log = logging.getLogger(__name__)


class MetricsLogger:
    """Buffered, thread-safe JSONL writer.

    Responses are produced in worker threads, so every buffer access goes
    through one lock. I/O and serialization problems are logged (rate
    limited) and never raised to the caller.
    """

    def __init__(self, metrics_config: dict):
        self._enabled = bool(metrics_config.get("enabled", True))
        self._file_path = Path(metrics_config.get("file", "metrics.jsonl"))
        try:
            flush_interval = int(metrics_config.get("flush_interval", 10))
        except (TypeError, ValueError):
            flush_interval = 10
        self._flush_interval = max(1, flush_interval)

        self._pending: list[str] = []
        self._lock = threading.Lock()
        self._events_since_flush = 0
        self._dropped_events = 0
        self._last_warn_s: float | None = None
        self._warn_interval_s = 30.0

        if self._enabled:
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                self._enabled = False
                self._warn("metrics directory %s is not writable, metrics disabled", self._file_path.parent)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def dropped_events(self) -> int:
        return self._dropped_events

    def log(self, event_type: str, **data) -> None:
        """Record one event; written on the next flush."""
        if not self._enabled:
            return

        record = {"timestamp": time.time(), "event": event_type, **data}
        try:
            line = json.dumps(record, ensure_ascii=False)
        except (TypeError, ValueError):
            self._dropped_events += 1
            self._warn("could not serialize metrics event %r, dropped", event_type)
            return

        with self._lock:
            self._pending.append(line)
            self._events_since_flush += 1
            if self._events_since_flush >= self._flush_interval:
                self._write_pending()

    def flush(self) -> None:
        with self._lock:
            self._write_pending()

    def _write_pending(self) -> None:
        """Append buffered lines to the file. Caller holds the lock."""
        self._events_since_flush = 0
        if not self._pending:
            return
        try:
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.writelines(line + "\n" for line in self._pending)
        except (OSError, ValueError) as exc:
            self._dropped_events += len(self._pending)
            self._warn("metrics flush to %s failed (%s), events dropped", self._file_path, exc)
        finally:
            self._pending.clear()

    def _warn(self, message: str, *args) -> None:
        now = time.monotonic()
        if self._last_warn_s is not None and now - self._last_warn_s < self._warn_interval_s:
            return
        self._last_warn_s = now
        log.warning(message, *args)
