"""Append-only JSONL trace logger."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Protocol


class EventSink(Protocol):
    """Anything a session can hand rebuild events to."""

    def append(self, event: dict) -> None: ...


class TraceLogger:
    """Write one compact JSON object per line; usable as a context manager."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def __enter__(self) -> "TraceLogger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def append(self, event: dict) -> None:
        line = json.dumps(event, ensure_ascii=False, separators=(",", ":"))
        self._fh.write(line + "\n")

    def extend(self, events: list[dict]) -> None:
        for event in events:
            self.append(event)

    def flush(self) -> None:
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class BestEffortTraceLogger:
    """Trace sink that reports I/O failures through ``warn`` and stops writing.

    A rebuild must never fail because its trace could not be recorded, so the
    first failed open or write disables the sink and keeps the reason in
    ``disabled_reason``.
    """

    def __init__(self, path: str, warn: Callable[[str], None] = print) -> None:
        self.warn = warn
        self.written = 0
        self.disabled_reason: str | None = None
        self._logger: TraceLogger | None = None
        try:
            self._logger = TraceLogger(path)
        except OSError as exc:
            self._disable(f"rebuild trace logging disabled: {exc}")

    @property
    def enabled(self) -> bool:
        return self._logger is not None and self.disabled_reason is None

    def _disable(self, reason: str) -> None:
        self.disabled_reason = reason
        self.warn(f"WARNING: {reason}")

    def append(self, event: dict) -> None:
        if not self.enabled:
            return
        try:
            self._logger.append(event)
        except (OSError, TypeError, ValueError) as exc:
            self._disable(f"rebuild trace logging failed: {exc}")
            return
        self.written += 1

    def close(self) -> None:
        if self._logger is None:
            return
        try:
            self._logger.close()
        except OSError as exc:
            self.warn(f"WARNING: rebuild trace close failed: {exc}")
        self._logger = None


def read_trace(path: str) -> list[dict]:
    """Load every event from a JSONL trace file."""

    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line.strip()]
