"""Rebuild trace events."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class RebuildEventKind(str, Enum):
    """Steps of a surface rebuild that are recorded in the trace."""

    REQUEST = "request"
    INSTRUMENT = "instrument"
    RENDER = "render"
    BUILD = "build"
    ENHANCE = "enhance"
    CORRELATE = "correlate"
    INSTALL = "install"
    DISCARD = "discard"
    ERROR = "error"
    NOTE = "note"


def _utc_iso_z_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_event(
    kind: RebuildEventKind | str,
    message: str,
    *,
    data: dict | None = None,
    refs: list[str] | None = None,
    generation: int | None = None,
) -> dict:
    """Create a trace event dict; unknown kinds raise ``ValueError``."""

    event = {
        "event_id": uuid4().hex,
        "ts": _utc_iso_z_now(),
        "kind": RebuildEventKind(kind).value,
        "message": message,
        "data": data,
        "refs": refs,
    }
    if generation is not None:
        event["generation"] = generation
    return event
