"""Shared dataclasses and the inbound event variants."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import MalformedEventError


@dataclass(frozen=True)
class Recording:
    """
    A finalized microphone recording on disk.

    Attributes:
        path: Location of the WAV file.
        ordinal: Counter value used in the file name (``output-<ordinal>.wav``).
    """

    path: Path
    ordinal: int


class EventKind(str, Enum):
    """Inbound event kinds recognized by the session client."""

    SESSION_CREATED = "session.created"
    AUDIO_DELTA = "response.audio.delta"
    CONTENT_PART_DONE = "response.content_part.done"
    RESPONSE_DONE = "response.done"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SessionCreated:
    session_id: str
    kind: EventKind = field(default=EventKind.SESSION_CREATED, init=False)


@dataclass(frozen=True)
class AudioDelta:
    """One base64 fragment of synthesized PCM16 audio."""

    delta: str
    kind: EventKind = field(default=EventKind.AUDIO_DELTA, init=False)


@dataclass(frozen=True)
class ContentPartDone:
    transcript: Optional[str]
    kind: EventKind = field(default=EventKind.CONTENT_PART_DONE, init=False)


@dataclass(frozen=True)
class ResponseDone:
    kind: EventKind = field(default=EventKind.RESPONSE_DONE, init=False)


@dataclass(frozen=True)
class ServerError:
    """Error descriptor reported by the remote service."""

    message: Optional[str]
    code: Optional[str]
    param: Optional[str]
    kind: EventKind = field(default=EventKind.ERROR, init=False)


@dataclass(frozen=True)
class UnknownEvent:
    type: str
    raw: Dict[str, Any]
    kind: EventKind = field(default=EventKind.UNKNOWN, init=False)


InboundEvent = Union[SessionCreated, AudioDelta, ContentPartDone, ResponseDone, ServerError, UnknownEvent]


def parse_event(text: Union[str, bytes]) -> InboundEvent:
    """
    Parse a raw WebSocket frame into a typed inbound event.

    Raises:
        MalformedEventError: when the frame is not a JSON object with a ``type`` tag,
            or a recognized kind is missing its required fields.
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedEventError(f"Invalid JSON frame: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedEventError(f"Expected a JSON object, got {type(payload).__name__}")
    event_type = payload.get("type")
    if not isinstance(event_type, str):
        raise MalformedEventError("Frame has no 'type' field")

    if event_type == EventKind.SESSION_CREATED.value:
        session = _require_dict(payload, "session")
        session_id = session.get("id")
        if not isinstance(session_id, str) or not session_id:
            raise MalformedEventError("Session created frame has no session id")
        return SessionCreated(session_id=session_id)

    if event_type == EventKind.AUDIO_DELTA.value:
        delta = payload.get("delta")
        if not isinstance(delta, str):
            raise MalformedEventError("Audio delta has no 'delta' string")
        return AudioDelta(delta=delta)

    if event_type == EventKind.CONTENT_PART_DONE.value:
        part = payload.get("part") or {}
        transcript = part.get("transcript") if isinstance(part, dict) else None
        return ContentPartDone(transcript=transcript)

    if event_type == EventKind.RESPONSE_DONE.value:
        return ResponseDone()

    if event_type == EventKind.ERROR.value:
        error = payload.get("error") or {}
        if not isinstance(error, dict):
            error = {"message": str(error)}
        return ServerError(
            message=error.get("message"),
            code=error.get("code"),
            param=error.get("param"),
        )

    return UnknownEvent(type=event_type, raw=payload)


def _require_dict(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise MalformedEventError(f"'{payload.get('type')}' frame has no '{key}' object")
    return value
