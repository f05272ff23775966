"""Custom exceptions for the voice chat client."""

from __future__ import annotations


class VoiceChatError(RuntimeError):
    """Base class for errors raised by the voice chat client."""


class PlaybackError(VoiceChatError):
    """Raised when audio is written to a sink that has no active output device."""


class SessionError(VoiceChatError):
    """Raised when the realtime session is used before it is ready."""


class NotConnectedError(SessionError):
    """Raised when a message is sent while the realtime connection is not open."""


class MalformedEventError(ValueError):
    """Raised when an inbound message cannot be parsed into an event."""
