"""Protocol interfaces for dependency injection."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Protocol


class PlaybackSink(Protocol):
    """Owns one audio output device fed by a pass-through byte buffer."""

    def open(self) -> None:
        """Allocate a fresh output device, replacing any previous one."""

    def write(self, chunk: bytes) -> None:
        """
        Queue PCM16 bytes for playback.

        Raises:
            PlaybackError: when no device is active.
        """

    def close(self) -> None:
        """Stop the current device."""


class MicrophoneCapture(Protocol):
    """Captures microphone input into a file."""

    def start(self, path: Path) -> None:
        """Begin writing microphone input to ``path``."""

    def stop(self) -> None:
        """Finalize and close the file being written."""


class Transport(Protocol):
    """A persistent bidirectional message connection."""

    @property
    def is_open(self) -> bool:
        """Whether messages can currently be sent."""

    def send_json(self, message: Dict[str, Any]) -> None:
        """Serialize and send one message."""

    def close(self) -> None:
        """Close the connection."""


class Cancellable(Protocol):
    def cancel(self) -> None:
        """Cancel the scheduled call if it has not fired yet."""


class Scheduler(Protocol):
    """Runs callbacks later on the event-processing thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """Schedule ``callback`` after ``delay`` seconds."""
