"""Two-state recording controller driven by console commands."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from .interfaces import MicrophoneCapture
from .models import Recording

logger = logging.getLogger(__name__)


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class RecordingController:
    """
    Tracks the open recording and numbers files ``output-<n>.wav``.

    A start while already recording finalizes the open file without sending
    it and begins a new one, so at most one recording is open and every start
    still advances the counter. A stop while idle does nothing.

    Args:
        capture: Microphone capture that writes into a path.
        directory: Where recordings are written; created on first start.
        on_complete: Receives each recording finalized by :meth:`stop`.
    """

    def __init__(
        self,
        capture: MicrophoneCapture,
        *,
        directory: Union[str, Path] = "recording",
        on_complete: Optional[Callable[[Recording], None]] = None,
    ) -> None:
        self._capture = capture
        self._directory = Path(directory)
        self._on_complete = on_complete
        self._ordinal = 0
        self._current: Optional[Recording] = None

    @property
    def state(self) -> RecorderState:
        return RecorderState.RECORDING if self._current is not None else RecorderState.IDLE

    @property
    def ordinal(self) -> int:
        return self._ordinal

    @property
    def current(self) -> Optional[Recording]:
        return self._current

    def start(self) -> Recording:
        if self._current is not None:
            logger.warning("Already recording %s; finalizing it without sending", self._current.path.name)
            self._finalize()

        self._ordinal += 1
        self._directory.mkdir(parents=True, exist_ok=True)
        recording = Recording(path=self._directory / f"output-{self._ordinal}.wav", ordinal=self._ordinal)
        self._capture.start(recording.path)
        self._current = recording
        return recording

    def stop(self) -> Optional[Recording]:
        if self._current is None:
            logger.debug("Stop requested while idle; ignoring")
            return None

        recording = self._finalize()
        if self._on_complete:
            self._on_complete(recording)
        return recording

    def abort(self) -> None:
        """Finalize any open recording without handing it off."""
        if self._current is None:
            return
        try:
            self._finalize()
        except Exception as exc:
            logger.warning("Failed to finalize recording during shutdown: %s", exc)

    def _finalize(self) -> Recording:
        recording, self._current = self._current, None
        assert recording is not None
        self._capture.stop()
        return recording
