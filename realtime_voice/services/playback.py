"""Speaker playback sink backed by a sounddevice raw output stream."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Optional

from ..exceptions import PlaybackError
from ..interfaces import PlaybackSink

logger = logging.getLogger(__name__)


class SinkState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


class PassThroughBuffer:
    """
    Byte FIFO between the session thread and the audio callback thread.

    ``read`` never blocks; when fewer bytes are buffered than requested the
    result is padded with silence.
    """

    def __init__(self) -> None:
        self._data = bytearray()
        self._lock = threading.Lock()

    def write(self, chunk: bytes) -> None:
        with self._lock:
            self._data.extend(chunk)

    def read(self, size: int) -> bytes:
        with self._lock:
            out = bytes(self._data[:size])
            del self._data[:size]
        if len(out) < size:
            out += b"\x00" * (size - len(out))
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class SoundDevicePlaybackSink(PlaybackSink):
    """
    Plays PCM16 mono audio as it arrives.

    Args:
        sample_rate: Output rate in Hz. The realtime API streams 24 kHz audio.
        channels: Number of output channels.

    Usage:
        sink = SoundDevicePlaybackSink()
        sink.open()
        sink.write(pcm_bytes)
        sink.close()
    """

    def __init__(self, *, sample_rate: int = 24000, channels: int = 1, drain_slack: float = 0.5) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.drain_slack = drain_slack
        self._stream: Optional[Any] = None
        self._buffer: Optional[PassThroughBuffer] = None
        self._closing: Optional[threading.Event] = None
        self._drained: Optional[threading.Event] = None
        self._state = SinkState.UNINITIALIZED

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def buffered_bytes(self) -> int:
        return len(self._buffer) if self._buffer is not None else 0

    def open(self) -> None:
        if self._state is SinkState.ACTIVE:
            self._shutdown_stream()

        sd = _lazy_import_sounddevice()
        buffer = PassThroughBuffer()
        closing = threading.Event()
        drained = threading.Event()
        frame_bytes = 2 * self.channels

        def callback(outdata, frames, time_info, status):
            if status:
                logger.debug("Playback status: %s", status)
            outdata[:] = buffer.read(frames * frame_bytes)
            if closing.is_set() and len(buffer) == 0:
                raise sd.CallbackStop

        stream = sd.RawOutputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="int16",
            callback=callback,
            finished_callback=drained.set,
        )
        stream.start()
        self._stream = stream
        self._buffer = buffer
        self._closing = closing
        self._drained = drained
        self._state = SinkState.ACTIVE
        logger.debug("Opened playback device at %d Hz", self.sample_rate)

    def write(self, chunk: bytes) -> None:
        if self._state is not SinkState.ACTIVE or self._buffer is None:
            raise PlaybackError(f"Cannot write audio to a {self._state.value} playback sink")
        self._buffer.write(chunk)

    def close(self) -> None:
        """Play out buffered audio, then stop the device."""
        if self._state is not SinkState.ACTIVE:
            return
        self._state = SinkState.CLOSED
        self._drain()
        self._shutdown_stream()
        logger.debug("Closed playback device")

    def _drain(self) -> None:
        if self._closing is None or self._drained is None:
            return
        pending = self.buffered_bytes
        self._closing.set()
        if pending == 0:
            return
        timeout = pending / (2 * self.channels * self.sample_rate) + self.drain_slack
        if not self._drained.wait(timeout):
            logger.warning("Playback did not drain within %.1fs; dropping %d bytes", timeout, self.buffered_bytes)

    def _shutdown_stream(self) -> None:
        stream, self._stream = self._stream, None
        self._buffer = None
        self._closing = None
        self._drained = None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()


def _lazy_import_sounddevice():
    try:
        import sounddevice as sd  # type: ignore
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise RuntimeError("sounddevice is required for audio playback. Install via pip.") from exc
    return sd
