"""Microphone recorder that streams sounddevice input into a WAV file."""

from __future__ import annotations

import logging
import queue
from pathlib import Path
from typing import Any, Optional

import numpy as np

from ..interfaces import MicrophoneCapture

logger = logging.getLogger(__name__)


class SoundDeviceRecorder(MicrophoneCapture):
    """
    Records the default microphone until :meth:`stop` is called.

    Audio blocks are queued from the PortAudio callback and drained into the
    file by the caller's thread, so nothing blocks inside the callback.

    Args:
        sample_rate: Capture rate (Hz).
        channels: Number of channels to record.

    Usage:
        recorder = SoundDeviceRecorder(sample_rate=24000)
        recorder.start(Path("recording/output-1.wav"))
        ...
        recorder.stop()
    """

    def __init__(self, *, sample_rate: int = 24000, channels: int = 1) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._stream: Optional[Any] = None
        self._file: Optional[Any] = None
        self._blocks: "queue.Queue[np.ndarray]" = queue.Queue()

    @property
    def active(self) -> bool:
        return self._stream is not None

    def start(self, path: Path) -> None:
        if self.active:
            raise RuntimeError("Recorder is already capturing")

        sd = _lazy_import_sounddevice()
        sf = _lazy_import_soundfile()
        self._blocks = queue.Queue()
        blocks = self._blocks

        def callback(indata, frames, time_info, status):
            if status:
                logger.debug("Capture status: %s", status)
            blocks.put(indata.copy())

        self._file = sf.SoundFile(
            str(path),
            mode="w",
            samplerate=self.sample_rate,
            channels=self.channels,
            subtype="PCM_16",
        )
        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                callback=callback,
            )
            stream.start()
        except Exception:
            self._file.close()
            self._file = None
            raise
        self._stream = stream
        logger.info("Recording to %s at %d Hz", path, self.sample_rate)

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()

        sound_file, self._file = self._file, None
        if sound_file is None:
            return
        try:
            frames = 0
            while True:
                try:
                    block = self._blocks.get_nowait()
                except queue.Empty:
                    break
                sound_file.write(block)
                frames += len(block)
            logger.info("Recorded %.2fs of audio", frames / self.sample_rate)
        finally:
            sound_file.close()


def _lazy_import_sounddevice():
    try:
        import sounddevice as sd  # type: ignore
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise RuntimeError("sounddevice is required for microphone recording. Install via pip.") from exc
    return sd


def _lazy_import_soundfile():
    try:
        import soundfile as sf  # type: ignore
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise RuntimeError("soundfile is required to write recordings. Install via pip.") from exc
    return sf
