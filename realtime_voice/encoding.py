"""PCM16 + base64 audio encoding for the realtime API."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np

Samples = Union[Sequence[float], np.ndarray]

# Largest multiple of 3 that fits in 32 KiB: each piece encodes without
# interior padding, so the joined output equals a single-call encoding.
BASE64_CHUNK_SIZE = 0x8000 - (0x8000 % 3)

# Rate of `pcm16` audio exchanged with the realtime API.
API_SAMPLE_RATE = 24000


def float_to_pcm16(samples: Samples) -> bytes:
    """
    Convert float samples in [-1.0, 1.0] to little-endian signed 16-bit PCM.

    Samples are clamped first. Negative values scale by 32768 and non-negative
    values by 32767, so -1.0 maps to -32768 and 1.0 to 32767 without overflow.
    Fractional results truncate toward zero.
    """
    audio = np.asarray(samples, dtype=np.float64).reshape(-1)
    audio = np.clip(np.nan_to_num(audio, nan=0.0), -1.0, 1.0)
    scaled = np.where(audio < 0, audio * 32768.0, audio * 32767.0)
    return np.trunc(scaled).astype("<i2").tobytes()


def pcm16_to_float(data: bytes) -> np.ndarray:
    """Inverse of :func:`float_to_pcm16`, returning float32 samples."""
    pcm = np.frombuffer(data, dtype="<i2").astype(np.float32)
    return np.where(pcm < 0, pcm / 32768.0, pcm / 32767.0).astype(np.float32)


def base64_encode_audio(samples: Samples) -> str:
    """
    Encode float samples as the base64 PCM16 payload expected by `input_audio`.

    Usage:
        >>> base64_encode_audio([0.0, 1.0])
        'AAD/fw=='
    """
    raw = float_to_pcm16(samples)
    pieces = []
    for offset in range(0, len(raw), BASE64_CHUNK_SIZE):
        pieces.append(base64.b64encode(raw[offset:offset + BASE64_CHUNK_SIZE]).decode("ascii"))
    return "".join(pieces)


def base64_decode_audio(payload: str) -> np.ndarray:
    return pcm16_to_float(base64.b64decode(payload))


def read_wav(path: Union[str, Path]) -> Tuple[np.ndarray, int]:
    """Decode a WAV file and return its first channel as float32 samples plus its rate."""
    sf = _lazy_import_soundfile()
    data, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
    return data[:, 0], int(sample_rate)


def read_wav_channel(path: Union[str, Path]) -> np.ndarray:
    return read_wav(path)[0]


def resample(samples: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Linear-interpolation resampling of mono float samples."""
    if src_rate == dst_rate or len(samples) == 0:
        return samples
    dst_length = int(round(len(samples) * float(dst_rate) / float(src_rate)))
    src_positions = np.arange(len(samples), dtype=np.float64)
    dst_positions = np.linspace(0, len(samples) - 1, dst_length, dtype=np.float64)
    return np.interp(dst_positions, src_positions, samples).astype(np.float32)


def encode_recording(path: Union[str, Path], sample_rate: int = API_SAMPLE_RATE) -> str:
    """
    Read a finished recording and return its base64 PCM16 payload.

    Recordings made at any other rate are resampled to ``sample_rate``, since
    `input_audio` is interpreted as 24 kHz mono PCM16.
    """
    samples, recorded_rate = read_wav(path)
    return base64_encode_audio(resample(samples, recorded_rate, sample_rate))


def _lazy_import_soundfile():
    try:
        import soundfile as sf  # type: ignore
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise RuntimeError("soundfile is required to read recordings. Install via pip.") from exc
    return sf
