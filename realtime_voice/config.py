"""Configuration helpers for the realtime voice chat client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_REALTIME_URL = "wss://api.openai.com/v1/realtime?model=gpt-4o-realtime-preview-2024-10-01"

DEFAULT_INSTRUCTIONS = (
    "You are a compassionate, non-judgmental virtual therapy assistant trained to support users by "
    "actively listening, asking thoughtful questions, and reflecting emotions. Your goal is to help users "
    "explore their thoughts and feelings, promote self-awareness, and provide emotional support. You are "
    "not a licensed therapist and must always remind users that for urgent mental health needs or "
    "diagnoses, they should seek help from a qualified mental health professional. Avoid giving medical "
    "advice, making diagnoses, or promising outcomes. Speak in a calm, warm, and empathetic tone. Ask "
    "open-ended questions to guide users in their own reflection. Keep answers concise, and ensure the "
    "conversation stays supportive and respectful."
)


@dataclass
class AppConfig:
    """
    Runtime configuration for the client.

    Attributes:
        api_key: Bearer token sent as `Authorization: Bearer <token>`.
        project: Optional project identifier sent as the `OpenAI-Project` header.
        realtime_url: WebSocket endpoint of the realtime API, including the model query.
        instructions: System instructions sent in `session.update` once the session exists.
        recording_dir: Directory that receives `output-<n>.wav` recordings.
        record_sample_rate: Microphone capture rate in Hz.

    Usage:
        >>> config = AppConfig.from_env()
        >>> config.recording_dir
        'recording'
    """

    api_key: Optional[str]
    project: Optional[str]
    realtime_url: str
    instructions: str
    recording_dir: str
    record_sample_rate: int

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Build an :class:`AppConfig` from environment variables.

        Supported variables:
            - OPENAI_API_KEY: Bearer credential for the realtime API.
            - OPENAI_PROJECT: Project identifier (falls back to PROJECT).
            - REALTIME_URL: WebSocket endpoint (default: gpt-4o realtime preview).
            - REALTIME_INSTRUCTIONS: Instructions sent once the session is created.
            - REALTIME_RECORDING_DIR: Recording directory (default: "recording").
            - REALTIME_RECORD_SAMPLE_RATE: Capture rate in Hz (default: 24000); recordings are
              resampled to 24 kHz before sending.
        """

        api_key = os.environ.get("OPENAI_API_KEY") or None
        project = os.environ.get("OPENAI_PROJECT") or os.environ.get("PROJECT") or None
        realtime_url = os.environ.get("REALTIME_URL") or DEFAULT_REALTIME_URL
        instructions = os.environ.get("REALTIME_INSTRUCTIONS") or DEFAULT_INSTRUCTIONS
        recording_dir = os.environ.get("REALTIME_RECORDING_DIR") or "recording"
        sample_rate_raw = os.environ.get("REALTIME_RECORD_SAMPLE_RATE", "24000")
        try:
            record_sample_rate = int(sample_rate_raw)
        except ValueError as exc:
            raise ValueError("REALTIME_RECORD_SAMPLE_RATE must be an integer") from exc

        return cls(
            api_key=api_key,
            project=project,
            realtime_url=realtime_url,
            instructions=instructions,
            recording_dir=recording_dir,
            record_sample_rate=record_sample_rate,
        )
