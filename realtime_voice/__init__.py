"""
Realtime voice chat client.

Records microphone audio to a WAV file, sends it to a realtime conversational
API over a persistent WebSocket, and plays back the synthesized reply.
The default entrypoint is ``python -m realtime_voice``.
"""

__all__ = [
    "config",
    "encoding",
    "event_loop",
    "interfaces",
    "models",
    "pipeline",
    "recording",
    "session",
]
