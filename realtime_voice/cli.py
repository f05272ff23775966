"""CLI harness for the realtime voice chat client."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from .config import AppConfig
from .event_loop import EventLoop
from .pipeline import VoiceChatApp
from .recording import RecordingController
from .services.console import ConsoleInput
from .services.mic_recorder import SoundDeviceRecorder
from .services.playback import SoundDevicePlaybackSink
from .services.realtime_connection import RealtimeConnection
from .session import SessionClient


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # websocket-client logs every frame at DEBUG
    logging.getLogger("websocket").setLevel(logging.INFO if verbose else logging.WARNING)


def build_app(config: AppConfig, loop: EventLoop) -> tuple[VoiceChatApp, RealtimeConnection]:
    """Wire up the client with the sounddevice, soundfile and websocket-client implementations."""
    if not config.api_key:
        raise RuntimeError("OPENAI_API_KEY must be set.")

    app: Optional[VoiceChatApp] = None
    session: Optional[SessionClient] = None

    connection = RealtimeConnection(
        config.realtime_url,
        api_key=config.api_key,
        project=config.project,
        post=loop.post,
        on_message=lambda message: session.handle_message(message),
    )
    sink = SoundDevicePlaybackSink(sample_rate=24000)
    session = SessionClient(
        transport=connection,
        sink=sink,
        scheduler=loop,
        instructions=config.instructions,
        on_turn_complete=lambda: app.prompt(),
    )
    recorder = RecordingController(
        SoundDeviceRecorder(sample_rate=config.record_sample_rate),
        directory=config.recording_dir,
        on_complete=lambda recording: app.send_recording(recording),
    )
    app = VoiceChatApp(
        loop=loop,
        transport=connection,
        sink=sink,
        session=session,
        recorder=recorder,
    )
    return app, connection


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Talk to a realtime voice model from the terminal.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    config = AppConfig.from_env()
    loop = EventLoop()
    app, connection = build_app(config, loop)
    console = ConsoleInput(post=loop.post, on_line=app.handle_line, on_eof=app.exit)
    console.start()
    app.run(connect=connection.connect)


if __name__ == "__main__":
    main()
