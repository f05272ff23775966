"""Core orchestration for the voice chat client."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .encoding import encode_recording
from .event_loop import EventLoop
from .exceptions import VoiceChatError
from .interfaces import PlaybackSink, Transport
from .models import Recording
from .recording import RecordingController
from .session import SessionClient

logger = logging.getLogger(__name__)

START_COMMAND = "s"
STOP_COMMAND = "q"
EXIT_COMMAND = "e"


class VoiceChatApp:
    """
    Session context for one run: loop, connection, speaker, session and recorder.

    Compose this class with concrete implementations; the CLI harness wires the
    sounddevice, soundfile and websocket-client backed ones. All methods run on
    the event loop thread.

    Usage:
        app = VoiceChatApp(loop=loop, transport=conn, sink=sink, session=session, recorder=controller)
        app.run()
    """

    def __init__(
        self,
        *,
        loop: EventLoop,
        transport: Transport,
        sink: PlaybackSink,
        session: SessionClient,
        recorder: RecordingController,
        encode: Callable[[Recording], str] = lambda recording: encode_recording(recording.path),
    ) -> None:
        self._loop = loop
        self._transport = transport
        self._sink = sink
        self._session = session
        self._recorder = recorder
        self._encode = encode
        self._exited = False

    @property
    def exited(self) -> bool:
        return self._exited

    def prompt(self) -> None:
        print(f"Enter ({START_COMMAND}) to start recording or ({EXIT_COMMAND}) to exit program:")

    def handle_line(self, line: str) -> None:
        command = line.strip().lower()
        if command == START_COMMAND:
            self.start_recording()
        elif command == STOP_COMMAND:
            self.stop_recording()
        elif command == EXIT_COMMAND:
            self.exit()

    def start_recording(self) -> None:
        try:
            recording = self._recorder.start()
        except Exception as exc:
            logger.error("Could not start recording: %s", exc)
            return
        print(f"Recording to {recording.path}...")
        print(f"Enter ({STOP_COMMAND}) to stop recording or ({EXIT_COMMAND}) to exit program:")

    def stop_recording(self) -> None:
        try:
            recording = self._recorder.stop()
        except Exception as exc:
            logger.error("Could not finalize recording: %s", exc)
            return
        if recording is not None:
            print("Recording stopped.\n")

    def send_recording(self, recording: Recording) -> None:
        """Encode a finished recording and submit it as one turn."""
        logger.info("Starting conversation turn with %s", recording.path)
        try:
            payload = self._encode(recording)
            self._session.send_audio(payload)
        except VoiceChatError as exc:
            logger.error("Could not send %s: %s", recording.path.name, exc)
            self.prompt()
        except (OSError, RuntimeError) as exc:
            logger.error("Could not read %s: %s", recording.path, exc)
            self.prompt()

    def exit(self) -> None:
        if self._exited:
            return
        self._exited = True
        print("Exiting program...")
        self._recorder.abort()
        self._session.close()
        if self._transport.is_open:
            self._transport.close()
        try:
            self._sink.close()
        except Exception as exc:
            logger.warning("Error stopping speaker: %s", exc)
        self._loop.stop()

    def run(self, connect: Optional[Callable[[], None]] = None) -> None:
        """Open the speaker, optionally start the connection, and process events until exit."""
        self._sink.open()
        if connect is not None:
            connect()
        self.prompt()
        try:
            self._loop.run()
        except KeyboardInterrupt:
            print()
            self.exit()
