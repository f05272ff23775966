"""Realtime session client: outbound requests and inbound event dispatch."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Callable, Optional, Union

from .exceptions import MalformedEventError, NotConnectedError, PlaybackError, SessionError
from .interfaces import Cancellable, PlaybackSink, Scheduler, Transport
from .models import (
    AudioDelta,
    ContentPartDone,
    InboundEvent,
    ResponseDone,
    ServerError,
    SessionCreated,
    UnknownEvent,
    parse_event,
)

logger = logging.getLogger(__name__)

# Heuristic drain period between `response.done` and resetting the speaker.
SINK_RESET_DELAY_SECONDS = 20.0


class SessionClient:
    """
    Owns the realtime session state for one process run.

    Outbound, it turns an encoded recording into a `conversation.item.create`
    plus `response.create` pair and pushes instructions once the session
    exists. Inbound, :meth:`handle_message` parses each frame and routes it by
    kind: audio to the playback sink, transcripts to the console, completion
    to a delayed sink reset.

    Usage:
        session = SessionClient(transport=conn, sink=sink, scheduler=loop, instructions="Be brief.")
        conn.on_message = session.handle_message
        session.send_audio(encode_recording(path))
    """

    def __init__(
        self,
        *,
        transport: Transport,
        sink: PlaybackSink,
        scheduler: Scheduler,
        instructions: str,
        reset_delay: float = SINK_RESET_DELAY_SECONDS,
        on_turn_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self._transport = transport
        self._sink = sink
        self._scheduler = scheduler
        self._instructions = instructions
        self._reset_delay = reset_delay
        self._on_turn_complete = on_turn_complete
        self._session_id: Optional[str] = None
        self._audio = bytearray()
        self._pending_reset: Optional[Cancellable] = None

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def retained_audio(self) -> bytes:
        """PCM16 bytes received for the current turn."""
        return bytes(self._audio)

    @property
    def reset_pending(self) -> bool:
        return self._pending_reset is not None

    # Outbound

    def send_audio(self, payload: str) -> None:
        """
        Submit one recording as user input and ask for a response.

        Raises:
            NotConnectedError: when the transport is not open. Nothing is queued.
        """
        if not self._transport.is_open:
            raise NotConnectedError("Cannot send audio: realtime connection is not open")

        self.cancel_pending_reset()
        self._audio = bytearray()
        self._transport.send_json(
            {
                "type": "conversation.item.create",
                "item": {
                    "type": "message",
                    "role": "user",
                    "content": [
                        {
                            "type": "input_audio",
                            "audio": payload,
                        }
                    ],
                },
            }
        )
        self._transport.send_json({"type": "response.create"})
        logger.info("Sent recording (%d base64 chars) and requested a response", len(payload))

    def send_session_config(self, instructions: str) -> None:
        """
        Push behavioral instructions with `session.update`.

        Raises:
            SessionError: when no session has been created yet.
        """
        if self._session_id is None:
            raise SessionError("Cannot update the session before `session.created` is received")
        if not self._transport.is_open:
            raise NotConnectedError("Cannot send instructions: realtime connection is not open")

        self._transport.send_json({"type": "session.update", "session": {"instructions": instructions}})
        logger.info("Sent custom instructions to the model.")

    # Inbound

    def handle_message(self, message: Union[str, bytes]) -> None:
        """Parse and dispatch one inbound frame. Never raises."""
        try:
            event = parse_event(message)
        except MalformedEventError as exc:
            logger.error("Dropping malformed message: %s", exc)
            return

        try:
            self.dispatch(event)
        except (SessionError, PlaybackError) as exc:
            logger.error("Failed to handle %s: %s", event.kind.value, exc)

    def dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, SessionCreated):
            self._on_session_created(event)
        elif isinstance(event, AudioDelta):
            self._on_audio_delta(event)
        elif isinstance(event, ContentPartDone):
            self._on_content_part_done(event)
        elif isinstance(event, ResponseDone):
            self._on_response_done()
        elif isinstance(event, ServerError):
            self._on_server_error(event)
        elif isinstance(event, UnknownEvent):
            logger.info("Unhandled event type: %s", event.type)
        else:  # pragma: no cover - closed variant
            raise TypeError(f"Unsupported event: {event!r}")

    def _on_session_created(self, event: SessionCreated) -> None:
        self._session_id = event.session_id
        logger.info("Session created with ID: %s", self._session_id)
        self.send_session_config(self._instructions)

    def _on_audio_delta(self, event: AudioDelta) -> None:
        try:
            chunk = base64.b64decode(event.delta, validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.error("Dropping audio delta with invalid base64: %s", exc)
            return
        self._audio.extend(chunk)
        self._sink.write(chunk)

    def _on_content_part_done(self, event: ContentPartDone) -> None:
        if event.transcript:
            print(f"Assistant: {event.transcript}\n")

    def _on_response_done(self) -> None:
        logger.info("Response done (%d bytes of audio); resetting speaker in %.0fs", len(self._audio), self._reset_delay)
        self.cancel_pending_reset()
        self._pending_reset = self._scheduler.call_later(self._reset_delay, self._reset_sink)

    def _on_server_error(self, event: ServerError) -> None:
        logger.error("API error: %s (code=%s, param=%s)", event.message, event.code, event.param)

    def _reset_sink(self) -> None:
        self._pending_reset = None
        try:
            self._sink.close()
            self._sink.open()
        except Exception as exc:
            logger.error("Could not reset speaker: %s", exc)
        finally:
            self._audio = bytearray()
            if self._on_turn_complete:
                self._on_turn_complete()

    def cancel_pending_reset(self) -> None:
        pending, self._pending_reset = self._pending_reset, None
        if pending is not None:
            pending.cancel()
            logger.debug("Cancelled pending speaker reset")

    def close(self) -> None:
        self.cancel_pending_reset()
