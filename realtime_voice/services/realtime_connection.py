"""WebSocket transport for the realtime conversational API."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, Optional

try:
    import websocket
except ImportError:
    websocket = None  # type: ignore[assignment]

from ..exceptions import NotConnectedError

logger = logging.getLogger(__name__)

Post = Callable[..., None]


class RealtimeConnection:
    """
    Persistent connection to the realtime API built on ``websocket.WebSocketApp``.

    The socket runs on a background thread. Every socket callback is handed to
    ``post`` (normally :meth:`EventLoop.post`) so the handlers run on the
    event-processing thread in arrival order.

    Args:
        url: WebSocket endpoint including the ``model`` query parameter.
        api_key: Bearer credential.
        project: Optional project identifier for the ``OpenAI-Project`` header.
        post: Function used to hand callbacks to the event loop.
        on_message: Called with each raw text frame.
        on_open: Called once the handshake completes.
        on_close: Called when the connection ends for any reason.

    Usage:
        conn = RealtimeConnection(url, api_key="sk-...", post=loop.post, on_message=session.handle_message)
        conn.connect()
    """

    def __init__(
        self,
        url: str,
        *,
        api_key: str,
        post: Post,
        on_message: Callable[[str], None],
        project: Optional[str] = None,
        on_open: Optional[Callable[[], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        if websocket is None:
            raise ImportError(
                "websocket-client is required for the realtime connection. "
                "Install it with: pip install websocket-client"
            )

        self._url = url
        self._api_key = api_key
        self._project = project
        self._post = post
        self._on_message = on_message
        self._on_open = on_open
        self._on_close = on_close
        self._app: Optional[Any] = None
        self._thread: Optional[threading.Thread] = None
        self._open = False
        self._closed_locally = False

    def headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "OpenAI-Beta": "realtime=v1",
        }
        if self._project:
            headers["OpenAI-Project"] = self._project
        return headers

    @property
    def is_open(self) -> bool:
        return self._open

    def connect(self) -> None:
        """Start the socket thread. Failures are reported through the error/close handlers."""
        if self._app is not None:
            return

        logger.info("Connecting to %s...", self._url)
        self._app = websocket.WebSocketApp(
            self._url,
            header=self.headers(),
            on_open=lambda ws: self._post(self._handle_open),
            on_message=lambda ws, message: self._post(self._on_message, message),
            on_error=lambda ws, error: self._post(self._handle_error, error),
            on_close=lambda ws, code, reason: self._post(self._handle_close, code, reason),
        )
        self._thread = threading.Thread(target=self._app.run_forever, name="realtime-socket", daemon=True)
        self._thread.start()

    def send_json(self, message: Dict[str, Any]) -> None:
        if not self._open or self._app is None:
            raise NotConnectedError("Realtime connection is not open")
        try:
            self._app.send(json.dumps(message))
        except websocket.WebSocketConnectionClosedException as exc:
            self._open = False
            raise NotConnectedError("Realtime connection closed while sending") from exc
        logger.debug("Sent %s", message.get("type"))

    def close(self) -> None:
        app, self._app = self._app, None
        self._open = False
        self._closed_locally = True
        if app is None:
            return
        try:
            app.close()
            logger.info("Closed realtime connection")
        except Exception as exc:
            logger.warning("Error closing WebSocket: %s", exc)

    def _handle_open(self) -> None:
        self._open = True
        logger.info("Connected to server.")
        if self._on_open:
            self._on_open()

    def _handle_error(self, error: Any) -> None:
        logger.error("WebSocket error: %s", error)

    def _handle_close(self, code: Optional[int], reason: Optional[str]) -> None:
        was_open = self._open
        self._open = False
        if self._closed_locally:
            logger.debug("Realtime connection closed (code=%s)", code)
        elif was_open:
            logger.info("Realtime connection closed (code=%s, reason=%s)", code, reason)
        else:
            logger.error("Realtime connection could not be established (code=%s, reason=%s)", code, reason)
        if self._on_close:
            self._on_close()
