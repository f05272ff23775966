"""Console line reader that feeds operator commands to the event loop."""

from __future__ import annotations

import sys
import threading
from typing import Callable, Optional, TextIO


class ConsoleInput:
    """
    Reads stdin on a daemon thread and posts each line to the event loop.

    Args:
        post: Function used to hand callbacks to the event loop.
        on_line: Called with each line (newline included).
        on_eof: Called once when the stream ends.
        stream: Input stream (default: ``sys.stdin``).
    """

    def __init__(
        self,
        *,
        post: Callable[..., None],
        on_line: Callable[[str], None],
        on_eof: Optional[Callable[[], None]] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._post = post
        self._on_line = on_line
        self._on_eof = on_eof
        self._stream = stream
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._read_lines, name="console-input", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _read_lines(self) -> None:
        stream = self._stream if self._stream is not None else sys.stdin
        for line in stream:
            self._post(self._on_line, line)
        if self._on_eof:
            self._post(self._on_eof)
