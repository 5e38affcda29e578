"""Debounced writes of streamed text into a visible message field."""

import threading
from typing import Callable, Optional, Protocol

from diffscribe.config import FLUSH_INTERVAL_SECONDS


class MessageField(Protocol):
    """The user-visible text field a generation writes into."""

    def get_text(self) -> str: ...

    def set_text(self, text: str) -> None: ...


class DebouncedFlusher:
    """Buffers streamed text and copies it into a field after a quiet period.

    Each update restarts the timer; the field is overwritten with the full
    buffered text once no update arrives for ``interval`` seconds. close()
    cancels the timer and flushes synchronously, and must run on every exit
    path of a generation.
    """

    def __init__(
        self,
        field: MessageField,
        interval: float = FLUSH_INTERVAL_SECONDS,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
    ):
        self._field = field
        self._interval = interval
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._text = ""
        self._dirty = False
        self._closed = False
        self._timer: Optional[threading.Timer] = None

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    def push(self, delta: str) -> None:
        """Append a delta to the buffer."""
        if not delta:
            return
        with self._lock:
            self._text += delta
            self._schedule_locked()

    def replace(self, text: str) -> None:
        """Overwrite the buffer with text."""
        with self._lock:
            self._text = text
            self._schedule_locked()

    def flush(self) -> None:
        """Write pending text to the field now."""
        with self._lock:
            self._cancel_timer_locked()
            self._flush_locked()

    def close(self) -> None:
        """Cancel the timer, flush, and ignore further updates."""
        with self._lock:
            self._cancel_timer_locked()
            self._flush_locked()
            self._closed = True

    def _schedule_locked(self) -> None:
        if self._closed:
            return
        self._dirty = True
        self._cancel_timer_locked()
        timer = self._timer_factory(self._interval, self.flush)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _flush_locked(self) -> None:
        if self._dirty and not self._closed:
            self._field.set_text(self._text)
            self._dirty = False
