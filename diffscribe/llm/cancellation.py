"""Cooperative cancellation."""

import threading
from typing import Callable, Optional

from diffscribe.llm.exceptions import AbortedError


class CancellationToken:
    """A thread-safe cancellation flag.

    A child token reports cancelled when it or any ancestor is cancelled;
    cancelling a child never affects its parent.
    """

    def __init__(self, parent: Optional["CancellationToken"] = None):
        self._event = threading.Event()
        self._parent = parent
        # Reentrant: cancel() may run from a signal handler on the same thread
        self._lock = threading.RLock()
        self._callbacks: list[Callable[[], None]] = []
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def child(self) -> "CancellationToken":
        """Create a token that is also cancelled when this one is."""
        return CancellationToken(parent=self)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run callback once when this token or an ancestor is cancelled.

        The callback runs immediately if the token is already cancelled.

        Args:
            callback: Called without arguments on the cancelling thread.

        Returns:
            A function that unregisters the callback.
        """
        fired = threading.Lock()

        def once() -> None:
            if fired.acquire(blocking=False):
                callback()

        tokens = []
        token: Optional[CancellationToken] = self
        while token is not None:
            with token._lock:
                token._callbacks.append(once)
            tokens.append(token)
            token = token._parent

        def remove() -> None:
            for registered in tokens:
                with registered._lock:
                    if once in registered._callbacks:
                        registered._callbacks.remove(once)

        if self.cancelled:
            remove()
            once()
        return remove

    def raise_if_cancelled(self) -> None:
        """Raise AbortedError if this token or an ancestor is cancelled."""
        if self.cancelled:
            reason = self.reason
            if reason is None and self._parent is not None:
                reason = self._parent.reason
            raise AbortedError(reason=reason)
