import signal
import threading
from contextlib import contextmanager
from typing import Callable, List

from voiceflow.utils.errors import Cancelled
from voiceflow.utils.logger import log


class AbortSignal:
    """
    Cooperative cancellation token shared by reference.

    ``abort()`` is idempotent: callbacks registered with ``on_abort`` run
    exactly once, on the first call. Blocking owners either poll
    ``aborted`` / ``wait()`` or register a callback that unblocks them
    (closing a socket, terminating a process).
    """

    def __init__(self):
        self._event = threading.Event()
        # Reentrant: the OS signal handler calls abort() on the main thread,
        # possibly while that thread is inside on_abort or _remove
        self._lock = threading.RLock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                log.debug(f"Abort callback failed: {e}")

    def on_abort(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register ``callback`` to run on abort; runs immediately if already
        aborted. Returns a function that unregisters it.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove(callback)
        callback()
        return lambda: None

    def _remove(self, callback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: float = None) -> bool:
        return self._event.wait(timeout)

    def raise_if_aborted(self, message: str = "Operation cancelled") -> None:
        if self._event.is_set():
            raise Cancelled(message)


def raise_if_aborted(abort_signal, message: str = "Operation cancelled") -> None:
    if abort_signal is not None:
        abort_signal.raise_if_aborted(message)


@contextmanager
def bind_os_signals(abort_signal: AbortSignal, signals=(signal.SIGINT, signal.SIGTERM)):
    """
    Translate OS interrupts into ``abort_signal`` for the duration of a session.

    The handler aborts the token and raises ``Cancelled`` in the main thread
    so that a blocking read or prompt returns immediately; worker threads
    observe the token. Previous handlers are restored on exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield abort_signal
        return

    def _handler(signum, frame):
        log.info(f"Received signal {signum}, aborting session")
        abort_signal.abort()
        raise Cancelled()

    previous = {}
    for sig in signals:
        try:
            previous[sig] = signal.signal(sig, _handler)
        except (ValueError, OSError) as e:
            log.debug(f"Cannot bind handler for {sig}: {e}")

    try:
        yield abort_signal
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
