import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager


class WallClockTimeout:
    """
    Helper to bound the wall-clock duration of a simulation run.

    When the limit elapses, the stop function is invoked from a helper thread;
    the simulator then finishes the event in progress and returns.
    """

    def __init__(self, timeout: float | None, stop: Callable[[], None]):
        """
        Args:
            timeout: wall-clock timeout in seconds; None disables the limit.
            stop: function to stop the simulator, e.g. `simulator.stop`.
        """
        self.occurred = False
        """Whether the timeout has occurred."""
        self._limit = timeout
        self._stop = stop
        self._cancel = threading.Event()

    def _stop_after_timeout(self):
        if not self._cancel.wait(timeout=self._limit):
            self.occurred = True
            self._stop()

    @contextmanager
    def __call__(self) -> Iterator[None]:
        """Open a context in which to run the simulation."""
        if self._limit is None:
            yield None
            return

        thread = threading.Thread(target=self._stop_after_timeout, daemon=True)
        try:
            thread.start()
            yield None
        finally:
            self._cancel.set()
            thread.join()
