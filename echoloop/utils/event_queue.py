"""Single-consumer event queue for the engine thread.

Device completion notifications arrive on the PortAudio thread and user
commands on the terminal reader thread. Both are posted here and run in
order by the one thread that owns the playback engine.
"""

import queue
from typing import Any, Callable, Optional


class EventQueue:
    """Queue of callables executed by a single consumer thread."""

    def __init__(self):
        self._queue: "queue.Queue[Callable[[], Any]]" = queue.Queue()

    def post(self, callback: Callable[[], Any]) -> None:
        """Schedule a callable. Safe to call from any thread."""
        self._queue.put(callback)

    def run_next(self, timeout: Optional[float] = None) -> bool:
        """Run the next pending callable.

        Args:
            timeout: Seconds to wait for an item; None blocks

        Returns:
            True if a callable was run, False on timeout
        """
        try:
            callback = self._queue.get(timeout=timeout)
        except queue.Empty:
            return False
        callback()
        return True

    def drain(self) -> int:
        """Run everything that is already pending.

        Returns:
            Number of callables run
        """
        count = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return count
            callback()
            count += 1

    def pending(self) -> int:
        return self._queue.qsize()
