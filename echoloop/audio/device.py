"""Output device boundary used by the playback engine.

The engine treats the output hardware as a capability that can open one
rendering connection for a buffer, close it again, and report when a
connection has rendered to the end.
"""

import itertools
from abc import ABC, abstractmethod
from typing import Callable

from .sample_buffer import SampleBuffer


class DeviceUnavailableError(RuntimeError):
    """Raised when an audio device cannot be opened."""


_handle_ids = itertools.count(1)


class PlaybackHandle:
    """Identifies one device connection.

    Attributes:
        id: Unique, increasing connection number
        closed: Set once the connection has been torn down
    """

    def __init__(self):
        self.id = next(_handle_ids)
        self.closed = False

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"PlaybackHandle(id={self.id}, {state})"


CompletionCallback = Callable[[PlaybackHandle], None]


class OutputDevice(ABC):
    """Abstract output device.

    Implementations must deliver the completion callback on the thread
    that drives the engine, never from inside ``open`` or ``close``.
    """

    @abstractmethod
    def open(
        self,
        buffer: SampleBuffer,
        rate: float,
        gain: float,
        on_complete: CompletionCallback,
    ) -> PlaybackHandle:
        """Open a connection and start rendering a buffer.

        Args:
            buffer: Audio to render from its first sample
            rate: Playback rate multiplier (1.0 = original speed)
            gain: Linear amplitude multiplier
            on_complete: Called with the handle once the buffer has been
                rendered to the end

        Returns:
            Handle of the new connection

        Raises:
            DeviceUnavailableError: If the device cannot be opened
        """
        pass

    @abstractmethod
    def close(self, handle: PlaybackHandle) -> None:
        """Halt rendering and release a connection.

        Closing an already closed handle does nothing.
        """
        pass
