"""State types shared by the playback engine and its callers.

The engine reports an explicit status enum and a result for every
operation instead of loose boolean flags, so duplicate play/stop commands
and late device notifications can be handled deterministically.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .sample_buffer import SampleBuffer, TrimWindow

if TYPE_CHECKING:
    from .device import PlaybackHandle


class PlaybackStatus(Enum):
    """Lifecycle of the playback engine.

    IDLE: nothing rendered yet for the current source
    PLAYING: a device connection is rendering
    STOPPED: the last session ended (explicit stop or natural end)
    """

    IDLE = "idle"
    PLAYING = "playing"
    STOPPED = "stopped"


class PlaybackResult(Enum):
    """Outcome of an engine operation."""

    OK = "ok"
    NO_SOURCE = "no_source"
    NOT_PLAYING = "not_playing"
    LOCKED_WHILE_PLAYING = "locked_while_playing"
    DEVICE_UNAVAILABLE = "device_unavailable"

    @property
    def is_error(self) -> bool:
        """True for failures the caller must see (not benign no-ops)."""
        return self is PlaybackResult.DEVICE_UNAVAILABLE


@dataclass
class PlaybackParameters:
    """Parameters read when a session starts."""

    reverse: bool = False
    loop: bool = False
    speed: float = 1.0
    gain: float = 1.0


@dataclass
class PlaybackSession:
    """One active rendering instance owned by the engine."""

    handle: "PlaybackHandle"
    buffer: SampleBuffer
    speed: float
    gain: float
    loop: bool


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of engine state for a UI."""

    status: PlaybackStatus
    speed: float
    gain: float
    reverse: bool
    loop: bool
    trim_window: Optional[TrimWindow]
    source_duration: Optional[float]

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING
