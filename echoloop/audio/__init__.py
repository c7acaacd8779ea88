"""Sample buffers, silence trimming and the playback engine."""

from .sample_buffer import SampleBuffer, TrimWindow
from .bounds_detector import BoundsDetector
from .transformer import BufferTransformer
from .device import DeviceUnavailableError, OutputDevice, PlaybackHandle
from .playback_state import (
    EngineSnapshot,
    PlaybackParameters,
    PlaybackResult,
    PlaybackSession,
    PlaybackStatus,
)
from .engine import PlaybackEngine

__all__ = [
    "SampleBuffer",
    "TrimWindow",
    "BoundsDetector",
    "BufferTransformer",
    "DeviceUnavailableError",
    "OutputDevice",
    "PlaybackHandle",
    "EngineSnapshot",
    "PlaybackParameters",
    "PlaybackResult",
    "PlaybackSession",
    "PlaybackStatus",
    "PlaybackEngine",
]
