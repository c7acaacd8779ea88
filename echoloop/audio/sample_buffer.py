"""Decoded audio buffers and trim windows.

A SampleBuffer is created once per recording and never mutated. Derived
buffers (trimmed, reversed) are always new instances, so the original can
be re-derived from at any time.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


class SampleBuffer:
    """Immutable multi-channel audio buffer.

    Samples are stored channel-major as a read-only float32 array of shape
    (channel_count, length). Values are nominally in [-1.0, 1.0].

    Attributes:
        sample_rate: Sample rate in Hz
        channels: Read-only array of shape (channel_count, length)
    """

    def __init__(self, channels: np.ndarray, sample_rate: int):
        """Initialize the buffer.

        Args:
            channels: Array-like of shape (channel_count, length)
            sample_rate: Sample rate in Hz

        Raises:
            ValueError: If the data does not describe a valid buffer
        """
        if isinstance(sample_rate, bool) or int(sample_rate) != sample_rate:
            raise ValueError(f"Sample rate must be an integer, got {sample_rate!r}")
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        data = np.array(channels, dtype=np.float32, copy=True)
        if data.ndim != 2:
            raise ValueError(
                f"Channel data must be 2-dimensional (channels, samples), "
                f"got shape {data.shape}"
            )
        if data.shape[0] < 1:
            raise ValueError("Buffer must have at least one channel")

        data.setflags(write=False)
        self._data = data
        self._sample_rate = int(sample_rate)

    @classmethod
    def from_channels(
        cls, channels: Sequence[Sequence[float]], sample_rate: int
    ) -> "SampleBuffer":
        """Build a buffer from one sample sequence per channel.

        Raises:
            ValueError: If channel lengths differ
        """
        channel_list = [np.asarray(ch, dtype=np.float32) for ch in channels]
        if not channel_list:
            raise ValueError("Buffer must have at least one channel")

        lengths = {len(ch) for ch in channel_list}
        if len(lengths) != 1:
            raise ValueError(f"Mismatched channel lengths: {sorted(lengths)}")
        return cls(np.stack(channel_list), sample_rate)

    @classmethod
    def from_frames(cls, frames: np.ndarray, sample_rate: int) -> "SampleBuffer":
        """Build a buffer from frame-major data.

        This is the layout delivered by sounddevice and soundfile: shape
        (frames, channels), or a 1-D array for mono audio.
        """
        data = np.asarray(frames, dtype=np.float32)
        if data.ndim == 1:
            data = data.reshape(1, -1)
        elif data.ndim == 2:
            data = data.T
        else:
            raise ValueError(f"Frame data must be 1- or 2-dimensional, got {data.ndim}")
        return cls(data, sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channel_count(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        """Number of samples per channel."""
        return self._data.shape[1]

    @property
    def channels(self) -> np.ndarray:
        return self._data

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.length / self._sample_rate

    def channel(self, index: int) -> np.ndarray:
        """Get the read-only samples of one channel."""
        return self._data[index]

    def to_frames(self) -> np.ndarray:
        """Get a contiguous (frames, channels) copy for stream output."""
        return np.ascontiguousarray(self._data.T)

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return (
            f"SampleBuffer(channels={self.channel_count}, length={self.length}, "
            f"sample_rate={self._sample_rate})"
        )


@dataclass(frozen=True)
class TrimWindow:
    """Playable, non-silent region of a SampleBuffer.

    The window is kept in samples together with the sample rate it was
    measured at; seconds are derived from those.
    """

    start_sample: int
    end_sample: int
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        if self.start_sample < 0 or self.end_sample < self.start_sample:
            raise ValueError(
                f"Invalid trim window [{self.start_sample}, {self.end_sample})"
            )

    @classmethod
    def full(cls, buffer: SampleBuffer) -> "TrimWindow":
        """Window covering the whole buffer."""
        return cls(0, buffer.length, buffer.sample_rate)

    @property
    def start_seconds(self) -> float:
        return self.start_sample / self.sample_rate

    @property
    def end_seconds(self) -> float:
        return self.end_sample / self.sample_rate

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    def sample_range(self, sample_rate: int, length: int) -> Tuple[int, int]:
        """Get the [start, end) sample range for a buffer.

        Args:
            sample_rate: Sample rate of the target buffer
            length: Length of the target buffer in samples

        Returns:
            Start and end indices, clamped to [0, length]
        """
        if sample_rate == self.sample_rate:
            start, end = self.start_sample, self.end_sample
        else:
            start = int(round(self.start_seconds * sample_rate))
            end = int(round(self.end_seconds * sample_rate))
        start = max(0, min(start, length))
        end = max(start, min(end, length))
        return start, end
