"""Silence trimming for decoded recordings.

This module finds the region of a buffer that actually contains sound,
so playback can skip the silence before and after a take.
"""

from typing import List, Optional, Tuple

import numpy as np

from .sample_buffer import SampleBuffer, TrimWindow
from ..constants import TrimConstants


class BoundsDetector:
    """Detects leading and trailing silence in a SampleBuffer.

    The window starts only once every channel has shown activity within
    its own padded lead-in, and ends as soon as any channel has gone
    quiet past its padded lead-out. Silent channels do not narrow the
    window.
    """

    @staticmethod
    def detect(
        buffer: SampleBuffer,
        silence_threshold: float = TrimConstants.SILENCE_THRESHOLD,
        padding_samples: int = TrimConstants.PADDING_SAMPLES,
    ) -> TrimWindow:
        """Compute the trim window of a buffer.

        Args:
            buffer: Decoded audio to scan (not modified)
            silence_threshold: Absolute amplitude a sample must exceed to
                count as sound
            padding_samples: Samples kept before the first and after the
                last loud sample of each channel

        Returns:
            TrimWindow; the full buffer if no channel exceeds the threshold

        Raises:
            ValueError: If threshold or padding is negative
        """
        if silence_threshold < 0:
            raise ValueError(f"Silence threshold must be >= 0, got {silence_threshold}")
        if padding_samples < 0:
            raise ValueError(f"Padding must be >= 0, got {padding_samples}")

        length = buffer.length
        onsets = BoundsDetector._channel_onsets(buffer, silence_threshold)
        loud = [bounds for bounds in onsets if bounds is not None]
        if not loud:
            return TrimWindow.full(buffer)

        start_candidates = [max(0, first - padding_samples) for first, _ in loud]
        end_candidates = [min(length, last + padding_samples) for _, last in loud]

        # Silent channels contribute 0 / length, which never wins max / min
        start = max(start_candidates)
        end = min(end_candidates)

        if end <= start:
            # Channels are loud in disjoint regions; cover all of them
            start = min(start_candidates)
            end = max(end_candidates)
        if end <= start:
            end = min(length, start + 1)

        return TrimWindow(int(start), int(end), buffer.sample_rate)

    @staticmethod
    def _channel_onsets(
        buffer: SampleBuffer, silence_threshold: float
    ) -> List[Optional[Tuple[int, int]]]:
        """Find first and last loud sample index for every channel.

        Returns:
            One (first, last) tuple per channel, or None for silent channels
        """
        onsets: List[Optional[Tuple[int, int]]] = []
        for channel in buffer.channels:
            loud = np.abs(channel) > silence_threshold
            if not loud.any():
                onsets.append(None)
                continue
            first = int(np.argmax(loud))
            last = len(loud) - 1 - int(np.argmax(loud[::-1]))
            onsets.append((first, last))
        return onsets
