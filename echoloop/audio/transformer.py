"""Buffer derivation for playback.

Trimming and reversal always produce a new SampleBuffer; the source
buffer is left untouched so it can be derived from again.
"""

import numpy as np

from .sample_buffer import SampleBuffer, TrimWindow


class BufferTransformer:
    """Builds the buffer that is actually rendered.

    Reversal inverts the temporal order inside each channel only. Channel
    order is kept, so a reversed stereo take stays paired left/right
    sample for sample.
    """

    @staticmethod
    def transform(
        buffer: SampleBuffer, window: TrimWindow, reverse: bool = False
    ) -> SampleBuffer:
        """Cut the window out of a buffer, optionally reversed.

        Args:
            buffer: Source audio
            window: Region to keep
            reverse: Whether to invert sample order within each channel

        Returns:
            New buffer with the same sample rate and channel count
        """
        start, end = window.sample_range(buffer.sample_rate, buffer.length)
        region = buffer.channels[:, start:end]
        if reverse:
            region = region[:, ::-1]
        return SampleBuffer(np.array(region, dtype=np.float32), buffer.sample_rate)

    @staticmethod
    def reverse(buffer: SampleBuffer) -> SampleBuffer:
        """Reverse a whole buffer."""
        return BufferTransformer.transform(buffer, TrimWindow.full(buffer), True)
