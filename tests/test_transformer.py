"""Tests for BufferTransformer trimming and reversal."""

import unittest

import numpy as np

from echoloop.audio.sample_buffer import SampleBuffer, TrimWindow
from echoloop.audio.transformer import BufferTransformer


class TestBufferTransformer(unittest.TestCase):
    """Test cases for BufferTransformer.transform()."""

    def setUp(self):
        self.stereo = SampleBuffer.from_channels([[1, 2, 3], [10, 20, 30]], 1000)

    def test_reverse_keeps_channel_pairing(self):
        """Each channel is reversed on its own; channel order is kept."""
        result = BufferTransformer.transform(
            self.stereo, TrimWindow.full(self.stereo), reverse=True
        )

        np.testing.assert_array_equal(result.channel(0), [3, 2, 1])
        np.testing.assert_array_equal(result.channel(1), [30, 20, 10])

    def test_straight_copy(self):
        result = BufferTransformer.transform(
            self.stereo, TrimWindow.full(self.stereo), reverse=False
        )

        np.testing.assert_array_equal(result.channels, self.stereo.channels)
        self.assertIsNot(result, self.stereo)

    def test_window_is_applied(self):
        buffer = SampleBuffer.from_channels([np.arange(10), np.arange(10) * -1], 1000)
        window = TrimWindow(2, 6, 1000)

        result = BufferTransformer.transform(buffer, window, reverse=False)

        self.assertEqual(result.length, 4)
        np.testing.assert_array_equal(result.channel(0), [2, 3, 4, 5])
        np.testing.assert_array_equal(result.channel(1), [-2, -3, -4, -5])

    def test_reversed_window(self):
        buffer = SampleBuffer.from_channels([np.arange(10)], 1000)

        result = BufferTransformer.transform(buffer, TrimWindow(2, 6, 1000), True)

        np.testing.assert_array_equal(result.channel(0), [5, 4, 3, 2])

    def test_reversal_is_self_inverse(self):
        """Reversing the reversed region gives the straight region back."""
        rng = np.random.default_rng(7)
        buffer = SampleBuffer(rng.uniform(-1, 1, size=(3, 257)), 44100)
        window = TrimWindow(13, 201, 44100)

        reversed_once = BufferTransformer.transform(buffer, window, True)
        reversed_twice = BufferTransformer.transform(
            reversed_once, TrimWindow.full(reversed_once), True
        )
        straight = BufferTransformer.transform(buffer, window, False)

        np.testing.assert_array_equal(reversed_twice.channels, straight.channels)

    def test_metadata_preserved(self):
        result = BufferTransformer.transform(self.stereo, TrimWindow(1, 3, 1000), True)

        self.assertEqual(result.sample_rate, 1000)
        self.assertEqual(result.channel_count, 2)
        self.assertEqual(result.length, 2)

    def test_source_untouched(self):
        before = self.stereo.channels.copy()

        BufferTransformer.transform(self.stereo, TrimWindow.full(self.stereo), True)

        np.testing.assert_array_equal(self.stereo.channels, before)

    def test_deterministic(self):
        window = TrimWindow(0, 2, 1000)
        first = BufferTransformer.transform(self.stereo, window, True)
        second = BufferTransformer.transform(self.stereo, window, True)

        self.assertEqual(first.channels.tobytes(), second.channels.tobytes())

    def test_empty_window(self):
        result = BufferTransformer.transform(self.stereo, TrimWindow(1, 1, 1000), True)

        self.assertEqual(result.length, 0)
        self.assertEqual(result.channel_count, 2)

    def test_reverse_helper(self):
        result = BufferTransformer.reverse(self.stereo)
        np.testing.assert_array_equal(result.channel(0), [3, 2, 1])


if __name__ == "__main__":
    unittest.main()
