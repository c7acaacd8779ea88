"""Tests for SampleBuffer and TrimWindow."""

import unittest

import numpy as np

from echoloop.audio.sample_buffer import SampleBuffer, TrimWindow


class TestSampleBuffer(unittest.TestCase):
    """Test cases for SampleBuffer construction and invariants."""

    def test_from_channels(self):
        """Channels are stored channel-major with matching length."""
        buffer = SampleBuffer.from_channels([[1, 2, 3], [10, 20, 30]], 1000)

        self.assertEqual(buffer.channel_count, 2)
        self.assertEqual(buffer.length, 3)
        self.assertEqual(buffer.sample_rate, 1000)
        np.testing.assert_array_equal(buffer.channel(1), [10, 20, 30])
        self.assertEqual(buffer.channels.dtype, np.float32)

    def test_duration(self):
        buffer = SampleBuffer.from_channels([np.zeros(24000)], 48000)
        self.assertAlmostEqual(buffer.duration, 0.5)

    def test_mismatched_channel_lengths_rejected(self):
        with self.assertRaises(ValueError):
            SampleBuffer.from_channels([[0.1, 0.2], [0.1]], 1000)

    def test_non_positive_sample_rate_rejected(self):
        for rate in (0, -44100):
            with self.assertRaises(ValueError):
                SampleBuffer.from_channels([[0.0]], rate)

    def test_fractional_sample_rate_rejected(self):
        with self.assertRaises(ValueError):
            SampleBuffer.from_channels([[0.0]], 44100.5)

    def test_no_channels_rejected(self):
        with self.assertRaises(ValueError):
            SampleBuffer.from_channels([], 1000)

    def test_samples_are_read_only(self):
        """A constructed buffer cannot be modified in place."""
        buffer = SampleBuffer.from_channels([[0.1, 0.2]], 1000)
        with self.assertRaises(ValueError):
            buffer.channels[0, 0] = 1.0

    def test_source_array_is_copied(self):
        """Changing the input array later does not affect the buffer."""
        data = np.array([[0.1, 0.2, 0.3]], dtype=np.float32)
        buffer = SampleBuffer(data, 1000)

        data[0, 0] = 0.9

        self.assertAlmostEqual(float(buffer.channel(0)[0]), 0.1, places=6)

    def test_from_frames_stereo(self):
        """Frame-major (frames, channels) data is transposed."""
        frames = np.array([[1, 10], [2, 20], [3, 30]], dtype=np.float32)
        buffer = SampleBuffer.from_frames(frames, 8000)

        self.assertEqual(buffer.channel_count, 2)
        np.testing.assert_array_equal(buffer.channel(0), [1, 2, 3])
        np.testing.assert_array_equal(buffer.to_frames(), frames)

    def test_from_frames_mono_1d(self):
        buffer = SampleBuffer.from_frames(np.array([0.5, -0.5]), 8000)
        self.assertEqual(buffer.channel_count, 1)
        self.assertEqual(buffer.length, 2)

    def test_empty_buffer_allowed(self):
        buffer = SampleBuffer.from_channels([[], []], 1000)
        self.assertEqual(buffer.length, 0)
        self.assertEqual(buffer.duration, 0.0)


class TestTrimWindow(unittest.TestCase):
    """Test cases for TrimWindow."""

    def test_seconds_derived_from_samples(self):
        window = TrimWindow(1, 3, 1000)
        self.assertAlmostEqual(window.start_seconds, 0.001)
        self.assertAlmostEqual(window.end_seconds, 0.003)
        self.assertAlmostEqual(window.duration, 0.002)

    def test_full(self):
        buffer = SampleBuffer.from_channels([np.zeros(500)], 1000)
        window = TrimWindow.full(buffer)
        self.assertEqual((window.start_sample, window.end_sample), (0, 500))
        self.assertAlmostEqual(window.end_seconds, buffer.duration)

    def test_inverted_window_rejected(self):
        with self.assertRaises(ValueError):
            TrimWindow(5, 2, 1000)

    def test_sample_range_clamped(self):
        window = TrimWindow(10, 200, 1000)
        self.assertEqual(window.sample_range(1000, 100), (10, 100))

    def test_sample_range_other_rate(self):
        """A window from another rate is converted through seconds."""
        window = TrimWindow(1000, 2000, 1000)
        self.assertEqual(window.sample_range(2000, 10000), (2000, 4000))


if __name__ == "__main__":
    unittest.main()
