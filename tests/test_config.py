"""Tests for configuration loading and clamping."""

import json
import tempfile
import unittest
from pathlib import Path

from echoloop.utils.config import (
    AppConfig,
    PlaybackConfig,
    calculate_blocksize,
    load_config,
)


class TestPlaybackConfig(unittest.TestCase):
    """Test cases for PlaybackConfig."""

    def test_defaults(self):
        config = PlaybackConfig()
        self.assertEqual(config.speed_range, (0.4, 2.0))
        self.assertEqual(config.gain_range, (0.0, 1.0))
        self.assertEqual(config.silence_threshold, 0.01)
        self.assertEqual(config.padding_samples, 1000)
        self.assertFalse(config.reset_flags_on_stop)

    def test_clamp_speed(self):
        config = PlaybackConfig()
        self.assertEqual(config.clamp_speed(3.0), 2.0)
        self.assertEqual(config.clamp_speed(0.1), 0.4)
        self.assertEqual(config.clamp_speed(1.3), 1.3)

    def test_clamp_gain(self):
        config = PlaybackConfig()
        self.assertEqual(config.clamp_gain(2), 1.0)
        self.assertEqual(config.clamp_gain(-1), 0.0)

    def test_custom_speed_range(self):
        config = PlaybackConfig(speed_min=0.5, speed_max=4.0)
        self.assertEqual(config.clamp_speed(3.0), 3.0)

    def test_invalid_ranges_rejected(self):
        with self.assertRaises(ValueError):
            PlaybackConfig(speed_min=0.0)
        with self.assertRaises(ValueError):
            PlaybackConfig(speed_min=3.0, speed_max=2.0)
        with self.assertRaises(ValueError):
            PlaybackConfig(gain_min=0.5, gain_max=0.2)


class TestLoadConfig(unittest.TestCase):
    """Test cases for load_config()."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "echoloop.json"

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, data):
        with open(self.path, "w") as f:
            f.write(data if isinstance(data, str) else json.dumps(data))

    def test_no_path_gives_defaults(self):
        self.assertEqual(load_config(None), AppConfig())

    def test_values_loaded_and_unknown_keys_ignored(self):
        self._write(
            {
                "audio": {"sample_rate": 44100, "bogus": 1},
                "playback": {"padding_samples": 500, "reset_flags_on_stop": True},
                "display": {"theme": "dark"},
            }
        )

        config = load_config(self.path)

        self.assertEqual(config.audio.sample_rate, 44100)
        self.assertEqual(config.playback.padding_samples, 500)
        self.assertTrue(config.playback.reset_flags_on_stop)

    def test_stream_format_is_not_configurable(self):
        """Streams always carry float32, so a dtype setting is dropped."""
        self._write({"audio": {"dtype": "int16", "channels": 2}})

        config = load_config(self.path)

        self.assertEqual(config.audio.channels, 2)
        self.assertNotIn("dtype", config.to_dict()["audio"])

    def test_round_trip_dict(self):
        config = AppConfig()
        config.playback.speed_max = 3.0
        self.assertEqual(AppConfig.from_dict(config.to_dict()), config)

    def test_missing_file(self):
        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_invalid_json(self):
        self._write("{not json")
        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_non_object_json(self):
        self._write([1, 2, 3])
        with self.assertRaises(ValueError):
            load_config(self.path)


class TestCalculateBlocksize(unittest.TestCase):
    """Test cases for calculate_blocksize()."""

    def test_ten_ms_at_48k(self):
        self.assertEqual(calculate_blocksize(10.0, 48000), 480)

    def test_clamped(self):
        self.assertEqual(calculate_blocksize(0.01, 8000), 64)
        self.assertEqual(calculate_blocksize(1000.0, 48000), 8192)


if __name__ == "__main__":
    unittest.main()
