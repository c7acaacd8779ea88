"""Constants for the echoloop recorder/looper.

This module defines all constant values used throughout the application,
organized into logical groups for audio capture, trimming, playback
control and the command line front-end.
"""


class AudioConstants:
    """Audio capture and stream related constants."""

    # Sample rates and channels
    DEFAULT_SAMPLE_RATE = 48000
    DEFAULT_CHANNELS = 1

    # Stream block size is derived from the response time
    DEFAULT_SYNC_RESPONSE_TIME_MS = 10.0
    MIN_BLOCKSIZE = 64
    MAX_BLOCKSIZE = 8192
    MS_TO_SEC = 1000.0


class TrimConstants:
    """Silence detection defaults.

    Samples whose absolute value does not exceed the threshold are
    treated as silence. Padding keeps a short lead-in/lead-out around
    the detected sound so it is not cut abruptly.
    """

    SILENCE_THRESHOLD = 0.01
    PADDING_SAMPLES = 1000


class PlaybackConstants:
    """Playback parameter ranges and defaults."""

    SPEED_MIN = 0.4
    SPEED_MAX = 2.0
    DEFAULT_SPEED = 1.0

    GAIN_MIN = 0.0
    GAIN_MAX = 1.0
    DEFAULT_GAIN = 1.0

    # Keep reverse/loop flags when playback is stopped
    RESET_FLAGS_ON_STOP = False


class CliConstants:
    """Command line front-end constants."""

    EVENT_POLL_TIMEOUT = 0.1  # seconds
    DEBUG_ENV_VAR = "ECHOLOOP_DEBUG"
    TRUE_WORDS = ("1", "on", "true", "yes")
    FALSE_WORDS = ("0", "off", "false", "no")
