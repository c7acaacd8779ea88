"""Pytest configuration and shared checks."""

import warnings


def _check_portaudio():
    """Warn if the PortAudio library cannot be loaded.

    sounddevice raises OSError at import time when PortAudio is missing
    (common on Linux hosts without libportaudio2). Tests for the stream
    backed player, recorder, device manager and CLI are skipped then.

    Fix on Debian/Ubuntu:

        sudo apt-get install libportaudio2
    """
    try:
        import sounddevice  # noqa: F401
    except OSError:
        warnings.warn(
            "PortAudio library not found; sounddevice based tests will be "
            "skipped. Install libportaudio2 to run them.",
            stacklevel=1,
        )


_check_portaudio()
