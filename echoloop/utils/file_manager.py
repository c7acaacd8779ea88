"""Decoding of existing audio files into sample buffers."""

from pathlib import Path

import soundfile as sf

from ..audio.sample_buffer import SampleBuffer


def load_sample_buffer(path: Path) -> SampleBuffer:
    """Decode an audio file.

    Args:
        path: Path to any format libsndfile can read

    Returns:
        SampleBuffer with one channel per file channel

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    try:
        data, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
    except RuntimeError as e:
        raise ValueError(f"Cannot decode {path}: {e}") from e
    return SampleBuffer.from_frames(data, sample_rate)
