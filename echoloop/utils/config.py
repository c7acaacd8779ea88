"""Configuration for audio streams and playback control."""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..constants import AudioConstants, PlaybackConstants, TrimConstants

DeviceRef = Optional[Union[int, str]]


@dataclass
class AudioConfig:
    """Settings shared by the recorder and the output device.

    Devices may be given as a PortAudio index, a device name or None for
    the system default.
    """

    sample_rate: int = AudioConstants.DEFAULT_SAMPLE_RATE
    channels: int = AudioConstants.DEFAULT_CHANNELS
    input_device: DeviceRef = None
    output_device: DeviceRef = None
    sync_response_time_ms: float = AudioConstants.DEFAULT_SYNC_RESPONSE_TIME_MS


@dataclass
class PlaybackConfig:
    """Trimming and playback parameter settings."""

    silence_threshold: float = TrimConstants.SILENCE_THRESHOLD
    padding_samples: int = TrimConstants.PADDING_SAMPLES
    speed_min: float = PlaybackConstants.SPEED_MIN
    speed_max: float = PlaybackConstants.SPEED_MAX
    default_speed: float = PlaybackConstants.DEFAULT_SPEED
    gain_min: float = PlaybackConstants.GAIN_MIN
    gain_max: float = PlaybackConstants.GAIN_MAX
    default_gain: float = PlaybackConstants.DEFAULT_GAIN
    reset_flags_on_stop: bool = PlaybackConstants.RESET_FLAGS_ON_STOP

    def __post_init__(self):
        if self.speed_min <= 0 or self.speed_min > self.speed_max:
            raise ValueError(
                f"Invalid speed range: [{self.speed_min}, {self.speed_max}]"
            )
        if self.gain_min < 0 or self.gain_min > self.gain_max:
            raise ValueError(f"Invalid gain range: [{self.gain_min}, {self.gain_max}]")

    @property
    def speed_range(self) -> Tuple[float, float]:
        return self.speed_min, self.speed_max

    @property
    def gain_range(self) -> Tuple[float, float]:
        return self.gain_min, self.gain_max

    def clamp_speed(self, value: float) -> float:
        """Clamp a speed value into the configured range."""
        return max(self.speed_min, min(float(value), self.speed_max))

    def clamp_gain(self, value: float) -> float:
        """Clamp a gain value into the configured range."""
        return max(self.gain_min, min(float(value), self.gain_max))


@dataclass
class AppConfig:
    """Complete application configuration."""

    audio: AudioConfig = field(default_factory=AudioConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a nested dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create configuration from a nested dictionary.

        Unknown sections and keys are ignored.
        """
        return cls(
            audio=_build_section(AudioConfig, data.get("audio", {})),
            playback=_build_section(PlaybackConfig, data.get("playback", {})),
        )


def _build_section(section_cls, data: Dict[str, Any]):
    if not isinstance(data, dict):
        return section_cls()
    valid_keys = {f.name for f in section_cls.__dataclass_fields__.values()}
    filtered_data = {k: v for k, v in data.items() if k in valid_keys}
    return section_cls(**filtered_data)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from a JSON file.

    Args:
        path: Path to a JSON config file, or None for defaults

    Returns:
        AppConfig with loaded or default values

    Raises:
        ValueError: If the file exists but cannot be parsed
    """
    if path is None:
        return AppConfig()

    path = Path(path)
    if not path.exists():
        raise ValueError(f"Config file not found: {path}")

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {path}: expected a JSON object")
    return AppConfig.from_dict(data)


def calculate_blocksize(response_time_ms: float, sample_rate: int) -> int:
    """Calculate stream blocksize from a response time.

    Args:
        response_time_ms: Desired callback interval in milliseconds
        sample_rate: Sample rate in Hz

    Returns:
        Blocksize in frames, clamped to a sane range
    """
    frames = int(sample_rate * response_time_ms / AudioConstants.MS_TO_SEC)
    return max(AudioConstants.MIN_BLOCKSIZE, min(frames, AudioConstants.MAX_BLOCKSIZE))
