"""Audio capture from an input device.

The recorder collects input blocks from a sounddevice InputStream and
hands the finished take to the engine as a decoded SampleBuffer.
"""

import sys
from typing import List, Optional

import numpy as np
import sounddevice as sd

from .device import DeviceUnavailableError
from .sample_buffer import SampleBuffer
from ..utils.config import AudioConfig, calculate_blocksize


class AudioRecorder:
    """Records one take at a time from the configured input device."""

    def __init__(self, config: AudioConfig):
        """Initialize the recorder.

        Args:
            config: Audio configuration (input device, rate, channels)
        """
        self.config = config
        self.is_recording = False
        self.audio_chunks: List[np.ndarray] = []
        self.stream: Optional[sd.InputStream] = None
        self.blocksize = calculate_blocksize(
            config.sync_response_time_ms, config.sample_rate
        )

    def start(self) -> None:
        """Start recording a new take.

        Falls back to the system default input once if the configured
        device cannot be opened.

        Raises:
            DeviceUnavailableError: If no input stream can be started
        """
        if self.is_recording:
            self.stop()

        self.audio_chunks = []
        self.blocksize = calculate_blocksize(
            self.config.sync_response_time_ms, self.config.sample_rate
        )

        try:
            self.stream = self._create_stream(self.config.input_device)
        except (sd.PortAudioError, OSError, ValueError) as e:
            if self.config.input_device is None:
                raise DeviceUnavailableError(f"Cannot open input stream: {e}") from e
            try:
                self.stream = self._create_stream(None)
            except (sd.PortAudioError, OSError, ValueError) as e:
                print(f"Error opening InputStream: {e}", file=sys.stderr)
                raise DeviceUnavailableError(f"Cannot open input stream: {e}") from e

        self.is_recording = True
        try:
            self.stream.start()
        except sd.PortAudioError as e:
            self.is_recording = False
            self.stream.close()
            self.stream = None
            raise DeviceUnavailableError(f"Cannot start input stream: {e}") from e

    def stop(self) -> Optional[SampleBuffer]:
        """Stop recording and return the take.

        Returns:
            The recorded audio, or None if nothing was captured
        """
        self.is_recording = False

        if self.stream:
            try:
                self.stream.stop()
                self.stream.close()
            except (sd.PortAudioError, RuntimeError) as e:
                print(f"Error stopping input stream: {e}", file=sys.stderr)
            finally:
                self.stream = None

        chunks = self.audio_chunks
        self.audio_chunks = []
        if not chunks:
            return None
        return SampleBuffer.from_frames(np.concatenate(chunks), self.config.sample_rate)

    def _create_stream(self, device) -> sd.InputStream:
        return sd.InputStream(
            samplerate=self.config.sample_rate,
            blocksize=self.blocksize,
            device=device,
            channels=self.config.channels,
            dtype="float32",
            callback=self._audio_callback,
        )

    def _audio_callback(
        self, indata: np.ndarray, frames: int, time_info, status
    ) -> None:
        """Audio stream callback.

        Args:
            indata: Input buffer with audio data
            frames: Number of frames received
            time_info: Hardware timing information
            status: Callback status flags
        """
        if status:
            print(f"Recording callback status: {status}", file=sys.stderr)
        if self.is_recording:
            self.audio_chunks.append(indata.copy())
