"""Audio output through sounddevice streams.

Each playback connection is one sounddevice OutputStream. The stream
callback reads the buffer at a fractional position that advances by the
playback rate per output frame, so speed changes never touch the stored
samples. Gain is applied in the callback as well.
"""

from typing import Any, Callable, Dict, Optional

import numpy as np
import sounddevice as sd

from .device import (
    CompletionCallback,
    DeviceUnavailableError,
    OutputDevice,
    PlaybackHandle,
)
from .sample_buffer import SampleBuffer
from ..utils.config import AudioConfig, calculate_blocksize

Dispatcher = Callable[[Callable[[], None]], None]


class _Connection:
    """Render state of one open stream."""

    def __init__(
        self,
        handle: PlaybackHandle,
        frames: np.ndarray,
        rate: float,
        gain: float,
        on_complete: CompletionCallback,
    ):
        self.handle = handle
        self.frames = frames
        self.rate = float(rate)
        self.gain = np.float32(gain)
        self.on_complete = on_complete
        self.position = 0.0
        self.completed = False
        self.stream: Optional[sd.OutputStream] = None


class SoundDeviceOutput(OutputDevice):
    """Output device backed by PortAudio via sounddevice.

    Stream callbacks run on the PortAudio thread. Completion is therefore
    never delivered directly: it is handed to ``dispatch``, which must
    schedule it on the thread that drives the engine.
    """

    def __init__(self, config: AudioConfig, dispatch: Dispatcher):
        """Initialize the output device.

        Args:
            config: Audio configuration (output device, response time)
            dispatch: Schedules a callable on the engine thread
        """
        self.config = config
        self.dispatch = dispatch
        self._connections: Dict[int, _Connection] = {}

    @property
    def open_connections(self) -> int:
        return len(self._connections)

    def open(
        self,
        buffer: SampleBuffer,
        rate: float,
        gain: float,
        on_complete: CompletionCallback,
    ) -> PlaybackHandle:
        """Open a stream and start rendering ``buffer``.

        Falls back to the system default device once if the configured
        device cannot be opened.

        Raises:
            DeviceUnavailableError: If no output stream can be started
        """
        if rate <= 0:
            raise ValueError(f"Playback rate must be positive, got {rate}")

        connection = _Connection(
            PlaybackHandle(), buffer.to_frames(), rate, gain, on_complete
        )
        blocksize = calculate_blocksize(
            self.config.sync_response_time_ms, buffer.sample_rate
        )

        try:
            stream = self._create_stream(
                connection, buffer, blocksize, self.config.output_device
            )
        except (sd.PortAudioError, OSError, ValueError) as e:
            if self.config.output_device is None:
                raise DeviceUnavailableError(f"Cannot open output stream: {e}") from e
            try:
                stream = self._create_stream(connection, buffer, blocksize, None)
            except (sd.PortAudioError, OSError, ValueError) as e:
                raise DeviceUnavailableError(f"Cannot open output stream: {e}") from e

        connection.stream = stream
        try:
            stream.start()
        except sd.PortAudioError as e:
            connection.handle.closed = True
            stream.close()
            raise DeviceUnavailableError(f"Cannot start output stream: {e}") from e

        self._connections[connection.handle.id] = connection
        return connection.handle

    def close(self, handle: PlaybackHandle) -> None:
        """Abort rendering immediately and release the stream."""
        handle.closed = True
        connection = self._connections.pop(handle.id, None)
        if connection is None:
            return

        stream = connection.stream
        connection.stream = None
        if stream is None:
            return
        try:
            stream.abort()
            stream.close()
        except (sd.PortAudioError, RuntimeError) as e:
            print(f"Error stopping audio stream: {e}")

    def close_all(self) -> None:
        """Close every open connection."""
        for connection in list(self._connections.values()):
            self.close(connection.handle)

    def _create_stream(
        self,
        connection: _Connection,
        buffer: SampleBuffer,
        blocksize: int,
        device,
    ) -> sd.OutputStream:
        return sd.OutputStream(
            samplerate=buffer.sample_rate,
            blocksize=blocksize,
            device=device,
            channels=buffer.channel_count,
            dtype="float32",
            callback=lambda outdata, frames, time_info, status: self._audio_callback(
                connection, outdata, frames, time_info, status
            ),
            finished_callback=lambda: self._finished_callback(connection),
        )

    def _audio_callback(
        self,
        connection: _Connection,
        outdata: np.ndarray,
        frames: int,
        time_info: Any,
        status: Optional[sd.CallbackFlags],
    ) -> None:
        """Stream callback filling ``outdata`` from the connection buffer.

        Args:
            connection: Connection being rendered
            outdata: Output buffer to fill
            frames: Number of frames to provide
            time_info: Hardware timing information from sounddevice
            status: Callback status flags
        """
        if status:
            print(f"Playback callback status: {status}")

        if connection.handle.closed:
            outdata.fill(0)
            raise sd.CallbackAbort()

        done = render_block(connection, outdata, frames)
        if done:
            connection.completed = True
            raise sd.CallbackStop()

    def _finished_callback(self, connection: _Connection) -> None:
        """Called by PortAudio when the stream has finished."""
        if not connection.completed or connection.handle.closed:
            return
        handle = connection.handle
        self.dispatch(lambda: connection.on_complete(handle))


def render_block(connection: _Connection, outdata: np.ndarray, frames: int) -> bool:
    """Render one block at the connection's rate and gain.

    Samples between stored positions are linearly interpolated. Frames past
    the end of the buffer are filled with silence.

    Args:
        connection: Connection state (position is advanced)
        outdata: Output array of shape (frames, channels)
        frames: Number of frames to render

    Returns:
        True once the end of the buffer has been reached
    """
    source = connection.frames
    total = len(source)
    positions = connection.position + connection.rate * np.arange(frames)
    available = int(np.count_nonzero(positions < total))

    if available > 0:
        pos = positions[:available]
        idx0 = pos.astype(np.int64)
        idx1 = np.minimum(idx0 + 1, total - 1)
        frac = (pos - idx0).astype(np.float32)[:, None]
        chunk = source[idx0] * (1.0 - frac) + source[idx1] * frac
        outdata[:available] = chunk * connection.gain
    if available < frames:
        outdata[available:] = 0

    connection.position += connection.rate * frames
    return connection.position >= total
