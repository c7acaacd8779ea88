"""Playback engine for trimmed, looped and reversed takes.

This module owns the single playback session: it derives the buffer to
render from the current recording, opens and tears down device
connections, and applies speed, gain and loop settings.

Set environment variable ECHOLOOP_DEBUG=1 to trace state transitions.
"""

import os
import sys
from typing import Optional

from .bounds_detector import BoundsDetector
from .device import DeviceUnavailableError, OutputDevice, PlaybackHandle
from .playback_state import (
    EngineSnapshot,
    PlaybackParameters,
    PlaybackResult,
    PlaybackSession,
    PlaybackStatus,
)
from .sample_buffer import SampleBuffer, TrimWindow
from .transformer import BufferTransformer
from ..constants import CliConstants
from ..utils.config import PlaybackConfig

DEBUG_PLAYBACK = os.environ.get(CliConstants.DEBUG_ENV_VAR, "").lower() in (
    "1",
    "true",
    "yes",
)


class PlaybackEngine:
    """State machine for playing back one recording.

    Rules:
    - At most one device connection exists at any time; every start tears
      down the previous connection first.
    - Speed and gain are bound when a connection opens. Changing them while
      playing restarts playback so the new value takes effect.
    - Reverse and loop require a rebuilt buffer and can only be changed
      while not playing.
    - A completion notification is honoured only if it belongs to the
      current session and the engine is still playing. Notifications that
      arrive after a stop or restart are dropped.

    On stop the engine reports STOPPED as soon as the device connection has
    been closed; ``OutputDevice.close`` silences output before returning.

    Attributes:
        device: Output device used for rendering
        config: Trimming and parameter range settings
        last_error: Message of the most recent device failure, if any
    """

    def __init__(self, device: OutputDevice, config: Optional[PlaybackConfig] = None):
        """Initialize the engine.

        Args:
            device: Output device capability
            config: Playback configuration (defaults if None)
        """
        self.device = device
        self.config = config or PlaybackConfig()
        self.last_error: Optional[str] = None

        self._params = PlaybackParameters(
            speed=self.config.clamp_speed(self.config.default_speed),
            gain=self.config.clamp_gain(self.config.default_gain),
        )
        self._source: Optional[SampleBuffer] = None
        self._trim_window: Optional[TrimWindow] = None
        self._session: Optional[PlaybackSession] = None
        self._status = PlaybackStatus.IDLE

    # Observable state

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._status is PlaybackStatus.PLAYING

    @property
    def speed(self) -> float:
        return self._params.speed

    @property
    def gain(self) -> float:
        return self._params.gain

    @property
    def reverse(self) -> bool:
        return self._params.reverse

    @property
    def loop(self) -> bool:
        return self._params.loop

    @property
    def trim_window(self) -> Optional[TrimWindow]:
        return self._trim_window

    @property
    def source(self) -> Optional[SampleBuffer]:
        return self._source

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    def snapshot(self) -> EngineSnapshot:
        """Get a read-only copy of the observable state."""
        return EngineSnapshot(
            status=self._status,
            speed=self._params.speed,
            gain=self._params.gain,
            reverse=self._params.reverse,
            loop=self._params.loop,
            trim_window=self._trim_window,
            source_duration=self._source.duration if self._source else None,
        )

    # Source ingestion

    def load(self, buffer: SampleBuffer) -> TrimWindow:
        """Attach a new recording and detect its trim window.

        Any active session is stopped first.

        Args:
            buffer: Decoded recording

        Returns:
            The detected trim window

        Raises:
            ValueError: If the object is not a SampleBuffer
        """
        if not isinstance(buffer, SampleBuffer):
            raise ValueError(f"Expected SampleBuffer, got {type(buffer).__name__}")

        self._teardown()
        self._source = buffer
        self._trim_window = BoundsDetector.detect(
            buffer,
            silence_threshold=self.config.silence_threshold,
            padding_samples=self.config.padding_samples,
        )
        self._set_status(PlaybackStatus.IDLE)
        return self._trim_window

    # Transport

    def play(self) -> PlaybackResult:
        """Start playback of the trimmed source from its beginning.

        If already playing, the current session is replaced.

        Returns:
            OK, NO_SOURCE if nothing is loaded, or DEVICE_UNAVAILABLE
        """
        if self._source is None:
            return PlaybackResult.NO_SOURCE
        return self._start()

    def stop(self) -> PlaybackResult:
        """Stop playback and release the device.

        Returns:
            OK, or NOT_PLAYING if there was nothing to stop
        """
        if not self.is_playing:
            return PlaybackResult.NOT_PLAYING

        self._teardown()
        self._set_status(PlaybackStatus.STOPPED)
        if self.config.reset_flags_on_stop:
            self._params.reverse = False
            self._params.loop = False
        return PlaybackResult.OK

    def toggle(self) -> PlaybackResult:
        """Stop if playing, otherwise play."""
        if self.is_playing:
            return self.stop()
        return self.play()

    def close(self) -> None:
        """Release the device at shutdown."""
        if self.is_playing:
            self._teardown()
            self._set_status(PlaybackStatus.STOPPED)

    # Parameters

    def set_speed(self, value: float) -> PlaybackResult:
        """Set the playback rate, clamped to the configured range.

        Restarts playback if currently playing.
        """
        self._params.speed = self.config.clamp_speed(value)
        return self._restart_if_playing()

    def set_gain(self, value: float) -> PlaybackResult:
        """Set the output gain, clamped to the configured range.

        Restarts playback if currently playing.
        """
        self._params.gain = self.config.clamp_gain(value)
        return self._restart_if_playing()

    def set_reverse(self, value: bool) -> PlaybackResult:
        """Enable or disable reversed playback (not while playing)."""
        if self.is_playing:
            return PlaybackResult.LOCKED_WHILE_PLAYING
        self._params.reverse = bool(value)
        return PlaybackResult.OK

    def set_loop(self, value: bool) -> PlaybackResult:
        """Enable or disable looping (not while playing)."""
        if self.is_playing:
            return PlaybackResult.LOCKED_WHILE_PLAYING
        self._params.loop = bool(value)
        return PlaybackResult.OK

    # Device notifications

    def handle_completion(self, handle: PlaybackHandle) -> None:
        """Handle a connection that rendered to the end of its buffer.

        Args:
            handle: Handle the notification belongs to
        """
        session = self._session
        if (
            session is None
            or session.handle is not handle
            or self._status is not PlaybackStatus.PLAYING
        ):
            self._debug(f"ignoring stale completion for {handle}")
            return

        if session.loop and session.buffer.length > 0:
            self._debug(f"loop restart after {handle}")
            self._start()
            return

        self._teardown()
        self._set_status(PlaybackStatus.STOPPED)

    # Internals

    def _restart_if_playing(self) -> PlaybackResult:
        if not self.is_playing:
            return PlaybackResult.OK
        return self._start()

    def _start(self) -> PlaybackResult:
        """Tear down any session and open a new one.

        On device failure no session is left behind: the engine keeps its
        previous status, or STOPPED if a running session had to be torn
        down first.
        """
        was_running = self._session is not None
        self._teardown()

        window = self._trim_window or TrimWindow.full(self._source)
        rendered = BufferTransformer.transform(
            self._source, window, self._params.reverse
        )

        try:
            handle = self.device.open(
                rendered,
                self._params.speed,
                self._params.gain,
                self.handle_completion,
            )
        except DeviceUnavailableError as e:
            self.last_error = str(e)
            print(f"Error opening output device: {e}", file=sys.stderr)
            if was_running:
                self._set_status(PlaybackStatus.STOPPED)
            return PlaybackResult.DEVICE_UNAVAILABLE

        self.last_error = None
        self._session = PlaybackSession(
            handle=handle,
            buffer=rendered,
            speed=self._params.speed,
            gain=self._params.gain,
            loop=self._params.loop,
        )
        self._set_status(PlaybackStatus.PLAYING)
        return PlaybackResult.OK

    def _teardown(self) -> None:
        """Close the current connection, if any."""
        session = self._session
        self._session = None
        if session is not None:
            self.device.close(session.handle)

    def _set_status(self, status: PlaybackStatus) -> None:
        if status is not self._status:
            self._debug(f"{self._status.value} -> {status.value}")
        self._status = status

    @staticmethod
    def _debug(message: str) -> None:
        if DEBUG_PLAYBACK:
            print(f"[playback] {message}", file=sys.stderr)
