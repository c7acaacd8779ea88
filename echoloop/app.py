"""Interactive command line front-end for echoloop.

Records or loads a take, trims its silence and plays it back with
reverse, loop, speed and gain controls typed at a prompt.
"""

import argparse
import sys
import threading
import traceback
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

import sounddevice as sd

from .audio.device import DeviceUnavailableError, OutputDevice
from .audio.engine import PlaybackEngine
from .audio.player import SoundDeviceOutput
from .audio.playback_state import PlaybackResult
from .audio.recorder import AudioRecorder
from .audio.sample_buffer import SampleBuffer
from .constants import CliConstants
from .utils.config import AppConfig, load_config
from .utils.device_manager import get_device_manager
from .utils.event_queue import EventQueue
from .utils.file_manager import load_sample_buffer

HELP_TEXT = """Commands:
  record            start recording a new take
  done              stop recording and trim the take
  load PATH         decode an audio file
  play | stop       start/stop playback
  toggle            play if stopped, stop if playing
  speed X           playback rate (restarts if playing)
  gain X            output gain (restarts if playing)
  reverse on|off    reversed playback (only while stopped)
  loop on|off       loop playback (only while stopped)
  status            show engine state
  help              show this text
  quit              exit"""

RESULT_MESSAGES = {
    PlaybackResult.NO_SOURCE: "No recording available",
    PlaybackResult.NOT_PLAYING: "Not playing",
    PlaybackResult.LOCKED_WHILE_PLAYING: "Stop playback first",
}


class EchoLoop:
    """Main application class.

    All engine access happens on the thread running ``run``; the terminal
    reader and the output device only post work to the event queue.

    Attributes:
        config: Application configuration
        events: Queue of pending commands and device notifications
        device: Output device used by the engine
        engine: Playback engine
        recorder: Input recorder
    """

    def __init__(
        self,
        config: AppConfig,
        device: Optional[OutputDevice] = None,
        recorder: Optional[AudioRecorder] = None,
        events: Optional[EventQueue] = None,
        out: TextIO = sys.stdout,
    ):
        """Initialize the application.

        Args:
            config: Application configuration
            device: Output device (sounddevice output if None)
            recorder: Recorder (sounddevice input if None)
            events: Event queue (a new one if None)
            out: Stream for user-facing messages
        """
        self.config = config
        self.out = out
        self.events = events or EventQueue()
        self.device = device or SoundDeviceOutput(config.audio, self.events.post)
        self.engine = PlaybackEngine(self.device, config.playback)
        self.recorder = recorder or AudioRecorder(config.audio)
        self._running = False

        self._commands: Dict[str, Callable[[List[str]], None]] = {
            "record": self._cmd_record,
            "done": self._cmd_done,
            "load": self._cmd_load,
            "play": self._cmd_play,
            "stop": self._cmd_stop,
            "toggle": self._cmd_toggle,
            "speed": self._cmd_speed,
            "gain": self._cmd_gain,
            "reverse": self._cmd_reverse,
            "loop": self._cmd_loop,
            "status": self._cmd_status,
            "help": self._cmd_help,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    @property
    def running(self) -> bool:
        return self._running

    def load_buffer(self, buffer: SampleBuffer) -> None:
        """Hand a decoded take to the engine and report its trim window."""
        window = self.engine.load(buffer)
        self._say(
            f"Loaded {buffer.duration:.2f}s, {buffer.channel_count} channel(s); "
            f"playing {window.start_seconds:.3f}s - {window.end_seconds:.3f}s"
        )

    def execute(self, line: str) -> None:
        """Execute one command line."""
        parts = line.split()
        if not parts:
            return
        name, args = parts[0].lower(), parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            self._say(f"Unknown command: {name} (try 'help')")
            return
        try:
            handler(args)
        except ValueError as e:
            self._say(f"Error: {e}")

    def run(self, stdin: TextIO = sys.stdin) -> None:
        """Process commands and device notifications until quit."""
        self._running = True
        reader = threading.Thread(target=self._read_commands, args=(stdin,))
        reader.daemon = True
        reader.start()

        try:
            while self._running:
                self.events.run_next(timeout=CliConstants.EVENT_POLL_TIMEOUT)
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Stop recording and playback and release devices."""
        self._running = False
        if self.recorder.is_recording:
            self.recorder.stop()
        self.engine.close()

    def _read_commands(self, stdin: TextIO) -> None:
        for line in stdin:
            self.events.post(lambda line=line: self.execute(line))
        self.events.post(lambda: self._cmd_quit([]))

    def _say(self, message: str) -> None:
        print(message, file=self.out)

    def _report(self, result: PlaybackResult) -> None:
        if result is PlaybackResult.DEVICE_UNAVAILABLE:
            self._say(f"Output device unavailable: {self.engine.last_error}")
        elif result in RESULT_MESSAGES:
            self._say(RESULT_MESSAGES[result])

    # Commands

    def _cmd_record(self, args: List[str]) -> None:
        self.engine.stop()
        try:
            self.recorder.start()
        except DeviceUnavailableError as e:
            self._say(f"Input device unavailable: {e}")
            return
        self._say("Recording... type 'done' to finish")

    def _cmd_done(self, args: List[str]) -> None:
        if not self.recorder.is_recording:
            self._say("Not recording")
            return
        buffer = self.recorder.stop()
        if buffer is None:
            self._say("Nothing was recorded")
            return
        self.load_buffer(buffer)

    def _cmd_load(self, args: List[str]) -> None:
        if not args:
            raise ValueError("load needs a file path")
        try:
            buffer = load_sample_buffer(Path(" ".join(args)))
        except FileNotFoundError as e:
            raise ValueError(str(e)) from e
        self.load_buffer(buffer)

    def _cmd_play(self, args: List[str]) -> None:
        self._report(self.engine.play())

    def _cmd_stop(self, args: List[str]) -> None:
        self._report(self.engine.stop())

    def _cmd_toggle(self, args: List[str]) -> None:
        self._report(self.engine.toggle())

    def _cmd_speed(self, args: List[str]) -> None:
        self._report(self.engine.set_speed(_parse_float(args, "speed")))
        self._say(f"Speed {self.engine.speed:g}x")

    def _cmd_gain(self, args: List[str]) -> None:
        self._report(self.engine.set_gain(_parse_float(args, "gain")))
        self._say(f"Gain {self.engine.gain * 100:.0f}%")

    def _cmd_reverse(self, args: List[str]) -> None:
        value = _parse_switch(args, "reverse", self.engine.reverse)
        self._report(self.engine.set_reverse(value))

    def _cmd_loop(self, args: List[str]) -> None:
        value = _parse_switch(args, "loop", self.engine.loop)
        self._report(self.engine.set_loop(value))

    def _cmd_status(self, args: List[str]) -> None:
        snapshot = self.engine.snapshot()
        window = snapshot.trim_window
        trim = (
            f"{window.start_seconds:.3f}s - {window.end_seconds:.3f}s"
            if window
            else "none"
        )
        self._say(
            f"status={snapshot.status.value} speed={snapshot.speed:g}x "
            f"gain={snapshot.gain * 100:.0f}% reverse={_on_off(snapshot.reverse)} "
            f"loop={_on_off(snapshot.loop)} trim={trim}"
        )

    def _cmd_help(self, args: List[str]) -> None:
        self._say(HELP_TEXT)

    def _cmd_quit(self, args: List[str]) -> None:
        self._running = False


def _parse_float(args: List[str], name: str) -> float:
    if len(args) != 1:
        raise ValueError(f"{name} needs one number")
    try:
        return float(args[0])
    except ValueError:
        raise ValueError(f"{name} needs a number, got '{args[0]}'") from None


def _parse_switch(args: List[str], name: str, current: bool) -> bool:
    """Parse on/off; no argument flips the current value."""
    if not args:
        return not current
    word = args[0].lower()
    if word in CliConstants.TRUE_WORDS:
        return True
    if word in CliConstants.FALSE_WORDS:
        return False
    raise ValueError(f"{name} expects on or off, got '{args[0]}'")


def _on_off(value: bool) -> str:
    return "on" if value else "off"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="echoloop - record, trim and loop short takes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("file", nargs="?", help="audio file to load at startup")
    parser.add_argument("--config", type=str, help="path to a JSON config file")

    playback = parser.add_argument_group("playback")
    playback.add_argument("--reverse", action="store_true", help="play reversed")
    playback.add_argument("--loop", action="store_true", help="loop playback")
    playback.add_argument("--speed", type=float, help="playback rate multiplier")
    playback.add_argument("--gain", type=float, help="output gain (0-1)")
    playback.add_argument(
        "--threshold", type=float, help="silence threshold (absolute amplitude)"
    )
    playback.add_argument(
        "--padding", type=int, help="samples kept around detected sound"
    )
    playback.add_argument(
        "--reset-on-stop",
        action="store_true",
        help="clear reverse/loop when playback is stopped",
    )

    audio = parser.add_argument_group("audio configuration")
    audio.add_argument(
        "--show-devices",
        action="store_true",
        help="show available audio devices and exit",
    )
    audio.add_argument(
        "--audio-in", type=str, default=None, help="input device index or name"
    )
    audio.add_argument(
        "--audio-out", type=str, default=None, help="output device index or name"
    )

    parser.add_argument("--debug", action="store_true", help="enable debug output")
    return parser.parse_args(argv)


def _handle_show_devices() -> None:
    """Display available audio devices."""
    for label in get_device_manager().describe_devices():
        print(label)


def _apply_command_line_overrides(args: argparse.Namespace, config: AppConfig) -> None:
    """Apply command line arguments to configuration.

    Args:
        args: Parsed command line arguments
        config: Application configuration to modify
    """
    playback = config.playback
    if args.threshold is not None:
        playback.silence_threshold = args.threshold
    if args.padding is not None:
        playback.padding_samples = args.padding
    if args.speed is not None:
        playback.default_speed = args.speed
    if args.gain is not None:
        playback.default_gain = args.gain
    if args.reset_on_stop:
        playback.reset_flags_on_stop = True

    if args.audio_in is not None or args.audio_out is not None:
        device_manager = get_device_manager()
        if args.audio_in is not None:
            config.audio.input_device = device_manager.resolve_device(
                args.audio_in, "input"
            )
        if args.audio_out is not None:
            config.audio.output_device = device_manager.resolve_device(
                args.audio_out, "output"
            )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    try:
        if args.show_devices:
            _handle_show_devices()
            return 0

        config = load_config(Path(args.config) if args.config else None)
        _apply_command_line_overrides(args, config)

        app = EchoLoop(config)
        app.engine.set_reverse(args.reverse)
        app.engine.set_loop(args.loop)
        if args.file:
            app.load_buffer(load_sample_buffer(Path(args.file)))

        print(HELP_TEXT)
        app.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return 1
    except (sd.PortAudioError, DeviceUnavailableError) as e:
        print(f"Audio device error: {e}", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
