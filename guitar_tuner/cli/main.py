"""Main entry point for the guitar tuner CLI."""

import argparse
import sys
import time
from collections import Counter
from typing import List, Optional

from ..core.config import ConfigManager, ConfigurationError
from ..detection.pitch_detector import PitchDetector
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import TunerReading
from ..note_utils import NoteMapper, convert_note_notation
from ..readout import big_note, format_cents, format_reading
from ..services.tuner_service import TunerService
from ..tuning import STANDARD_TUNING

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guitar-tuner", description="Guitar tuner - pitch detection and note mapping"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding the JSON configuration (default: ~/.config/guitar_tuner)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Live tuning from the microphone
    listen_parser = subparsers.add_parser("listen", help="Tune live from an audio input")
    listen_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID"
    )
    listen_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until Ctrl+C)",
    )
    listen_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Audio sample rate in Hz"
    )
    listen_parser.add_argument(
        "--threshold", type=float, default=None, help="RMS level treated as silence"
    )
    listen_parser.add_argument(
        "--gain", type=float, default=None, help="Input gain between 0.0 and 10.0"
    )
    listen_parser.add_argument(
        "--flats", action="store_true", help="Use flat notes instead of sharps"
    )
    listen_parser.add_argument(
        "--big", action="store_true", help="Show the note name in large letters"
    )

    # Offline analysis of a recording
    analyze_parser = subparsers.add_parser("analyze", help="Detect pitch in a recording")
    analyze_parser.add_argument("file", help="Path to a WAV/FLAC/OGG recording")
    analyze_parser.add_argument(
        "--block-size", type=int, default=4096, help="Samples per analysed block"
    )
    analyze_parser.add_argument(
        "--threshold", type=float, default=None, help="RMS level treated as silence"
    )
    analyze_parser.add_argument(
        "--gain", type=float, default=1.0, help="Gain applied before analysis"
    )
    analyze_parser.add_argument(
        "--flats", action="store_true", help="Use flat notes instead of sharps"
    )

    # Frequency to note mapping
    note_parser = subparsers.add_parser("note", help="Map frequencies to notes")
    note_parser.add_argument("frequencies", type=float, nargs="+", help="Frequencies in Hz")
    note_parser.add_argument(
        "--flats", action="store_true", help="Use flat notes instead of sharps"
    )
    note_parser.add_argument(
        "--reference", type=float, default=440.0, help="Frequency of A4 in Hz"
    )

    subparsers.add_parser("strings", help="Show the standard tuning table")
    return parser


def run_listen(args, config_manager: ConfigManager) -> int:
    """Tune live until the duration elapses or the user interrupts."""
    # Imported here: sounddevice needs PortAudio at import time
    from ..audio.audio_input import SoundDeviceInput

    audio_config = config_manager.get_config("audio_input")
    tuner_config = config_manager.get_config("tuner")
    sample_rate = args.sample_rate or audio_config["sample_rate"]

    detector_config = config_manager.detector_config(
        sample_rate=sample_rate, signal_threshold=args.threshold
    )
    audio_input = SoundDeviceInput(
        device_id=args.device,
        sample_rate=sample_rate,
        frames_per_buffer=audio_config["frames_per_buffer"],
        channels=audio_config["channels"],
        gain=args.gain if args.gain is not None else audio_config["gain"],
    )
    service = TunerService(
        audio_input,
        detector=PitchDetector.from_config(detector_config),
        poll_interval=tuner_config["poll_interval"],
        max_string_distance_hz=tuner_config["max_string_distance_hz"],
    )
    use_flats = args.flats or tuner_config["use_flats"]

    def on_reading(reading: TunerReading) -> None:
        if args.big:
            name = convert_note_notation(reading.note.full_name, to_flats=use_flats)
            print("\033[2J\033[H" + big_note(name if reading.pitch.is_valid else None))
            print(format_reading(reading, use_flats=use_flats), flush=True)
        else:
            print("\r" + format_reading(reading, use_flats=use_flats), end="", flush=True)

    if not service.start(on_reading):
        logger.error("Could not start the tuner")
        return 1

    print("Play a string... (Ctrl+C to stop)")
    try:
        start_time = time.time()
        while service.is_running():
            if args.duration is not None and time.time() - start_time >= args.duration:
                break
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        service.stop()
        print()
    return 0


def run_analyze(args, config_manager: ConfigManager) -> int:
    """Run the detector over every block of a recording."""
    from ..audio.file_input import WavFileInput

    try:
        audio_input = WavFileInput(
            args.file, frames_per_buffer=args.block_size, gain=args.gain, realtime=False
        )
    except RuntimeError as e:
        logger.error(f"Could not open {args.file}: {e}")
        return 1

    detector_config = config_manager.detector_config(
        sample_rate=audio_input.sample_rate, signal_threshold=args.threshold
    )
    service = TunerService(
        audio_input, detector=PitchDetector.from_config(detector_config)
    )

    block_seconds = args.block_size / audio_input.sample_rate
    note_counts: Counter = Counter()
    for index, block in enumerate(audio_input.blocks()):
        reading = service.analyze(block, timestamp=index * block_seconds)
        if reading.pitch.is_valid:
            name = convert_note_notation(reading.note.full_name, to_flats=args.flats)
            note_counts[name] += 1
            print(
                f"{reading.timestamp:7.2f}s  {name:<4} {reading.pitch.frequency:8.2f} Hz  "
                f"{format_cents(reading.note.cents_offset):>6} cents  "
                f"conf: {reading.pitch.confidence:.2f}  rms: {reading.pitch.rms:.3f}"
            )
        else:
            print(f"{reading.timestamp:7.2f}s  --   rms: {reading.pitch.rms:.3f}")

    if not note_counts:
        print("No pitch detected.")
        return 0

    print("\nNote statistics:")
    for note_name, count in note_counts.most_common():
        print(f"  {note_name}: {count} blocks")
    return 0


def run_note(args) -> int:
    mapper = NoteMapper(reference_frequency=args.reference)
    for frequency in args.frequencies:
        note = mapper.map_frequency(frequency)
        if not note.is_valid:
            print(f"{frequency:.2f} Hz -> ---")
            continue
        name = convert_note_notation(note.full_name, to_flats=args.flats)
        print(
            f"{frequency:.2f} Hz -> {name} / {note.solfege_full_name} "
            f"(MIDI {note.midi_number}, {note.exact_frequency:.2f} Hz, "
            f"{format_cents(note.cents_offset)} cents, {note.tuning_status.value})"
        )
    return 0


def run_strings() -> int:
    for string in STANDARD_TUNING:
        print(string)
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(level="DEBUG" if parsed_args.debug else None)

    try:
        if parsed_args.command == "listen":
            return run_listen(parsed_args, ConfigManager(parsed_args.config_dir))
        elif parsed_args.command == "analyze":
            return run_analyze(parsed_args, ConfigManager(parsed_args.config_dir))
        elif parsed_args.command == "note":
            return run_note(parsed_args)
        elif parsed_args.command == "strings":
            return run_strings()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
