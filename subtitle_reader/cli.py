"""Command-line interface for Subtitle Reader.

WHY: Reading a markdown file aloud with captions in the terminal is the
quickest way to use the reader and the easiest way to debug it. A dry run
that only builds and exports the read plan shows exactly what the speech
engine will hear and which caption covers which characters.

HOW: argparse collects the input file and overrides for the environment
config. The markdown is rendered and aligned; exporters selected with
--export are saved next to the input (or to --output-dir). Unless
--dry-run is given, a SubtitleReader drives pyttsx3 and prints each
caption to stdout until reading completes.

RULES:
- Positional argument: markdown file path, or "-" for stdin
- Captions go to stdout; status messages go to stderr
- --export: comma-separated exporter keys (no default: nothing is saved)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-plan-2.json)
- ValueError family (including ConfigurationError) → "Error: ..." and exit 1
- SpeechEngineError (engine failed to start, or its loop died mid-read) →
  "Error: ..." and exit 1
- Ctrl-C stops speech and exits 130
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional

from subtitle_reader.adapters.base import SpeechEngineError
from subtitle_reader.adapters.console import ConsoleCaptionRenderer
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.adapters.width import CellWidth
from subtitle_reader.config import ReaderConfig
from subtitle_reader.core.ir import ReadPlan
from subtitle_reader.formatters import FORMATTERS
from subtitle_reader.formatters.base import FormatterOutput
from subtitle_reader.reader import SubtitleReader, build_plan

STDIN_STEM = "stdin"
WAIT_POLL_S = 0.2


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. notes-plan.json)
    - Conflict: counter inserted before the extension (notes-plan-2.json)
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_export_keys(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    keys = [k.strip() for k in raw.split(",") if k.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise ValueError("Unknown export format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS))
            ))
    return keys


def read_input(path_arg: str) -> tuple:
    """Return (markup, stem, default output dir) for a path or "-"."""
    if path_arg == "-":
        return sys.stdin.read(), STDIN_STEM, Path.cwd()
    input_path = Path(path_arg).resolve()
    if not input_path.is_file():
        raise ValueError("File not found: {}".format(input_path))
    return input_path.read_text(encoding="utf-8"), input_path.stem, input_path.parent


def config_from_args(args: argparse.Namespace, screen_width: Optional[float] = None) -> ReaderConfig:
    """Environment config with command-line overrides applied on top."""
    return ReaderConfig.from_env(screen_width=screen_width).with_overrides(
        target_voice_name=args.voice,
        voice_language=args.language,
        speech_rate=args.rate,
        max_unit_width=args.max_unit_width,
        standalone=args.standalone,
    )


def _export(plan: ReadPlan, keys: List[str], stem: str, output_dir: Path) -> List[Path]:
    saved: List[Path] = []
    for key in keys:
        formatter = FORMATTERS[key]()
        for output in formatter.format(plan):
            saved.append(_save_output(output, stem, output_dir))
            _status("  Saved: {}".format(saved[-1].name))
    return saved


def _speak(markup: str, config: ReaderConfig) -> None:
    """Read markup aloud, printing captions until the read completes."""
    # Imported here so --dry-run works without an audio stack.
    from subtitle_reader.adapters.speech import Pyttsx3SpeechEngine

    done = threading.Event()
    engine = Pyttsx3SpeechEngine()
    reader = SubtitleReader(
        config,
        ConsoleCaptionRenderer(),
        engine,
        measure=CellWidth.for_config(config),
        document_renderer=MarkdownRenderer(),
        on_complete=lambda session: done.set(),
    )
    reader.read(markup)
    try:
        while not done.wait(WAIT_POLL_S):
            if not engine.is_speaking() and not done.is_set():
                reader.stop()
                raise SpeechEngineError("Speech stopped before reading completed: {}".format(
                    engine.loop_error or "engine loop exited"
                ))
    except KeyboardInterrupt:
        reader.stop()
        raise


def run(args: argparse.Namespace) -> int:
    """Execute one CLI invocation. Returns the process exit code."""
    try:
        export_keys = _parse_export_keys(args.export)
        markup, stem, default_dir = read_input(args.input_file)
        output_dir = Path(args.output_dir).resolve() if args.output_dir else default_dir
        if export_keys and not output_dir.is_dir():
            raise ValueError("Output directory does not exist: {}".format(output_dir))
        config = config_from_args(args)

        if args.dry_run or export_keys:
            plan = build_plan(markup, config, MarkdownRenderer(), CellWidth.for_config(config))
            _status("{} units, {} mapped, {} spoken characters".format(
                len(plan.units), plan.mapped_count, len(plan.spoken_form)
            ))
            if export_keys:
                _export(plan, export_keys, stem, output_dir)
            if args.dry_run:
                for unit in plan.units:
                    print(unit.text)
                return 0

        _speak(markup, config)
        _status("Done.")
        return 0
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1
    except SpeechEngineError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: input_file ("-" for stdin)
    - Overrides: --voice, --language, --rate, --max-unit-width, --standalone
    - Plan inspection: --dry-run, --export, --output-dir
    """
    parser = argparse.ArgumentParser(
        prog="subtitle_reader",
        description="Read a markdown document aloud with synchronized captions.",
    )
    parser.add_argument(
        "input_file",
        help='Markdown file to read, or "-" for stdin.',
    )
    parser.add_argument(
        "--voice",
        default=None,
        help="Preferred voice name (substring match). Default from SUBTITLE_READER_VOICE.",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Fallback voice language tag, e.g. zh or en. Default from SUBTITLE_READER_LANGUAGE.",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=None,
        help="Speech rate multiplier (1.0 = engine default).",
    )
    parser.add_argument(
        "--max-unit-width",
        type=float,
        default=None,
        help="Maximum caption unit width in pixels (default: 80%% of screen width).",
    )
    parser.add_argument(
        "--standalone",
        action="store_true",
        default=None,
        help="Let the reader resize, move, and close its own window.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build the read plan and print the captions without speaking.",
    )
    parser.add_argument(
        "--export",
        default=None,
        help="Comma-separated exporters to save. Available: {}.".format(
            ", ".join(sorted(FORMATTERS.keys()))
        ),
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exported files (default: next to the input file).",
    )
    parser.add_argument(
        "--gui",
        action="store_true",
        help="Show captions in the Tk caption window instead of the terminal.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log alignment and session details to stderr.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m subtitle_reader``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.gui:
        from subtitle_reader.gui import run_window
        sys.exit(run_window(args))
    sys.exit(run(args))


if __name__ == "__main__":
    main()
