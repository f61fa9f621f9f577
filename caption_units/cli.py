"""CLI wrapper for the caption unit library.

WHY: Tuning the width budget and punctuation sets is easiest when the
segmenter can be run on a plain text file and its units eyeballed.

HOW: Reads the input (file path or "-" for stdin), treats every non-empty
line as one segmentation input, and prints each unit on its own line.
Widths use visible_width() (monospace cells), so --max-width is a number
of cells, not pixels.

RULES:
- Usage:
    python -m caption_units input.txt
    python -m caption_units input.txt --max-width 24
    python -m caption_units input.txt --sanitize   (print cleaned lines only)
    cat input.txt | python -m caption_units -
- Exit codes: 0 = success, 1 = error.
- Units go to stdout; the summary goes to stderr.
"""

import sys
from typing import List

from .core import sanitize, segment_line
from .models import SanitizeMode

DEFAULT_MAX_WIDTH = 40

HELP_TEXT = """caption_units — split text into caption-sized units

Usage:
    python -m caption_units input.txt [--max-width N] [--sanitize]
    cat input.txt | python -m caption_units - [--max-width N]

Options:
    --max-width N   Width budget in monospace cells (default: 40).
                    Wide CJK characters count as two cells.
    --sanitize      Print each line with emoji, links and symbols removed
                    instead of splitting it.
"""


def main(argv: "List[str]" = None) -> None:
    """Run the caption unit CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    if argv is None:
        argv = sys.argv[1:]

    args = list(argv)

    if not args or args[0] in ("-h", "--help"):
        print(HELP_TEXT)
        sys.exit(0)

    max_width = DEFAULT_MAX_WIDTH
    sanitize_only = False
    positional = []  # type: List[str]
    i = 0
    while i < len(args):
        if args[i] == "--max-width" and i + 1 < len(args):
            raw_width = args[i + 1]
            i += 2
        elif args[i].startswith("--max-width="):
            raw_width = args[i].split("=", 1)[1]
            i += 1
        elif args[i] == "--sanitize":
            sanitize_only = True
            i += 1
            continue
        else:
            positional.append(args[i])
            i += 1
            continue
        try:
            max_width = int(raw_width)
        except ValueError:
            print("Error: --max-width must be an integer, got '{}'".format(raw_width),
                  file=sys.stderr)
            sys.exit(1)
        if max_width <= 0:
            print("Error: --max-width must be positive", file=sys.stderr)
            sys.exit(1)

    input_path = positional[0] if positional else "-"
    if input_path == "-":
        raw = sys.stdin.read()
    else:
        try:
            with open(input_path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            print("Error: {}".format(e), file=sys.stderr)
            sys.exit(1)

    lines = [line.strip() for line in raw.splitlines() if line.strip()]

    if sanitize_only:
        for line in lines:
            cleaned = sanitize(line, SanitizeMode.COMPLETE)
            if cleaned:
                print(cleaned)
        return

    count = 0
    for line in lines:
        for cut in segment_line(line, max_width):
            print(cut.text.strip())
            count += 1

    print("{} units from {} lines (max width {})".format(count, len(lines), max_width),
          file=sys.stderr)


if __name__ == "__main__":
    main()
