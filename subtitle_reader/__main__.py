"""Package entry point for ``python -m subtitle_reader``.

WHY: Users run the reader as ``python -m subtitle_reader notes.md`` for
terminal captions, or ``python -m subtitle_reader notes.md --gui`` for
the caption window.

HOW: Checks sys.argv for the ``--gui`` flag. If present, launches the
Tkinter caption window. Otherwise, delegates to the CLI's main().

RULES:
- Both front ends parse the same arguments (cli.build_parser)
- Without ``--gui``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from subtitle_reader.gui import main as gui_main
        gui_main()
    else:
        from subtitle_reader.cli import main
        main()
