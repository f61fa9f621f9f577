"""Entry point for ``python -m caption_units``."""

from .cli import main

if __name__ == "__main__":
    main()
