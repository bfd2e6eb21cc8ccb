import os
import sys

DEFAULT_SIZE = (80, 24)


def get_terminal_size() -> tuple[int, int]:
    """Return (columns, rows) of the terminal, or (80, 24) if not a tty."""
    if not sys.stdout.isatty():
        return DEFAULT_SIZE
    try:
        size = os.get_terminal_size()
    except OSError:
        return DEFAULT_SIZE
    # Leave the last column free so lines never wrap
    return (max(size.columns - 1, 1), max(size.lines, 1))
