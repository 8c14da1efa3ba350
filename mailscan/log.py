"""Logging setup: rich-formatted diagnostics on stderr."""
import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = 'WARNING') -> None:
    """Send all log records to stderr through rich.

    stdout is reserved for the message summary lines, so diagnostics never
    end up interleaved with (or piped along with) the listing.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter('%(message)s', datefmt='[%X]'))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
