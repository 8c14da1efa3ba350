"""Terminal rendering of message summaries with rich."""
from .maildir import MessageSummary

from typing import Dict, Optional, Sequence

from rich.color import Color, ColorParseError
from rich.console import Console
from rich.style import Style
from rich.text import Text

COLOR_NAMES = (
    'black', 'blue', 'bright_black', 'bright_blue', 'bright_cyan', 'bright_green',
    'bright_magenta', 'bright_red', 'bright_white', 'bright_yellow', 'cyan', 'green',
    'magenta', 'red', 'white', 'yellow',
)


def parse_color(name: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """Normalize a color name for rich, or return ``default`` if it is unknown.

    ``"Light Cyan"``, ``"bright cyan"`` and ``"bright_cyan"`` are all accepted.
    """
    if not name:
        return default
    key = '_'.join(name.strip().lower().split())
    for candidate in (key, key.replace('light_', 'bright_', 1)):
        try:
            Color.parse(candidate)
        except ColorParseError:
            continue
        return candidate
    return default


def list_colors(console: Console) -> None:
    for name in sorted(COLOR_NAMES):
        console.print(f'  {name}', markup=False, highlight=False)


def format_summary(summary: MessageSummary, columns: Sequence[str],
                   styles: Optional[Dict[str, str]] = None) -> Text:
    """Render ``mailbox: <col1> / <col2> ...`` for one message.

    Missing headers show as ``no <name>``; unreadable messages show the error.
    """
    styles = styles or {}

    def styled(value, key):
        color = styles.get(key)
        return (value, Style(color=color)) if color else value

    if summary.error is not None:
        return Text.assemble(styled(summary.mailbox, 'mailbox'), f': <No subject> ({summary.error})')

    parts = [styled(summary.mailbox, 'mailbox'), ': ']
    for i, name in enumerate(columns):
        if i:
            parts.append(' / ')
        parts.append(styled(summary.headers.get(name, f'no {name}'), name))
    return Text.assemble(*parts)
