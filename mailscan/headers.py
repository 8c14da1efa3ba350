"""Pull selected header fields out of a raw message file.

Only the header block is read: parsing stops at the first empty line, so
message bodies are never inspected. Folded (multi-line) values are joined
before the encoded words in them are decoded.
"""
from .encoded_words import decode_header_value

from typing import Dict, Iterable, Iterator, NamedTuple, Optional

DEFAULT_WANTED = ('from', 'subject')


class RawHeader(NamedTuple):
    name: str
    value: str


def iter_raw_headers(lines: Iterable[str]) -> Iterator[RawHeader]:
    """Yield each header of the header block with its folded value unfolded."""
    name: Optional[str] = None
    parts = []

    for line in lines:
        line = line.rstrip('\r\n')
        if not line:
            break

        if line[0].isspace():
            # continuation: drop only the whitespace that introduced the fold
            if name is not None:
                parts.append(line[1:])
            continue

        if ':' not in line:
            continue

        if name is not None:
            yield RawHeader(name, ''.join(parts))

        field, rest = line.split(':', 1)
        name = field.strip().lower()
        parts = [rest.lstrip()]

    if name is not None:
        yield RawHeader(name, ''.join(parts))


def extract_headers(lines: Iterable[str], wanted: Iterable[str] = DEFAULT_WANTED) -> Dict[str, str]:
    """Return decoded values for the wanted headers, keyed by lowercase name.

    The first occurrence of a header wins. Empty values are skipped so callers
    can apply their own fallback text.
    """
    wanted = {w.lower() for w in wanted}
    found = {}
    for header in iter_raw_headers(lines):
        if header.name not in wanted or header.name in found or not header.value:
            continue
        found[header.name] = decode_header_value(header.value)
        if len(found) == len(wanted):
            break
    return found


def read_headers(path, wanted: Iterable[str] = DEFAULT_WANTED) -> Dict[str, str]:
    """Read a message file and return its decoded wanted headers.

    Raises OSError when the file cannot be opened or read.
    """
    with open(path, 'r', encoding='utf-8', errors='replace', newline='') as f:
        return extract_headers(f, wanted)
