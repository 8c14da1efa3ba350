"""Walk maildir folders and summarize every message in them.

Each message is handled independently, so the work can be spread over a
thread pool. Results always come back in folder-then-file order.
"""
from .headers import DEFAULT_WANTED, read_headers

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

MAILDIR_SUBFOLDERS = ('cur', 'new')


@dataclass
class MessageSummary:
    mailbox: str
    path: Path
    headers: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None


def mailbox_folders(roots: Iterable) -> List[Path]:
    """Return the existing cur/new folders of each maildir root, in order."""
    folders = []
    for root in roots:
        for sub in MAILDIR_SUBFOLDERS:
            candidate = Path(root) / sub
            if candidate.exists():
                folders.append(candidate)
            else:
                logger.debug('No %s folder under %s', sub, root)
    return folders


def mailbox_name(folder: Path) -> str:
    """Name shown for a folder: its maildir root's directory name."""
    name = folder.parent.name
    return name or str(folder)


def message_files(folder: Path) -> List[Path]:
    # maildir file names start with the delivery timestamp
    with os.scandir(folder) as entries:
        return sorted(Path(e.path) for e in entries if e.is_file())


def summarize_message(path: Path, mailbox: str, wanted: Iterable[str] = DEFAULT_WANTED) -> MessageSummary:
    try:
        headers = read_headers(path, wanted)
    except OSError as e:
        logger.warning('Could not read %s: %s', path, e)
        return MessageSummary(mailbox, path, error=str(e))
    return MessageSummary(mailbox, path, headers)


def _folder_jobs(roots: Iterable) -> Iterator[tuple]:
    for folder in mailbox_folders(roots):
        try:
            files = message_files(folder)
        except OSError as e:
            logger.error('Failed to list %s: %s', folder, e)
            continue
        mailbox = mailbox_name(folder)
        for path in files:
            yield path, mailbox


def scan_maildirs(roots: Iterable, wanted: Iterable[str] = DEFAULT_WANTED, jobs: int = 1) -> Iterator[MessageSummary]:
    """Yield a MessageSummary for every message under the given maildir roots.

    With ``jobs > 1`` messages are read on a thread pool of that size; the
    output order is the same as with a single worker.
    """
    wanted = tuple(wanted)
    work = list(_folder_jobs(roots))
    logger.info('Scanning %d messages with %d worker(s)', len(work), max(jobs, 1))

    if jobs <= 1:
        for path, mailbox in work:
            yield summarize_message(path, mailbox, wanted)
        return

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        # map() hands results back in submission order
        yield from pool.map(lambda job: summarize_message(job[0], job[1], wanted), work)
