"""CSV sink for viewing-log rows."""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from watch_log_agent.models import ViewLogEntry

HEADER = "date,service,title,watch_time"

logger = logging.getLogger(__name__)


class WatchLogError(Exception):
    """Raised when the log file cannot be created, opened or written."""

    pass


def ensure_log_file(path: Path) -> None:
    """Create the log file with its header row if it does not exist yet."""
    path = Path(path)
    if path.exists():
        return
    try:
        with path.open("w", encoding="utf-8") as f:
            f.write(HEADER + "\n")
    except OSError as e:
        raise WatchLogError(f"failed to create {path}: {e}") from e
    logger.info("Created watch log %s", path)


def date_from_offset(offset: int, today: Optional[date] = None) -> str:
    """Resolve a day offset against today, formatted YYYY-MM-DD."""
    base = today or date.today()
    return (base + timedelta(days=offset)).isoformat()


def format_row(entry: ViewLogEntry, today: Optional[date] = None) -> str:
    """CSV line for one entry. Fields are written verbatim, no quoting."""
    return f"{date_from_offset(entry.days_offset, today)},{entry.service},{entry.title},{entry.watch_time}\n"


def append_entries(path: Path, entries: Iterable[ViewLogEntry], today: Optional[date] = None) -> int:
    """
    Append one line per entry and return how many were written.
    A failure stops the batch and raises WatchLogError; lines already written stay in the file.
    """
    path = Path(path)
    try:
        f = path.open("a", encoding="utf-8")
    except OSError as e:
        raise WatchLogError(f"failed to open {path}: {e}") from e

    written = 0
    with f:
        for entry in entries:
            row = format_row(entry, today)
            try:
                f.write(row)
            except OSError as e:
                raise WatchLogError(f"failed to write to {path}: {e}") from e
            written += 1
            logger.info("Wrote row for %r", entry.title)
            logger.debug("Wrote row: %s", row.rstrip("\n"))
    return written
