"""Pull viewing-log entries out of a model reply and hand them to the watch log."""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from watch_log_agent.models import ViewLogEntry
from watch_log_agent.watch_log import WatchLogError, append_entries

FENCE = "```"

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[ViewLogEntry])


class MessageFormatError(Exception):
    """Raised when a reply has an unterminated code fence."""

    pass


class ExtractionStatus(str, Enum):
    OK = "ok"
    FENCE_ERROR = "fence_error"
    JSON_ERROR = "json_error"


@dataclass
class ExtractionResult:
    status: ExtractionStatus
    entries: list[ViewLogEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK


class ProcessStatus(str, Enum):
    WRITTEN = "written"
    EMPTY = "empty"
    FENCE_ERROR = "fence_error"
    JSON_ERROR = "json_error"
    WRITE_ERROR = "write_error"


@dataclass
class ProcessResult:
    status: ProcessStatus
    written: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (ProcessStatus.WRITTEN, ProcessStatus.EMPTY)


def strip_code_fence(message: str) -> str:
    """Return the text between the first and last ``` markers, minus a leading 'json' tag.

    Text without a fence is returned unchanged.
    """
    start = message.find(FENCE)
    end = message.rfind(FENCE)
    if start == -1:
        return message
    if start == end:
        raise MessageFormatError("could not parse message")
    inner = message[start + len(FENCE) : end].strip()
    return inner.removeprefix("json")


def parse_entries(message: str) -> ExtractionResult:
    """Fence extraction, then strict JSON decoding into ViewLogEntry records."""
    try:
        payload = strip_code_fence(message)
    except MessageFormatError as e:
        return ExtractionResult(ExtractionStatus.FENCE_ERROR, error=str(e))
    try:
        entries = _ENTRIES.validate_json(payload)
    except ValidationError as e:
        return ExtractionResult(ExtractionStatus.JSON_ERROR, error=f"failed to unmarshal: {e}")
    return ExtractionResult(ExtractionStatus.OK, entries=entries)


def process_message(message: str, log_path: Path, today: Optional[date] = None) -> ProcessResult:
    """Extract entries from a reply and append them to the log file."""
    logger.info("Processing message")
    logger.debug("Message: %s", message)
    extraction = parse_entries(message)
    if not extraction.ok:
        logger.error("Could not extract entries (%s): %s", extraction.status.value, extraction.error)
        return ProcessResult(ProcessStatus(extraction.status.value), error=extraction.error)
    if not extraction.entries:
        logger.warning("No view data rows found in message")
        return ProcessResult(ProcessStatus.EMPTY)
    try:
        written = append_entries(log_path, extraction.entries, today=today)
    except WatchLogError as e:
        logger.error("Writing entries failed: %s", e)
        return ProcessResult(ProcessStatus.WRITE_ERROR, error=str(e))
    return ProcessResult(ProcessStatus.WRITTEN, written=written)
