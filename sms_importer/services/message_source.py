"""Message sources supplying raw SMS records to the import pipeline.

A message source stands in for the device inbox. Given a mailbox selector and a result
cap it returns the matching messages as a JSON array, or raises MessageRetrievalError
when the messages cannot be read (missing permission, unreadable export, and so on).
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from fastapi import UploadFile

from sms_importer.core.models import MessageFilter
from sms_importer.core.utils import get_logger

logger = get_logger("sms-importer.source")


class MessageRetrievalError(Exception):
    """Raised when a message source cannot supply messages."""


class MessageSource(ABC):
    """Abstract base class for all message sources."""

    @abstractmethod
    def list_messages(self, message_filter: MessageFilter) -> str:
        """Return the messages of the selected mailbox as a JSON array string."""


class JsonPayloadMessageSource(MessageSource):
    """Message source backed by an SMS export already held in memory as JSON."""

    def __init__(self, payload: str | bytes) -> None:
        """Initialize the source with a JSON array payload."""
        self.payload = payload

    def list_messages(self, message_filter: MessageFilter) -> str:
        """Return at most max_count records of the payload."""
        try:
            records = json.loads(self.payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"SMS export is not valid JSON: {exc}"
            raise MessageRetrievalError(msg) from exc
        if not isinstance(records, list):
            msg = f"SMS export must be a JSON array, got {type(records).__name__}"
            raise MessageRetrievalError(msg)
        served = min(len(records), message_filter.max_count)
        logger.debug(f"Serving {served} of {len(records)} records from '{message_filter.box}'")
        return json.dumps(records[: message_filter.max_count])


class InMemoryMessageSource(JsonPayloadMessageSource):
    """Message source serving a list of raw SMS records."""

    def __init__(self, records: list[dict]) -> None:
        """Initialize the source with raw SMS records."""
        super().__init__(json.dumps(records))


class JsonFileMessageSource(MessageSource):
    """Message source reading an SMS backup exported to a JSON file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the source with the path of the export file."""
        self.path = Path(path)

    def list_messages(self, message_filter: MessageFilter) -> str:
        """Read the export file and return at most max_count of its records."""
        try:
            payload = self.path.read_bytes()
        except OSError as exc:
            msg = f"Could not read SMS export {self.path}: {exc}"
            raise MessageRetrievalError(msg) from exc
        return JsonPayloadMessageSource(payload).list_messages(message_filter)


def source_from_upload(file: UploadFile) -> MessageSource:
    """Build a message source from an uploaded SMS backup file."""
    return JsonPayloadMessageSource(file.file.read())
