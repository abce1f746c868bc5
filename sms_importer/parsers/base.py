"""Base parser abstraction for sender-specific SMS extractors.

Each parser owns an ordered list of template patterns. Templates are tried in priority
order and the first match wins; when nothing matches, the parser's fallback scavenges
whatever loose fields it can and otherwise returns the draft unchanged.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable

from sms_importer.core.models import TransactionDraft
from sms_importer.core.settings import Settings
from sms_importer.core.utils import get_logger, parse_amount

logger = get_logger("sms-importer.parser")

TemplateHandler = Callable[[re.Match[str], str, TransactionDraft], TransactionDraft]


class BaseParser(ABC):
    """Abstract base class for all sender-specific parsers."""

    name = "base"

    @classmethod
    def from_settings(cls, settings: Settings) -> "BaseParser":
        """Build a parser configured from application settings."""
        _ = settings
        return cls()

    @abstractmethod
    def templates(self) -> list[tuple[re.Pattern[str], TemplateHandler]]:
        """Return the (pattern, handler) pairs in priority order."""

    @abstractmethod
    def fallback(self, body: str, draft: TransactionDraft) -> TransactionDraft:
        """Handle a body that matched no template."""

    def parse(self, body: str, draft: TransactionDraft) -> TransactionDraft:
        """Enrich a draft from the SMS body using the first matching template."""
        for pattern, handler in self.templates():
            match = pattern.search(body)
            if match:
                logger.debug(f"[{self.name}] {draft.id} matched template {handler.__name__}")
                return handler(match, body, draft)
        logger.debug(f"[{self.name}] {draft.id} matched no template")
        return self.fallback(body, draft)


def find_amount(pattern: re.Pattern[str], body: str) -> float | None:
    """Return the first group of a pattern parsed as an amount, or None when absent."""
    match = pattern.search(body)
    if not match:
        return None
    return parse_amount(match.group(1))
