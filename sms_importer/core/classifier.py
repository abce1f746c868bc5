"""Classifier deciding whether an SMS is a transaction notification from a known sender."""

from sms_importer.core.models import RawMessage
from sms_importer.core.settings import Settings, get_settings
from sms_importer.core.utils import get_logger

logger = get_logger("sms-importer.classifier")


class MessageClassifier:
    """Filter SMS records down to transaction notifications."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the classifier from the sender allow-list and phrase lists in settings."""
        settings = settings or get_settings()
        self.senders = frozenset(sender.upper() for sender in settings.sender_wallets)
        self.exclude_patterns = tuple(settings.exclude_patterns)
        self.transaction_indicators = tuple(settings.transaction_indicators)

    def is_known_sender(self, address: str) -> bool:
        """Check whether the sender address belongs to a supported institution."""
        return address.upper() in self.senders

    def is_excluded(self, body: str) -> bool:
        """Check whether the body contains an exclusion phrase such as an OTP warning."""
        return any(pattern in body for pattern in self.exclude_patterns)

    def has_indicator(self, body: str) -> bool:
        """Check whether the body contains at least one transaction indicator phrase."""
        return any(indicator in body for indicator in self.transaction_indicators)

    def is_transaction_message(self, message: RawMessage) -> bool:
        """Return True when the message is a transaction notification from a known sender."""
        if not self.is_known_sender(message.address):
            return False
        if self.is_excluded(message.body):
            logger.debug(f"Excluded message from {message.address}: {message.body[:40]!r}")
            return False
        return self.has_indicator(message.body)
