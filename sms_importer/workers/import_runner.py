"""SMS import orchestration: fetch, classify, parse, and filter transaction messages."""

from collections.abc import Callable

import pandas as pd
from pydantic import TypeAdapter, ValidationError

from sms_importer.core import categories
from sms_importer.core.classifier import MessageClassifier
from sms_importer.core.models import MessageFilter, RawMessage, TransactionDraft, TransactionNote, TransactionType
from sms_importer.core.settings import Settings, get_settings
from sms_importer.core.utils import epoch_millis_to_iso, get_logger
from sms_importer.parsers.base import BaseParser
from sms_importer.parsers.registry import ParserRegistry
from sms_importer.services.message_source import MessageRetrievalError, MessageSource

logger = get_logger("sms-importer.worker")

MAX_BODY_LOG_LEN = 80

CSV_COLUMNS = [
    "id",
    "walletId",
    "date",
    "type",
    "categoryId",
    "category.name",
    "balance",
    "fee",
    "reference",
    "note.textNote",
    "isAutoImported",
]

raw_messages_adapter = TypeAdapter(list[RawMessage])

SuccessCallback = Callable[[list[TransactionDraft]], None]
ErrorCallback = Callable[[str], None]


def build_draft(message: RawMessage, index: int, settings: Settings | None = None) -> TransactionDraft:
    """Create the initial draft for a classified message at a position in the filtered sequence."""
    settings = settings or get_settings()
    sender = message.address.upper()
    wallets = {address.upper(): wallet for address, wallet in settings.sender_wallets.items()}
    has_local_id = message.local_id is not None and message.local_id != ""
    draft_id = f"sms_{message.local_id if has_local_id else index}"
    date = epoch_millis_to_iso(message.date)
    if date is None and message.date is not None:
        logger.warning(f"{draft_id}: unreadable timestamp {message.date!r}")
    return TransactionDraft(
        id=draft_id,
        wallet_id=wallets.get(sender, sender.lower()),
        category_id=categories.OTHER.id,
        category=categories.OTHER,
        balance=0.0,
        date=date,
        type=TransactionType.EXPENSE,
        note=TransactionNote(text_note=message.body),
        fee=0.0,
        reference=draft_id,
        is_auto_imported=True,
    )


class ImportRunner:
    """ImportRunner turns the inbox of a message source into transaction drafts."""

    def __init__(self, source: MessageSource, settings: Settings | None = None) -> None:
        """Initialize ImportRunner with a message source and settings."""
        self.source = source
        self.settings = settings or get_settings()
        self.classifier = MessageClassifier(self.settings)
        self._parsers: dict[str, BaseParser] = {}
        self.unparsed_wallets = sorted(set(self.settings.sender_wallets.values()) - set(ParserRegistry.available()))
        if self.unparsed_wallets:
            logger.warning(f"No parser registered for wallets {self.unparsed_wallets}, messages keep builder defaults")

    def parser_for(self, wallet_id: str) -> BaseParser | None:
        """Return the parser for a wallet id, or None when the wallet has no parser."""
        if wallet_id not in self._parsers:
            parser_cls = ParserRegistry.get(wallet_id)
            if parser_cls is None:
                return None
            self._parsers[wallet_id] = parser_cls.from_settings(self.settings)
        return self._parsers[wallet_id]

    def parse_message(self, message: RawMessage, index: int) -> TransactionDraft:
        """Build the draft for a message and enrich it with its sender's parser."""
        draft = build_draft(message, index, self.settings)
        parser = self.parser_for(draft.wallet_id)
        if parser is None:
            logger.debug(f"{draft.id}: no parser for wallet '{draft.wallet_id}'")
            return draft
        return parser.parse(message.body, draft)

    def filter_and_parse(self, messages: list[RawMessage]) -> list[TransactionDraft]:
        """Classify, parse, and keep only drafts with a balance and a type."""
        transaction_messages = [m for m in messages if self.classifier.is_transaction_message(m)]
        parsed = [self.parse_message(m, idx) for idx, m in enumerate(transaction_messages)]
        transactions = [t for t in parsed if t.is_importable()]
        for draft in parsed:
            if not draft.is_importable():
                body = draft.note.text_note[:MAX_BODY_LOG_LEN]
                logger.debug(f"{draft.id}: dropped, no amount recovered from {body!r}")
        logger.info(
            f"Parsed {len(messages)} messages: {len(transaction_messages)} transaction messages, "
            f"{len(transactions)} transactions kept"
        )
        return transactions

    def fetch_messages(self) -> list[RawMessage]:
        """Fetch and decode the inbox messages from the source."""
        message_filter = MessageFilter(box=self.settings.inbox_box, max_count=self.settings.max_message_count)
        payload = self.source.list_messages(message_filter)
        try:
            return raw_messages_adapter.validate_json(payload)
        except ValidationError as exc:
            msg = f"Malformed SMS records: {exc}"
            raise MessageRetrievalError(msg) from exc

    def read_and_parse_transactions(self, on_success: SuccessCallback, on_error: ErrorCallback | None = None) -> None:
        """Read the inbox and deliver the parsed transactions to on_success, or the failure to on_error."""
        try:
            messages = self.fetch_messages()
        except MessageRetrievalError as exc:
            logger.error(f"Failed to read SMS: {exc}")
            if on_error is not None:
                on_error(str(exc))
            return
        on_success(self.filter_and_parse(messages))


def read_and_parse_transactions(
    source: MessageSource,
    on_success: SuccessCallback,
    on_error: ErrorCallback | None = None,
    settings: Settings | None = None,
) -> None:
    """Top-level function to import transactions from a message source using ImportRunner."""
    runner = ImportRunner(source, settings)
    runner.read_and_parse_transactions(on_success, on_error)


def export_transactions_csv(transactions: list[TransactionDraft]) -> str:
    """Flatten transactions into CSV text for download."""
    records = [t.model_dump(mode="json", by_alias=True) for t in transactions]
    data_frame = pd.json_normalize(records) if records else pd.DataFrame(columns=CSV_COLUMNS)
    return data_frame.reindex(columns=CSV_COLUMNS).to_csv(index=False)
