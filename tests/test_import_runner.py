"""Tests for the SMS import pipeline: draft building, filtering, callbacks, and CSV export."""

import csv
import io
import json
from pathlib import Path

import pytest

from sms_importer.core.models import MessageFilter, RawMessage, TransactionDraft, TransactionType
from sms_importer.core.settings import Settings
from sms_importer.core.utils import parse_amount, to_base_currency
from sms_importer.parsers.registry import ParserRegistry
from sms_importer.services.message_source import (
    InMemoryMessageSource,
    JsonFileMessageSource,
    JsonPayloadMessageSource,
    MessageRetrievalError,
    MessageSource,
)
from sms_importer.workers.import_runner import (
    ImportRunner,
    build_draft,
    export_transactions_csv,
    read_and_parse_transactions,
)

MOMO_TRANSFER = "1,000 RWF transferred to John Doe (250788123456). Fee was: 100. Your new balance: 5,000 RWF"
BANK_TRANSFER = "50.00 USD was successfully sent to Jane Smith 250788000000. Charges 1.00 USD"

INBOX = [
    {"_id": 1, "address": "EQUITYBANK", "body": "One-Time-Pin 4521, Never share this code", "date": "1700000000000"},
    {"_id": 2, "address": "+250788999999", "body": "I sent you 5,000 RWF", "date": "1700000000000"},
    {"address": "M-MONEY", "body": MOMO_TRANSFER, "date": "1700000000000"},
    {"address": "equitybank", "body": BANK_TRANSFER, "date": 1700000060000},
    {"address": "M-MONEY", "body": "TxId: 42 request received, please wait", "date": "1700000120000"},
]


class FailingMessageSource(MessageSource):
    """Message source that always fails, like an inbox without read permission."""

    def list_messages(self, message_filter: MessageFilter) -> str:
        """Raise a retrieval error."""
        _ = message_filter
        msg = "permission denied"
        raise MessageRetrievalError(msg)


def _collect(runner: ImportRunner) -> tuple[list[list[TransactionDraft]], list[str]]:
    successes: list[list[TransactionDraft]] = []
    errors: list[str] = []
    runner.read_and_parse_transactions(successes.append, errors.append)
    return successes, errors


def test_parse_amount_and_currency_normalization() -> None:
    """Separators are stripped, bad literals become None, and only USD is converted."""
    if parse_amount("1,234.50") != 1234.5:
        msg = "Expected '1,234.50' to parse as 1234.5"
        raise AssertionError(msg)
    for literal in (",", "", "abc", None):
        if parse_amount(literal) is not None:
            msg = f"Expected {literal!r} to parse as None"
            raise AssertionError(msg)
    if to_base_currency(250.0, "RWF", 1440) != 250.0:
        msg = "Expected RWF amounts to pass through unchanged"
        raise AssertionError(msg)
    if to_base_currency(2.0, "USD", 1440) != 2880.0:
        msg = "Expected USD amounts to be multiplied by the rate once"
        raise AssertionError(msg)
    if to_base_currency(None, "USD", 1440) is not None:
        msg = "Expected a missing amount to stay missing"
        raise AssertionError(msg)


def test_build_draft_defaults() -> None:
    """Drafts start as 'Other' expenses carrying the raw body and a synthetic reference."""
    message = RawMessage.model_validate({"_id": 42, "address": "m-money", "body": "hello", "date": "1700000000000"})
    draft = build_draft(message, 3, Settings())
    expected = {
        "id": "sms_42",
        "wallet_id": "mtn_momo",
        "category_id": "other",
        "balance": 0.0,
        "fee": 0.0,
        "type": TransactionType.EXPENSE,
        "reference": "sms_42",
        "date": "2023-11-14T22:13:20+00:00",
        "is_auto_imported": True,
    }
    for field, value in expected.items():
        if getattr(draft, field) != value:
            msg = f"Expected {field}={value!r}, got {getattr(draft, field)!r}"
            raise AssertionError(msg)
    if draft.note.text_note != "hello":
        msg = f"Expected note seeded with the body, got {draft.note.text_note!r}"
        raise AssertionError(msg)


def test_build_draft_uses_index_without_local_id() -> None:
    """Messages without a local id are identified by their position."""
    draft = build_draft(RawMessage(address="EQUITYBANK", body="x", date="garbage"), 5, Settings())
    if draft.id != "sms_5" or draft.reference != "sms_5":
        msg = f"Expected id and reference 'sms_5', got {draft.id!r} / {draft.reference!r}"
        raise AssertionError(msg)
    if draft.wallet_id != "equity_bank":
        msg = f"Expected wallet 'equity_bank', got {draft.wallet_id!r}"
        raise AssertionError(msg)
    if draft.date is not None:
        msg = f"Expected unreadable timestamp to give no date, got {draft.date!r}"
        raise AssertionError(msg)


def test_filter_and_parse_mixed_inbox() -> None:
    """Only recognized transactions from known senders survive the pipeline."""
    runner = ImportRunner(InMemoryMessageSource(INBOX), Settings(usd_to_rwf=1440))
    messages = [RawMessage.model_validate(record) for record in INBOX]
    transactions = runner.filter_and_parse(messages)
    if [t.id for t in transactions] != ["sms_0", "sms_1"]:
        msg = f"Expected transactions sms_0 and sms_1, got {[t.id for t in transactions]}"
        raise AssertionError(msg)
    momo, bank = transactions
    if (momo.wallet_id, momo.balance, momo.fee) != ("mtn_momo", 5000, 100):
        msg = f"Unexpected mobile money transaction: {momo}"
        raise AssertionError(msg)
    if (bank.wallet_id, bank.balance, bank.fee) != ("equity_bank", 72000, 1440):
        msg = f"Unexpected bank transaction: {bank}"
        raise AssertionError(msg)
    for txn in transactions:
        if not txn.balance or txn.type is None:
            msg = f"Expected only importable transactions, got {txn}"
            raise AssertionError(msg)


def test_read_and_parse_calls_success_once() -> None:
    """A successful import calls on_success exactly once and never on_error."""
    successes, errors = _collect(ImportRunner(InMemoryMessageSource(INBOX), Settings()))
    if len(successes) != 1 or errors:
        msg = f"Expected one success and no error, got {len(successes)} / {errors}"
        raise AssertionError(msg)
    if len(successes[0]) != 2:
        msg = f"Expected 2 transactions, got {len(successes[0])}"
        raise AssertionError(msg)


def test_retrieval_failure_calls_error_only() -> None:
    """A failing source reports its detail through on_error and skips on_success."""
    successes, errors = _collect(ImportRunner(FailingMessageSource(), Settings()))
    if successes or errors != ["permission denied"]:
        msg = f"Expected only the retrieval error, got {successes} / {errors}"
        raise AssertionError(msg)
    ImportRunner(FailingMessageSource(), Settings()).read_and_parse_transactions(successes.append)
    if successes:
        msg = "Expected no success callback without an error callback"
        raise AssertionError(msg)


def test_malformed_payloads_are_reported() -> None:
    """Invalid JSON and records missing fields are reported as retrieval failures."""
    for source in (JsonPayloadMessageSource("{not json"), JsonPayloadMessageSource('{"a": 1}')):
        successes, errors = _collect(ImportRunner(source, Settings()))
        if successes or len(errors) != 1:
            msg = f"Expected a single error for {source.payload!r}, got {successes} / {errors}"
            raise AssertionError(msg)
    successes, errors = _collect(ImportRunner(InMemoryMessageSource([{"address": "M-MONEY"}]), Settings()))
    if successes or len(errors) != 1 or "Malformed SMS records" not in errors[0]:
        msg = f"Expected a malformed records error, got {successes} / {errors}"
        raise AssertionError(msg)


def test_max_message_count_caps_the_inbox() -> None:
    """Only the first max_message_count records are requested."""
    records = [{"address": "M-MONEY", "body": MOMO_TRANSFER}] * 3
    successes, _ = _collect(ImportRunner(InMemoryMessageSource(records), Settings(max_message_count=2)))
    if len(successes[0]) != 2:
        msg = f"Expected 2 transactions, got {len(successes[0])}"
        raise AssertionError(msg)


def test_json_file_source(tmp_path: Path) -> None:
    """SMS backups are read from disk; missing files raise a retrieval error."""
    backup = tmp_path / "backup.json"
    backup.write_text(json.dumps(INBOX), encoding="utf-8")
    payload = JsonFileMessageSource(backup).list_messages(MessageFilter())
    if len(json.loads(payload)) != len(INBOX):
        msg = "Expected every record of the backup to be served"
        raise AssertionError(msg)
    with pytest.raises(MessageRetrievalError):
        JsonFileMessageSource(tmp_path / "missing.json").list_messages(MessageFilter())


def test_export_transactions_csv() -> None:
    """Transactions flatten into CSV rows with camelCase headers."""
    messages = [RawMessage.model_validate(record) for record in INBOX]
    transactions = ImportRunner(InMemoryMessageSource([]), Settings()).filter_and_parse(messages)
    reader = csv.DictReader(io.StringIO(export_transactions_csv(transactions)))
    rows = list(reader)
    if reader.fieldnames[:5] != ["id", "walletId", "date", "type", "categoryId"]:
        msg = f"Unexpected CSV header: {reader.fieldnames}"
        raise AssertionError(msg)
    if [(row["id"], row["walletId"], row["type"]) for row in rows] != [
        ("sms_0", "mtn_momo", "expense"),
        ("sms_1", "equity_bank", "expense"),
    ]:
        msg = f"Unexpected CSV rows: {rows}"
        raise AssertionError(msg)
    if not rows[0]["note.textNote"].startswith(MOMO_TRANSFER):
        msg = f"Expected the note column to keep the SMS body, got {rows[0]['note.textNote']!r}"
        raise AssertionError(msg)
    empty = list(csv.reader(io.StringIO(export_transactions_csv([]))))
    if len(empty) != 1:
        msg = f"Expected only a header for no transactions, got {empty}"
        raise AssertionError(msg)


def test_module_level_import_uses_settings() -> None:
    """The top-level entry point builds a runner with the given settings."""
    received: list[list[TransactionDraft]] = []
    records = [{"address": "EQUITYBANK", "body": BANK_TRANSFER}]
    read_and_parse_transactions(InMemoryMessageSource(records), received.append, settings=Settings(usd_to_rwf=2))
    if [t.balance for t in received[0]] != [100.0]:
        msg = f"Expected a balance of 100.0 at a rate of 2, got {received}"
        raise AssertionError(msg)


def test_every_default_wallet_has_a_parser() -> None:
    """Both supported institutions have a registered parser; unknown wallets are reported."""
    if sorted(ParserRegistry.available()) != ["equity_bank", "mtn_momo"]:
        msg = f"Unexpected registered wallets: {ParserRegistry.available()}"
        raise AssertionError(msg)
    if ImportRunner(InMemoryMessageSource([]), Settings()).unparsed_wallets:
        msg = "Expected every default sender wallet to have a parser"
        raise AssertionError(msg)
    settings = Settings(sender_wallets={"EQUITYBANK": "equity_bank", "BK": "bank_of_kigali"})
    runner = ImportRunner(InMemoryMessageSource([]), settings)
    if runner.unparsed_wallets != ["bank_of_kigali"]:
        msg = f"Expected bank_of_kigali to be reported, got {runner.unparsed_wallets}"
        raise AssertionError(msg)
