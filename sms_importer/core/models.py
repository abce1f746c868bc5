"""Pydantic models for the SMS Transaction Importer.

This module defines the raw message records handed over by a message source and the
immutable transaction drafts produced by the parsing pipeline. Drafts serialize with
camelCase aliases so the output matches what the wallet UI consumes.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionType(StrEnum):
    """Direction of a transaction relative to the wallet."""

    EXPENSE = "expense"
    INCOME = "income"


class RawMessage(BaseModel):
    """A single SMS record as exported by the device inbox."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    address: str
    body: str
    date: str | int | float | None = None
    local_id: str | int | None = Field(default=None, alias="_id")


class MessageFilter(BaseModel):
    """Mailbox selector and result cap passed to a message source."""

    box: str = "inbox"
    max_count: int = 10000


class Category(BaseModel):
    """Category descriptor attached to a transaction."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    parent_id: str
    name: str
    icon: str


class TransactionNote(BaseModel):
    """Free-text note; always begins with the original SMS body."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    text_note: str = ""


class TransactionDraft(BaseModel):
    """Transaction record threaded through the parsing pipeline."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    wallet_id: str
    category_id: str
    category: Category
    balance: float | None = 0.0
    date: str | None = None
    type: TransactionType | None = TransactionType.EXPENSE
    note: TransactionNote = Field(default_factory=TransactionNote)
    fee: float = 0.0
    reference: str | None = None
    is_auto_imported: bool = True

    def with_note_line(self, line: str) -> str:
        """Return the current note text with a summary line appended."""
        return f"{self.note.text_note}\n{line}"

    def classify(
        self,
        category: Category,
        transaction_type: TransactionType,
        balance: float | None,
        note_line: str,
        fee: float | None = None,
    ) -> "TransactionDraft":
        """Return a copy carrying the category, type, balance and note summary of a matched template."""
        update = {
            "type": transaction_type,
            "category": category,
            "category_id": category.id,
            "balance": balance,
            "note": TransactionNote(text_note=self.with_note_line(note_line)),
        }
        if fee is not None:
            update["fee"] = fee
        return self.model_copy(update=update)

    def is_importable(self) -> bool:
        """Check that the draft carries a non-zero balance and a transaction type."""
        return bool(self.balance or 0) and self.type is not None
