"""EquityBankParser: extraction rules for Equity Bank transfer-style SMS notifications.

Equity Bank reports amounts in either the base currency (RWF) or a foreign currency (USD).
Foreign amounts are converted into the base currency with the configured exchange rate
before being stored on the draft. Both currency codes come from settings, so the
currency-bearing templates are compiled per parser instance.
"""

import re

from sms_importer.core import categories
from sms_importer.core.models import TransactionDraft, TransactionType
from sms_importer.core.settings import USD_TO_RWF, Settings
from sms_importer.core.utils import parse_amount, to_base_currency
from sms_importer.parsers.base import BaseParser, TemplateHandler, find_amount
from sms_importer.parsers.registry import ParserRegistry

AMOUNT = r"(\d[\d,]*(?:\.\d+)?)"

RE_WITHDRAW_CHARGES = re.compile(rf"charges\s+{AMOUNT}")
RE_BALANCE = re.compile(rf"balance[:\s]+{AMOUNT}", re.IGNORECASE)
RE_REFERENCE = re.compile(r"[Rr]ef[.:\s]+(\d+)")
# "ACME LTD. Ref 998877" -> "ACME LTD"
RE_NAME_REF_TAIL = re.compile(r"\.\s*Ref\b.*$", re.IGNORECASE | re.DOTALL)


class EquityBankParser(BaseParser):
    """Parser for SMS notifications sent by Equity Bank."""

    name = "equity_bank"

    def __init__(
        self,
        usd_to_rwf: float = USD_TO_RWF,
        foreign_currency: str = "USD",
        base_currency: str = "RWF",
    ) -> None:
        """Initialize the parser with the exchange rate and the two currency codes it recognizes."""
        self.usd_to_rwf = usd_to_rwf
        self.foreign_currency = foreign_currency
        self.base_currency = base_currency
        cur = f"({re.escape(base_currency)}|{re.escape(foreign_currency)})"
        # "50.00 USD was successfully sent to JANE DOE 250788000000" or "... to JANE DOE 4***1234"
        self.re_sent = re.compile(
            rf"{AMOUNT}\s+{cur}\s+(?:was|has been) successfully sent to\s+([^0-9]+?)(?:\s+4\*+\d+|\s+(\d+))"
        )
        self.re_received = re.compile(rf"You have received\s+{AMOUNT}\s+{cur}\s+from\s+([^0-9]+)")
        self.re_withdrawn = re.compile(rf"withdrawn\s+{cur}\s+{AMOUNT}")
        self.re_deposited = re.compile(rf"deposited\s+{cur}\s+{AMOUNT}")
        self.re_card_auth = re.compile(rf"Amt:\s+{cur}\s+{AMOUNT}\s+Details:([^.]+)")
        self.re_card_debit = re.compile(rf"Debit for card.*Amt:\s+{cur}\s+{AMOUNT}")
        self.re_transfer_charges = re.compile(rf"Charges\s+{AMOUNT}\s+{cur}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "EquityBankParser":
        """Build a parser using the exchange rate and currencies from settings."""
        return cls(
            usd_to_rwf=settings.usd_to_rwf,
            foreign_currency=settings.foreign_currency,
            base_currency=settings.base_currency,
        )

    def templates(self) -> list[tuple[re.Pattern[str], TemplateHandler]]:
        """Return the Equity Bank templates in priority order."""
        return [
            (self.re_sent, self._parse_sent),
            (self.re_received, self._parse_received),
            (self.re_withdrawn, self._parse_withdrawn),
            (self.re_deposited, self._parse_deposited),
            (self.re_card_auth, self._parse_card),
            (self.re_card_debit, self._parse_card),
        ]

    def to_rwf(self, amount: str | None, currency: str) -> float | None:
        """Parse an amount literal and convert it into the base currency."""
        return to_base_currency(parse_amount(amount), currency, self.usd_to_rwf, self.foreign_currency)

    def _parse_sent(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        amount, currency, recipient, phone = match.groups()
        charges_match = self.re_transfer_charges.search(body)
        fee = self.to_rwf(*charges_match.groups()) if charges_match else None
        return draft.classify(
            categories.TRANSFER,
            TransactionType.EXPENSE,
            self.to_rwf(amount, currency),
            f"Transfer to {recipient.strip()} ({phone or 'N/A'})",
            fee=fee if fee is not None else 0.0,
        )

    def _parse_received(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        _ = body
        amount, currency, sender = match.groups()
        return draft.classify(
            categories.RECEIVED,
            TransactionType.INCOME,
            self.to_rwf(amount, currency),
            f"Received from {RE_NAME_REF_TAIL.sub('', sender).strip()}",
        )

    def _parse_withdrawn(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        currency, amount = match.groups()
        # Withdrawal charges carry no currency and are already in the base currency.
        fee = find_amount(RE_WITHDRAW_CHARGES, body)
        return draft.classify(
            categories.ATM_WITHDRAWAL,
            TransactionType.EXPENSE,
            self.to_rwf(amount, currency),
            "ATM Withdrawal",
            fee=fee if fee is not None else 0.0,
        )

    def _parse_deposited(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        _ = body
        currency, amount = match.groups()
        return draft.classify(
            categories.CASH_DEPOSIT,
            TransactionType.INCOME,
            self.to_rwf(amount, currency),
            "Cash Deposit",
        )

    def _parse_card(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        _ = body
        currency, amount = match.group(1), match.group(2)
        details = match.group(3).strip() if match.re.groups >= 3 else ""
        return draft.classify(
            categories.CARD_PAYMENT,
            TransactionType.EXPENSE,
            self.to_rwf(amount, currency),
            details or "Card Payment",
        )

    def fallback(self, body: str, draft: TransactionDraft) -> TransactionDraft:
        """Scavenge a raw balance figure and a reference number from an unrecognized message."""
        update = {}
        balance_match = RE_BALANCE.search(body)
        if balance_match:
            update["balance"] = parse_amount(balance_match.group(1))
        ref_match = RE_REFERENCE.search(body)
        if ref_match:
            update["reference"] = ref_match.group(1)
        return draft.model_copy(update=update) if update else draft


ParserRegistry.register(EquityBankParser.name, EquityBankParser)
