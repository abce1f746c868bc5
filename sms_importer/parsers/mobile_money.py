"""MobileMoneyParser: extraction rules for MTN Mobile Money (M-MONEY) SMS notifications.

All Mobile Money messages are denominated in RWF. When a message reports the wallet's new
balance, that figure is stored as the draft balance in place of the transaction amount.
"""

import re

from sms_importer.core import categories
from sms_importer.core.models import Category, TransactionDraft, TransactionType
from sms_importer.core.utils import parse_amount
from sms_importer.parsers.base import BaseParser, TemplateHandler, find_amount
from sms_importer.parsers.registry import ParserRegistry

AMOUNT = r"(\d[\d,]*(?:\.\d+)?)"

RE_SENT = re.compile(rf"{AMOUNT}\s+RWF transferred to\s+([^(]+)\((\d+)\)")
RE_RECEIVED = re.compile(rf"You have received\s+{AMOUNT}\s+RWF from\s+([^(]+)\(\*+(\d+)\)")
RE_PAYMENT = re.compile(rf"Your payment of\s+{AMOUNT}\s+RWF to\s+([^0-9]+)")
RE_TXID_PAYMENT = re.compile(rf"TxId:\s+\d+\.\s+Your payment of\s+{AMOUNT}\s+RWF to\s+([^0-9]+)")
RE_MERCHANT = re.compile(rf"transaction of\s+{AMOUNT}\s+RWF by\s+(.+?)\s*on your MOMO")
RE_AGENT_WITHDRAW = re.compile(rf"withdrawn\s+{AMOUNT}\s+RWF from your mobile money")

RE_TRANSFER_FEE = re.compile(rf"Fee was:\s+{AMOUNT}")
RE_PAYMENT_FEE = re.compile(rf"Fee was\s+{AMOUNT}")
RE_WITHDRAW_FEE = re.compile(rf"Fee paid:\s+{AMOUNT}")
RE_NEW_BALANCE = re.compile(rf"[Nn]ew balance:\s*{AMOUNT}\s+RWF")
RE_TX_ID = re.compile(r"TxId:\s*(\d+)|Transaction Id:\s*(\d+)")


def balance_or_amount(body: str, amount: str) -> float | None:
    """Return the reported new balance if the message has one, otherwise the transaction amount."""
    new_balance = find_amount(RE_NEW_BALANCE, body)
    if new_balance is not None:
        return new_balance
    return parse_amount(amount)


def fee_or_zero(pattern: re.Pattern[str], body: str) -> float:
    """Return the fee reported by the message, or zero when it reports none."""
    fee = find_amount(pattern, body)
    return fee if fee is not None else 0.0


def payment_category(body: str) -> Category:
    """Infer the category of a merchant or bill payment from the message text."""
    if "Cash Power" in body or "MTN cash Power" in body:
        return categories.ELECTRICITY
    if "Airtime" in body:
        return categories.AIRTIME
    return categories.PAYMENT


class MobileMoneyParser(BaseParser):
    """Parser for SMS notifications sent by MTN Mobile Money."""

    name = "mtn_momo"

    def templates(self) -> list[tuple[re.Pattern[str], TemplateHandler]]:
        """Return the Mobile Money templates in priority order."""
        return [
            (RE_SENT, self._parse_sent),
            (RE_RECEIVED, self._parse_received),
            (RE_PAYMENT, self._parse_payment),
            (RE_TXID_PAYMENT, self._parse_payment),
            (RE_MERCHANT, self._parse_merchant),
            (RE_AGENT_WITHDRAW, self._parse_agent_withdrawal),
        ]

    def _parse_sent(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        amount, recipient, phone = match.groups()
        return draft.classify(
            categories.TRANSFER,
            TransactionType.EXPENSE,
            balance_or_amount(body, amount),
            f"Transfer to {recipient.strip()} ({phone})",
            fee=fee_or_zero(RE_TRANSFER_FEE, body),
        )

    def _parse_received(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        amount, sender, phone = match.groups()
        return draft.classify(
            categories.RECEIVED,
            TransactionType.INCOME,
            balance_or_amount(body, amount),
            f"Received from {sender.strip()} ({phone})",
        )

    def _parse_payment(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        amount, merchant = match.groups()
        return draft.classify(
            payment_category(body),
            TransactionType.EXPENSE,
            balance_or_amount(body, amount),
            f"Payment to {merchant.strip()}",
            fee=fee_or_zero(RE_PAYMENT_FEE, body),
        )

    def _parse_merchant(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        amount, merchant = match.groups()
        return draft.classify(
            categories.MERCHANT_PAYMENT,
            TransactionType.EXPENSE,
            balance_or_amount(body, amount),
            f"Payment to {merchant.strip()}",
        )

    def _parse_agent_withdrawal(self, match: re.Match[str], body: str, draft: TransactionDraft) -> TransactionDraft:
        (amount,) = match.groups()
        return draft.classify(
            categories.AGENT_WITHDRAWAL,
            TransactionType.EXPENSE,
            balance_or_amount(body, amount),
            "Cash withdrawal",
            fee=fee_or_zero(RE_WITHDRAW_FEE, body),
        )

    def fallback(self, body: str, draft: TransactionDraft) -> TransactionDraft:
        """Scavenge a transaction id from an unrecognized message."""
        match = RE_TX_ID.search(body)
        if not match:
            return draft
        return draft.model_copy(update={"reference": match.group(1) or match.group(2)})


ParserRegistry.register(MobileMoneyParser.name, MobileMoneyParser)
