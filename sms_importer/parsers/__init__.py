"""Parsers package: provides the parser registry, base class, and sender-specific parser implementations."""

from .base import BaseParser  # noqa: F401
from .equity_bank import EquityBankParser  # noqa: F401
from .mobile_money import MobileMoneyParser  # noqa: F401
from .registry import ParserRegistry  # noqa: F401
