"""Parser registry mapping wallet identifiers to parser implementations.

Parsers register themselves under the wallet id of the institution whose messages they
understand. The import runner looks parsers up by the wallet id of each draft.
"""

from typing import ClassVar

from sms_importer.parsers.base import BaseParser


class ParserRegistry:
    """Registry for parser classes."""

    _registry: ClassVar[dict[str, type[BaseParser]]] = {}

    @classmethod
    def register(cls, wallet_id: str, parser_cls: type[BaseParser]) -> None:
        """Register a parser class for a wallet id."""
        cls._registry[wallet_id] = parser_cls

    @classmethod
    def get(cls, wallet_id: str) -> type[BaseParser] | None:
        """Retrieve the parser class for a wallet id, or None when none is registered."""
        return cls._registry.get(wallet_id)

    @classmethod
    def available(cls) -> list[str]:
        """List all wallet ids that have a parser."""
        return list(cls._registry.keys())
