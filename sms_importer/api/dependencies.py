"""FastAPI dependencies for DI (settings and the import runner factory).

This module provides dependency injection helpers so that endpoints can be tested with
overridden settings, for example a different exchange rate or sender allow-list.
"""

from collections.abc import Callable

from sms_importer.core.settings import Settings, get_settings
from sms_importer.services.message_source import MessageSource
from sms_importer.workers.import_runner import ImportRunner


def get_runner_factory() -> Callable[[MessageSource], ImportRunner]:
    """Provide a factory building an ImportRunner for a message source."""
    settings: Settings = get_settings()

    def factory(source: MessageSource) -> ImportRunner:
        return ImportRunner(source, settings)

    return factory
