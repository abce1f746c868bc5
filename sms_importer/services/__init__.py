"""Services package: provides the message sources feeding the import pipeline."""

from .message_source import (  # noqa: F401
    InMemoryMessageSource,
    JsonFileMessageSource,
    JsonPayloadMessageSource,
    MessageRetrievalError,
    MessageSource,
)
