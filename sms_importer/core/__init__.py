"""Core package: provides models, settings, the message classifier, and shared utilities."""

from .classifier import MessageClassifier  # noqa: F401
from .models import Category, MessageFilter, RawMessage, TransactionDraft, TransactionNote, TransactionType  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
from .utils import get_logger  # noqa: F401
