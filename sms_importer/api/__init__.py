"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_runner_factory, get_settings  # noqa: F401
from .routes import router  # noqa: F401
