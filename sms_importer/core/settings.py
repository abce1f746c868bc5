"""Configuration and environment settings for the SMS Transaction Importer."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

USD_TO_RWF = 1440.0

DEFAULT_SENDER_WALLETS = {
    "EQUITYBANK": "equity_bank",
    "M-MONEY": "mtn_momo",
}

DEFAULT_EXCLUDE_PATTERNS = [
    "Never share this code",
    "One-Time-Pin",
    "OTM",
    "Use code",
    "Do no share",
    "Customer Care",
    "balance of accumulated interest",
]

DEFAULT_TRANSACTION_INDICATORS = [
    "RWF",
    "USD",
    "transferred",
    "received",
    "sent",
    "withdrawn",
    "deposited",
    "payment",
    "completed",
    "successfully",
    "balance:",
    "new balance",
    "Fee",
    "TxId:",
    "Ref.",
    "Transaction Id",
]


class Settings(BaseSettings):
    """Application settings for the SMS Transaction Importer."""

    usd_to_rwf: float = USD_TO_RWF
    base_currency: str = "RWF"
    foreign_currency: str = "USD"
    sender_wallets: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SENDER_WALLETS))
    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    transaction_indicators: list[str] = Field(default_factory=lambda: list(DEFAULT_TRANSACTION_INDICATORS))
    inbox_box: str = "inbox"
    max_message_count: int = 10000
    log_file: str = "logs/sms_import.log"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
