"""Workers package: provides the SMS import runner."""

from .import_runner import ImportRunner, build_draft, export_transactions_csv, read_and_parse_transactions  # noqa: F401
