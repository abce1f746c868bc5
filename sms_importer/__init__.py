"""SMS Transaction Importer: extracts wallet transactions from bank and mobile-money SMS notifications."""
