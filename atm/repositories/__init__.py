"""Data access for the ledger file."""
