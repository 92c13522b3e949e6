"""Ledger query package."""

from contabil.queries.ledger import LedgerQueries

__all__ = ["LedgerQueries"]
