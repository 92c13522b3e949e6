"""Bank reconciliation package."""

from contabil.reconciliation.importer import (
    BankStatementImporter,
    EmptyStatementError,
)
from contabil.reconciliation.matcher import ReconciliationMatcher

__all__ = [
    "BankStatementImporter",
    "EmptyStatementError",
    "ReconciliationMatcher",
]
