"""
Data Models Package

This package contains all Pydantic models used in Contabil.
All data flowing through the core must conform to these schemas.
"""

from contabil.models.audit import (
    AuditAction,
    AuditEntity,
    AuditEntryBuilder,
    AuditLogEntry,
)
from contabil.models.closing import (
    CheckCategory,
    CheckSeverity,
    ChecklistItem,
    MonthClose,
    MonthCloseChecklist,
)
from contabil.models.common import (
    Competence,
    competence_of,
    due_date_next_month,
    format_competence,
    new_id,
    to_cents,
)
from contabil.models.ledger import (
    AccountClass,
    BankAccount,
    BankAccountKind,
    Client,
    Document,
    DocumentKind,
    EntryBalance,
    JournalEntry,
    JournalLine,
)
from contabil.models.reconciliation import (
    BankTransaction,
    ImportResult,
    MatchCandidate,
    ParsedTransaction,
    StatementValidationResult,
    ValidationIssue,
)
from contabil.models.reports import (
    IncomeStatement,
    IncomeStatementLine,
    TrialBalance,
    TrialBalanceLine,
)
from contabil.models.tax import (
    BreakdownLine,
    DeadlineAlert,
    TaxItem,
    TaxPeriod,
    TaxPeriodStatus,
    TaxRegime,
    TaxResult,
    TaxType,
)

__all__ = [
    # Audit models
    "AuditAction",
    "AuditEntity",
    "AuditEntryBuilder",
    "AuditLogEntry",
    # Month close models
    "CheckCategory",
    "CheckSeverity",
    "ChecklistItem",
    "MonthClose",
    "MonthCloseChecklist",
    # Common helpers
    "Competence",
    "competence_of",
    "due_date_next_month",
    "format_competence",
    "new_id",
    "to_cents",
    # Ledger models
    "AccountClass",
    "BankAccount",
    "BankAccountKind",
    "Client",
    "Document",
    "DocumentKind",
    "EntryBalance",
    "JournalEntry",
    "JournalLine",
    # Reconciliation models
    "BankTransaction",
    "ImportResult",
    "MatchCandidate",
    "ParsedTransaction",
    "StatementValidationResult",
    "ValidationIssue",
    # Report models
    "IncomeStatement",
    "IncomeStatementLine",
    "TrialBalance",
    "TrialBalanceLine",
    # Tax models
    "BreakdownLine",
    "DeadlineAlert",
    "TaxItem",
    "TaxPeriod",
    "TaxPeriodStatus",
    "TaxRegime",
    "TaxResult",
    "TaxType",
]
