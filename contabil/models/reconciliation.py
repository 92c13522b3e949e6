"""
Reconciliation Models for Contabil

ParsedTransaction is what reaches the matcher after the statement rows
have been normalized. BankTransaction is what gets persisted.

CRITICAL: match metadata on a BankTransaction is set once, at import.
There is no re-matching pass.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from contabil.models.common import new_id


class ParsedTransaction(BaseModel):
    """A normalized bank statement row (ISO date, decimal amount)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: date
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        description="Signed amount: positive is an inflow, negative an outflow"
    )


class MatchCandidate(BaseModel):
    """Best journal entry found for a transaction."""

    entry_id: str
    confidence: int = Field(..., ge=0, le=100)


class BankTransaction(BaseModel):
    """A persisted bank statement line with its match metadata."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    client_id: str
    bank_account_id: str = ""
    date: date
    description: str
    amount: Decimal
    matched: bool = False
    match_entry_id: Optional[str] = None
    match_confidence: int = Field(default=0, ge=0, le=100)
    imported_from: str = Field(default="", description="Source file name")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ImportResult(BaseModel):
    """
    Outcome of one statement import.

    `matches` keeps every candidate at or above the suggestion
    threshold, keyed by the transaction's position in the batch, so
    weak suggestions can be shown even though they were not applied.
    """

    source_file: str
    transactions: list[BankTransaction] = Field(default_factory=list)
    matches: dict[int, MatchCandidate] = Field(default_factory=dict)
    skipped_rows: int = Field(default=0, ge=0)

    @property
    def matched_count(self) -> int:
        return sum(1 for tx in self.transactions if tx.matched)

    @property
    def suggested_count(self) -> int:
        """Candidates that were reported but not auto-applied."""
        return sum(
            1 for idx in self.matches
            if idx < len(self.transactions) and not self.transactions[idx].matched
        )


# =============================================================================
# STATEMENT ROW VALIDATION
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a statement row."""

    row_number: int = Field(..., ge=1, description="1-based data row number")
    field: str = Field(
        ...,
        description="Field with the issue (date, description, amount)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    raw_value: Optional[str] = None


class StatementValidationResult(BaseModel):
    """Rows that survived normalization plus what was dropped and why."""

    transactions: list[ParsedTransaction] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def skipped_rows(self) -> int:
        return len({issue.row_number for issue in self.issues})

    @property
    def has_transactions(self) -> bool:
        return len(self.transactions) > 0
