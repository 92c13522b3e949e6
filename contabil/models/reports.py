"""
Report Models for Contabil

Shapes of the income statement (DRE) and trial balance (balancete)
views. These are consumed by display and printing layers as-is.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from contabil.models.common import Competence


class IncomeStatementLine(BaseModel):
    """A line of the income statement; group headers have is_total=True."""

    code: str
    name: str
    value: Decimal
    level: int = Field(..., ge=1)
    is_total: bool = False


class IncomeStatement(BaseModel):
    competence: Competence
    lines: list[IncomeStatementLine] = Field(default_factory=list)
    total_revenue: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    result: Decimal = Decimal("0")


class TrialBalanceLine(BaseModel):
    """
    Per-account movement and resulting balance.

    Only one of debit_balance / credit_balance is nonzero.
    """

    code: str
    name: str
    debit_movement: Decimal
    credit_movement: Decimal
    debit_balance: Decimal
    credit_balance: Decimal
    level: int = Field(..., ge=1)


class TrialBalance(BaseModel):
    competence: Competence
    lines: list[TrialBalanceLine] = Field(default_factory=list)
    total_debit: Decimal = Decimal("0")
    total_credit: Decimal = Decimal("0")

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit
