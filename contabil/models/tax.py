"""
Tax Models for Contabil

A TaxResult is what the apportionment engine computes: it is NOT yet
persisted. A TaxPeriod is the persisted record, one per client and
competence, whose items are replaced on every re-apportionment.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from contabil.models.common import Competence, new_id


class TaxRegime(str, Enum):
    """
    Tax regimes a client can be under.

    Closed set: the apportionment engine has exactly one rule per member.
    """
    MEI = "MEI"
    SIMPLES = "Simples"
    PRESUMIDO = "Presumido"
    REAL = "Real"

    @property
    def label(self) -> str:
        return _REGIME_LABELS[self]

    @classmethod
    def parse(cls, value: object) -> Optional["TaxRegime"]:
        """Return the matching regime, or None when the value is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_REGIME_LABELS = {
    TaxRegime.MEI: "MEI",
    TaxRegime.SIMPLES: "Simples Nacional",
    TaxRegime.PRESUMIDO: "Lucro Presumido",
    TaxRegime.REAL: "Lucro Real",
}


class TaxType(str, Enum):
    """Tax slip / tax kind tags."""
    DAS = "DAS"
    ISS = "ISS"
    ICMS = "ICMS"
    IRPJ = "IRPJ"
    CSLL = "CSLL"
    PIS = "PIS"
    COFINS = "COFINS"
    WITHHOLDING = "withholding"


class TaxPeriodStatus(str, Enum):
    """
    Tax period lifecycle.

    TO_COMPUTE → COMPUTED → PAID, with LATE reachable from COMPUTED
    when an unpaid item passes its due date. LATE returns to COMPUTED
    once no unpaid item is overdue.
    """
    TO_COMPUTE = "to_compute"
    COMPUTED = "computed"
    PAID = "paid"
    LATE = "late"


class TaxItem(BaseModel):
    """A single tax obligation inside a period."""

    id: str = Field(default_factory=new_id)
    tax_type: TaxType
    value: Decimal = Field(..., ge=0, description="Amount due in BRL")
    due_date: date
    paid: bool = False
    paid_on: Optional[date] = None
    guide_document_id: Optional[str] = Field(
        default=None,
        description="Document holding the payment guide or receipt"
    )


class BreakdownLine(BaseModel):
    """One human-readable step of a tax computation."""

    label: str
    value: str


class TaxResult(BaseModel):
    """
    Output of one apportionment run.

    The breakdown is displayed verbatim as the audit trail of the
    calculation, so its order and wording are part of the contract.
    """

    regime: TaxRegime
    competence: Competence
    gross_revenue: Decimal
    items: list[TaxItem] = Field(default_factory=list)
    effective_rate: Decimal = Field(
        default=Decimal("0"),
        description="Total taxes over gross revenue, in percent"
    )
    breakdown: list[BreakdownLine] = Field(default_factory=list)

    @computed_field
    @property
    def total_taxes(self) -> Decimal:
        return sum((item.value for item in self.items), Decimal("0"))


class TaxPeriod(BaseModel):
    """Persisted tax obligations for one client and competence."""

    id: str = Field(default_factory=new_id)
    client_id: str
    competence: Competence
    status: TaxPeriodStatus = TaxPeriodStatus.TO_COMPUTE
    items: list[TaxItem] = Field(default_factory=list)

    @property
    def all_paid(self) -> bool:
        return bool(self.items) and all(item.paid for item in self.items)

    def find_item(self, item_id: str) -> Optional[TaxItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class DeadlineAlert(BaseModel):
    """An unpaid tax item that is due soon or already overdue."""

    period_id: str
    client_id: str
    competence: Competence
    item_id: str
    tax_type: TaxType
    value: Decimal
    due_date: date
    days_until: int

    @property
    def is_overdue(self) -> bool:
        return self.days_until < 0
