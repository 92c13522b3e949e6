"""
Ledger Models for Contabil

Clients, their bank accounts, supporting documents and double-entry
journal entries.

DESIGN DECISION: Balance (sum of debits == sum of credits) is NOT
enforced on JournalEntry. Unbalanced entries are accepted and reported
through EntryBalance so the user sees the problem instead of losing
the record.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from contabil.models.common import Competence, new_id
from contabil.models.tax import TaxRegime


# =============================================================================
# ENUMS
# =============================================================================

class AccountClass(str, Enum):
    """
    Account classification, derived from the first digit of the code.

    "1.1.2" is an asset, "4.1" a revenue, and so on.
    """
    ASSET = "1"
    LIABILITY = "2"
    EQUITY = "3"
    REVENUE = "4"
    EXPENSE = "5"

    @classmethod
    def of(cls, account_code: str) -> Optional["AccountClass"]:
        """Classify an account code; None for codes outside the chart."""
        try:
            return cls(account_code[:1])
        except ValueError:
            return None


class BankAccountKind(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"


class DocumentKind(str, Enum):
    """Source documents kept for a client."""
    NF_IN = "nf_in"          # Incoming invoice (purchase)
    NF_OUT = "nf_out"        # Outgoing invoice (sale/service)
    STATEMENT = "statement"  # Bank statement
    BOLETO = "boleto"
    TAX_GUIDE = "tax_guide"  # DAS/DARF guide or receipt
    CONTRACT = "contract"
    OTHER = "other"


# =============================================================================
# CLIENTS
# =============================================================================

class BankAccount(BaseModel):
    """A client's bank account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    bank: str = Field(..., min_length=1, max_length=100)
    agency: str = Field(default="", max_length=20)
    account: str = Field(default="", max_length=30)
    kind: BankAccountKind = BankAccountKind.CHECKING


class Client(BaseModel):
    """
    A bookkeeping client (company or individual).

    The regime drives tax apportionment. Unknown regime values coming
    from storage are kept as None so apportionment can report
    "cannot compute" instead of failing to load the client.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200, description="Legal name")
    tax_id: str = Field(..., max_length=20, description="CNPJ or CPF")
    regime: Optional[TaxRegime] = None
    industry_code: str = Field(default="", max_length=20, description="CNAE")
    state_registration: str = Field(default="", max_length=30)
    municipal_registration: str = Field(default="", max_length=30)
    address: str = Field(default="", max_length=300)
    phone: str = Field(default="", max_length=30)
    email: str = Field(default="", max_length=120)
    bank_accounts: list[BankAccount] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator('regime', mode='before')
    @classmethod
    def unknown_regime_to_none(cls, v: object) -> Optional[TaxRegime]:
        if v is None or v == "":
            return None
        return TaxRegime.parse(v)

    @property
    def default_bank_account_id(self) -> str:
        return self.bank_accounts[0].id if self.bank_accounts else ""


class Document(BaseModel):
    """A supporting document (invoice, guide, statement...)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    client_id: str
    kind: DocumentKind
    competence: Competence
    issued_on: date
    value: Decimal = Field(default=Decimal("0"))
    description: str = Field(default="", max_length=300)
    file_name: str = Field(default="", max_length=200)
    created_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# JOURNAL
# =============================================================================

class JournalLine(BaseModel):
    """
    One debit or credit line of a journal entry.

    In practice exactly one of debit/credit is nonzero, but the model
    allows both.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    account_code: str = Field(
        ...,
        pattern=r"^\d+(\.\d+)*$",
        description="Hierarchical account code, e.g. 5.1.1"
    )
    account_name: str = Field(default="", max_length=200)
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)
    document_id: Optional[str] = None

    @property
    def account_class(self) -> Optional[AccountClass]:
        return AccountClass.of(self.account_code)


class JournalEntry(BaseModel):
    """A dated, memo'd set of journal lines belonging to one client."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    client_id: str
    date: date
    competence: Competence
    memo: str = Field(default="", max_length=500)
    lines: list[JournalLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


class EntryBalance(BaseModel):
    """Debit/credit totals and whether they agree (within one cent)."""

    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < Decimal("0.01")
