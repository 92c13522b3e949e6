"""
Month Close Models for Contabil

A MonthCloseChecklist is computed on demand from the store and never
persisted. A MonthClose is the persisted record, one per competence,
that says whether the office has locked that month.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from contabil.models.common import Competence


class CheckSeverity(str, Enum):
    """
    How much a failing check matters.

    Only ERROR blocks the close; WARNING is reported and counted.
    """
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class CheckCategory(str, Enum):
    DOCUMENTS = "documents"
    ENTRIES = "entries"
    TAXES = "taxes"


class ChecklistItem(BaseModel):
    """One line of the month-close checklist."""

    id: str = Field(..., description="Stable check id, e.g. 'entry_balance'")
    category: CheckCategory
    label: str = Field(..., description="pt-BR summary shown to the accountant")
    detail: str = ""
    ok: bool
    severity: CheckSeverity


class MonthCloseChecklist(BaseModel):
    """Every check for a competence, in display order."""

    competence: Competence
    client_id: Optional[str] = None
    items: list[ChecklistItem] = Field(default_factory=list)

    @property
    def errors(self) -> list[ChecklistItem]:
        return [i for i in self.items if not i.ok and i.severity == CheckSeverity.ERROR]

    @property
    def warnings(self) -> list[ChecklistItem]:
        return [i for i in self.items if not i.ok and i.severity == CheckSeverity.WARNING]

    @property
    def can_close(self) -> bool:
        return not self.errors

    @property
    def progress(self) -> int:
        """Percent of checks that pass (0 for an empty checklist)."""
        if not self.items:
            return 0
        passed = sum(1 for i in self.items if i.ok)
        total = len(self.items)
        # integer percent, half up
        return (passed * 200 + total) // (2 * total)

    def find(self, check_id: str) -> Optional[ChecklistItem]:
        for item in self.items:
            if item.id == check_id:
                return item
        return None


class MonthClose(BaseModel):
    """
    Persisted close state of a competence.

    The competence doubles as the record id, so there is at most one
    record per month; reopening keeps the record with closed=False.
    """

    id: str
    competence: Competence
    closed: bool = False
    closed_at: Optional[datetime] = None
    reopened_at: Optional[datetime] = None
    warnings: int = Field(default=0, ge=0, description="Open warnings when last closed")
