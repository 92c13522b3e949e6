"""
Audit Models for Contabil

Every mutating operation of the core appends one AuditLogEntry:
bank imports, tax period saves, payment confirmations, receipt links,
journal postings, overdue transitions and month close/reopen.

DESIGN DECISION: Audit logs are append-only. We never delete or modify
them, and the core never reads them back.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from contabil.models.common import new_id


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditEntity(str, Enum):
    """Entity names recorded in the audit trail."""
    BANK_IMPORT = "bank_import"
    TAX_PERIOD = "tax_period"
    JOURNAL_ENTRY = "journal_entry"
    MONTH_CLOSE = "month_close"


class AuditLogEntry(BaseModel):
    """
    A single audit record.

    `hash` covers every other field, so any later tampering with the
    stored record is detectable.
    """

    id: str = Field(default_factory=new_id)
    at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the mutation happened (UTC)"
    )
    entity: str = Field(..., min_length=1)
    entity_id: str
    action: AuditAction
    before: Optional[dict[str, Any]] = Field(
        default=None,
        description="Snapshot before the mutation; None for creations"
    )
    after: dict[str, Any] = Field(default_factory=dict)
    hash: str = ""

    def canonical_json(self) -> str:
        """Serialize every field but the hash in a stable key order."""
        payload = self.model_dump(mode="json", exclude={"hash"})
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.

        Snapshots are left out; they can be large.
        """
        return {
            "audit_id": self.id,
            "at": self.at.isoformat(),
            "entity": self.entity,
            "entity_id": self.entity_id,
            "action": self.action.value,
            "has_before": self.before is not None,
            "hash": self.hash,
        }


class AuditEntryBuilder:
    """
    Helper class to build audit entries for the core's mutations.

    Usage:
        entry = AuditEntryBuilder.bank_import("extrato.csv", 8, 6)
        entry = AuditEntryBuilder.tax_period_saved(period_id, before, after)
    """

    @staticmethod
    def bank_import(
        source_file: str,
        count: int,
        matched: int,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            entity=AuditEntity.BANK_IMPORT.value,
            entity_id=source_file,
            action=AuditAction.CREATE,
            after={"count": count, "matched": matched},
        )

    @staticmethod
    def tax_period_saved(
        period_id: str,
        before: Optional[dict],
        after: dict,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            entity=AuditEntity.TAX_PERIOD.value,
            entity_id=period_id,
            action=AuditAction.UPDATE if before is not None else AuditAction.CREATE,
            before=before,
            after=after,
        )

    @staticmethod
    def tax_period_updated(
        period_id: str,
        before: dict,
        after: dict,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            entity=AuditEntity.TAX_PERIOD.value,
            entity_id=period_id,
            action=AuditAction.UPDATE,
            before=before,
            after=after,
        )

    @staticmethod
    def journal_entry_created(
        entry_id: str,
        after: dict,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            entity=AuditEntity.JOURNAL_ENTRY.value,
            entity_id=entry_id,
            action=AuditAction.CREATE,
            after=after,
        )

    @staticmethod
    def month_closed(
        competence: str,
        before: Optional[dict],
        after: dict,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            entity=AuditEntity.MONTH_CLOSE.value,
            entity_id=competence,
            action=AuditAction.UPDATE if before is not None else AuditAction.CREATE,
            before=before,
            after=after,
        )

    @staticmethod
    def month_reopened(
        competence: str,
        before: dict,
        after: dict,
    ) -> AuditLogEntry:
        # Reopening undoes a close, so it is recorded as a delete
        return AuditLogEntry(
            entity=AuditEntity.MONTH_CLOSE.value,
            entity_id=competence,
            action=AuditAction.DELETE,
            before=before,
            after=after,
        )
