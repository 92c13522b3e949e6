"""
Audit Logger

DESIGN DECISION: Every mutating operation of the core is audited.
This provides:
1. Complete traceability of who changed which aggregate and how
2. Before/after snapshots for the accountant to review
3. Tamper evidence through a per-entry hash

The audit logger:
- Is synchronous, like the rest of the core
- Always emits a structured "audit_event" log line
- Appends to the record store when one is configured

CRITICAL: Storage failures are logged and then re-raised. A mutation
whose audit entry cannot be written must not look successful.
"""

import hashlib
from typing import Any, Optional

from contabil.config import get_logger
from contabil.models.audit import (
    AuditAction,
    AuditEntryBuilder,
    AuditLogEntry,
)
from contabil.services.storage import Collection, RecordStore


class AuditLogger:
    """
    Central audit sink.

    Writes entries both to:
    1. Structured local log (for debugging)
    2. The record store's audit_logs collection (for persistence)
    """

    def __init__(self, store: Optional[RecordStore] = None):
        """
        Initialize audit logger.

        Args:
            store: Record store for persistence.
                   If None, only logs locally.
        """
        self._store = store
        self._logger = get_logger(__name__)

    @staticmethod
    def compute_hash(entry: AuditLogEntry) -> str:
        """SHA-256 over the entry's canonical JSON (hash field excluded)."""
        return hashlib.sha256(entry.canonical_json().encode("utf-8")).hexdigest()

    def log(self, entry: AuditLogEntry) -> AuditLogEntry:
        """
        Hash, log and persist an audit entry.

        Returns:
            The entry with its hash filled in

        Raises:
            StorageError: If the store rejects the entry
        """
        entry.hash = self.compute_hash(entry)
        self._logger.info("audit_event", **entry.to_log_dict())

        if self._store is not None:
            try:
                self._store.append(
                    Collection.AUDIT_LOGS,
                    entry.model_dump(mode="json"),
                )
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    audit_id=entry.id,
                    entity=entry.entity,
                    entity_id=entry.entity_id,
                )
                raise

        return entry

    def record(
        self,
        entity: str,
        entity_id: str,
        action: AuditAction,
        before: Optional[dict[str, Any]],
        after: dict[str, Any],
    ) -> AuditLogEntry:
        """Build and log an entry from its parts."""
        return self.log(AuditLogEntry(
            entity=entity,
            entity_id=entity_id,
            action=action,
            before=before,
            after=after,
        ))

    def log_bank_import(
        self,
        source_file: str,
        count: int,
        matched: int,
    ) -> AuditLogEntry:
        """Log a bank statement import."""
        return self.log(AuditEntryBuilder.bank_import(
            source_file=source_file,
            count=count,
            matched=matched,
        ))

    def log_tax_period_saved(
        self,
        period_id: str,
        before: Optional[dict],
        after: dict,
    ) -> AuditLogEntry:
        """Log an apportionment save (create or update)."""
        return self.log(AuditEntryBuilder.tax_period_saved(
            period_id=period_id,
            before=before,
            after=after,
        ))

    def log_tax_period_updated(
        self,
        period_id: str,
        before: dict,
        after: dict,
    ) -> AuditLogEntry:
        """Log a payment, receipt link or overdue transition."""
        return self.log(AuditEntryBuilder.tax_period_updated(
            period_id=period_id,
            before=before,
            after=after,
        ))

    def log_journal_entry_created(
        self,
        entry_id: str,
        after: dict,
    ) -> AuditLogEntry:
        """Log a journal posting."""
        return self.log(AuditEntryBuilder.journal_entry_created(
            entry_id=entry_id,
            after=after,
        ))

    def log_month_closed(
        self,
        competence: str,
        before: Optional[dict],
        after: dict,
    ) -> AuditLogEntry:
        """Log a month close (first close or close after a reopen)."""
        return self.log(AuditEntryBuilder.month_closed(
            competence=competence,
            before=before,
            after=after,
        ))

    def log_month_reopened(
        self,
        competence: str,
        before: dict,
        after: dict,
    ) -> AuditLogEntry:
        return self.log(AuditEntryBuilder.month_reopened(
            competence=competence,
            before=before,
            after=after,
        ))
