"""
Journal Posting

DESIGN DECISION: Unbalanced entries are ACCEPTED. The entry is saved,
audited and a warning is logged; the caller gets the EntryBalance and
decides what to show. Blocking the save would lose the accountant's
work over a typo that the month-close check will surface anyway.
"""

from contabil.audit import AuditLogger
from contabil.config import get_logger
from contabil.models.ledger import EntryBalance, JournalEntry
from contabil.queries import LedgerQueries
from contabil.services.storage import Collection, RecordStore


logger = get_logger(__name__)


class JournalService:
    """Saves journal entries and audits each posting."""

    def __init__(self, store: RecordStore, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger

    def post(self, entry: JournalEntry) -> EntryBalance:
        """
        Persist a journal entry.

        Returns:
            The entry's debit/credit balance (possibly unbalanced)
        """
        balance = LedgerQueries.entry_balance(entry)
        record = entry.model_dump(mode="json")

        self._store.save(Collection.ENTRIES, record)
        self._audit.log_journal_entry_created(entry_id=entry.id, after=record)

        if not balance.is_balanced:
            logger.warning(
                "journal_entry_unbalanced",
                entry_id=entry.id,
                client_id=entry.client_id,
                total_debit=str(balance.total_debit),
                total_credit=str(balance.total_credit),
            )
        else:
            logger.info(
                "journal_entry_posted",
                entry_id=entry.id,
                client_id=entry.client_id,
                competence=entry.competence,
            )
        return balance
