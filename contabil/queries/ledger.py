"""
Ledger Query Layer

DESIGN DECISION: Every figure the engines need is DERIVED here from
the stored journal entries, never cached and never estimated beyond
what is documented below.

Account classification comes from the first character of the code:
lines whose code starts with "4" are revenue, "5" are expense.

GUARANTEES:
- Pure reads; nothing here writes to the store
- Entries are returned in store insertion order
- Zero is returned (not an error) when no entry matches
"""

from decimal import Decimal
from typing import Iterable, Optional

from contabil.models.common import to_cents
from contabil.models.ledger import AccountClass, EntryBalance, JournalEntry
from contabil.services.storage import Collection, RecordStore


ZERO = Decimal("0")
MONTHS_PER_YEAR = 12


class LedgerQueries:
    """Read-only aggregations over a client's journal entries."""

    def __init__(self, store: RecordStore):
        self._store = store

    def entries_for(
        self,
        client_id: Optional[str] = None,
        competence: Optional[str] = None,
    ) -> list[JournalEntry]:
        """Journal entries filtered by client and/or competence."""
        entries = []
        for record in self._store.get_all(Collection.ENTRIES):
            if client_id is not None and record.get("client_id") != client_id:
                continue
            if competence is not None and record.get("competence") != competence:
                continue
            entries.append(JournalEntry.model_validate(record))
        return entries

    # =========================================================================
    # PER-ENTRY FIGURES
    # =========================================================================

    @staticmethod
    def entry_debit_total(entry: JournalEntry) -> Decimal:
        """The entry's "amount": the sum of its lines' debits."""
        return entry.total_debit

    @staticmethod
    def entry_balance(entry: JournalEntry) -> EntryBalance:
        return EntryBalance(
            total_debit=entry.total_debit,
            total_credit=entry.total_credit,
        )

    # =========================================================================
    # PERIOD FIGURES
    # =========================================================================

    def revenue_total(self, client_id: str, competence: str) -> Decimal:
        """Sum of credits on revenue ("4") lines for the client's month."""
        return self._sum_lines(
            self.entries_for(client_id, competence),
            AccountClass.REVENUE,
            credit=True,
        )

    def expense_total(self, client_id: str, competence: str) -> Decimal:
        """Sum of debits on expense ("5") lines for the client's month."""
        return self._sum_lines(
            self.entries_for(client_id, competence),
            AccountClass.EXPENSE,
            credit=False,
        )

    def annualized_revenue_approximated(
        self,
        client_id: str,
        competence: str,
    ) -> Decimal:
        """
        Stand-in for RBT12 (gross revenue of the trailing 12 months).

        CRITICAL: this is the competence month's revenue times twelve,
        NOT the real trailing sum. Seasonal clients will land in the
        wrong Simples bracket.
        """
        return self.revenue_total(client_id, competence) * MONTHS_PER_YEAR

    def period_balance(
        self,
        competence: str,
        client_id: Optional[str] = None,
    ) -> EntryBalance:
        """Month-close check: total debits vs. total credits of a competence."""
        entries = self.entries_for(client_id, competence)
        return EntryBalance(
            total_debit=to_cents(sum((e.total_debit for e in entries), ZERO)),
            total_credit=to_cents(sum((e.total_credit for e in entries), ZERO)),
        )

    def unbalanced_entries(
        self,
        competence: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> list[tuple[JournalEntry, EntryBalance]]:
        """Entries whose debits and credits disagree by a cent or more."""
        result = []
        for entry in self.entries_for(client_id, competence):
            balance = self.entry_balance(entry)
            if not balance.is_balanced:
                result.append((entry, balance))
        return result

    @staticmethod
    def _sum_lines(
        entries: Iterable[JournalEntry],
        account_class: AccountClass,
        credit: bool,
    ) -> Decimal:
        total = ZERO
        for entry in entries:
            for line in entry.lines:
                if line.account_class == account_class:
                    total += line.credit if credit else line.debit
        return total
