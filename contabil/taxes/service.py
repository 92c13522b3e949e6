"""
Tax Period Lifecycle

Flow:
1. Save     → apportionment result becomes the (client, competence) period
2. Receipt  → a payment guide document is linked to an item
3. Payment  → items are confirmed paid; the period is PAID once all are
4. Overdue  → unpaid items past their due date turn the period LATE;
               a LATE period with nothing overdue left returns to COMPUTED

DESIGN DECISION: Save is an UPSERT keyed by (client_id, competence).
Re-apportioning a month keeps the period id and replaces every item,
so there is never more than one period per client and competence.

Every mutation writes exactly one audit entry with before/after
snapshots of the period.
"""

from datetime import date
from typing import Optional

from contabil.audit import AuditLogger
from contabil.config import get_logger, get_settings
from contabil.journal import JournalService
from contabil.models.common import competence_of, new_id
from contabil.models.ledger import JournalEntry, JournalLine
from contabil.models.tax import (
    DeadlineAlert,
    TaxItem,
    TaxPeriod,
    TaxPeriodStatus,
    TaxResult,
)
from contabil.services.storage import Collection, NotFoundError, RecordStore


logger = get_logger(__name__)

TAX_EXPENSE_ACCOUNT = ("5.3", "Impostos e Taxas")
BANK_ACCOUNT = ("1.1.2", "Bancos c/ Movimento")


class TaxPeriodError(Exception):
    """Invalid operation on a tax period."""
    pass


class TaxItemNotFoundError(TaxPeriodError):
    """The period has no item with the given id."""
    pass


class TaxPeriodService:
    """
    Persists and updates tax periods.

    Usage:
        service = TaxPeriodService(store, audit_logger, journal)
        period = service.save(client.id, engine.apportion(client, "2025-01"))
        service.confirm_payment(period.id, period.items[0].id, post_entry=True)
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: AuditLogger,
        journal: Optional[JournalService] = None,
    ):
        self._store = store
        self._audit = audit_logger
        self._journal = journal

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, period_id: str) -> TaxPeriod:
        record = self._store.get(Collection.TAX_PERIODS, period_id)
        if record is None:
            raise NotFoundError(f"Tax period not found: {period_id}")
        return TaxPeriod.model_validate(record)

    def find(self, client_id: str, competence: str) -> Optional[TaxPeriod]:
        for period in self.list_periods(client_id):
            if period.competence == competence:
                return period
        return None

    def list_periods(self, client_id: Optional[str] = None) -> list[TaxPeriod]:
        return [
            TaxPeriod.model_validate(record)
            for record in self._store.get_all(Collection.TAX_PERIODS)
            if client_id is None or record.get("client_id") == client_id
        ]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def save(self, client_id: str, result: TaxResult) -> TaxPeriod:
        """
        Store an apportionment result as the client's period.

        Items always get fresh ids and start unpaid with no guide.
        """
        existing = self.find(client_id, result.competence)
        before = existing.model_dump(mode="json") if existing else None

        period = TaxPeriod(
            id=existing.id if existing else new_id(),
            client_id=client_id,
            competence=result.competence,
            status=TaxPeriodStatus.COMPUTED,
            items=[
                TaxItem(
                    tax_type=item.tax_type,
                    value=item.value,
                    due_date=item.due_date,
                )
                for item in result.items
            ],
        )
        after = period.model_dump(mode="json")

        self._store.save(Collection.TAX_PERIODS, after)
        self._audit.log_tax_period_saved(period_id=period.id, before=before, after=after)

        logger.info(
            "tax_period_saved",
            period_id=period.id,
            client_id=client_id,
            competence=period.competence,
            replaced=existing is not None,
            items=len(period.items),
        )
        return period

    def confirm_payment(
        self,
        period_id: str,
        item_id: str,
        paid_on: Optional[date] = None,
        post_entry: bool = False,
    ) -> TaxPeriod:
        """
        Mark an item paid.

        A LATE period whose remaining unpaid items are not yet due on
        paid_on goes back to COMPUTED.

        IMPORTANT: With post_entry the journal entry is posted BEFORE the
        period is stored, so a failed posting leaves the item unpaid and
        the payment can simply be confirmed again.

        Args:
            paid_on: Payment date (defaults to today)
            post_entry: Also post the payment to the journal
                        (debit taxes expense, credit bank)

        Raises:
            TaxItemNotFoundError: If the item is not in the period
            TaxPeriodError: If the item is already paid, or post_entry is
                            requested without a journal service
        """
        if post_entry and self._journal is None:
            raise TaxPeriodError("Cannot post payment entry: no journal service configured")

        period = self.get(period_id)
        item = self._require_item(period, item_id)
        if item.paid:
            raise TaxPeriodError(f"Tax item {item_id} is already paid")

        before = period.model_dump(mode="json")
        item.paid = True
        item.paid_on = paid_on or date.today()
        if period.all_paid:
            period.status = TaxPeriodStatus.PAID
        elif period.status == TaxPeriodStatus.LATE and not self._has_overdue(period, item.paid_on):
            period.status = TaxPeriodStatus.COMPUTED

        if post_entry:
            self._journal.post(self._payment_entry(period, item))

        self._persist_update(period, before)

        logger.info(
            "tax_item_paid",
            period_id=period.id,
            item_id=item.id,
            tax_type=item.tax_type.value,
            period_status=period.status.value,
        )
        return period

    def link_receipt(self, period_id: str, item_id: str, document_id: str) -> TaxPeriod:
        """
        Attach a payment guide/receipt document to an item.

        Raises:
            NotFoundError: If the period or the document does not exist
            TaxItemNotFoundError: If the item is not in the period
        """
        period = self.get(period_id)
        if self._store.get(Collection.DOCUMENTS, document_id) is None:
            raise NotFoundError(f"Document not found: {document_id}")
        item = self._require_item(period, item_id)

        before = period.model_dump(mode="json")
        item.guide_document_id = document_id
        self._persist_update(period, before)
        return period

    def refresh_overdue(self, today: date) -> list[TaxPeriod]:
        """
        Re-evaluate the LATE status of every unpaid period.

        Periods with an unpaid item due before today become LATE; LATE
        periods with nothing overdue left go back to COMPUTED.

        Returns:
            The periods whose status changed
        """
        changed = []
        for period in self.list_periods():
            if period.status == TaxPeriodStatus.PAID:
                continue
            if self._has_overdue(period, today):
                status = TaxPeriodStatus.LATE
            elif period.status == TaxPeriodStatus.LATE:
                status = TaxPeriodStatus.COMPUTED
            else:
                continue
            if status == period.status:
                continue

            before = period.model_dump(mode="json")
            period.status = status
            self._persist_update(period, before)
            changed.append(period)

        late = [p.id for p in changed if p.status == TaxPeriodStatus.LATE]
        if late:
            logger.warning("tax_periods_overdue", count=len(late), period_ids=late)
        if len(late) < len(changed):
            logger.info(
                "tax_periods_back_on_time",
                period_ids=[p.id for p in changed if p.status != TaxPeriodStatus.LATE],
            )
        return changed

    def upcoming_deadlines(
        self,
        today: date,
        within_days: Optional[int] = None,
        client_id: Optional[str] = None,
    ) -> list[DeadlineAlert]:
        """
        Unpaid items due within the window, overdue ones included.

        Ordered by days until due (most overdue first).
        """
        if within_days is None:
            within_days = get_settings().app.deadline_alert_days

        alerts = []
        for period in self.list_periods(client_id):
            for item in period.items:
                if item.paid:
                    continue
                days_until = (item.due_date - today).days
                if days_until > within_days:
                    continue
                alerts.append(DeadlineAlert(
                    period_id=period.id,
                    client_id=period.client_id,
                    competence=period.competence,
                    item_id=item.id,
                    tax_type=item.tax_type,
                    value=item.value,
                    due_date=item.due_date,
                    days_until=days_until,
                ))

        alerts.sort(key=lambda a: a.days_until)
        return alerts

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _require_item(period: TaxPeriod, item_id: str) -> TaxItem:
        item = period.find_item(item_id)
        if item is None:
            raise TaxItemNotFoundError(
                f"Tax item {item_id} not found in period {period.id}"
            )
        return item

    @staticmethod
    def _has_overdue(period: TaxPeriod, today: date) -> bool:
        return any(not item.paid and item.due_date < today for item in period.items)

    def _persist_update(self, period: TaxPeriod, before: dict) -> None:
        after = period.model_dump(mode="json")
        self._store.save(Collection.TAX_PERIODS, after)
        self._audit.log_tax_period_updated(period_id=period.id, before=before, after=after)

    @staticmethod
    def _payment_entry(period: TaxPeriod, item: TaxItem) -> JournalEntry:
        expense_code, expense_name = TAX_EXPENSE_ACCOUNT
        bank_code, bank_name = BANK_ACCOUNT
        return JournalEntry(
            client_id=period.client_id,
            date=item.paid_on,
            competence=competence_of(item.paid_on),
            memo=f"Pagamento {item.tax_type.value} {period.competence}",
            lines=[
                JournalLine(
                    account_code=expense_code,
                    account_name=expense_name,
                    debit=item.value,
                    document_id=item.guide_document_id,
                ),
                JournalLine(
                    account_code=bank_code,
                    account_name=bank_name,
                    credit=item.value,
                    document_id=item.guide_document_id,
                ),
            ],
        )
