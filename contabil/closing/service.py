"""
Month Close

Flow:
1. Checklist → documents, entries and taxes of a competence are checked
2. Close     → allowed only when no ERROR check fails; warnings are
               recorded with the close
3. Reopen    → a closed competence can be unlocked again

DESIGN DECISION: The checklist is computed from the store every time
and never persisted. Only the close state is stored, one record per
competence in the month_closes collection.

IMPORTANT: Closing is office-wide. The checklist can be filtered by
client for display, but close() always checks every client.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from contabil.audit import AuditLogger
from contabil.config import get_logger
from contabil.models.closing import (
    CheckCategory,
    CheckSeverity,
    ChecklistItem,
    MonthClose,
    MonthCloseChecklist,
)
from contabil.models.common import format_competence
from contabil.models.ledger import Client, Document, DocumentKind
from contabil.models.tax import TaxPeriod
from contabil.queries import LedgerQueries
from contabil.services.storage import Collection, RecordStore
from contabil.taxes.rules import format_brl


logger = get_logger(__name__)

INVOICE_KINDS = (DocumentKind.NF_IN, DocumentKind.NF_OUT)


class MonthCloseError(Exception):
    """Invalid close or reopen of a competence."""
    pass


class MonthCloseService:
    """
    Builds the month-close checklist and locks/unlocks competences.

    Usage:
        closing = MonthCloseService(store, audit_logger)
        checklist = closing.checklist("2025-01")
        if checklist.can_close:
            closing.close("2025-01")
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: AuditLogger,
        queries: Optional[LedgerQueries] = None,
    ):
        self._store = store
        self._audit = audit_logger
        self._queries = queries or LedgerQueries(store)

    # =========================================================================
    # CHECKLIST
    # =========================================================================

    def checklist(self, competence: str, client_id: Optional[str] = None) -> MonthCloseChecklist:
        """
        Run every check for a competence.

        Args:
            competence: Month to check ("YYYY-MM")
            client_id: Restrict the checks to one client

        Returns:
            The checklist, in documents/entries/taxes order
        """
        items = (
            self._document_checks(competence, client_id)
            + self._entry_checks(competence, client_id)
            + self._tax_checks(competence, client_id)
        )
        return MonthCloseChecklist(competence=competence, client_id=client_id, items=items)

    def _document_checks(self, competence: str, client_id: Optional[str]) -> list[ChecklistItem]:
        documents = [
            Document.model_validate(record)
            for record in self._store.get_all(Collection.DOCUMENTS)
            if record.get("competence") == competence
            and (client_id is None or record.get("client_id") == client_id)
        ]
        count = len(documents)
        items = [ChecklistItem(
            id="doc_count",
            category=CheckCategory.DOCUMENTS,
            label=f"{count} documento(s) na competência",
            detail=(
                f"{count} documento(s) encontrado(s)" if count
                else "Nenhum documento cadastrado para este mês"
            ),
            ok=count > 0,
            severity=CheckSeverity.INFO if count else CheckSeverity.WARNING,
        )]

        for client in self._clients(client_id):
            has_invoice = any(
                d.client_id == client.id and d.kind in INVOICE_KINDS
                for d in documents
            )
            if not has_invoice:
                items.append(ChecklistItem(
                    id=f"doc_nf_{client.id}",
                    category=CheckCategory.DOCUMENTS,
                    label=f"{client.name}: sem NF no período",
                    detail="Nenhuma nota fiscal de entrada ou saída encontrada",
                    ok=False,
                    severity=CheckSeverity.WARNING,
                ))
        return items

    def _entry_checks(self, competence: str, client_id: Optional[str]) -> list[ChecklistItem]:
        entries = self._queries.entries_for(client_id, competence)
        count = len(entries)
        balance = self._queries.period_balance(competence, client_id)
        balanced = balance.is_balanced

        items = [
            ChecklistItem(
                id="entry_count",
                category=CheckCategory.ENTRIES,
                label=f"{count} lançamento(s) na competência",
                detail=f"{count} lançamento(s)" if count else "Nenhum lançamento contábil registrado",
                ok=count > 0,
                severity=CheckSeverity.INFO if count else CheckSeverity.ERROR,
            ),
            ChecklistItem(
                id="entry_balance",
                category=CheckCategory.ENTRIES,
                label=(
                    "Débitos e créditos balanceados" if balanced
                    else "Desbalanceamento entre débitos e créditos"
                ),
                detail=(
                    f"Débitos: {format_brl(balance.total_debit)} | "
                    f"Créditos: {format_brl(balance.total_credit)}"
                ),
                ok=balanced,
                severity=CheckSeverity.INFO if balanced else CheckSeverity.ERROR,
            ),
        ]

        without_document = [
            e for e in entries
            if all(line.document_id is None for line in e.lines)
        ]
        if without_document:
            items.append(ChecklistItem(
                id="entry_no_doc",
                category=CheckCategory.ENTRIES,
                label=f"{len(without_document)} lançamento(s) sem documento vinculado",
                detail="Lançamentos devem ter suporte documental",
                ok=False,
                severity=CheckSeverity.WARNING,
            ))
        return items

    def _tax_checks(self, competence: str, client_id: Optional[str]) -> list[ChecklistItem]:
        periods = [
            TaxPeriod.model_validate(record)
            for record in self._store.get_all(Collection.TAX_PERIODS)
            if record.get("competence") == competence
            and (client_id is None or record.get("client_id") == client_id)
        ]
        if not periods:
            return [ChecklistItem(
                id="tax_not_computed",
                category=CheckCategory.TAXES,
                label="Impostos não apurados nesta competência",
                detail="Execute a apuração fiscal antes de fechar o mês",
                ok=False,
                severity=CheckSeverity.ERROR,
            )]

        items = []
        for period in periods:
            unpaid = [i for i in period.items if not i.paid]
            without_guide = [i for i in period.items if i.guide_document_id is None]
            total = sum((i.value for i in period.items), Decimal("0"))

            items.append(ChecklistItem(
                id=f"tax_status_{period.id}",
                category=CheckCategory.TAXES,
                label=(
                    f"{len(unpaid)} imposto(s) pendente(s) de pagamento" if unpaid
                    else f"Impostos {format_competence(period.competence)}: todos pagos"
                ),
                detail=f"Total: {format_brl(total)}",
                ok=not unpaid,
                severity=CheckSeverity.ERROR if unpaid else CheckSeverity.INFO,
            ))
            if without_guide:
                items.append(ChecklistItem(
                    id=f"tax_guide_{period.id}",
                    category=CheckCategory.TAXES,
                    label=f"{len(without_guide)} guia(s) sem comprovante vinculado",
                    detail="Vincule os comprovantes de pagamento às guias",
                    ok=False,
                    severity=CheckSeverity.WARNING,
                ))
        return items

    def _clients(self, client_id: Optional[str]) -> list[Client]:
        return [
            Client.model_validate(record)
            for record in self._store.get_all(Collection.CLIENTS)
            if client_id is None or record.get("id") == client_id
        ]

    # =========================================================================
    # CLOSE / REOPEN
    # =========================================================================

    def get(self, competence: str) -> Optional[MonthClose]:
        record = self._store.get(Collection.MONTH_CLOSES, competence)
        return MonthClose.model_validate(record) if record is not None else None

    def is_closed(self, competence: str) -> bool:
        state = self.get(competence)
        return state is not None and state.closed

    def closed_competences(self) -> list[str]:
        """Closed competences, oldest first."""
        return sorted(
            record["competence"]
            for record in self._store.get_all(Collection.MONTH_CLOSES)
            if record.get("closed")
        )

    def close(self, competence: str) -> MonthClose:
        """
        Lock a competence.

        Raises:
            MonthCloseError: If the competence is already closed, or any
                             ERROR check fails
        """
        existing = self.get(competence)
        if existing is not None and existing.closed:
            raise MonthCloseError(f"Competence {competence} is already closed")

        checklist = self.checklist(competence)
        if not checklist.can_close:
            logger.warning(
                "month_close_blocked",
                competence=competence,
                errors=[i.id for i in checklist.errors],
            )
            raise MonthCloseError(
                f"Competence {competence} has {len(checklist.errors)} blocking check(s): "
                + ", ".join(i.id for i in checklist.errors)
            )

        before = existing.model_dump(mode="json") if existing else None
        state = MonthClose(
            id=competence,
            competence=competence,
            closed=True,
            closed_at=datetime.utcnow(),
            reopened_at=existing.reopened_at if existing else None,
            warnings=len(checklist.warnings),
        )
        self._store.save(Collection.MONTH_CLOSES, state.model_dump(mode="json"))
        self._audit.log_month_closed(
            competence=competence,
            before=before,
            after={
                "competence": competence,
                "closed_at": state.closed_at.isoformat(),
                "warnings": state.warnings,
            },
        )

        logger.info("month_closed", competence=competence, warnings=state.warnings)
        return state

    def reopen(self, competence: str) -> MonthClose:
        """
        Unlock a closed competence.

        Raises:
            MonthCloseError: If the competence is not closed
        """
        state = self.get(competence)
        if state is None or not state.closed:
            raise MonthCloseError(f"Competence {competence} is not closed")

        before = state.model_dump(mode="json")
        state.closed = False
        state.reopened_at = datetime.utcnow()
        self._store.save(Collection.MONTH_CLOSES, state.model_dump(mode="json"))
        self._audit.log_month_reopened(
            competence=competence,
            before=before,
            after={"reopened_at": state.reopened_at.isoformat()},
        )

        logger.info("month_reopened", competence=competence)
        return state
