"""
Main Orchestrator for Contabil

This module ties together all the components and defines the
end-to-end flows for:
1. Bank statement import (rows → normalize → match → persist → audit)
2. Tax apportionment (client + competence → TaxResult → TaxPeriod)
3. Reports (DRE and balancete over the same store)
4. Month close (checklist → close/reopen a competence)

DESIGN DECISION: Every component receives the same RecordStore and
AuditLogger. Nothing reaches for global state except the settings
read here, at wiring time.
"""

from dataclasses import dataclass
from typing import Optional

from contabil.audit import AuditLogger
from contabil.closing import MonthCloseService
from contabil.config import configure_logging, get_logger, get_settings
from contabil.journal import JournalService
from contabil.models.ledger import Client
from contabil.models.tax import TaxPeriod
from contabil.queries import LedgerQueries
from contabil.reconciliation import BankStatementImporter, ReconciliationMatcher
from contabil.reports import ReportAggregator
from contabil.services.storage import (
    Collection,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStore,
)
from contabil.taxes import TaxApportionmentEngine, TaxPeriodService


logger = get_logger(__name__)


@dataclass
class Bookkeeper:
    """
    All core components, wired over one store.

    Usage:
        books = create_app_components()
        books.importer.import_rows(client_id, headers, rows, "extrato.csv")
        period = books.apportion_and_save(client_id, "2025-01")
    """

    store: RecordStore
    audit: AuditLogger
    queries: LedgerQueries
    journal: JournalService
    matcher: ReconciliationMatcher
    importer: BankStatementImporter
    engine: TaxApportionmentEngine
    tax_periods: TaxPeriodService
    reports: ReportAggregator
    closing: MonthCloseService

    def get_client(self, client_id: str) -> Optional[Client]:
        record = self.store.get(Collection.CLIENTS, client_id)
        return Client.model_validate(record) if record is not None else None

    def apportion_and_save(self, client_id: str, competence: str) -> Optional[TaxPeriod]:
        """
        Compute and persist a client's taxes for one competence.

        Returns:
            The saved TaxPeriod, or None when the client does not exist
            or its regime is not recognized
        """
        client = self.get_client(client_id)
        if client is None:
            logger.warning("apportion_client_not_found", client_id=client_id)
            return None

        result = self.engine.apportion(client, competence)
        if result is None:
            return None

        return self.tax_periods.save(client_id, result)


def create_store() -> RecordStore:
    """Build the record store selected by AppSettings.storage_backend."""
    backend = get_settings().app.storage_backend
    if backend == "google_sheets":
        return GoogleSheetsRecordStore(GoogleSheetsClient())
    return InMemoryRecordStore()


def create_app_components(store: Optional[RecordStore] = None) -> Bookkeeper:
    """
    Factory function to create all application components.

    Logging is configured from AppSettings first, so every component
    logs through the selected renderer.

    Args:
        store: Record store to use. Built from settings when None.

    Returns:
        A Bookkeeper holding every component
    """
    configure_logging()
    store = store if store is not None else create_store()
    settings = get_settings()

    audit = AuditLogger(store)
    queries = LedgerQueries(store)
    journal = JournalService(store, audit)
    matcher = ReconciliationMatcher(settings.reconciliation)

    logger.info(
        "app_components_created",
        store=type(store).__name__,
        environment=settings.app.app_environment,
    )

    return Bookkeeper(
        store=store,
        audit=audit,
        queries=queries,
        journal=journal,
        matcher=matcher,
        importer=BankStatementImporter(store, matcher, queries, audit),
        engine=TaxApportionmentEngine(queries),
        tax_periods=TaxPeriodService(store, audit, journal),
        reports=ReportAggregator(store),
        closing=MonthCloseService(store, audit, queries),
    )
