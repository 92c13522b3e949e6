"""
Bank Statement Importer

Flow:
1. Normalize → raw CSV rows become ParsedTransactions (bad rows skipped)
2. Match → score against the client's journal entries
3. Persist → one BankTransaction per row, match metadata set once
4. Audit → one bank_import entry for the whole batch

DESIGN DECISION: Weak suggestions (between the suggestion and
auto-match thresholds) are returned in the ImportResult but NOT
applied. Only strong candidates mark a transaction as matched.
"""

from typing import Optional

from contabil.audit import AuditLogger
from contabil.config import ReconciliationSettings, get_logger
from contabil.models.ledger import Client
from contabil.models.reconciliation import (
    BankTransaction,
    ImportResult,
    ParsedTransaction,
)
from contabil.queries import LedgerQueries
from contabil.reconciliation.matcher import ReconciliationMatcher
from contabil.services.storage import Collection, NotFoundError, RecordStore
from contabil.validation import (
    ColumnMapping,
    StatementRowValidator,
    detect_columns,
)


logger = get_logger(__name__)


class EmptyStatementError(Exception):
    """The statement has no importable transaction."""
    pass


class BankStatementImporter:
    """
    Imports a bank statement for one client.

    Usage:
        importer = BankStatementImporter(store, matcher, queries, audit)
        result = importer.import_rows("cli_demo_001", headers, rows, "extrato.csv")
    """

    def __init__(
        self,
        store: RecordStore,
        matcher: ReconciliationMatcher,
        queries: LedgerQueries,
        audit_logger: AuditLogger,
        settings: Optional[ReconciliationSettings] = None,
        row_validator: Optional[StatementRowValidator] = None,
    ):
        self._store = store
        self._matcher = matcher
        self._queries = queries
        self._audit = audit_logger
        self._settings = settings or matcher.settings
        self._row_validator = row_validator or StatementRowValidator()

    def _load_client(self, client_id: str) -> Client:
        record = self._store.get(Collection.CLIENTS, client_id)
        if record is None:
            raise NotFoundError(f"Client not found: {client_id}")
        return Client.model_validate(record)

    def import_transactions(
        self,
        client_id: str,
        transactions: list[ParsedTransaction],
        source_file: str,
        bank_account_id: Optional[str] = None,
        skipped_rows: int = 0,
    ) -> ImportResult:
        """
        Match, persist and audit already-normalized transactions.

        Only the client's own journal entries are candidates.

        Raises:
            EmptyStatementError: If there is nothing to import
            NotFoundError: If the client does not exist
            StorageError: If persisting a transaction or the audit entry fails
        """
        if not transactions:
            raise EmptyStatementError(f"No transactions to import from {source_file}")

        client = self._load_client(client_id)
        if bank_account_id is None:
            bank_account_id = client.default_bank_account_id

        entries = self._queries.entries_for(client_id=client_id)
        matches = self._matcher.match(transactions, entries)

        result = ImportResult(source_file=source_file, skipped_rows=skipped_rows)
        for idx, parsed in enumerate(transactions):
            candidate = matches.get(idx)
            confidence = candidate.confidence if candidate else 0
            auto_matched = confidence >= self._settings.auto_match_threshold

            transaction = BankTransaction(
                client_id=client_id,
                bank_account_id=bank_account_id,
                date=parsed.date,
                description=parsed.description,
                amount=parsed.amount,
                matched=auto_matched,
                match_entry_id=candidate.entry_id if auto_matched else None,
                match_confidence=confidence,
                imported_from=source_file,
            )
            self._store.save(Collection.TRANSACTIONS, transaction.model_dump(mode="json"))
            result.transactions.append(transaction)

        result.matches = matches

        self._audit.log_bank_import(
            source_file=source_file,
            count=len(result.transactions),
            matched=result.matched_count,
        )

        logger.info(
            "bank_statement_imported",
            client_id=client_id,
            source_file=source_file,
            count=len(result.transactions),
            matched=result.matched_count,
            suggested=result.suggested_count,
            skipped=skipped_rows,
        )
        return result

    def import_rows(
        self,
        client_id: str,
        headers: list[str],
        rows: list[dict[str, str]],
        source_file: str,
        mapping: Optional[ColumnMapping] = None,
        bank_account_id: Optional[str] = None,
    ) -> ImportResult:
        """
        Normalize raw CSV rows, then import them.

        Args:
            headers: Header row from the CSV parser
            rows: Data rows keyed by header
            mapping: Column mapping; detected from the headers when None

        Raises:
            IncompleteMappingError: If a field cannot be mapped
            EmptyStatementError: If no row survives normalization
        """
        mapping = mapping or detect_columns(headers)
        validation = self._row_validator.normalize(rows, mapping)

        if not validation.has_transactions:
            logger.warning(
                "bank_statement_empty",
                client_id=client_id,
                source_file=source_file,
                rows=len(rows),
                skipped=validation.skipped_rows,
            )
            raise EmptyStatementError(
                f"No valid rows in {source_file} ({validation.skipped_rows} skipped)"
            )

        return self.import_transactions(
            client_id=client_id,
            transactions=validation.transactions,
            source_file=source_file,
            bank_account_id=bank_account_id,
            skipped_rows=validation.skipped_rows,
        )
