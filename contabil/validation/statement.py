"""
Bank Statement Row Normalization

DESIGN DECISION: Rows coming out of the CSV parser are normalized in
two steps before they ever reach the matcher:

STEP 1 - COLUMN MAPPING:
- Headers are mapped to date / description / amount
- Auto-detection understands Portuguese and English bank exports
- The user may override the mapping

STEP 2 - ROW VALIDATION:
- Dates: DD/MM/YYYY (any of / - . as separator) or ISO YYYY-MM-DD
- Amounts: Brazilian "1.234,56" or plain "1234.56"
- Blank descriptions are rejected

IMPORTANT: Validation NEVER silently fixes a row.
Rows that cannot be read are dropped and reported with a reason,
so the importer can show how many lines were skipped.
"""

import re
import unicodedata
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel

from contabil.config import get_logger
from contabil.models.reconciliation import (
    ParsedTransaction,
    StatementValidationResult,
    ValidationIssue,
)

logger = get_logger(__name__)

_BR_DATE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
_ISO_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_WHITESPACE = re.compile(r"\s")


def _fold(text: str) -> str:
    """Lower-case and strip accents."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


class IncompleteMappingError(Exception):
    """Date, description and amount columns must all be mapped."""
    pass


class ColumnMapping(BaseModel):
    """Which CSV header feeds each transaction field."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.date and self.description and self.amount)

    @property
    def missing_fields(self) -> list[str]:
        return [
            name for name in ("date", "description", "amount")
            if not getattr(self, name)
        ]


def detect_columns(headers: list[str]) -> ColumnMapping:
    """
    Guess the column mapping from the header row.

    Matching ignores case and accents ("Histórico" is "historico") and
    the first matching header wins for each field. Unrecognized fields
    are left as None.
    """
    mapping = ColumnMapping()
    for header in headers:
        lower = _fold(header)
        if not mapping.date and ("data" in lower or lower == "date"):
            mapping.date = header
        if not mapping.description and (
            "descri" in lower or "histori" in lower or lower == "memo"
        ):
            mapping.description = header
        if not mapping.amount and any(
            key in lower for key in ("valor", "amount", "saldo", "value")
        ):
            mapping.amount = header
    return mapping


def parse_date(value: str) -> Optional[date]:
    """Parse DD/MM/YYYY or a YYYY-MM-DD prefix; None if neither fits."""
    value = value.strip()

    match = _BR_DATE.match(value)
    if match:
        day, month, year = (int(part) for part in match.groups())
    else:
        match = _ISO_DATE_PREFIX.match(value)
        if not match:
            return None
        year, month, day = (int(part) for part in match.groups())

    try:
        return date(year, month, day)
    except ValueError:
        # 31/02/2025 and friends
        return None


def parse_amount(value: str) -> Optional[Decimal]:
    """
    Parse a statement amount.

    "1.234,56" -> 1234.56 (Brazilian thousands/decimal separators)
    "1234,56"  -> 1234.56 (lone comma is the decimal separator)
    "-1234.56" -> -1234.56
    """
    cleaned = _WHITESPACE.sub("", value)
    if "," in cleaned and cleaned.index(",") > cleaned.rfind("."):
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned and "." not in cleaned:
        cleaned = cleaned.replace(",", ".", 1)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


class StatementRowValidator:
    """
    Turns parsed CSV rows into ParsedTransactions.

    Usage:
        validator = StatementRowValidator()
        result = validator.normalize(rows, detect_columns(headers))
    """

    def normalize(
        self,
        rows: list[dict[str, str]],
        mapping: ColumnMapping,
    ) -> StatementValidationResult:
        """
        Validate every row against the mapping.

        Raises:
            IncompleteMappingError: If a field has no column
        """
        if not mapping.is_complete:
            raise IncompleteMappingError(
                f"Unmapped columns: {', '.join(mapping.missing_fields)}"
            )

        result = StatementValidationResult()
        for row_number, row in enumerate(rows, start=1):
            transaction, issue = self._normalize_row(row_number, row, mapping)
            if issue is not None:
                result.issues.append(issue)
            else:
                result.transactions.append(transaction)

        if result.issues:
            logger.info(
                "statement_rows_skipped",
                skipped=result.skipped_rows,
                kept=len(result.transactions),
            )
        return result

    def _normalize_row(
        self,
        row_number: int,
        row: dict[str, str],
        mapping: ColumnMapping,
    ) -> tuple[Optional[ParsedTransaction], Optional[ValidationIssue]]:
        raw_date = (row.get(mapping.date) or "").strip()
        raw_description = (row.get(mapping.description) or "").strip()
        raw_amount = (row.get(mapping.amount) or "").strip()

        parsed_date = parse_date(raw_date)
        if parsed_date is None:
            return None, ValidationIssue(
                row_number=row_number,
                field="date",
                issue_type="missing" if not raw_date else "invalid_format",
                message="Date is missing or not in DD/MM/YYYY or YYYY-MM-DD format",
                raw_value=raw_date or None,
            )

        amount = parse_amount(raw_amount)
        if amount is None:
            return None, ValidationIssue(
                row_number=row_number,
                field="amount",
                issue_type="missing" if not raw_amount else "invalid_format",
                message="Amount is missing or not a number",
                raw_value=raw_amount or None,
            )

        if not raw_description:
            return None, ValidationIssue(
                row_number=row_number,
                field="description",
                issue_type="missing",
                message="Description is blank",
            )

        return ParsedTransaction(
            date=parsed_date,
            description=raw_description,
            amount=amount,
        ), None
