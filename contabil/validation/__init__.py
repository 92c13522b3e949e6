"""Statement validation package."""

from contabil.validation.statement import (
    ColumnMapping,
    IncompleteMappingError,
    StatementRowValidator,
    detect_columns,
    parse_amount,
    parse_date,
)

__all__ = [
    "ColumnMapping",
    "IncompleteMappingError",
    "StatementRowValidator",
    "detect_columns",
    "parse_amount",
    "parse_date",
]
