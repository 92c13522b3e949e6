"""Tax apportionment package."""

from contabil.taxes.engine import TaxApportionmentEngine
from contabil.taxes.service import (
    TaxItemNotFoundError,
    TaxPeriodError,
    TaxPeriodService,
)

__all__ = [
    "TaxApportionmentEngine",
    "TaxItemNotFoundError",
    "TaxPeriodError",
    "TaxPeriodService",
]
