"""
Shared model primitives.

Competence strings ("YYYY-MM") are used as plain, validated strings
because that is how they are stored and compared everywhere.
"""

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated
from uuid import uuid4

from pydantic import Field


COMPETENCE_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

Competence = Annotated[
    str,
    Field(pattern=COMPETENCE_PATTERN, description="Accounting period as YYYY-MM"),
]

CENT = Decimal("0.01")


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid4())


def to_cents(value: Decimal) -> Decimal:
    """Round a monetary value to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def competence_of(day: date) -> str:
    """Competence a date falls in."""
    return f"{day.year:04d}-{day.month:02d}"


def parse_competence(competence: str) -> tuple[int, int]:
    """Split a competence into (year, month)."""
    year, month = competence.split("-")
    return int(year), int(month)


def due_date_next_month(competence: str, day_of_month: int) -> date:
    """
    Due date on a given day of the month following the competence.

    Days that do not exist in that month (e.g. 30 February) are
    clamped to the month's last day.
    """
    year, month = parse_competence(competence)
    if month == 12:
        year, month = year + 1, 1
    else:
        month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


_MONTH_ABBREVIATIONS = (
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
)


def format_competence(competence: str) -> str:
    """'2025-01' -> 'Jan/2025'."""
    year, month = parse_competence(competence)
    return f"{_MONTH_ABBREVIATIONS[month - 1]}/{year}"
