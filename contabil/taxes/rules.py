"""
Tax Rule Tables

CRITICAL: These rates are ILLUSTRATIVE. They mirror the shape of the
Brazilian regimes (fixed MEI fee, Simples Anexo III brackets, presumed
profit, actual profit) but are not kept in sync with legislation.
Never use them to file a real return.

Rates are Decimal fractions (0.15 = 15%) except Simples nominal rates,
which are percentages as published in the Anexo III table.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from contabil.models.common import to_cents


# =============================================================================
# MEI
# =============================================================================

MEI_MONTHLY_FEE = Decimal("75.90")
MEI_DUE_DAY = 20


# =============================================================================
# SIMPLES NACIONAL - ANEXO III (services)
# =============================================================================

class SimplesBracket(BaseModel):
    """One revenue bracket of the Simples table."""

    ceiling: Decimal = Field(..., gt=0, description="Maximum RBT12 in the bracket")
    nominal_rate: Decimal = Field(..., ge=0, description="Nominal rate in percent")
    deduction: Decimal = Field(..., ge=0, description="Amount to deduct, in BRL")


SIMPLES_ANEXO_III = [
    SimplesBracket(ceiling=Decimal("180000"), nominal_rate=Decimal("6.0"), deduction=Decimal("0")),
    SimplesBracket(ceiling=Decimal("360000"), nominal_rate=Decimal("11.2"), deduction=Decimal("9360")),
    SimplesBracket(ceiling=Decimal("720000"), nominal_rate=Decimal("13.5"), deduction=Decimal("17640")),
    SimplesBracket(ceiling=Decimal("1800000"), nominal_rate=Decimal("16.0"), deduction=Decimal("35640")),
    SimplesBracket(ceiling=Decimal("3600000"), nominal_rate=Decimal("21.0"), deduction=Decimal("125640")),
    SimplesBracket(ceiling=Decimal("4800000"), nominal_rate=Decimal("33.0"), deduction=Decimal("648000")),
]

SIMPLES_DUE_DAY = 20


def select_bracket(rbt12: Decimal) -> SimplesBracket:
    """First bracket whose ceiling covers RBT12; the last one above the table."""
    for bracket in SIMPLES_ANEXO_III:
        if rbt12 <= bracket.ceiling:
            return bracket
    return SIMPLES_ANEXO_III[-1]


def simples_effective_rate(rbt12: Decimal, bracket: SimplesBracket) -> Decimal:
    """
    Effective rate in percent: (RBT12 x nominal - deduction) / RBT12.

    Zero when there is no revenue.
    """
    if rbt12 <= 0:
        return Decimal("0")
    return (rbt12 * bracket.nominal_rate / 100 - bracket.deduction) / rbt12 * 100


# =============================================================================
# LUCRO PRESUMIDO
# =============================================================================

PRESUMED_PROFIT_SERVICES = Decimal("0.32")

PRESUMIDO_IRPJ = Decimal("0.15")     # over the presumed base
PRESUMIDO_CSLL = Decimal("0.09")     # over the presumed base
PRESUMIDO_PIS = Decimal("0.0065")    # over revenue
PRESUMIDO_COFINS = Decimal("0.03")   # over revenue
PRESUMIDO_ISS = Decimal("0.05")      # over revenue


# =============================================================================
# LUCRO REAL
# =============================================================================

REAL_IRPJ = Decimal("0.15")
REAL_IRPJ_SURTAX = Decimal("0.10")
REAL_SURTAX_THRESHOLD = Decimal("20000")  # monthly profit
REAL_CSLL = Decimal("0.09")
REAL_PIS = Decimal("0.0165")          # non-cumulative
REAL_COFINS = Decimal("0.076")        # non-cumulative


# =============================================================================
# DUE DAYS (of the month after the competence)
# =============================================================================

INCOME_TAX_DUE_DAY = 30   # IRPJ, CSLL
PIS_COFINS_DUE_DAY = 25
ISS_DUE_DAY = 15


# =============================================================================
# BREAKDOWN FORMATTING
# =============================================================================

_PT_BR_SEPARATORS = str.maketrans(",.", ".,")


def format_brl(value: Decimal) -> str:
    """'R$ 1234.50' - cents rounded half up like item values, no thousands separator."""
    return f"R$ {to_cents(value):f}"


def format_brl_grouped(value: Decimal) -> str:
    """'R$ 180.000' - pt-BR separators, no decimals for whole values."""
    grouped = f"{value.normalize():,f}"
    return f"R$ {grouped.translate(_PT_BR_SEPARATORS)}"


def format_percent(value: Decimal) -> str:
    return f"{to_cents(value):f}%"


def format_rate(value: Decimal) -> str:
    """Table rate as printed: '6%', '11.2%'."""
    return f"{value.normalize():f}%"
