"""
Tax Apportionment Engine

Derives a month's tax obligations from the ledger, under the client's
regime. Exactly one rule runs per regime:

- MEI:       fixed monthly DAS
- Simples:   DAS at the Anexo III effective rate
- Presumido: IRPJ/CSLL over a presumed profit base, PIS/COFINS/ISS over revenue
- Real:      IRPJ (+ surtax) and CSLL over actual profit, PIS/COFINS over revenue

DESIGN DECISION: Dispatch is a closed table keyed by TaxRegime.
Adding a regime without a rule is caught by the test suite, and a
client whose stored regime is not recognized yields None instead of
an exception, so callers can show "cannot compute".

Item values and breakdown amounts are both rounded half up to cents,
so every breakdown line agrees with the item it explains.
"""

from decimal import Decimal
from typing import Callable, Optional

from contabil.config import get_logger
from contabil.models.common import due_date_next_month, to_cents
from contabil.models.ledger import Client
from contabil.models.tax import (
    BreakdownLine,
    TaxItem,
    TaxRegime,
    TaxResult,
    TaxType,
)
from contabil.queries import LedgerQueries
from contabil.taxes import rules
from contabil.taxes.rules import format_brl, format_percent


logger = get_logger(__name__)

ZERO = Decimal("0")


def _item(tax_type: TaxType, value: Decimal, competence: str, due_day: int) -> TaxItem:
    return TaxItem(
        tax_type=tax_type,
        value=to_cents(value),
        due_date=due_date_next_month(competence, due_day),
    )


def _effective_rate(total: Decimal, revenue: Decimal) -> Decimal:
    """Total taxes over revenue, in percent; 0 without revenue."""
    if revenue <= 0:
        return ZERO
    return to_cents(total / revenue * 100)


class TaxApportionmentEngine:
    """
    Computes a TaxResult for a client and competence.

    Usage:
        engine = TaxApportionmentEngine(queries)
        result = engine.apportion(client, "2025-01")
        if result is None:
            ...  # regime not recognized
    """

    def __init__(self, queries: LedgerQueries):
        self._queries = queries
        self._rules: dict[TaxRegime, Callable[[Client, str], TaxResult]] = {
            TaxRegime.MEI: self._apportion_mei,
            TaxRegime.SIMPLES: self._apportion_simples,
            TaxRegime.PRESUMIDO: self._apportion_presumido,
            TaxRegime.REAL: self._apportion_real,
        }

    @property
    def supported_regimes(self) -> frozenset[TaxRegime]:
        return frozenset(self._rules)

    def apportion(self, client: Client, competence: str) -> Optional[TaxResult]:
        """
        Compute the client's taxes for one competence.

        Returns:
            TaxResult, or None when the client's regime is not recognized
        """
        rule = self._rules.get(client.regime) if client.regime is not None else None
        if rule is None:
            logger.warning(
                "tax_regime_unrecognized",
                client_id=client.id,
                competence=competence,
            )
            return None

        result = rule(client, competence)
        logger.info(
            "tax_apportioned",
            client_id=client.id,
            competence=competence,
            regime=result.regime.value,
            gross_revenue=str(result.gross_revenue),
            total_taxes=str(result.total_taxes),
            items=len(result.items),
        )
        return result

    # =========================================================================
    # RULES
    # =========================================================================

    def _apportion_mei(self, client: Client, competence: str) -> TaxResult:
        revenue = self._queries.revenue_total(client.id, competence)
        fee = rules.MEI_MONTHLY_FEE

        return TaxResult(
            regime=TaxRegime.MEI,
            competence=competence,
            gross_revenue=revenue,
            items=[_item(TaxType.DAS, fee, competence, rules.MEI_DUE_DAY)],
            effective_rate=_effective_rate(fee, revenue),
            breakdown=[
                BreakdownLine(label="Receita Bruta", value=format_brl(revenue)),
                BreakdownLine(label="DAS-MEI (valor fixo)", value=format_brl(fee)),
                BreakdownLine(label="Inclui", value="INSS + ISS/ICMS"),
            ],
        )

    def _apportion_simples(self, client: Client, competence: str) -> TaxResult:
        revenue = self._queries.revenue_total(client.id, competence)
        rbt12 = self._queries.annualized_revenue_approximated(client.id, competence)

        bracket = rules.select_bracket(rbt12)
        rate = rules.simples_effective_rate(rbt12, bracket)
        das = revenue * rate / 100

        return TaxResult(
            regime=TaxRegime.SIMPLES,
            competence=competence,
            gross_revenue=revenue,
            items=[_item(TaxType.DAS, das, competence, rules.SIMPLES_DUE_DAY)],
            effective_rate=to_cents(rate),
            breakdown=[
                BreakdownLine(label="Receita Bruta Mensal", value=format_brl(revenue)),
                BreakdownLine(label="RBT12 (estimada)", value=format_brl(rbt12)),
                BreakdownLine(
                    label="Faixa Anexo III",
                    value=f"até {rules.format_brl_grouped(bracket.ceiling)}",
                ),
                BreakdownLine(label="Alíquota Nominal", value=rules.format_rate(bracket.nominal_rate)),
                BreakdownLine(label="Dedução", value=rules.format_brl_grouped(bracket.deduction)),
                BreakdownLine(label="Alíquota Efetiva", value=format_percent(rate)),
                BreakdownLine(label="Valor DAS", value=format_brl(das)),
            ],
        )

    def _apportion_presumido(self, client: Client, competence: str) -> TaxResult:
        revenue = self._queries.revenue_total(client.id, competence)
        base = revenue * rules.PRESUMED_PROFIT_SERVICES

        irpj = base * rules.PRESUMIDO_IRPJ
        csll = base * rules.PRESUMIDO_CSLL
        pis = revenue * rules.PRESUMIDO_PIS
        cofins = revenue * rules.PRESUMIDO_COFINS
        iss = revenue * rules.PRESUMIDO_ISS
        total = irpj + csll + pis + cofins + iss

        presumption = f"{rules.PRESUMED_PROFIT_SERVICES * 100:.0f}%"

        return TaxResult(
            regime=TaxRegime.PRESUMIDO,
            competence=competence,
            gross_revenue=revenue,
            items=[
                _item(TaxType.IRPJ, irpj, competence, rules.INCOME_TAX_DUE_DAY),
                _item(TaxType.CSLL, csll, competence, rules.INCOME_TAX_DUE_DAY),
                _item(TaxType.PIS, pis, competence, rules.PIS_COFINS_DUE_DAY),
                _item(TaxType.COFINS, cofins, competence, rules.PIS_COFINS_DUE_DAY),
                _item(TaxType.ISS, iss, competence, rules.ISS_DUE_DAY),
            ],
            effective_rate=_effective_rate(total, revenue),
            breakdown=[
                BreakdownLine(label="Receita Bruta", value=format_brl(revenue)),
                BreakdownLine(label="Presunção Serviços", value=presumption),
                BreakdownLine(label="Base Presumida", value=format_brl(base)),
                BreakdownLine(label="IRPJ (15% s/ base)", value=format_brl(irpj)),
                BreakdownLine(label="CSLL (9% s/ base)", value=format_brl(csll)),
                BreakdownLine(label="PIS (0,65% s/ fat.)", value=format_brl(pis)),
                BreakdownLine(label="COFINS (3% s/ fat.)", value=format_brl(cofins)),
                BreakdownLine(label="ISS (5% s/ fat.)", value=format_brl(iss)),
            ],
        )

    def _apportion_real(self, client: Client, competence: str) -> TaxResult:
        revenue = self._queries.revenue_total(client.id, competence)
        expenses = self._queries.expense_total(client.id, competence)
        # Losses are not taxed
        profit = max(revenue - expenses, ZERO)

        irpj = profit * rules.REAL_IRPJ
        surtax = ZERO
        if profit > rules.REAL_SURTAX_THRESHOLD:
            surtax = (profit - rules.REAL_SURTAX_THRESHOLD) * rules.REAL_IRPJ_SURTAX
        csll = profit * rules.REAL_CSLL
        pis = revenue * rules.REAL_PIS
        cofins = revenue * rules.REAL_COFINS
        total = irpj + surtax + csll + pis + cofins

        return TaxResult(
            regime=TaxRegime.REAL,
            competence=competence,
            gross_revenue=revenue,
            items=[
                _item(TaxType.IRPJ, irpj + surtax, competence, rules.INCOME_TAX_DUE_DAY),
                _item(TaxType.CSLL, csll, competence, rules.INCOME_TAX_DUE_DAY),
                _item(TaxType.PIS, pis, competence, rules.PIS_COFINS_DUE_DAY),
                _item(TaxType.COFINS, cofins, competence, rules.PIS_COFINS_DUE_DAY),
            ],
            effective_rate=_effective_rate(total, revenue),
            breakdown=[
                BreakdownLine(label="Receita Bruta", value=format_brl(revenue)),
                BreakdownLine(label="Despesas Dedutíveis", value=format_brl(expenses)),
                BreakdownLine(label="Lucro Real", value=format_brl(profit)),
                BreakdownLine(label="IRPJ (15%)", value=format_brl(irpj)),
                BreakdownLine(label="IRPJ Adicional (10%)", value=format_brl(surtax)),
                BreakdownLine(label="CSLL (9%)", value=format_brl(csll)),
                BreakdownLine(label="PIS (1,65% não-cum.)", value=format_brl(pis)),
                BreakdownLine(label="COFINS (7,6% não-cum.)", value=format_brl(cofins)),
            ],
        )
