"""
Report Aggregator

Builds the monthly income statement (DRE) and trial balance
(balancete) from journal entries.

IMPORTANT: Reports NEVER correct the data. An unbalanced ledger gives
a trial balance whose debit and credit totals visibly disagree.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from contabil.config import get_logger
from contabil.models.ledger import AccountClass, JournalEntry
from contabil.models.reports import (
    IncomeStatement,
    IncomeStatementLine,
    TrialBalance,
    TrialBalanceLine,
)
from contabil.queries import LedgerQueries
from contabil.services.storage import RecordStore


logger = get_logger(__name__)

ZERO = Decimal("0")
REVENUE_HEADER = "RECEITAS"
EXPENSE_HEADER = "DESPESAS"
RESULT_LABEL = "RESULTADO DO EXERCÍCIO"


def _code_key(code: str) -> tuple[int, ...]:
    """Chart order: "1.1.2" before "1.1.10"."""
    return tuple(int(part) for part in code.split("."))


@dataclass
class _AccountMovement:
    code: str
    name: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO


def _movements(
    entries: list[JournalEntry],
    classes: Optional[set[AccountClass]] = None,
) -> dict[str, _AccountMovement]:
    """Debit/credit totals per account code; the first line seen names the account."""
    accounts: dict[str, _AccountMovement] = {}
    for entry in entries:
        for line in entry.lines:
            if classes is not None and line.account_class not in classes:
                continue
            account = accounts.get(line.account_code)
            if account is None:
                account = _AccountMovement(
                    code=line.account_code,
                    name=line.account_name or line.account_code,
                )
                accounts[line.account_code] = account
            account.debit += line.debit
            account.credit += line.credit
    return accounts


class ReportAggregator:
    """
    Financial reports for one competence.

    Usage:
        reports = ReportAggregator(store)
        dre = reports.income_statement("2025-01", client_id="cli_demo_001")
        balancete = reports.trial_balance("2025-01")
    """

    def __init__(self, store: RecordStore):
        self._queries = LedgerQueries(store)

    def income_statement(
        self,
        competence: str,
        client_id: Optional[str] = None,
    ) -> IncomeStatement:
        entries = self._queries.entries_for(client_id, competence)
        accounts = _movements(entries, {AccountClass.REVENUE, AccountClass.EXPENSE})
        ordered = sorted(accounts.values(), key=lambda a: _code_key(a.code))

        revenue_lines = [
            IncomeStatementLine(code=a.code, name=a.name, value=a.credit - a.debit, level=2)
            for a in ordered if AccountClass.of(a.code) == AccountClass.REVENUE
        ]
        expense_lines = [
            IncomeStatementLine(code=a.code, name=a.name, value=a.debit - a.credit, level=2)
            for a in ordered if AccountClass.of(a.code) == AccountClass.EXPENSE
        ]
        total_revenue = sum((line.value for line in revenue_lines), ZERO)
        total_expense = sum((line.value for line in expense_lines), ZERO)
        result = total_revenue - total_expense

        lines = [
            IncomeStatementLine(
                code=AccountClass.REVENUE.value,
                name=REVENUE_HEADER,
                value=total_revenue,
                level=1,
                is_total=True,
            ),
            *revenue_lines,
            IncomeStatementLine(
                code=AccountClass.EXPENSE.value,
                name=EXPENSE_HEADER,
                value=total_expense,
                level=1,
                is_total=True,
            ),
            *expense_lines,
            IncomeStatementLine(
                code="",
                name=RESULT_LABEL,
                value=result,
                level=1,
                is_total=True,
            ),
        ]

        return IncomeStatement(
            competence=competence,
            lines=lines,
            total_revenue=total_revenue,
            total_expense=total_expense,
            result=result,
        )

    def trial_balance(
        self,
        competence: str,
        client_id: Optional[str] = None,
    ) -> TrialBalance:
        entries = self._queries.entries_for(client_id, competence)
        accounts = _movements(entries)

        lines = []
        for account in sorted(accounts.values(), key=lambda a: _code_key(a.code)):
            net = account.debit - account.credit
            lines.append(TrialBalanceLine(
                code=account.code,
                name=account.name,
                debit_movement=account.debit,
                credit_movement=account.credit,
                debit_balance=net if net > 0 else ZERO,
                credit_balance=-net if net < 0 else ZERO,
                level=len(account.code.split(".")),
            ))

        report = TrialBalance(
            competence=competence,
            lines=lines,
            total_debit=sum((line.debit_balance for line in lines), ZERO),
            total_credit=sum((line.credit_balance for line in lines), ZERO),
        )
        if not report.is_balanced:
            logger.warning(
                "trial_balance_unbalanced",
                competence=competence,
                client_id=client_id,
                total_debit=str(report.total_debit),
                total_credit=str(report.total_credit),
            )
        return report
