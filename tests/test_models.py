"""
Tests for Contabil models

Test strategy:
1. Unit tests for individual components (models, rules, matcher)
2. Integration tests for flows (over the in-memory store)
3. No real API calls in tests (gspread is mocked)
"""

import pytest
from datetime import date
from decimal import Decimal

from contabil.models import (
    AccountClass,
    AuditAction,
    AuditEntity,
    AuditEntryBuilder,
    AuditLogEntry,
    BankTransaction,
    Client,
    EntryBalance,
    ImportResult,
    JournalLine,
    MatchCandidate,
    TaxItem,
    TaxPeriod,
    TaxRegime,
    TaxResult,
    TaxType,
    competence_of,
    due_date_next_month,
    format_competence,
    to_cents,
)


class TestCommonHelpers:
    """Tests for competence and money helpers."""

    def test_due_date_next_month(self):
        """Test due date falls in the month after the competence."""
        assert due_date_next_month("2025-01", 20) == date(2025, 2, 20)

    def test_due_date_rolls_december_into_january(self):
        """Test December competence is due in January of the next year."""
        assert due_date_next_month("2025-12", 25) == date(2026, 1, 25)

    def test_due_date_clamps_to_month_end(self):
        """Test a day that does not exist is clamped to the last day."""
        assert due_date_next_month("2025-01", 30) == date(2025, 2, 28)
        assert due_date_next_month("2024-01", 30) == date(2024, 2, 29)

    def test_to_cents_rounds_half_up(self):
        """Test monetary rounding is half up."""
        assert to_cents(Decimal("0.125")) == Decimal("0.13")
        assert to_cents(Decimal("97.5")) == Decimal("97.50")

    def test_competence_of(self):
        """Test competence string from a date."""
        assert competence_of(date(2025, 3, 9)) == "2025-03"

    def test_format_competence(self):
        """Test pt-BR month abbreviation."""
        assert format_competence("2025-01") == "Jan/2025"
        assert format_competence("2024-12") == "Dez/2024"


class TestLedgerModels:
    """Tests for client and journal models."""

    def test_account_class_from_code(self):
        """Test classification by first digit."""
        assert AccountClass.of("4.1") == AccountClass.REVENUE
        assert AccountClass.of("5.1.1") == AccountClass.EXPENSE
        assert AccountClass.of("1.1.2") == AccountClass.ASSET
        assert AccountClass.of("9.9") is None

    def test_journal_line_rejects_bad_code(self):
        """Test that account codes must be dotted digits."""
        with pytest.raises(ValueError):
            JournalLine(account_code="4.x", credit=Decimal("10"))

    def test_journal_line_rejects_negative_debit(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            JournalLine(account_code="5.1", debit=Decimal("-1"))

    def test_client_unknown_regime_becomes_none(self):
        """Test an unrecognized stored regime loads as None."""
        client = Client(name="Acme", tax_id="1", regime="Lucro Arbitrado")
        assert client.regime is None

    def test_client_known_regime(self):
        """Test regime parsing from its stored value."""
        client = Client(name="Acme", tax_id="1", regime="Presumido")
        assert client.regime == TaxRegime.PRESUMIDO

    def test_client_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        client = Client(name="  Acme Ltda  ", tax_id="1")
        assert client.name == "Acme Ltda"

    def test_client_default_bank_account_empty(self):
        """Test a client without accounts has no default account."""
        assert Client(name="Acme", tax_id="1").default_bank_account_id == ""

    def test_entry_balance_tolerance(self):
        """Test balance allows sub-cent differences only."""
        assert EntryBalance(total_debit=Decimal("10.005"), total_credit=Decimal("10")).is_balanced
        assert not EntryBalance(total_debit=Decimal("10.01"), total_credit=Decimal("10")).is_balanced


class TestReconciliationModels:
    """Tests for import result bookkeeping."""

    def test_import_result_counts(self):
        """Test matched and suggested counts."""
        matched = BankTransaction(
            client_id="c", date=date(2025, 1, 7), description="A",
            amount=Decimal("10"), matched=True, match_entry_id="e1", match_confidence=80,
        )
        suggested = BankTransaction(
            client_id="c", date=date(2025, 1, 7), description="B",
            amount=Decimal("10"), match_confidence=45,
        )
        result = ImportResult(
            source_file="x.csv",
            transactions=[matched, suggested],
            matches={
                0: MatchCandidate(entry_id="e1", confidence=80),
                1: MatchCandidate(entry_id="e2", confidence=45),
            },
        )
        assert result.matched_count == 1
        assert result.suggested_count == 1

    def test_match_candidate_bounds(self):
        """Test confidence must stay within 0-100."""
        with pytest.raises(ValueError):
            MatchCandidate(entry_id="e", confidence=101)


class TestTaxModels:
    """Tests for tax result and period models."""

    def test_total_taxes_sums_items(self):
        """Test total is the sum of the items."""
        result = TaxResult(
            regime=TaxRegime.REAL,
            competence="2025-01",
            gross_revenue=Decimal("1000"),
            items=[
                TaxItem(tax_type=TaxType.PIS, value=Decimal("16.50"), due_date=date(2025, 2, 25)),
                TaxItem(tax_type=TaxType.COFINS, value=Decimal("76.00"), due_date=date(2025, 2, 25)),
            ],
        )
        assert result.total_taxes == Decimal("92.50")

    def test_tax_result_rejects_bad_competence(self):
        """Test competence must be YYYY-MM."""
        with pytest.raises(ValueError):
            TaxResult(regime=TaxRegime.MEI, competence="2025-13", gross_revenue=Decimal("0"))

    def test_period_all_paid(self):
        """Test all_paid requires every item paid."""
        period = TaxPeriod(
            client_id="c",
            competence="2025-01",
            items=[
                TaxItem(tax_type=TaxType.IRPJ, value=Decimal("1"), due_date=date(2025, 2, 28), paid=True),
                TaxItem(tax_type=TaxType.CSLL, value=Decimal("1"), due_date=date(2025, 2, 28)),
            ],
        )
        assert not period.all_paid
        period.items[1].paid = True
        assert period.all_paid

    def test_empty_period_is_not_paid(self):
        """Test a period without items is not considered paid."""
        assert not TaxPeriod(client_id="c", competence="2025-01").all_paid

    def test_regime_labels(self):
        """Test display labels of every regime."""
        assert TaxRegime.SIMPLES.label == "Simples Nacional"
        assert TaxRegime.PRESUMIDO.label == "Lucro Presumido"
        assert TaxRegime.REAL.label == "Lucro Real"
        assert TaxRegime.MEI.label == "MEI"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_month_close_builders(self):
        """Test a first close is a create and a reopen is a delete."""
        closed = AuditEntryBuilder.month_closed("2025-01", before=None, after={"warnings": 0})
        reclosed = AuditEntryBuilder.month_closed("2025-01", before={"closed": False}, after={"warnings": 0})
        reopened = AuditEntryBuilder.month_reopened("2025-01", before={"closed": True}, after={})

        assert (closed.entity, closed.entity_id, closed.action) == ("month_close", "2025-01", AuditAction.CREATE)
        assert reclosed.action == AuditAction.UPDATE
        assert reopened.action == AuditAction.DELETE

    def test_audited_entities(self):
        """Test only entities the core mutates are named."""
        assert {e.value for e in AuditEntity} == {
            "bank_import", "tax_period", "journal_entry", "month_close",
        }

    def test_audit_entry_creation(self):
        """Test AuditLogEntry model creation."""
        entry = AuditLogEntry(
            entity="tax_period",
            entity_id="tp_001",
            action=AuditAction.CREATE,
            after={"status": "computed"},
        )
        assert entry.before is None
        assert entry.hash == ""

    def test_canonical_json_excludes_hash(self):
        """Test the hash is not part of its own input."""
        entry = AuditLogEntry(entity="journal_entry", entity_id="c", action=AuditAction.UPDATE)
        before = entry.canonical_json()
        entry.hash = "abc"
        assert entry.canonical_json() == before
        assert '"hash"' not in before

    def test_audit_entry_to_log_dict(self):
        """Test conversion to log dictionary."""
        entry = AuditEntryBuilder.bank_import("extrato.csv", count=8, matched=6)
        log_dict = entry.to_log_dict()
        assert log_dict["entity"] == "bank_import"
        assert log_dict["entity_id"] == "extrato.csv"
        assert log_dict["action"] == "create"

    def test_builder_bank_import(self):
        """Test bank import entry carries count and matched."""
        entry = AuditEntryBuilder.bank_import("extrato.csv", count=8, matched=6)
        assert entry.after == {"count": 8, "matched": 6}

    def test_builder_tax_period_saved_action(self):
        """Test create vs update depends on the before snapshot."""
        created = AuditEntryBuilder.tax_period_saved("tp", None, {"a": 1})
        updated = AuditEntryBuilder.tax_period_saved("tp", {"a": 0}, {"a": 1})
        assert created.action == AuditAction.CREATE
        assert updated.action == AuditAction.UPDATE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
