"""
Tests for the reconciliation matcher.

Scores are checked against hand-computed values:
amount (50/30) + date (30/25/15/5) + description (5 per word, max 20).
"""

import pytest
from datetime import date
from decimal import Decimal

from contabil.config import ReconciliationSettings
from contabil.models import ParsedTransaction
from contabil.reconciliation import ReconciliationMatcher
from contabil.reconciliation.matcher import (
    amount_points,
    date_points,
    description_points,
)

from conftest import make_entry


def tx(day: str, description: str, amount: str) -> ParsedTransaction:
    return ParsedTransaction(
        date=date.fromisoformat(day),
        description=description,
        amount=Decimal(amount),
    )


class TestScoringComponents:
    """Tests for the individual scoring rules."""

    def test_exact_amount(self):
        """Test sub-cent difference scores 50."""
        assert amount_points(Decimal("15000"), Decimal("15000.005")) == 50

    def test_close_amount(self):
        """Test difference under one real scores 30."""
        assert amount_points(Decimal("-100.50"), Decimal("100")) == 30

    def test_amount_gate(self):
        """Test a difference of 1.00 or more fails the gate."""
        assert amount_points(Decimal("101"), Decimal("100")) is None
        assert amount_points(Decimal("250"), Decimal("100")) is None

    @pytest.mark.parametrize("days,points", [
        (0, 30), (1, 25), (2, 15), (3, 15), (5, 5), (7, 5), (8, 0), (40, 0),
    ])
    def test_date_points(self, days, points):
        """Test date proximity bands."""
        assert date_points(days) == points

    def test_description_overlap(self):
        """Test shared words of four or more characters count."""
        assert description_points(
            "TED RECEBIDA CONSULTORIA", "Receita NF 001 - Consultoria TI"
        ) == 5

    def test_description_ignores_short_words(self):
        """Test words of three characters or fewer never count."""
        assert description_points("TED PIX NF", "TED PIX NF") == 0

    def test_description_substring_both_ways(self):
        """Test a word counts when it contains, or is contained in, a memo word."""
        assert description_points("aluguel", "Pagamento aluguel janeiro") == 5
        assert description_points("pagamentos", "pagamento") == 5

    def test_description_points_capped(self):
        """Test overlap contributes at most 20."""
        text = "alpha bravo charlie delta echo foxtrot"
        assert description_points(text, text) == 20

    def test_description_empty_memo(self):
        """Test an empty memo shares no words."""
        assert description_points("pagamento aluguel", "") == 0


class TestReconciliationMatcher:
    """Tests for best-candidate selection."""

    def test_end_to_end_consulting_receipt(self, matcher):
        """Test the consulting receipt matches its revenue entry with 70."""
        entry = make_entry("je_001", "2025-01-05", "Receita NF 001 Consultoria TI", "1.1.3", "4.1", "15000")
        transaction = tx("2025-01-07", "TED RECEBIDA CONSULTORIA", "15000")

        assert matcher.score(transaction, entry) == 70
        matches = matcher.match([transaction], [entry])
        assert matches[0].entry_id == "je_001"
        assert matches[0].confidence == 70
        assert matches[0].confidence >= matcher.settings.auto_match_threshold

    def test_amount_gate_excludes_entry(self, matcher):
        """Test an entry outside the amount gate never contributes."""
        far = make_entry("je_far", "2025-01-07", "consultoria", "1.1.2", "4.1", "14999")
        transaction = tx("2025-01-07", "consultoria", "15000")

        assert matcher.score(transaction, far) is None
        assert matcher.match([transaction], [far]) == {}

    def test_confidence_capped_at_99(self, matcher):
        """Test a perfect candidate is capped below 100."""
        entry = make_entry("je_1", "2025-01-07", "pagamento aluguel janeiro sala comercial", "5.1.1", "1.1.2", "2800")
        transaction = tx("2025-01-07", "pagamento aluguel janeiro sala comercial", "-2800")

        assert matcher.score(transaction, entry) == 99

    def test_custom_cap(self):
        """Test the cap comes from settings."""
        matcher = ReconciliationMatcher(ReconciliationSettings(max_confidence=90))
        entry = make_entry("je_1", "2025-01-07", "pagamento aluguel janeiro sala", "5.1.1", "1.1.2", "2800")
        transaction = tx("2025-01-07", "pagamento aluguel janeiro sala", "-2800")

        assert matcher.score(transaction, entry) == 90

    def test_weak_candidate_below_threshold_absent(self, matcher):
        """Test a best score under 40 is dropped."""
        entry = make_entry("je_1", "2025-01-01", "x", "5.1.1", "1.1.2", "100")
        transaction = tx("2025-02-01", "boleto", "-100.50")

        assert matcher.score(transaction, entry) == 30
        assert matcher.match([transaction], [entry]) == {}

    def test_weak_suggestion_kept(self, matcher):
        """Test a score of 40-59 stays in the map."""
        entry = make_entry("je_1", "2025-01-01", "x", "5.1.1", "1.1.2", "100")
        transaction = tx("2025-01-10", "boleto", "-100")

        matches = matcher.match([transaction], [entry])
        assert matches[0].confidence == 50

    def test_tie_goes_to_first_entry(self, matcher):
        """Test equal scores keep the entry seen first."""
        first = make_entry("je_a", "2025-01-07", "pagamento", "5.1.1", "1.1.2", "500")
        second = make_entry("je_b", "2025-01-07", "pagamento", "5.1.1", "1.1.2", "500")
        transaction = tx("2025-01-07", "pagamento", "-500")

        assert matcher.match([transaction], [first, second])[0].entry_id == "je_a"
        assert matcher.match([transaction], [second, first])[0].entry_id == "je_b"

    def test_higher_score_wins(self, matcher):
        """Test the closest date beats an earlier, farther entry."""
        far = make_entry("je_far", "2025-01-01", "energia", "5.1.2", "1.1.2", "380")
        near = make_entry("je_near", "2025-01-15", "energia", "5.1.2", "1.1.2", "380")
        transaction = tx("2025-01-15", "DEB AUTOMATICO ENERGIA", "-380")

        assert matcher.match([transaction], [far, near])[0].entry_id == "je_near"

    def test_zero_debit_entry_is_ineligible(self, matcher):
        """Test entries with no debits never match, even a zero transaction."""
        empty = make_entry("je_zero", "2025-01-07", "estorno", "5.1.1", "1.1.2", "0")
        transaction = tx("2025-01-07", "estorno", "0")

        assert matcher.score(transaction, empty) is None
        assert matcher.match([transaction], [empty]) == {}

    def test_no_entries_no_matches(self, matcher):
        """Test every transaction is unmatched without entries."""
        assert matcher.match([tx("2025-01-07", "TED", "10")], []) == {}

    def test_same_entry_can_match_several_transactions(self, matcher):
        """Test non-exclusive matching by default."""
        entry = make_entry("je_1", "2025-01-07", "tarifa", "5.1.1", "1.1.2", "45")
        transactions = [
            tx("2025-01-07", "TARIFA BANCARIA", "-45"),
            tx("2025-01-08", "TARIFA BANCARIA", "-45"),
        ]

        matches = matcher.match(transactions, [entry])
        assert matches[0].entry_id == "je_1"
        assert matches[1].entry_id == "je_1"


class TestExclusiveMatching:
    """Tests for the one-entry-per-transaction mode."""

    @pytest.fixture
    def exclusive_matcher(self):
        return ReconciliationMatcher(ReconciliationSettings(exclusive_matching=True))

    def test_entry_used_once(self, exclusive_matcher):
        """Test the stronger pair keeps the entry, the other is dropped."""
        entry = make_entry("je_1", "2025-01-08", "tarifa", "5.1.1", "1.1.2", "45")
        transactions = [
            tx("2025-01-07", "TARIFA BANCARIA", "-45"),
            tx("2025-01-08", "TARIFA BANCARIA", "-45"),
        ]

        matches = exclusive_matcher.match(transactions, [entry])
        assert list(matches) == [1]
        assert matches[1].entry_id == "je_1"

    def test_second_best_used_when_best_taken(self, exclusive_matcher):
        """Test a transaction falls back to its next candidate."""
        a = make_entry("je_a", "2025-01-07", "tarifa", "5.1.1", "1.1.2", "45")
        b = make_entry("je_b", "2025-01-09", "tarifa", "5.1.1", "1.1.2", "45")
        transactions = [
            tx("2025-01-07", "TARIFA", "-45"),
            tx("2025-01-08", "TARIFA", "-45"),
        ]

        matches = exclusive_matcher.match(transactions, [a, b])
        assert matches[0].entry_id == "je_a"
        assert matches[1].entry_id == "je_b"

    def test_ties_broken_by_transaction_index(self, exclusive_matcher):
        """Test equal pairs go to the earlier transaction."""
        entry = make_entry("je_1", "2025-01-07", "tarifa", "5.1.1", "1.1.2", "45")
        transactions = [
            tx("2025-01-07", "TARIFA", "-45"),
            tx("2025-01-07", "TARIFA", "-45"),
        ]

        matches = exclusive_matcher.match(transactions, [entry])
        assert list(matches) == [0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
