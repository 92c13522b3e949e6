"""
Reconciliation Matcher

Scores bank transactions against journal entries and picks the best
candidate per transaction.

SCORING (per transaction/entry pair):
1. Amount gate: |abs(tx.amount) - entry debit total|
   < 0.01 -> +50, < 1.00 -> +30, otherwise the entry is skipped
2. Date proximity: same day +30, 1 day +25, 3 days +15, 7 days +5
3. Description overlap: +5 per shared word, at most +20
4. Capped at max_confidence (99 by default)

CRITICAL: A score is never 100. Only a human confirms a match.

DESIGN DECISION: Matching is deterministic. Entries are scored in the
order given (the importer passes store insertion order) and only a
strictly higher score replaces the current best, so ties go to the
entry seen first.
"""

from decimal import Decimal
from typing import Optional

from contabil.config import ReconciliationSettings, get_logger, get_settings
from contabil.models.ledger import JournalEntry
from contabil.models.reconciliation import MatchCandidate, ParsedTransaction


logger = get_logger(__name__)

EXACT_AMOUNT_TOLERANCE = Decimal("0.01")
CLOSE_AMOUNT_TOLERANCE = Decimal("1.00")
EXACT_AMOUNT_POINTS = 50
CLOSE_AMOUNT_POINTS = 30

# (max days apart, points), checked in order
DATE_PROXIMITY_POINTS = [
    (0, 30),
    (1, 25),
    (3, 15),
    (7, 5),
]

MIN_WORD_LENGTH = 4
POINTS_PER_WORD = 5
MAX_DESCRIPTION_POINTS = 20


def amount_points(tx_amount: Decimal, entry_amount: Decimal) -> Optional[int]:
    """Points for the amount test, or None when the gate fails."""
    diff = abs(abs(tx_amount) - entry_amount)
    if diff < EXACT_AMOUNT_TOLERANCE:
        return EXACT_AMOUNT_POINTS
    if diff < CLOSE_AMOUNT_TOLERANCE:
        return CLOSE_AMOUNT_POINTS
    return None


def date_points(days_apart: int) -> int:
    for max_days, points in DATE_PROXIMITY_POINTS:
        if days_apart <= max_days:
            return points
    return 0


def description_points(description: str, memo: str) -> int:
    """
    Keyword overlap between the bank description and the entry memo.

    A description word counts when it has at least four characters and
    is contained in, or contains, some memo word.
    """
    memo_words = memo.lower().split()
    shared = [
        word for word in description.lower().split()
        if len(word) >= MIN_WORD_LENGTH
        and any(word in m or m in word for m in memo_words)
    ]
    return min(len(shared) * POINTS_PER_WORD, MAX_DESCRIPTION_POINTS)


class ReconciliationMatcher:
    """
    Finds the most likely journal entry for each bank transaction.

    Usage:
        matcher = ReconciliationMatcher()
        matches = matcher.match(transactions, entries)
        # {0: MatchCandidate(entry_id="je_001", confidence=70)}
    """

    def __init__(self, settings: Optional[ReconciliationSettings] = None):
        self._settings = settings or get_settings().reconciliation

    @property
    def settings(self) -> ReconciliationSettings:
        return self._settings

    def score(
        self,
        transaction: ParsedTransaction,
        entry: JournalEntry,
    ) -> Optional[int]:
        """
        Confidence that an entry records a transaction.

        Returns:
            Capped confidence, or None when the entry is not a candidate
            (amount gate failed or the entry has no debits)
        """
        entry_amount = entry.total_debit
        if entry_amount == 0:
            return None

        confidence = amount_points(transaction.amount, entry_amount)
        if confidence is None:
            return None

        days_apart = abs((transaction.date - entry.date).days)
        confidence += date_points(days_apart)
        confidence += description_points(transaction.description, entry.memo)

        return min(confidence, self._settings.max_confidence)

    def best_candidate(
        self,
        transaction: ParsedTransaction,
        entries: list[JournalEntry],
    ) -> Optional[MatchCandidate]:
        """Highest-scoring entry for one transaction, first one on ties."""
        best: Optional[MatchCandidate] = None
        for entry in entries:
            confidence = self.score(transaction, entry)
            if confidence is None:
                continue
            if best is None or confidence > best.confidence:
                best = MatchCandidate(entry_id=entry.id, confidence=confidence)
        return best

    def match(
        self,
        transactions: list[ParsedTransaction],
        entries: list[JournalEntry],
    ) -> dict[int, MatchCandidate]:
        """
        Best candidate per transaction index, at or above the suggestion
        threshold. Transactions without one are absent from the map.
        """
        if self._settings.exclusive_matching:
            matches = self._match_exclusive(transactions, entries)
        else:
            matches = {}
            for idx, transaction in enumerate(transactions):
                best = self.best_candidate(transaction, entries)
                if best is not None and best.confidence >= self._settings.suggestion_threshold:
                    matches[idx] = best

        logger.info(
            "reconciliation_matched",
            transactions=len(transactions),
            entries=len(entries),
            candidates=len(matches),
            auto_matched=sum(
                1 for m in matches.values()
                if m.confidence >= self._settings.auto_match_threshold
            ),
            exclusive=self._settings.exclusive_matching,
        )
        return matches

    def _match_exclusive(
        self,
        transactions: list[ParsedTransaction],
        entries: list[JournalEntry],
    ) -> dict[int, MatchCandidate]:
        """
        Greedy one-to-one assignment.

        Pairs are taken by descending confidence, then transaction
        index, then entry order. Each entry is used at most once.
        """
        pairs = []
        for tx_idx, transaction in enumerate(transactions):
            for entry_idx, entry in enumerate(entries):
                confidence = self.score(transaction, entry)
                if confidence is not None and confidence >= self._settings.suggestion_threshold:
                    pairs.append((-confidence, tx_idx, entry_idx))
        pairs.sort()

        matches: dict[int, MatchCandidate] = {}
        used_entries: set[int] = set()
        for neg_confidence, tx_idx, entry_idx in pairs:
            if tx_idx in matches or entry_idx in used_entries:
                continue
            matches[tx_idx] = MatchCandidate(
                entry_id=entries[entry_idx].id,
                confidence=-neg_confidence,
            )
            used_entries.add(entry_idx)

        return dict(sorted(matches.items()))
