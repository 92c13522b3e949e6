"""Journal posting package."""

from contabil.journal.service import JournalService

__all__ = ["JournalService"]
