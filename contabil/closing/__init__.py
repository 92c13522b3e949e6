"""Month close package."""

from contabil.closing.service import MonthCloseError, MonthCloseService

__all__ = ["MonthCloseError", "MonthCloseService"]
