"""Financial reports package."""

from contabil.reports.aggregator import ReportAggregator

__all__ = ["ReportAggregator"]
