"""Closing report services."""

from .aggregator import ClosingReport, ClosingTotals, DelivererReport, aggregate, format_km, format_money, merge_reports
from .filtering import ALL_COURIERS, filter_records, sort_newest_first
from .manifest import list_export_files, list_runs, resolve_export_file

__all__ = [
    "ALL_COURIERS",
    "ClosingReport",
    "ClosingTotals",
    "DelivererReport",
    "aggregate",
    "filter_records",
    "format_km",
    "format_money",
    "list_export_files",
    "list_runs",
    "merge_reports",
    "resolve_export_file",
    "sort_newest_first",
]
