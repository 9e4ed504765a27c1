"""Utility functions for sieledger."""

from sieledger.utils.date_parser import parse_date, parse_sie_date, month_range
from sieledger.utils.amount_parser import parse_amount, format_sek

__all__ = ["parse_date", "parse_sie_date", "month_range", "parse_amount", "format_sek"]
