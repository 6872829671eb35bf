"""Utility functions for the Mahallu bank ledger."""

from mahallu.utils.date_parser import parse_date
from mahallu.utils.amount_parser import parse_amount
from mahallu.utils.phone import normalize_phone

__all__ = ["parse_date", "parse_amount", "normalize_phone"]
