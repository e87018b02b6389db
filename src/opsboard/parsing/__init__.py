"""Pasted-text departure import."""

from opsboard.parsing.departures import TABULATED_COLUMNS, convert_date, finalize, format_time, parse_departures
from opsboard.parsing.llm import LlmDepartureParser

__all__ = [
    "TABULATED_COLUMNS",
    "LlmDepartureParser",
    "convert_date",
    "finalize",
    "format_time",
    "parse_departures",
]
