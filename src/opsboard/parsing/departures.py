"""Recover route departures from text pasted out of a spreadsheet.

The parser is pure: no network, no clock, no randomness. Unusable lines are
dropped or folded into the previous record, never raised.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date

from opsboard.contracts.records import ZERO_TIME, ParsedDeparture

_LOG = logging.getLogger(__name__)

_DATE_TOKEN = re.compile(r"(?<!\d)(\d{2})[/-](\d{2})[/-](\d{4})(?!\d)")
_ISO_DATE_TOKEN = re.compile(r"(?<!\d)(\d{4})[/-](\d{2})[/-](\d{2})(?!\d)")
_TIME_TOKEN = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?::(\d{2}))?(?![\d:])")

# Positional columns of a row copied straight from the spreadsheet.
TABULATED_COLUMNS = ("rota", "data", "inicio", "motorista", "placa", "saida", "motivo", "observacao", "operacao")
_TIME_COLUMNS = frozenset({"inicio", "saida"})


def convert_date(text: str | None) -> str:
    """Return ``YYYY-MM-DD`` for a ``DD/MM/YYYY``, ``DD-MM-YYYY`` or ISO date; ``""`` otherwise."""
    if not text:
        return ""
    match = _DATE_TOKEN.search(text)
    if match:
        day, month, year = match.groups()
    else:
        iso = _ISO_DATE_TOKEN.search(text)
        if iso is None:
            return ""
        year, month, day = iso.groups()
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return ""


def format_time(text: str | None) -> str:
    """Return the first ``H:MM[:SS]`` token of *text* as ``HH:MM:SS``."""
    if not text:
        return ZERO_TIME
    match = _TIME_TOKEN.search(text)
    if match is None:
        return ZERO_TIME
    hours, minutes, seconds = match.groups()
    return f"{int(hours):02d}:{minutes}:{seconds or '00'}"


def _parse_tabulated(cells: list[str]) -> dict[str, str]:
    cells = [cell.strip() for cell in cells]
    cells += [""] * (len(TABULATED_COLUMNS) - len(cells))
    record = dict(zip(TABULATED_COLUMNS, cells))
    record["data"] = convert_date(record["data"])
    for column in _TIME_COLUMNS:
        record[column] = format_time(record[column])
    return record


def _parse_heuristic(line: str, match: re.Match[str]) -> dict[str, str]:
    route = line[: match.start()].strip()
    after = line[match.end() :].strip()
    times = [token.group(0) for token in _TIME_TOKEN.finditer(after)][:2]
    words = [word for word in after.split() if not _TIME_TOKEN.search(word)]
    return {
        "rota": route,
        "data": convert_date(match.group(0)),
        "inicio": format_time(times[0] if times else None),
        "motorista": " ".join(words[:-1]),
        "placa": words[-1] if words else "",
        "saida": format_time(times[1] if len(times) > 1 else None),
        "motivo": "",
        "observacao": "",
        "operacao": "",
    }


def parse_departures(text: str | None) -> list[ParsedDeparture]:
    """Parse pasted rows into partial departures.

    Dated lines open a record (tab-separated when they have three or more
    cells, otherwise segmented around the date). Undated lines are appended to
    the previous record's ``observacao``. Records without a route or a valid
    date are discarded.
    """
    records: list[dict[str, str]] = []
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        match = _DATE_TOKEN.search(line)
        if match is None:
            if records:
                last = records[-1]
                last["observacao"] = f"{last['observacao']} {' '.join(line.split())}".strip()
            continue
        cells = line.split("\t")
        if len(cells) >= 3:
            records.append(_parse_tabulated(cells))
        else:
            records.append(_parse_heuristic(line, match))
    return finalize(ParsedDeparture(**record) for record in records)


def finalize(records: Iterable[ParsedDeparture]) -> list[ParsedDeparture]:
    """Apply the shared defaulting rules and drop records missing a route or date."""
    kept: list[ParsedDeparture] = []
    for record in records:
        cleaned = record.model_copy(
            update={
                "rota": record.rota.strip(),
                "data": convert_date(record.data),
                "inicio": format_time(record.inicio),
                "saida": format_time(record.saida),
                "motorista": record.motorista.strip(),
                "placa": record.placa.strip(),
                "operacao": record.operacao.strip(),
            }
        )
        if not cleaned.rota or not cleaned.data:
            _LOG.debug("Dropping parsed row without route or date: %r", record.rota)
            continue
        kept.append(cleaned)
    return kept
