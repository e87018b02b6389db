"""``HH:MM:SS`` duration arithmetic and tolerance classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from opsboard.contracts.records import ZERO_TIME

_NON_TIME_CHARS = re.compile(r"[^0-9:]")


class GapStatus(StrEnum):
    OK = "OK"
    LATE = "Atrasado"
    EARLY = "Adiantado"


@dataclass(frozen=True)
class GapResult:
    gap: str
    status: GapStatus
    out_of_tolerance: bool
    diff_seconds: int = 0


NEUTRAL_GAP = GapResult(gap="OK", status=GapStatus.OK, out_of_tolerance=False)


def time_to_seconds(value: str | None) -> int:
    """Parse ``H:M:S`` text into seconds; anything non-conforming yields 0.

    Missing parts count as zero and parts beyond the third are ignored.
    A leading ``-`` negates the result.
    """
    if not value or ":" not in value:
        return 0
    text = value.strip()
    sign = 1
    if text.startswith("-"):
        sign, text = -1, text[1:]
    parts = text.split(":")[:3]
    try:
        numbers = [int(part) if part else 0 for part in parts]
    except ValueError:
        return 0
    if any(number < 0 for number in numbers):
        return 0
    numbers += [0] * (3 - len(numbers))
    hours, minutes, seconds = numbers
    return sign * (hours * 3600 + minutes * 60 + seconds)


def seconds_to_time(total: int) -> str:
    magnitude = abs(int(total))
    hours, remainder = divmod(magnitude, 3600)
    minutes, seconds = divmod(remainder, 60)
    formatted = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"-{formatted}" if total < 0 else formatted


def is_unset(value: str | None) -> bool:
    return not value or not value.strip() or value.strip() == ZERO_TIME


def clock_time(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")


def compute_gap(
    start: str | None,
    end: str | None,
    tolerance: str | None = ZERO_TIME,
    *,
    live: bool = False,
    now: datetime | None = None,
) -> GapResult:
    """Signed gap from *start* to *end* classified against *tolerance*.

    With ``live=True`` an unset *end* is replaced by the current wall-clock
    time (or *now*), giving a running-late indicator for departures that have
    not left yet.
    """
    if live and is_unset(end) and not is_unset(start):
        end = clock_time(now or datetime.now())
    if is_unset(start) or is_unset(end):
        return NEUTRAL_GAP
    diff = time_to_seconds(end) - time_to_seconds(start)
    tolerance_seconds = abs(time_to_seconds(tolerance or ZERO_TIME))
    out_of_tolerance = abs(diff) > tolerance_seconds
    if not out_of_tolerance:
        status = GapStatus.OK
    elif diff > 0:
        status = GapStatus.LATE
    else:
        status = GapStatus.EARLY
    return GapResult(gap=seconds_to_time(diff), status=status, out_of_tolerance=out_of_tolerance, diff_seconds=diff)


def format_time_input(value: str | None) -> str:
    """Coerce free user input into ``HH:MM:SS`` (digits and colons only)."""
    clean = _NON_TIME_CHARS.sub("", value or "")
    if not clean:
        return ZERO_TIME
    parts = clean.split(":")
    padded = [(parts[index] if index < len(parts) and parts[index] else "00").zfill(2)[:2] for index in range(3)]
    return ":".join(padded)
