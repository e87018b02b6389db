"""Canonical lookup keys for human column labels."""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(label: str | None) -> str:
    """Lower-case *label*, strip diacritics and drop everything but ``[a-z0-9]``.

    ``normalize("Célula Ativa?") == "celulaativa"``. Idempotent; ``None`` and
    empty input yield ``""``.
    """
    if not label:
        return ""
    decomposed = unicodedata.normalize("NFD", str(label).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped).strip()
