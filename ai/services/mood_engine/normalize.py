# -*- coding: utf-8 -*-
"""Accent folding for keyword matching (DE/EN).

Not a Unicode collation: only the fixed table below is folded, so that
"glücklich" and "gluecklich" hit the same keyword.
"""

from __future__ import annotations

import re
from typing import Optional

_FOLD_TABLE = {
    "ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss",
    "á": "a", "à": "a", "â": "a",
    "é": "e", "è": "e", "ê": "e",
    "í": "i", "ì": "i", "î": "i",
    "ó": "o", "ò": "o", "ô": "o",
    "ú": "u", "ù": "u", "û": "u",
}
_FOLD = str.maketrans(_FOLD_TABLE)

_WS = re.compile(r"\s+")


def fold_diacritics(text: str) -> str:
    # case is left alone; callers lowercase first
    return text.translate(_FOLD)


def normalize_keyword(text: str) -> str:
    return fold_diacritics(text.lower())


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim, squeeze whitespace runs to one space and lowercase. None -> ""."""
    if text is None:
        return ""
    t = text.strip()
    if not t:
        return ""
    return _WS.sub(" ", t).lower()
