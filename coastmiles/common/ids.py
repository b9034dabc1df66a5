"""Run identifier and slug helpers."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone

_SLUG_DISALLOWED = re.compile(r"[^\w\s$*_+~.()'\"!\-:@]+")
# Entries from the npm slugify char map for symbols and for letters that
# NFKD cannot reduce to ASCII.
_SLUG_CHAR_MAP = {
    "&": "and",
    "$": "dollar",
    "%": "percent",
    "<": "less",
    ">": "greater",
    "|": "or",
    "‘": "'",
    "’": "'",
    "‚": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    "©": "(c)",
    "®": "(r)",
    "€": "euro",
    "£": "pound",
    "¥": "yen",
    "¢": "cent",
    "Æ": "AE",
    "æ": "ae",
    "Ð": "D",
    "ð": "d",
    "Ø": "O",
    "ø": "o",
    "Þ": "TH",
    "þ": "th",
    "ß": "ss",
    "Đ": "D",
    "đ": "d",
    "Ħ": "H",
    "ħ": "h",
    "ı": "i",
    "Ł": "L",
    "ł": "l",
    "Œ": "OE",
    "œ": "oe",
}


def generate_run_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")


def slugify(value: str, replacement: str = "-") -> str:
    """Slug with the same defaults as the npm ``slugify`` package.

    Symbols and non-decomposable letters are spelled out from the char map,
    remaining accents are transliterated to ASCII, characters outside the
    permitted set are dropped and runs of whitespace or ``replacement``
    collapse to one ``replacement``. Case is kept.
    """
    out = []
    for ch in value:
        ch = _SLUG_CHAR_MAP.get(ch, ch)
        if ch == replacement:
            ch = " "
        ch = unicodedata.normalize("NFKD", ch).encode("ascii", "ignore").decode("ascii")
        out.append(_SLUG_DISALLOWED.sub("", ch))
    collapse = re.compile(rf"[\s{re.escape(replacement)}]+")
    return collapse.sub(replacement, "".join(out).strip())
