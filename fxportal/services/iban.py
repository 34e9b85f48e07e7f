"""IBAN validation (ISO 13616 structure, ISO 7064 MOD-97-10 checksum).

Pure and offline. ``is_valid_iban`` only has an opinion on non-empty input:
it returns False for an empty string, and callers that treat an empty field
as "not yet filled" (the payment form does) must check for emptiness first.
"""

from __future__ import annotations

import re
from typing import Dict

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{1,30}$")
_WHITESPACE_RE = re.compile(r"\s+")

# Country code -> total IBAN length (ISO 13616 registry)
IBAN_LENGTHS: Dict[str, int] = {
    "AD": 24, "AE": 23, "AL": 28, "AT": 20, "AZ": 28, "BA": 20, "BE": 16,
    "BG": 22, "BH": 22, "BI": 27, "BR": 29, "BY": 28, "CH": 21, "CR": 22,
    "CY": 28, "CZ": 24, "DE": 22, "DJ": 27, "DK": 18, "DO": 28, "EE": 20,
    "EG": 29, "ES": 24, "FI": 18, "FK": 18, "FO": 18, "FR": 27, "GB": 22,
    "GE": 22, "GI": 23, "GL": 18, "GR": 27, "GT": 28, "HN": 28, "HR": 21,
    "HU": 28, "IE": 22, "IL": 23, "IQ": 23, "IS": 26, "IT": 27, "JO": 30,
    "KW": 30, "KZ": 20, "LB": 28, "LC": 32, "LI": 21, "LT": 20, "LU": 20,
    "LV": 21, "LY": 25, "MC": 27, "MD": 24, "ME": 22, "MK": 19, "MN": 20,
    "MR": 27, "MT": 31, "MU": 30, "NI": 28, "NL": 18, "NO": 15, "OM": 23,
    "PK": 24, "PL": 28, "PS": 29, "PT": 25, "QA": 29, "RO": 24, "RS": 22,
    "RU": 33, "SA": 24, "SC": 31, "SD": 18, "SE": 24, "SI": 19, "SK": 24,
    "SM": 27, "SO": 23, "ST": 25, "SV": 28, "TL": 23, "TN": 24, "TR": 26,
    "UA": 29, "VA": 22, "VG": 24, "XK": 20, "YE": 30,
}


def normalize_iban(raw: str | None) -> str:
    """Remove all whitespace and upper-case."""
    return _WHITESPACE_RE.sub("", raw or "").upper()


def mod97(iban: str) -> int:
    """Remainder of the rearranged IBAN modulo 97.

    Folds one character at a time so the value never exceeds a few digits:
    digits shift the accumulator by one decimal place, letters (A=10 .. Z=35)
    by two.
    """
    rearranged = iban[4:] + iban[:4]
    acc = 0
    for ch in rearranged:
        if ch.isdigit():
            acc = (acc * 10 + int(ch)) % 97
        else:
            acc = (acc * 100 + ord(ch) - ord("A") + 10) % 97
    return acc


def is_valid_iban(raw: str | None) -> bool:
    """Validate an IBAN; case and whitespace are ignored."""
    iban = normalize_iban(raw)
    if not _IBAN_RE.match(iban):
        return False
    if IBAN_LENGTHS.get(iban[:2]) != len(iban):
        return False
    return mod97(iban) == 1
