# bureau_resolver/utils/identifiers.py
"""
Extraction of stable identifiers from masked account numbers.

Each bureau masks card numbers its own way:

    "xxxxxxxxxxxx 1234"   -> trailing digits visible
    "414709XXXXXX"        -> only the BIN (issuer prefix) visible
    "414709786075****"    -> BIN and middle digits visible, tail masked

The helpers here pull out the two fragments that survive across formats: the
last four visible digits and the six-digit BIN.
"""

import re

# Tried in order; the first pattern that matches wins. Digits are ASCII only.
_LAST4_PATTERNS = (
    # "xxxx 1234", "xxxx1234", "1234  "
    re.compile(r'(\d{4})\s*\Z', re.ASCII),
    # "414709786075****"
    re.compile(r'(\d{4})\*+\Z', re.ASCII),
    # "XXXX1234-", "XXXX1234 (closed)". X/x are mask letters, so "414709XXXXXX"
    # exposes a BIN, not a last four.
    re.compile(r'(\d{4})[^\dXx]*\Z', re.ASCII),
)

_FIRST6_PATTERN = re.compile(r'(\d{6})', re.ASCII)


def extract_last4(masked: str | None) -> str | None:
    """
    Returns the last four visible digits of a masked account number.

    Args:
        masked: The masked account number as reported, or None.

    Returns:
        A four-digit string, or None when no trailing digit run is visible.
    """
    if not masked:
        return None

    for pattern in _LAST4_PATTERNS:
        match = pattern.search(masked)
        if match:
            return match.group(1)
    return None


def extract_first6(masked: str | None) -> str | None:
    """Returns the six-digit BIN when the masked number starts with six digits."""
    if not masked:
        return None

    match = _FIRST6_PATTERN.match(masked)
    return match.group(1) if match else None
