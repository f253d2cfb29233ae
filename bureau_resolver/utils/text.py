# bureau_resolver/utils/text.py
"""
Core text processing utilities for the reconciliation engine.

Three different name keys are used, one per matching problem:

1.  **Creditor keys** (`clean_creditor_name`): lowercase alphanumerics and
    spaces, the input to the alias-table normalizer used for tradelines.
2.  **Company keys** (`normalize_company_name`): upper-cased, punctuation and
    spaces removed, common corporate noise tokens deleted. Used to decide
    whether two inquiries belong to one application.
3.  **Issuer keys** (`normalize_issuer_name`): a looser key used to compare a
    reconciled account with the cards in the user's wallet.

The keys are intentionally not interchangeable; each reproduces the behaviour
its consumer was tuned against.
"""

import re
from typing import Iterable, Pattern

_NON_CREDITOR_CHARS = re.compile(r'[^a-z0-9\s]')
_NON_UPPER_ALNUM = re.compile(r'[^A-Z0-9]')
_NON_LOWER_ALNUM = re.compile(r'[^a-z0-9]')

# Noise words dropped from issuer names before wallet matching, together with
# the whitespace around them. Not anchored to word boundaries.
_ISSUER_NOISE = re.compile(
    r'\s*(bank|card|cards|credit|cbna|na|n\.a\.|financial|services|usa|corp|inc|llc|consumer|group)\s*'
)


def clean_creditor_name(name: str | None) -> str:
    """Lowercases a creditor name and keeps only letters, digits and whitespace."""
    if not name:
        return ''
    return _NON_CREDITOR_CHARS.sub('', name.lower()).strip()


def compile_noise_pattern(tokens: Iterable[str]) -> Pattern[str]:
    """
    Builds the alternation used to strip corporate noise from company names.

    Tokens are tried in the given order at every position, exactly like a
    regex alternation, so earlier tokens shadow later ones that share a prefix.
    """
    alternation = '|'.join(re.escape(token) for token in tokens)
    return re.compile(f'({alternation})')


def normalize_company_name(name: str | None, noise_pattern: Pattern[str]) -> str:
    """
    Produces the comparison key for an inquiry's company name.

    Example: "Capital One Bank USA, N.A." -> "CAPITALONE".
    """
    if not name:
        return ''
    compact = _NON_UPPER_ALNUM.sub('', name.upper())
    return noise_pattern.sub('', compact).strip()


def normalize_issuer_name(name: str | None) -> str:
    """Produces the loose issuer key used for wallet card matching."""
    if not name:
        return ''
    without_noise = _ISSUER_NOISE.sub(' ', name.lower())
    return _NON_LOWER_ALNUM.sub('', without_noise).strip()
