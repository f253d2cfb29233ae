# bureau_resolver/utils/__init__.py
"""
Utility Package for the Reconciliation Engine.

This package consolidates the low-level, reusable helper functions of the
engine, organized into domain-specific modules. This `__init__.py` file
exposes the public functions from each module, allowing for clean and
convenient access, e.g., `from bureau_resolver.utils import extract_last4`.

Modules:
- identifiers: Last-four and BIN extraction from masked account numbers.
- text: Name keys for creditors, inquiry companies and wallet issuers.
- validation: Consistency checks on grouping results.
"""

# Account number fragments
from .identifiers import (
    extract_first6,
    extract_last4,
)

# Text processing
from .text import (
    clean_creditor_name,
    compile_noise_pattern,
    normalize_company_name,
    normalize_issuer_name,
)

# Validation
from .validation import validate_partition

# The public API of the 'utils' package.
__all__ = [
    # identifiers.py
    'extract_last4',
    'extract_first6',

    # text.py
    'clean_creditor_name',
    'compile_noise_pattern',
    'normalize_company_name',
    'normalize_issuer_name',

    # validation.py
    'validate_partition',
]
