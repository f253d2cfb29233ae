# bureau_resolver/normalizer.py
"""
CreditorNormalizer module for canonicalizing creditor and issuer names.

Bureaus spell the same issuer differently ("AMEX", "AMERICAN EXPRESS",
"JPMCB CARD SERVICES" for Chase). This module maps those spellings onto one
canonical name through an ordered alias table so names can be compared
across bureaus.
"""

import logging
from typing import Dict, List, Optional, Tuple

# Local Package Imports
from .config import NormalizationConfig
from .utils import clean_creditor_name

# Set up module-level logger
logger = logging.getLogger(__name__)


class CreditorNormalizer:
    """
    Canonicalize free-text creditor names via an alias table.

    Lookup runs in two passes over the cleaned name (lowercase letters,
    digits and spaces):

    1. Exact match against an alias key.
    2. The first alias, in table order, that is contained in the name or
       that contains the name.

    A name matching no alias is its own canonical form.

    Attributes:
        config (NormalizationConfig): Configuration holding the alias table
        _alias_pairs (List): Alias table in lookup order
        _exact_aliases (Dict): Alias -> canonical map for the exact pass
    """

    def __init__(self, config: Optional[NormalizationConfig] = None):
        """
        Initialize the CreditorNormalizer.

        Args:
            config: NormalizationConfig holding the ordered alias table. The
                    default table is used when omitted.
        """
        self.config = config if config is not None else NormalizationConfig()

        # The list keeps table order for the containment pass; the dict is only
        # an index for the exact pass.
        self._alias_pairs: List[Tuple[str, str]] = list(self.config.creditor_aliases)
        self._exact_aliases: Dict[str, str] = dict(self._alias_pairs)

        logger.debug(f"Initialized CreditorNormalizer with {len(self._alias_pairs)} aliases")

    def normalize(self, name: Optional[str]) -> str:
        """
        Return the canonical form of a creditor name.

        Args:
            name: Raw creditor name as reported, or None.

        Returns:
            The canonical name, the cleaned name when no alias applies, or an
            empty string for missing input.
        """
        cleaned = clean_creditor_name(name)
        # A name made only of punctuation cleans to '' and would otherwise be
        # "contained" in every alias.
        if not cleaned:
            return ''

        canonical = self._exact_aliases.get(cleaned)
        if canonical is not None:
            return canonical

        for alias, canonical in self._alias_pairs:
            if alias in cleaned or cleaned in alias:
                return canonical

        return cleaned


# Shared read-only instance behind the module-level helper.
_DEFAULT_NORMALIZER = CreditorNormalizer()


def normalize_creditor_name(name: Optional[str]) -> str:
    """Normalize a creditor name with the default alias table."""
    return _DEFAULT_NORMALIZER.normalize(name)
