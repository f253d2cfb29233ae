# bureau_resolver/deduplicator.py
"""
This module defines the BureauDeduplicator class, which collapses records
that a single bureau reported more than once (for example across repeated
pulls) before any cross-bureau matching happens.
"""

import logging
from typing import Dict, Iterable, List, Tuple

# --- Local Package Imports ---
from .models import AccountRecord, Bureau
from .normalizer import CreditorNormalizer
from .utils import extract_last4

# Set up a logger for this module
logger = logging.getLogger(__name__)

DedupeKey = Tuple[Bureau, str, str, str]


def completeness_score(record: AccountRecord) -> int:
    """Counts how many of limit, balance and last-update date a record carries."""
    return (
        (1 if record.credit_limit_cents else 0)
        + (1 if record.balance_cents else 0)
        + (1 if record.date_updated else 0)
    )


class BureauDeduplicator:
    """
    Collapses duplicate records reported by the same bureau.

    Two records are duplicates when they share bureau, normalized creditor,
    account identifier (last four digits, else the raw mask) and open date.
    The survivor is the record carrying the most data; on a tie the first
    one seen is kept.
    """

    def __init__(self, normalizer: CreditorNormalizer):
        """
        Initializes the BureauDeduplicator.

        Args:
            normalizer: Normalizer used to build the creditor part of the key.
        """
        self.normalizer = normalizer

    def build_key(self, record: AccountRecord) -> DedupeKey:
        """Builds the composite key identifying one account within one bureau."""
        creditor = self.normalizer.normalize(record.match_name)
        last4 = extract_last4(record.account_number_masked)
        if last4 is None:
            last4 = record.account_number_masked or ''
        return (record.bureau, creditor, last4, record.date_opened or '')

    def dedupe(self, records: Iterable[AccountRecord]) -> List[AccountRecord]:
        """
        Keeps one record per composite key.

        Args:
            records: Records from any number of bureaus.

        Returns:
            The surviving records, in first-seen key order. Callers must not
            depend on this order; the grouper re-sorts its input.
        """
        survivors: Dict[DedupeKey, AccountRecord] = {}
        total = 0

        for record in records:
            total += 1
            key = self.build_key(record)
            existing = survivors.get(key)
            if existing is None:
                survivors[key] = record
            elif completeness_score(record) > completeness_score(existing):
                logger.debug(
                    f"Replacing {existing.bureau.value} record {existing.id} with more complete {record.id}"
                )
                # Reassignment keeps the key's original position in the dict.
                survivors[key] = record

        deduped = list(survivors.values())
        removed = total - len(deduped)
        if removed:
            logger.info(f"Removed {removed} intra-bureau duplicates from {total} records.")
        else:
            logger.debug(f"No intra-bureau duplicates among {total} records.")
        return deduped
