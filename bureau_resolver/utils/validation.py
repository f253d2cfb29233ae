# bureau_resolver/utils/validation.py
"""
This module provides utilities for consistency checking of grouping results,
crucial for ensuring that every record lands in exactly one group.
"""

import logging
from collections import Counter
from typing import Iterable, Sequence

from ..models import AccountGroup, AccountRecord

# Set up a logger for this module.
logger = logging.getLogger(__name__)


def _find_duplicate_memberships(groups: Iterable[AccountGroup]) -> dict[str, int]:
    """
    Identifies record ids that were placed in more than one group.

    Args:
        groups: The groups to inspect.

    Returns:
        A mapping of record id -> number of groups it appears in, containing
        only the offending ids.
    """
    membership_counts = Counter(
        (account.bureau, account.id) for group in groups for account in group.accounts
    )
    return {
        f'{bureau.value}:{record_id}': count
        for (bureau, record_id), count in membership_counts.items()
        if count > 1
    }


def validate_partition(
    records: Sequence[AccountRecord],
    groups: Sequence[AccountGroup],
    context: str | None = None,
) -> bool:
    """
    Validates that the groups partition the records exactly.

    Every record must appear in exactly one group and no group may contain a
    record that was not in the input. Records are identified by bureau and id,
    since ids are only unique within a bureau.

    Args:
        records: The (deduplicated) records that were grouped.
        groups: The groups produced from them.
        context: Optional label for the pipeline stage, used only for clearer
                 log messages.

    Returns:
        True if validation passes, False otherwise.
    """
    phase = f' during {context}' if context else ''
    logger.info(f'Validating group partition of {len(records)} records{phase}...')

    duplicates = _find_duplicate_memberships(groups)
    if duplicates:
        logger.error(
            f'VALIDATION FAILED{phase}: {len(duplicates)} records appear in multiple groups!'
        )
        # Log the first few examples for quick debugging.
        for record_key, group_count in list(duplicates.items())[:5]:
            logger.error(f"  '{record_key}' appears in {group_count} different groups.")
        return False

    expected = {(r.bureau, r.id) for r in records}
    grouped = {(a.bureau, a.id) for g in groups for a in g.accounts}

    missing = expected - grouped
    if missing:
        logger.error(f'VALIDATION FAILED{phase}: {len(missing)} records were not grouped.')
        return False

    unexpected = grouped - expected
    if unexpected:
        logger.error(
            f'VALIDATION FAILED{phase}: {len(unexpected)} grouped records were not in the input.'
        )
        return False

    logger.info(f'Validation PASSED{phase}: every record belongs to exactly one group.')
    return True
