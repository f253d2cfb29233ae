# bureau_resolver/refiner.py
"""
This module defines the GroupRefiner class, which is responsible for the
final stage of account resolution: reconciling each group's status across
bureaus and ordering the groups for presentation.

It also provides the read-only accessors callers use to pick a single
representative record out of a group:
- `get_best_account`: the most complete record overall.
- `get_account_for_bureau`: the most complete record from one bureau.
- `get_bureaus_for_group`: the bureaus reporting the group.
"""

import logging
from typing import List, Optional

# --- Local Package Imports ---
from .config import GroupingConfig
from .models import AccountGroup, AccountRecord, Bureau

# Set up a logger for this module
logger = logging.getLogger(__name__)

CLOSED_STATUS = 'closed'
OPEN_STATUS = 'open'


class GroupRefiner:
    """
    Reconciles and orders account groups.

    1. **Reconciles Status**: a group is closed when any bureau reports any
       member as closed. Bureaus lag each other, so one closed report is taken
       as authoritative.

    2. **Orders Groups**: open groups first, then newest open date first.
       Groups without an open date sort last within their tier.
    """

    def __init__(self, config: GroupingConfig):
        """
        Initializes the GroupRefiner.

        Args:
            config: GroupingConfig providing the missing-date display key.
        """
        self.config = config

    def refine(self, groups: List[AccountGroup]) -> List[AccountGroup]:
        """
        Applies status reconciliation and returns the groups in display order.

        Args:
            groups: Groups as produced by the CrossBureauClusterer. Their
                    status fields are updated in place.

        Returns:
            A new list holding the same groups, sorted for display.
        """
        closed_count = 0
        for group in groups:
            if group.status != CLOSED_STATUS and any(
                account.status == CLOSED_STATUS for account in group.accounts
            ):
                logger.debug(
                    f"Group {group.id} ('{group.display_name}') marked closed; "
                    f"a member reports closed while the seed reported '{group.status}'"
                )
                group.status = CLOSED_STATUS
                closed_count += 1

        if closed_count:
            logger.info(f"Reconciled {closed_count} groups to closed status.")

        return self.sort_groups(groups)

    def sort_groups(self, groups: List[AccountGroup]) -> List[AccountGroup]:
        """Sorts groups open first, then by open date newest first."""
        missing = self.config.missing_date_display_key

        # Two stable passes: date descending, then the open tier.
        by_date = sorted(groups, key=lambda g: g.date_opened or missing, reverse=True)
        return sorted(by_date, key=lambda g: 0 if g.status == OPEN_STATUS else 1)


def _bureau_completeness(account: AccountRecord) -> int:
    return (1 if account.credit_limit_cents else 0) + (1 if account.balance_cents else 0)


def _overall_completeness(account: AccountRecord) -> int:
    return (
        (1 if account.creditor_name else 0)
        + (2 if account.credit_limit_cents else 0)
        + (2 if account.balance_cents else 0)
        + (1 if account.date_opened else 0)
        + (1 if account.date_updated else 0)
    )


def get_best_account(group: AccountGroup) -> AccountRecord:
    """
    Returns the most complete member of a group.

    Amounts count double. The first member wins ties, including the case where
    no member carries any of the scored fields.
    """
    best = group.accounts[0]
    best_score = 0
    for account in group.accounts:
        score = _overall_completeness(account)
        if score > best_score:
            best_score = score
            best = account
    return best


def get_account_for_bureau(group: AccountGroup, bureau: Bureau) -> Optional[AccountRecord]:
    """Returns the member from `bureau` carrying the most amounts, or None."""
    accounts = group.by_bureau.get(bureau)
    if not accounts:
        return None

    best = accounts[0]
    for account in accounts[1:]:
        if _bureau_completeness(account) > _bureau_completeness(best):
            best = account
    return best


def get_bureaus_for_group(group: AccountGroup) -> List[Bureau]:
    """Returns the bureaus reporting a group, in alphabetical order."""
    return group.bureaus
