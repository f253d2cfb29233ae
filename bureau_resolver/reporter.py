# bureau_resolver/reporter.py
"""
This module defines the ResolutionReporter class, which is responsible for
generating human-readable reports, summary DataFrames and derived credit
metrics from the results of account resolution.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

# --- Local Package Imports ---
from .config import ResolverConfig
from .models import AccountGroup, AccountRecord, Bureau
from .refiner import CLOSED_STATUS, OPEN_STATUS, get_account_for_bureau
from .scorer import MatchScorer

# Set up a logger for this module
logger = logging.getLogger(__name__)

REVOLVING_ACCOUNT_TYPE = 'revolving'
AUTHORIZED_USER = 'authorized_user'


@dataclass
class CreditInsights:
    """Portfolio-level metrics over reconciled account groups. Amounts are cents."""

    total_credit_limit_cents: int = 0
    total_balance_cents: int = 0
    utilization_percent: float = 0.0
    average_age_months: float = 0.0
    oldest_group_id: Optional[str] = None
    oldest_group_name: Optional[str] = None
    oldest_date_opened: Optional[str] = None
    open_count: int = 0
    closed_count: int = 0
    per_bureau_open_count: Dict[Bureau, int] = field(default_factory=dict)


def max_utilization(group: AccountGroup) -> float:
    """Highest balance/limit percentage over members with a limit and a non-zero balance."""
    highest = 0.0
    for account in group.accounts:
        if account.credit_limit_cents and account.credit_limit_cents > 0 and account.balance_cents:
            highest = max(highest, account.balance_cents / account.credit_limit_cents * 100)
    return highest


def bureau_utilization(group: AccountGroup, bureau: Bureau) -> float:
    """
    Highest utilization percentage reported by one bureau.

    Returns -1 when the bureau does not report the group, and 0 when it
    reports only accounts without a usable limit (charge cards).
    """
    accounts = group.by_bureau.get(bureau)
    if not accounts:
        return -1.0

    highest = -1.0
    for account in accounts:
        if (
            account.credit_limit_cents
            and account.credit_limit_cents > 0
            and account.balance_cents is not None
        ):
            highest = max(highest, account.balance_cents / account.credit_limit_cents * 100)
        elif highest == -1.0:
            highest = 0.0
    return highest


def is_authorized_user(group: AccountGroup) -> bool:
    """True if any bureau reports the user as an authorized user on the account."""
    return any(account.responsibility == AUTHORIZED_USER for account in group.accounts)


def _months_between(start: pd.Timestamp, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def _check_groups(groups: Any) -> None:
    if not isinstance(groups, (list, tuple)):
        raise TypeError(f'groups must be a list of AccountGroup, not {type(groups).__name__}')
    for group in groups:
        if not isinstance(group, AccountGroup):
            raise TypeError(f'groups must contain AccountGroup objects, found {type(group).__name__}')


class ResolutionReporter:
    """
    Generates reports, review frames and credit metrics from resolved groups.

    This class is stateless; it takes the groups produced by the resolver and
    transforms them into formats suitable for analysis and review.
    """

    def __init__(self, config: ResolverConfig, scorer: MatchScorer):
        """
        Initializes the ResolutionReporter.

        Args:
            config: The main ResolverConfig object.
            scorer: The MatchScorer used for pair breakdowns in debug output.
        """
        self.config = config
        self.scorer = scorer

    def get_review_dataframe(self, groups: Sequence[AccountGroup]) -> pd.DataFrame:
        """
        Generates a summary DataFrame with one row per account group.

        Args:
            groups: Resolved account groups, in display order.

        Returns:
            A pandas DataFrame with the group's identity, its bureaus, the
            limit and balance each bureau reports, and its max utilization.
        """
        _check_groups(groups)

        columns = ['group_id', 'display_name', 'status', 'loan_type', 'date_opened',
                   'account_count', 'bureaus', 'authorized_user']
        for bureau in Bureau:
            columns += [f'{bureau.value}_limit_cents', f'{bureau.value}_balance_cents']
        columns.append('max_utilization')

        if not groups:
            logger.warning("No groups given; returning an empty review DataFrame.")
            return pd.DataFrame(columns=columns)

        logger.info("Generating review DataFrame...")

        rows = []
        for group in groups:
            row = {
                'group_id': group.id,
                'display_name': group.display_name,
                'status': group.status,
                'loan_type': group.loan_type,
                'date_opened': group.date_opened,
                'account_count': len(group.accounts),
                'bureaus': ', '.join(b.value for b in group.bureaus),
                'authorized_user': is_authorized_user(group),
            }
            for bureau in Bureau:
                account = get_account_for_bureau(group, bureau)
                row[f'{bureau.value}_limit_cents'] = account.credit_limit_cents if account else None
                row[f'{bureau.value}_balance_cents'] = account.balance_cents if account else None
            row['max_utilization'] = max_utilization(group)
            rows.append(row)

        review_df = pd.DataFrame(rows, columns=columns)

        # Nullable integers keep cents exact when some bureaus are missing.
        cents_cols = [c for c in columns if c.endswith('_cents')]
        review_df[cents_cols] = review_df[cents_cols].astype('Int64')

        logger.info(f"Review DataFrame has {len(review_df)} rows.")
        return review_df

    def get_matching_debug_info(self, groups: Sequence[AccountGroup]) -> List[Dict[str, Any]]:
        """
        Explains every group: its members and the score of each cross-bureau pair.

        Args:
            groups: Resolved account groups.

        Returns:
            One dict per group with a summary of each member and a
            `match_scores` list holding a breakdown for every pair of members
            from different bureaus.
        """
        _check_groups(groups)

        debug_info = []
        for group in groups:
            match_scores = []
            for i, a in enumerate(group.accounts):
                for b in group.accounts[i + 1:]:
                    if a.bureau == b.bureau:
                        continue
                    breakdown = self.scorer.breakdown(a, b)
                    match_scores.append({
                        'account1': self._summarize_account(a),
                        'account2': self._summarize_account(b),
                        'score': breakdown.total,
                        'breakdown': breakdown.to_dict(),
                        'matched': breakdown.matched,
                    })

            debug_info.append({
                'group_id': group.id,
                'display_name': group.display_name,
                'account_count': len(group.accounts),
                'bureaus': list(group.by_bureau),
                'date_opened': group.date_opened,
                'status': group.status,
                'loan_type': group.loan_type,
                'accounts': [self._summarize_account(a) for a in group.accounts],
                'match_scores': match_scores,
            })
        return debug_info

    @staticmethod
    def _summarize_account(account: AccountRecord) -> Dict[str, Any]:
        return {
            'id': account.id,
            'bureau': account.bureau,
            'creditor': account.match_name,
            'masked': account.account_number_masked,
            'date_opened': account.date_opened,
            'limit': account.credit_limit_cents,
            'balance': account.balance_cents,
        }

    def calculate_credit_insights(
        self, groups: Sequence[AccountGroup], as_of: Optional[date] = None
    ) -> CreditInsights:
        """
        Derives portfolio metrics from reconciled groups.

        Utilization counts each open group once: its limit is the largest
        limit any revolving member reports and its balance is the last
        reported revolving balance.

        Args:
            groups: Resolved account groups.
            as_of: Reference date for account ages. Defaults to today.

        Returns:
            A populated CreditInsights.
        """
        _check_groups(groups)
        as_of = as_of or date.today()

        open_groups = [g for g in groups if g.status == OPEN_STATUS]
        insights = CreditInsights(
            open_count=len(open_groups),
            closed_count=sum(1 for g in groups if g.status == CLOSED_STATUS),
            per_bureau_open_count={
                bureau: sum(1 for g in open_groups if bureau in g.by_bureau) for bureau in Bureau
            },
        )

        # --- Utilization ---
        for group in open_groups:
            revolving = [a for a in group.accounts if a.account_type == REVOLVING_ACCOUNT_TYPE]
            if not revolving:
                continue

            group_limit = 0
            group_balance = 0
            for account in revolving:
                if account.credit_limit_cents and account.credit_limit_cents > group_limit:
                    group_limit = account.credit_limit_cents
                if account.balance_cents is not None:
                    group_balance = account.balance_cents

            insights.total_credit_limit_cents += group_limit
            insights.total_balance_cents += group_balance

        if insights.total_credit_limit_cents > 0:
            insights.utilization_percent = (
                insights.total_balance_cents / insights.total_credit_limit_cents * 100
            )

        # --- Age ---
        ages = []
        oldest = None
        for group in open_groups:
            if not group.date_opened:
                continue
            opened = pd.to_datetime(group.date_opened, errors='coerce', utc=True)
            if pd.isna(opened):
                logger.warning(
                    f"Group {group.id} has an unparseable open date '{group.date_opened}'; "
                    f"excluded from account age."
                )
                continue
            ages.append(_months_between(opened, as_of))
            if oldest is None or opened < oldest[0]:
                oldest = (opened, group)

        if ages:
            insights.average_age_months = sum(ages) / len(ages)
        if oldest is not None:
            insights.oldest_group_id = oldest[1].id
            insights.oldest_group_name = oldest[1].display_name
            insights.oldest_date_opened = oldest[1].date_opened

        logger.debug(
            f"Credit insights: utilization {insights.utilization_percent:.1f}% over "
            f"{insights.open_count} open groups"
        )
        return insights

    def generate_report(
        self, records: Sequence[AccountRecord], groups: Sequence[AccountGroup],
        deduped_count: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Generates a dictionary of statistics about an account resolution run.

        Args:
            records: The records that were passed to the resolver.
            groups: The groups it produced.
            deduped_count: Number of records left after intra-bureau
                           deduplication. Defaults to the grouped member count.

        Returns:
            A dictionary with a 'summary' and a 'group_details' section.
        """
        _check_groups(groups)
        logger.info("Generating resolution report...")

        grouped_members = sum(len(g.accounts) for g in groups)
        if deduped_count is None:
            deduped_count = grouped_members

        bureau_counts = pd.Series(
            [len(g.by_bureau) for g in groups], dtype='int64'
        ).value_counts().to_dict()

        report_dict = {
            'summary': {
                'records_in': len(records),
                'records_after_dedup': deduped_count,
                'account_groups': len(groups),
                'reduction_rate': 1 - (len(groups) / max(len(records), 1)),
            },
            'group_details': {
                'multi_bureau_groups': sum(1 for g in groups if len(g.by_bureau) > 1),
                'singleton_groups': sum(1 for g in groups if len(g.accounts) == 1),
                'open_groups': sum(1 for g in groups if g.status == OPEN_STATUS),
                'closed_groups': sum(1 for g in groups if g.status == CLOSED_STATUS),
            },
            'bureau_coverage': {int(k): int(v) for k, v in sorted(bureau_counts.items())},
        }

        self._log_report(report_dict)
        return report_dict

    def _log_report(self, report_dict: Dict[str, Any]) -> None:
        """Formats and logs the generated report dictionary."""
        logger.info("--- Resolution Report ---")
        for key, val in report_dict['summary'].items():
            val_str = f"{val:.2%}" if 'rate' in key else str(val)
            logger.info(f"{key.replace('_', ' ').title():<28}: {val_str}")

        logger.info("\n--- Group Details ---")
        for key, val in report_dict['group_details'].items():
            logger.info(f"{key.replace('_', ' ').title():<28}: {val}")

        if report_dict['bureau_coverage']:
            logger.info("\n--- Bureau Coverage ---")
            for bureau_count, group_count in report_dict['bureau_coverage'].items():
                label = f"Reported By {bureau_count} Bureau{'s' if bureau_count != 1 else ''}"
                logger.info(f"{label:<28}: {group_count}")
