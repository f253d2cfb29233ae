# bureau_resolver/scorer.py
"""
This module defines the MatchScorer class, responsible for calculating the
compatibility score between two tradelines reported by different bureaus.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

# --- Local Package Imports ---
from .config import GroupingConfig, ScoringConfig
from .models import AccountRecord
from .normalizer import CreditorNormalizer
from .utils import extract_first6, extract_last4

# Set up a logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchBreakdown:
    """Points awarded by each signal for one pair of records."""

    date_opened: int = 0
    credit_limit: int = 0
    balance: int = 0
    creditor_name: int = 0
    last4: int = 0
    first6: int = 0
    loan_type: int = 0
    status: int = 0
    matched: bool = False

    @property
    def total(self) -> int:
        return (
            self.date_opened
            + self.credit_limit
            + self.balance
            + self.creditor_name
            + self.last4
            + self.first6
            + self.loan_type
            + self.status
        )

    def to_dict(self) -> dict:
        result = asdict(self)
        result['total'] = self.total
        return result


class MatchScorer:
    """
    Scores how likely two records from different bureaus describe one account.

    The score is a sum of independent, non-negative signal bonuses. Missing
    data on either side withholds a signal rather than penalizing the pair,
    and records from the same bureau always score 0.
    """

    def __init__(
        self,
        scoring_config: ScoringConfig,
        grouping_config: GroupingConfig,
        normalizer: CreditorNormalizer,
    ):
        """
        Initializes the MatchScorer.

        Args:
            scoring_config: Signal weights and balance tolerance.
            grouping_config: Provides the match threshold for `breakdown`.
            normalizer: Normalizer used for the creditor name signal.
        """
        self.scoring_config = scoring_config
        self.grouping_config = grouping_config
        self.normalizer = normalizer

    def score(self, a: AccountRecord, b: AccountRecord) -> int:
        """Returns the total match score of two records."""
        if a.bureau == b.bureau:
            return 0
        return self._compute(a, b).total

    def breakdown(self, a: AccountRecord, b: AccountRecord) -> MatchBreakdown:
        """Returns the per-signal points of two records and whether they match."""
        if a.bureau == b.bureau:
            return MatchBreakdown()
        return self._compute(a, b)

    def balances_agree(self, a: Optional[int], b: Optional[int]) -> bool:
        """
        Checks whether two balances are within the relative tolerance.

        Zero balances carry no information (every paid-off card reports zero),
        so they never count as agreeing. The ratio is taken over the signed
        average: two credit balances (negative average) always agree. A zero
        average is guarded explicitly.
        """
        if not a or not b:
            return False
        average = (a + b) / 2
        if average == 0:
            return False
        return abs(a - b) / average < self.scoring_config.balance_tolerance

    def _compute(self, a: AccountRecord, b: AccountRecord) -> MatchBreakdown:
        """Computes every signal for a cross-bureau pair."""
        weights = self.scoring_config.weights

        # --- Dates and amounts: the signals bureaus report most consistently ---
        date_points = (
            weights.date_opened
            if a.date_opened and b.date_opened and a.date_opened == b.date_opened
            else 0
        )
        limit_points = (
            weights.credit_limit
            if a.credit_limit_cents
            and b.credit_limit_cents
            and a.credit_limit_cents == b.credit_limit_cents
            else 0
        )
        balance_points = (
            weights.balance if self.balances_agree(a.balance_cents, b.balance_cents) else 0
        )

        # --- Names ---
        name_a = self.normalizer.normalize(a.match_name)
        name_b = self.normalizer.normalize(b.match_name)
        name_points = weights.creditor_name if name_a and name_b and name_a == name_b else 0

        # --- Account number fragments ---
        last4_a = extract_last4(a.account_number_masked)
        last4_b = extract_last4(b.account_number_masked)
        last4_points = weights.last4 if last4_a and last4_b and last4_a == last4_b else 0

        first6_a = extract_first6(a.account_number_masked)
        first6_b = extract_first6(b.account_number_masked)
        first6_points = weights.first6 if first6_a and first6_b and first6_a == first6_b else 0

        # --- Categorical agreement, including both empty ---
        loan_type_points = weights.loan_type if a.loan_type == b.loan_type else 0
        status_points = weights.status if a.status == b.status else 0

        total = (
            date_points
            + limit_points
            + balance_points
            + name_points
            + last4_points
            + first6_points
            + loan_type_points
            + status_points
        )

        return MatchBreakdown(
            date_opened=date_points,
            credit_limit=limit_points,
            balance=balance_points,
            creditor_name=name_points,
            last4=last4_points,
            first6=first6_points,
            loan_type=loan_type_points,
            status=status_points,
            matched=total >= self.grouping_config.match_threshold,
        )
