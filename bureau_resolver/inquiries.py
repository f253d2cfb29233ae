# bureau_resolver/inquiries.py
"""
Cross-bureau grouping of credit inquiries.

One credit application usually shows up as an inquiry on two or three
bureaus, with slightly different company names and dates a few days apart.
This module folds those inquiries into `InquiryGroup` objects:

1. Inquiries the user grouped by hand are reported as their persisted
   groups, unchanged.
2. Every other inquiry is auto-grouped in a single pass: each not-yet-placed
   inquiry seeds a group and pulls in every other unplaced inquiry that is
   close in date and has a similar company name.

The auto-grouping is not transitive. If B matches the seed A and C matches
only B, C is left for a later group. That behaviour is kept so results stay
stable for users who have already reviewed them.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import pandas as pd

# Local Package Imports
from .config import InquiryConfig
from .models import Bureau, InquiryGroup, InquiryGroupMetadata, InquiryRecord, WalletCard
from .utils import compile_noise_pattern, normalize_company_name

# Set up module-level logger
logger = logging.getLogger(__name__)

# (bureau, player_number) -> id of the newest snapshot pulled for that pair
SnapshotIndex = Mapping[Tuple[Bureau, int], str]

INQUIRY_FILTERS = ('all', 'hard', 'soft')

_SECONDS_PER_DAY = 60 * 60 * 24


def _days_between(date_a: str, date_b: str) -> Optional[float]:
    """
    Returns the absolute distance in days between two date strings.

    Returns None when either date cannot be parsed.
    """
    ts_a = pd.to_datetime(date_a, errors='coerce', utc=True)
    ts_b = pd.to_datetime(date_b, errors='coerce', utc=True)
    if pd.isna(ts_a) or pd.isna(ts_b):
        return None
    return abs((ts_a - ts_b).total_seconds()) / _SECONDS_PER_DAY


def is_inquiry_active(inquiry: InquiryRecord, latest_snapshot_ids: Optional[SnapshotIndex]) -> bool:
    """
    Checks whether an inquiry still appears on the newest report for its bureau.

    Without tracking data for the inquiry's bureau and player, or without a
    last-seen snapshot on the inquiry, the inquiry is assumed active.
    """
    if not latest_snapshot_ids:
        return True
    latest = latest_snapshot_ids.get((inquiry.bureau, inquiry.player_number))
    if not latest or not inquiry.last_seen_snapshot_id:
        return True
    return inquiry.last_seen_snapshot_id == latest


def is_soft_inquiry(inquiry_type: Optional[str], soft_types: Optional[Iterable[str]] = None) -> bool:
    """Checks whether an inquiry type denotes a soft pull. A missing type is hard."""
    if not inquiry_type:
        return False
    if soft_types is None:
        soft_types = InquiryConfig().soft_types
    return inquiry_type.lower() in set(soft_types)


class InquiryGrouper:
    """
    Builds inquiry groups from raw inquiries and the user's persisted groups.

    Attributes:
        config (InquiryConfig): Date window, name prefix rules and soft types
        noise_pattern (Pattern): Compiled company-name noise alternation
    """

    def __init__(self, config: Optional[InquiryConfig] = None):
        self.config = config if config is not None else InquiryConfig()
        self.noise_pattern = compile_noise_pattern(self.config.company_noise_tokens)
        self._soft_types: Set[str] = set(self.config.soft_types)

    def normalize_company_name(self, name: Optional[str]) -> str:
        """Returns the comparison key for a company name."""
        return normalize_company_name(name, self.noise_pattern)

    def names_match(self, name_a: str, name_b: str) -> bool:
        """
        Compares two normalized company names.

        Names of at least `min_name_length` characters match on a shared
        prefix of up to `prefix_length` characters; otherwise they must be
        identical.
        """
        min_length = self.config.min_name_length
        if len(name_a) >= min_length and len(name_b) >= min_length:
            prefix = min(len(name_a), len(name_b), self.config.prefix_length)
            if name_a[:prefix] == name_b[:prefix]:
                return True
        return name_a == name_b

    def should_auto_group(self, a: InquiryRecord, b: InquiryRecord) -> bool:
        """Decides whether two inquiries look like one application."""
        days = _days_between(a.inquiry_date, b.inquiry_date)
        # An unparseable date does not keep a pair apart.
        if days is not None and days > self.config.window_days:
            return False

        return self.names_match(
            self.normalize_company_name(a.company_name),
            self.normalize_company_name(b.company_name),
        )

    def is_soft(self, inquiry_type: Optional[str]) -> bool:
        return is_soft_inquiry(inquiry_type, self._soft_types)

    def group_inquiries(
        self,
        inquiries: Sequence[InquiryRecord],
        group_membership: Optional[Mapping[str, str]] = None,
        group_metadata: Optional[Mapping[str, InquiryGroupMetadata]] = None,
        wallet_cards: Optional[Sequence[WalletCard]] = None,
        latest_snapshot_ids: Optional[SnapshotIndex] = None,
    ) -> List[InquiryGroup]:
        """
        Groups inquiries for presentation.

        Args:
            inquiries: All inquiries, from any bureaus.
            group_membership: Inquiry id -> persisted group id.
            group_metadata: Persisted group id -> user annotations.
            wallet_cards: The user's wallet, used for display names.
            latest_snapshot_ids: (bureau, player_number) -> newest snapshot id,
                                 used to flag groups that fell off the report.

        Returns:
            Persisted groups in first-seen order, followed by auto-groups in
            seed order.
        """
        group_membership = group_membership or {}
        group_metadata = group_metadata or {}
        cards_by_id = {card.id: card for card in wallet_cards or ()}

        groups: List[InquiryGroup] = []

        # --- 1. User-defined groups ---
        by_group_id: Dict[str, List[InquiryRecord]] = {}
        remaining: List[InquiryRecord] = []
        for inquiry in inquiries:
            group_id = group_membership.get(inquiry.id)
            if group_id:
                by_group_id.setdefault(group_id, []).append(inquiry)
            else:
                remaining.append(inquiry)

        for group_id, members in by_group_id.items():
            metadata = group_metadata.get(group_id) or InquiryGroupMetadata()
            earliest = min(members, key=lambda i: i.inquiry_date)
            groups.append(
                InquiryGroup(
                    id=group_id,
                    company_name=earliest.company_name,
                    display_name=self.display_name(
                        members, metadata.related_card_id, metadata.group_name, cards_by_id
                    ),
                    inquiry_date=earliest.inquiry_date,
                    bureaus={i.bureau for i in members},
                    inquiries=members,
                    group_id=group_id,
                    group_name=metadata.group_name,
                    related_card_id=metadata.related_card_id,
                    related_note=metadata.related_note,
                    is_dropped=self._all_dropped(members, latest_snapshot_ids),
                )
            )

        logger.debug(f"Restored {len(groups)} user-defined inquiry groups.")

        # --- 2. Single-pass auto-grouping of the rest ---
        placed: Set[int] = set()
        auto_count = 0
        for seed_index, seed in enumerate(remaining):
            if seed_index in placed:
                continue

            members = []
            for other_index, other in enumerate(remaining):
                if other_index in placed:
                    continue
                if other_index == seed_index or self.should_auto_group(seed, other):
                    members.append(other)
                    placed.add(other_index)

            groups.append(
                InquiryGroup(
                    id=seed.id,
                    company_name=seed.company_name,
                    display_name=self.display_name(members, None, None, cards_by_id),
                    inquiry_date=seed.inquiry_date,
                    bureaus={i.bureau for i in members},
                    inquiries=members,
                    is_dropped=self._all_dropped(members, latest_snapshot_ids),
                )
            )
            auto_count += 1
            if len(members) > 1:
                logger.debug(
                    f"Auto-grouped {len(members)} inquiries under '{seed.company_name}' "
                    f"({seed.inquiry_date})"
                )

        logger.info(
            f"Grouped {len(inquiries)} inquiries into {len(by_group_id)} user-defined "
            f"and {auto_count} automatic groups."
        )
        return groups

    @staticmethod
    def display_name(
        members: Sequence[InquiryRecord],
        related_card_id: Optional[str],
        group_name: Optional[str],
        cards_by_id: Mapping[str, WalletCard],
    ) -> str:
        """
        Picks the label shown for a group.

        A linked wallet card wins (issuer name, else card name), then the
        user's group name, then the alphabetically first company name.
        """
        if related_card_id:
            card = cards_by_id.get(related_card_id)
            if card is not None:
                return card.issuer_name or card.name

        if group_name:
            return group_name

        return sorted((i.company_name for i in members), key=lambda n: (n.casefold(), n))[0]

    def filter_groups(
        self,
        groups: Iterable[InquiryGroup],
        inquiry_type: str = 'hard',
        include_dropped: bool = False,
    ) -> List[InquiryGroup]:
        """
        Filters groups by inquiry kind and dropped state.

        A group is kept when any of its inquiries is of the requested kind.

        Raises:
            ValueError: If `inquiry_type` is not 'all', 'hard' or 'soft'.
        """
        if inquiry_type not in INQUIRY_FILTERS:
            raise ValueError(f"inquiry_type must be one of {INQUIRY_FILTERS}, got '{inquiry_type}'")

        result = []
        for group in groups:
            if group.is_dropped and not include_dropped:
                continue
            if inquiry_type == 'hard' and not any(
                not self.is_soft(i.inquiry_type) for i in group.inquiries
            ):
                continue
            if inquiry_type == 'soft' and not any(
                self.is_soft(i.inquiry_type) for i in group.inquiries
            ):
                continue
            result.append(group)
        return result

    @staticmethod
    def _all_dropped(
        members: Iterable[InquiryRecord], latest_snapshot_ids: Optional[SnapshotIndex]
    ) -> bool:
        return all(not is_inquiry_active(i, latest_snapshot_ids) for i in members)


def count_active_by_bureau(
    inquiries: Iterable[InquiryRecord],
    latest_snapshot_ids: Optional[SnapshotIndex] = None,
    as_of: Optional[date] = None,
    recent_years: int = 2,
) -> Dict[Bureau, int]:
    """
    Counts active inquiries per bureau.

    Each inquiry counts once for its own bureau when it is still on the newest
    report (see `is_inquiry_active`) and was made within `recent_years` of
    `as_of`. Inquiries with an unparseable date are not counted.

    Args:
        inquiries: Raw inquiries, not groups; two inquiries from one bureau
                   in the same group both count.
        latest_snapshot_ids: (bureau, player_number) -> newest snapshot id.
        as_of: Reference date for the recency window. Defaults to today.
        recent_years: Length of the recency window in years.

    Returns:
        A count for every bureau, zero included.
    """
    as_of = as_of or date.today()
    cutoff = (pd.Timestamp(as_of) - pd.DateOffset(years=recent_years)).tz_localize('UTC')

    counts = {bureau: 0 for bureau in Bureau}
    for inquiry in inquiries:
        inquired = pd.to_datetime(inquiry.inquiry_date, errors='coerce', utc=True)
        if pd.isna(inquired) or inquired < cutoff:
            continue
        if is_inquiry_active(inquiry, latest_snapshot_ids):
            counts[inquiry.bureau] += 1
    return counts
