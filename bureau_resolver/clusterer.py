# bureau_resolver/clusterer.py
"""
Greedy cross-bureau grouping of tradelines.

This module places deduplicated records into groups that represent one
real-world account each. The algorithm is a single left-to-right greedy
pass:

1. Records are ordered by open date, oldest first, so the best-dated
   records become the anchors new records are compared against.
2. Each record joins the existing group holding its best-scoring partner,
   provided that score reaches the match threshold; otherwise it seeds a
   new group.
3. Placements are final. A record is never re-evaluated or moved, so an
   early, information-poor record can decide where later ones go. With
   tens of accounts per person this approximation is accepted in exchange
   for a predictable, explainable result.

During the pass, groups live in an arena: each group is a list of indices
into the sorted record list. `AccountGroup` objects are only materialized
once placement is finished.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

# Local Package Imports
from .config import GroupingConfig
from .models import AccountGroup, AccountRecord, Bureau
from .scorer import MatchScorer

# Set up module-level logger
logger = logging.getLogger(__name__)


@dataclass
class _GroupSlot:
    """Arena entry for one group under construction."""

    seed: int
    display_name: str
    members: List[int] = field(default_factory=list)
    by_bureau: Dict[Bureau, List[int]] = field(default_factory=dict)

    def add(self, index: int, bureau: Bureau) -> None:
        self.members.append(index)
        self.by_bureau.setdefault(bureau, []).append(index)


class CrossBureauClusterer:
    """
    Assign records from different bureaus to account groups.

    The clusterer holds no state between calls; every call to `build_groups`
    starts from an empty arena.

    Attributes:
        config (GroupingConfig): Threshold and missing-date sort key
        scorer (MatchScorer): Pairwise scorer used for placement decisions
    """

    def __init__(self, config: GroupingConfig, scorer: MatchScorer):
        """
        Initialize the CrossBureauClusterer.

        Args:
            config: GroupingConfig with the join threshold.
            scorer: MatchScorer used to compare a candidate with group members.
        """
        self.config = config
        self.scorer = scorer

    def sort_records(self, records: Sequence[AccountRecord]) -> List[AccountRecord]:
        """Orders records by open date, oldest first, undated records last."""
        missing = self.config.missing_date_sort_key
        return sorted(records, key=lambda r: r.date_opened or missing)

    def build_groups(self, records: Sequence[AccountRecord]) -> List[AccountGroup]:
        """
        Group deduplicated records in a single greedy pass.

        Args:
            records: Deduplicated records from any bureaus, in any order.

        Returns:
            Groups in creation order. Status reconciliation and final ordering
            are left to the GroupRefiner.
        """
        ordered = self.sort_records(records)
        arena: List[_GroupSlot] = []

        logger.debug(f"Grouping {len(ordered)} records across bureaus...")

        for index, record in enumerate(ordered):
            best_slot, best_score = self._find_best_slot(record, ordered, arena)

            if best_slot is not None:
                slot = arena[best_slot]
                slot.add(index, record.bureau)
                self._update_display_name(slot, record)
                logger.debug(
                    f"Placed {record.bureau.value} record {record.id} in group "
                    f"{ordered[slot.seed].id} (score {best_score})"
                )
            else:
                slot = _GroupSlot(seed=index, display_name=record.match_name)
                slot.add(index, record.bureau)
                arena.append(slot)
                logger.debug(f"Started group {record.id} from {record.bureau.value} record")

        groups = [self._materialize(slot, ordered) for slot in arena]
        logger.info(f"Grouped {len(ordered)} records into {len(groups)} account groups.")
        return groups

    def _find_best_slot(
        self,
        record: AccountRecord,
        ordered: Sequence[AccountRecord],
        arena: Sequence[_GroupSlot],
    ) -> Tuple[Optional[int], int]:
        """
        Finds the group holding the record's best-scoring partner.

        Only a strictly higher score replaces the current best, so ties go to
        the group created first.

        Returns:
            (arena index, score) of the winning group, or (None, 0) if no
            member of any group reaches the threshold.
        """
        threshold = self.config.match_threshold
        best_slot: Optional[int] = None
        best_score = 0

        for slot_index, slot in enumerate(arena):
            for member in slot.members:
                score = self.scorer.score(record, ordered[member])
                if score > best_score and score >= threshold:
                    best_score = score
                    best_slot = slot_index

        return best_slot, best_score

    @staticmethod
    def _update_display_name(slot: _GroupSlot, record: AccountRecord) -> None:
        """Adopts the record's creditor name when it is new and more descriptive."""
        candidate = record.creditor_name
        if not candidate or candidate in slot.display_name:
            return
        if len(candidate) > len(slot.display_name):
            slot.display_name = candidate

    @staticmethod
    def _materialize(slot: _GroupSlot, ordered: Sequence[AccountRecord]) -> AccountGroup:
        """Turns an arena slot into an AccountGroup."""
        seed = ordered[slot.seed]
        return AccountGroup(
            id=seed.id,
            display_name=slot.display_name,
            loan_type=seed.loan_type,
            status=seed.status,
            date_opened=seed.date_opened,
            accounts=[ordered[i] for i in slot.members],
            by_bureau={
                bureau: [ordered[i] for i in indices]
                for bureau, indices in slot.by_bureau.items()
            },
        )
