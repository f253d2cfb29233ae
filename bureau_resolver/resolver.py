# bureau_resolver/resolver.py
"""
Main BureauResolver class that orchestrates cross-bureau reconciliation.

This module provides the primary interface of the package, coordinating the
pipeline components: creditor normalization, intra-bureau deduplication,
pairwise scoring, greedy grouping, group refinement, inquiry grouping,
wallet card matching and reporting.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

import pandas as pd

# ============================================================================
# LOCAL PACKAGE IMPORTS
# ============================================================================
from .clusterer import CrossBureauClusterer
from .config import ResolverConfig, load_config
from .deduplicator import BureauDeduplicator
from .inquiries import InquiryGrouper, SnapshotIndex, count_active_by_bureau
from .models import (
    AccountGroup,
    AccountRecord,
    Bureau,
    InquiryGroup,
    InquiryGroupMetadata,
    InquiryRecord,
    WalletCard,
)
from .normalizer import CreditorNormalizer
from .refiner import GroupRefiner
from .reporter import CreditInsights, ResolutionReporter
from .scorer import MatchBreakdown, MatchScorer
from .utils import validate_partition
from .wallet import WalletCardMatcher


def _coerce_models(items: Iterable[Any], model: type, label: str) -> list:
    """Validates plain mappings into `model` instances; model instances pass through."""
    if isinstance(items, (str, bytes, Mapping)):
        raise TypeError(f'{label} must be a sequence of records, not {type(items).__name__}')
    return [item if isinstance(item, model) else model.model_validate(item) for item in items]


class BureauResolver:
    """
    Main orchestrator for the cross-bureau reconciliation pipeline.

    The resolver holds only configuration and stateless components. Every
    call works on the records passed to it and returns fresh results, so one
    instance can serve many users and many threads.

    Attributes:
        config (ResolverConfig): Configuration object containing all settings
        logger (logging.Logger): Logger instance for this resolver
    """

    # Package version for tracking
    __version__ = '0.1.0'

    def __init__(self, config_path: str | None = None, *, config: ResolverConfig | None = None):
        """
        Initialize the BureauResolver and all sub-components.

        This constructor supports three initialization modes:
        1. Load configuration from YAML file (provide config_path)
        2. Use pre-built configuration object (provide config)
        3. Use default configuration (provide neither)

        Args:
            config_path: Optional path to YAML configuration file
            config: Pre-built ResolverConfig object

        Raises:
            ValueError: If both config_path and config are provided
        """
        # Validate mutually exclusive parameters
        if config_path and config:
            raise ValueError(
                "Provide either 'config_path' or 'config', not both. "
                'config_path is for loading from file, config is a pre-built object.'
            )

        # Load or use provided configuration
        self.config = config if config else load_config(config_path)

        # Set up logging for this instance
        self.logger = self._setup_logger()
        self.logger.info(f'Initializing BureauResolver v{self.__version__}')

        # Initialize all pipeline components
        self._initialize_components()

        self.logger.debug('BureauResolver initialization complete')

    def _initialize_components(self) -> None:
        """
        Instantiate all pipeline component classes with their configurations.

        This method creates instances of each component in the pipeline,
        passing the appropriate configuration sections to each.
        """
        self.logger.debug('Initializing pipeline components...')

        self.normalizer = CreditorNormalizer(self.config.normalization)
        self.deduplicator = BureauDeduplicator(self.normalizer)

        # Scorer is shared by the clusterer and the debug reporter
        self.scorer = MatchScorer(
            scoring_config=self.config.scoring,
            grouping_config=self.config.grouping,
            normalizer=self.normalizer,
        )
        self.clusterer = CrossBureauClusterer(self.config.grouping, self.scorer)
        self.refiner = GroupRefiner(self.config.grouping)

        self.inquiry_grouper = InquiryGrouper(self.config.inquiries)
        self.wallet_matcher = WalletCardMatcher(self.config.wallet)
        self.reporter = ResolutionReporter(self.config, self.scorer)

        self.logger.info('All pipeline components initialized successfully')

    # ========================================================================
    # MAIN PUBLIC API METHODS
    # ========================================================================

    def resolve_accounts(self, records: Iterable[AccountRecord | Mapping[str, Any]]) -> list[AccountGroup]:
        """
        Reconcile tradelines from all bureaus into account groups.

        Pipeline: intra-bureau deduplication, greedy cross-bureau grouping,
        status reconciliation and display ordering.

        Args:
            records: AccountRecord objects or mappings with the same fields.

        Returns:
            Account groups, open groups first, newest first within each tier.

        Raises:
            pydantic.ValidationError: If a mapping is not a valid record
        """
        account_records = _coerce_models(records, AccountRecord, 'records')

        self.logger.info(f'{"=" * 60}')
        self.logger.info(f'Resolving {len(account_records):,} account records')
        self.logger.info(f'{"=" * 60}')

        deduped = self.deduplicator.dedupe(account_records)
        groups = self.clusterer.build_groups(deduped)
        groups = self.refiner.refine(groups)

        # A failed partition is logged with details but never raised.
        validate_partition(deduped, groups, context='account grouping')

        self.logger.info(
            f'Resolved {len(account_records):,} records into {len(groups):,} account groups'
        )
        return groups

    def score_pair(self, a: AccountRecord | Mapping[str, Any], b: AccountRecord | Mapping[str, Any]) -> int:
        """Return the cross-bureau match score of two records."""
        a, b = _coerce_models([a, b], AccountRecord, 'pair')
        return self.scorer.score(a, b)

    def explain_pair(
        self, a: AccountRecord | Mapping[str, Any], b: AccountRecord | Mapping[str, Any]
    ) -> MatchBreakdown:
        """Return the per-signal breakdown of a pair's match score."""
        a, b = _coerce_models([a, b], AccountRecord, 'pair')
        return self.scorer.breakdown(a, b)

    def resolve_inquiries(
        self,
        inquiries: Iterable[InquiryRecord | Mapping[str, Any]],
        group_membership: Mapping[str, str] | None = None,
        group_metadata: Mapping[str, InquiryGroupMetadata | Mapping[str, Any]] | None = None,
        wallet_cards: Iterable[WalletCard | Mapping[str, Any]] | None = None,
        latest_snapshot_ids: Mapping[tuple[Bureau | str, int], str] | None = None,
    ) -> list[InquiryGroup]:
        """
        Group inquiries across bureaus, honouring the user's persisted groups.

        Args:
            inquiries: InquiryRecord objects or mappings.
            group_membership: Inquiry id -> persisted group id.
            group_metadata: Persisted group id -> name, related card and note.
            wallet_cards: The user's wallet cards, used for display names.
            latest_snapshot_ids: (bureau, player_number) -> newest snapshot id.

        Returns:
            Persisted groups first, then automatically built groups.
        """
        inquiry_records = _coerce_models(inquiries, InquiryRecord, 'inquiries')
        cards = _coerce_models(wallet_cards or [], WalletCard, 'wallet_cards')
        metadata = {
            group_id: meta if isinstance(meta, InquiryGroupMetadata)
            else InquiryGroupMetadata.model_validate(meta)
            for group_id, meta in (group_metadata or {}).items()
        }

        self.logger.info(f'Grouping {len(inquiry_records):,} inquiries')
        return self.inquiry_grouper.group_inquiries(
            inquiry_records,
            group_membership=group_membership,
            group_metadata=metadata,
            wallet_cards=cards,
            latest_snapshot_ids=self._normalize_snapshot_index(latest_snapshot_ids),
        )

    def count_active_inquiries(
        self,
        inquiries: Iterable[InquiryRecord | Mapping[str, Any]],
        latest_snapshot_ids: Mapping[tuple[Bureau | str, int], str] | None = None,
        as_of: date | None = None,
    ) -> dict[Bureau, int]:
        """Count recent inquiries still on each bureau's newest report."""
        inquiry_records = _coerce_models(inquiries, InquiryRecord, 'inquiries')
        counts = count_active_by_bureau(
            inquiry_records,
            latest_snapshot_ids=self._normalize_snapshot_index(latest_snapshot_ids),
            as_of=as_of,
            recent_years=self.config.inquiries.recent_years,
        )
        self.logger.debug(f'Active inquiries by bureau: {counts}')
        return counts

    def suggest_wallet_cards(
        self,
        groups: Sequence[AccountGroup],
        cards: Iterable[WalletCard | Mapping[str, Any]],
    ) -> dict[str, WalletCard | None]:
        """
        Suggest a wallet card for every account group.

        Returns:
            Group id -> suggested card, or None where no card is convincing.
        """
        wallet = _coerce_models(cards, WalletCard, 'cards')
        suggestions = {group.id: self.wallet_matcher.suggest_card(group, wallet) for group in groups}
        matched = sum(1 for card in suggestions.values() if card is not None)
        self.logger.info(f'Suggested wallet cards for {matched} of {len(suggestions)} account groups')
        return suggestions

    def get_review_dataframe(self, groups: Sequence[AccountGroup]) -> pd.DataFrame:
        """
        Get a summary DataFrame for reviewing resolution results.

        Returns:
            pandas DataFrame with one row per account group
        """
        self.logger.info('Generating review DataFrame')
        review_df = self.reporter.get_review_dataframe(groups)
        self.logger.debug(f'Review DataFrame contains {len(review_df):,} summary rows')
        return review_df

    def get_matching_debug_info(self, groups: Sequence[AccountGroup]) -> list[dict[str, Any]]:
        """Explain how each group was formed, pair by pair."""
        return self.reporter.get_matching_debug_info(groups)

    def calculate_credit_insights(
        self, groups: Sequence[AccountGroup], as_of: date | None = None
    ) -> CreditInsights:
        """Compute utilization, account age and counts over resolved groups."""
        return self.reporter.calculate_credit_insights(groups, as_of=as_of)

    def generate_report(
        self,
        records: Iterable[AccountRecord | Mapping[str, Any]],
        groups: Sequence[AccountGroup],
    ) -> dict[str, Any]:
        """
        Generate a statistical report on an account resolution run.

        Args:
            records: The records that were passed to `resolve_accounts`
            groups: The groups it returned

        Returns:
            Dictionary with 'summary', 'group_details' and 'bureau_coverage'
        """
        account_records = _coerce_models(records, AccountRecord, 'records')

        self.logger.info('Generating resolution report')
        deduped_count = len(self.deduplicator.dedupe(account_records))
        report = self.reporter.generate_report(account_records, groups, deduped_count=deduped_count)
        self.logger.debug('Report generation complete')
        return report

    # ========================================================================
    # UTILITY AND HELPER METHODS
    # ========================================================================

    @staticmethod
    def _normalize_snapshot_index(
        latest_snapshot_ids: Mapping[tuple[Bureau | str, int], str] | None,
    ) -> SnapshotIndex | None:
        """Keys the snapshot index by (Bureau, int) so lookups from records hit."""
        if not latest_snapshot_ids:
            return None
        return {
            (Bureau(bureau), int(player)): snapshot_id
            for (bureau, player), snapshot_id in latest_snapshot_ids.items()
        }

    def _setup_logger(self) -> logging.Logger:
        """
        Set up logging for the entire bureau_resolver package.

        This method configures the package-level logger so that all modules
        inherit the same log level and handler configuration. This ensures
        consistent logging throughout the pipeline.

        Returns:
            Logger instance for this specific module
        """
        # Get the package-level logger (parent of all module loggers)
        package_logger = logging.getLogger('bureau_resolver')

        # Set the log level on the package logger
        # This will apply to all child loggers (normalizer, clusterer, etc.)
        package_logger.setLevel(self.config.output.log_level)

        # Stop messages from propagating to the root logger
        package_logger.propagate = False

        # Only add a handler if one doesn't already exist
        # This prevents duplicate log messages when creating multiple BureauResolver instances
        if not package_logger.handlers:
            console_handler = logging.StreamHandler()

            # Set formatter for consistent log format
            log_format = logging.Formatter(
                fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
            )
            console_handler.setFormatter(log_format)

            # Set handler level to match package level
            console_handler.setLevel(self.config.output.log_level)

            # Add handler to package logger
            package_logger.addHandler(console_handler)

        # If log level changed, update existing handler
        else:
            package_logger.handlers[0].setLevel(self.config.output.log_level)

        # Return a module-specific logger for the resolver's own messages
        return logging.getLogger(__name__)


# ============================================================================
# MODULE-LEVEL CONVENIENCE FUNCTIONS
# ============================================================================


def group_accounts_across_bureaus(
    records: Iterable[AccountRecord | Mapping[str, Any]],
    config: ResolverConfig | None = None,
) -> list[AccountGroup]:
    """Resolve account records with a one-off resolver."""
    return BureauResolver(config=config).resolve_accounts(records)


def auto_group_inquiries(
    inquiries: Iterable[InquiryRecord | Mapping[str, Any]],
    group_membership: Mapping[str, str] | None = None,
    config: ResolverConfig | None = None,
) -> list[InquiryGroup]:
    """Group inquiries with a one-off resolver."""
    return BureauResolver(config=config).resolve_inquiries(
        inquiries, group_membership=group_membership
    )
