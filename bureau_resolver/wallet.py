# bureau_resolver/wallet.py
"""
Matches reconciled account groups to the cards in the user's wallet.

The user's wallet holds cards with the issuer, approval date and limit they
entered themselves. A group earns confidence points for each of these that
agrees with what the bureaus report, and the best card above the suggestion
threshold is offered as a label for the group.
"""

import logging
from typing import Mapping, Optional, Sequence

import pandas as pd

# Local Package Imports
from .config import WalletConfig
from .models import AccountGroup, WalletCard
from .utils import normalize_issuer_name

# Set up module-level logger
logger = logging.getLogger(__name__)


class WalletCardMatcher:
    """
    Scores wallet cards against account groups on a 0-100 scale.

    Attributes:
        config (WalletConfig): Point values, bands and suggestion threshold
    """

    def __init__(self, config: Optional[WalletConfig] = None):
        self.config = config if config is not None else WalletConfig()

    def issuer_points(self, group: AccountGroup, card: WalletCard) -> int:
        group_issuer = normalize_issuer_name(group.display_name)
        card_issuer = normalize_issuer_name(card.issuer_name or card.name)
        if not group_issuer or not card_issuer:
            return 0

        if card_issuer in group_issuer or group_issuer in card_issuer:
            return self.config.issuer_contains_points
        if (
            len(group_issuer) > 3
            and len(card_issuer) > 3
            and group_issuer[:4] == card_issuer[:4]
        ):
            return self.config.issuer_prefix_points
        return 0

    def date_points(self, group: AccountGroup, card: WalletCard) -> int:
        if not group.date_opened or not card.approval_date:
            return 0

        opened = pd.to_datetime(group.date_opened, errors='coerce', utc=True)
        approved = pd.to_datetime(card.approval_date, errors='coerce', utc=True)
        if pd.isna(opened) or pd.isna(approved):
            return 0

        days = abs((opened - approved).total_seconds()) / (60 * 60 * 24)
        for max_days, points in self.config.date_bands:
            if days <= max_days:
                return points
        return 0

    def limit_points(self, group: AccountGroup, card: WalletCard) -> int:
        limits = [
            a.credit_limit_cents
            for a in group.accounts
            if a.credit_limit_cents is not None and a.credit_limit_cents > 0
        ]
        if not limits or not card.credit_limit_cents:
            return 0

        average = sum(limits) / len(limits)
        ratio = min(average, card.credit_limit_cents) / max(average, card.credit_limit_cents)
        for min_ratio, points in self.config.limit_bands:
            if ratio >= min_ratio:
                return points
        return 0

    def match_confidence(self, group: AccountGroup, card: WalletCard) -> int:
        """Returns how confident we are that `card` is the account behind `group`."""
        return (
            self.issuer_points(group, card)
            + self.date_points(group, card)
            + self.limit_points(group, card)
        )

    def suggest_card(
        self, group: AccountGroup, cards: Sequence[WalletCard]
    ) -> Optional[WalletCard]:
        """
        Returns the best-matching wallet card, or None if none is convincing.

        Only a strictly higher confidence replaces the current best, so the
        earlier card wins ties.
        """
        best_card = None
        best_confidence = 0
        for card in cards:
            confidence = self.match_confidence(group, card)
            if confidence > best_confidence and confidence >= self.config.suggestion_threshold:
                best_confidence = confidence
                best_card = card

        if best_card is not None:
            logger.debug(
                f"Suggesting wallet card '{best_card.name}' for group {group.id} "
                f"(confidence {best_confidence})"
            )
        return best_card

    @staticmethod
    def resolve_display_name(
        group: AccountGroup,
        account_links: Optional[Mapping[str, Optional[str]]] = None,
        custom_names: Optional[Mapping[str, str]] = None,
        cards: Sequence[WalletCard] = (),
    ) -> str:
        """
        Returns the label for a group, honouring the user's own choices.

        Args:
            group: The account group.
            account_links: Record id -> linked wallet card id (or None).
            custom_names: Record id -> name the user typed for the account.
            cards: The user's wallet.

        Returns:
            The name of the first linked card found among the members, else
            the first custom name, else the group's display name.
        """
        account_links = account_links or {}
        custom_names = custom_names or {}
        cards_by_id = {card.id: card for card in cards}

        for account in group.accounts:
            card_id = account_links.get(account.id)
            if card_id and card_id in cards_by_id:
                return cards_by_id[card_id].name

        for account in group.accounts:
            name = custom_names.get(account.id)
            if name:
                return name

        return group.display_name
