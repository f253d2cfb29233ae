# bureau_resolver/config/schema.py
"""
Pydantic Schema for the Cross-Bureau Reconciliation Engine Configuration.

This module is the single source of truth for every tunable parameter of the
reconciliation engine: the creditor alias table, the pairwise signal weights,
the grouping threshold, the inquiry auto-grouping rules, the wallet-card
suggestion bands and the logging verbosity.

Using Pydantic gives the engine:
1.  **Type Safety & Validation**: values are parsed and checked once, at load
    time, so the matching code can trust every number it reads.
2.  **Rich Error Messages**: a bad YAML file fails with a message pointing at
    the offending key.
3.  **Strictness**: `extra='forbid'` rejects misspelled keys instead of
    silently falling back to defaults.

The defaults reproduce the production behaviour exactly; most deployments
never need a configuration file at all.

The primary entry point is `ResolverConfig`, which aggregates all of the
stage-specific configurations.
"""

# ======================================================================================
# Core Library Imports
# ======================================================================================

# --- Standard Library Imports ---
from typing import Any

# --- Third-Party Library Imports ---
from pydantic import (
    BaseModel,  # The base class for all configuration models.
    ConfigDict,  # A dictionary-like object for configuring model behavior.
    Field,  # Used to customize model fields with defaults, validation, etc.
    field_validator,  # A decorator for creating custom per-field validation logic.
    model_validator,  # A decorator for creating custom validation logic for the entire model.
)

# ======================================================================================
# Default Tables
# ======================================================================================

# Ordered (alias, canonical) pairs. Order is significant: the containment
# fallback in the normalizer returns the first alias that matches.
DEFAULT_CREDITOR_ALIASES: tuple[tuple[str, str], ...] = (
    # American Express variations
    ('amex', 'american express'),
    ('american express', 'american express'),
    # Chase variations
    ('jpmcb card', 'chase'),
    ('jpmcb card services', 'chase'),
    ('chase', 'chase'),
    ('chase bank', 'chase'),
    # Capital One variations
    ('capital one', 'capital one'),
    ('capital one bank usa na', 'capital one'),
    ('capital one bank', 'capital one'),
    # Bank of America variations
    ('bank of america', 'bank of america'),
    ('bank of america na', 'bank of america'),
    ('bofa', 'bank of america'),
    # Wells Fargo variations
    ('wells fargo', 'wells fargo'),
    ('wells fargo bank na', 'wells fargo'),
    ('wfbna', 'wells fargo'),
    ('wf card services', 'wells fargo'),
    # Citi variations
    ('citicards cbna', 'citi'),
    ('citibank', 'citi'),
    ('citi cards', 'citi'),
    ('citi', 'citi'),
    # Credit Union One
    ('credit union 1', 'credit union one'),
    ('credit union one', 'credit union one'),
    # BlockFi variations
    ('blockfi', 'blockfi'),
    ('deserve/blockfi', 'blockfi'),
    ('deserve/blockfi/evolve', 'blockfi'),
    # Discover
    ('discover', 'discover'),
    ('discover bank', 'discover'),
    ('discover financial', 'discover'),
    # US Bank
    ('us bank', 'us bank'),
    ('us bank na', 'us bank'),
    ('u.s. bank', 'us bank'),
    ('usb card services', 'us bank'),
    # Barclays
    ('barclays', 'barclays'),
    ('barclays bank delaware', 'barclays'),
    ('barclaycard us', 'barclays'),
    # Synchrony
    ('synchrony', 'synchrony'),
    ('synchrony bank', 'synchrony'),
    ('synchrony financial', 'synchrony'),
    # TD
    ('td bank', 'td bank'),
    ('td auto finance', 'td bank'),
    ('td bank usa', 'td bank'),
)

# Removed, in this alternation order, from upper-cased inquiry company names.
# 'CORP' precedes 'CORPORATION', so 'CORPORATION' leaves 'ORATION' behind.
DEFAULT_COMPANY_NOISE_TOKENS: tuple[str, ...] = (
    'BANK',
    'FINANCIAL',
    'SERVICES',
    'CORP',
    'CORPORATION',
    'INC',
    'LLC',
    'NA',
    'USA',
)

DEFAULT_SOFT_INQUIRY_TYPES: tuple[str, ...] = ('soft', 'account_review', 'promotional')


# ======================================================================================
# Preprocessing Configurations
# ======================================================================================


class NormalizationConfig(BaseModel):
    """
    Defines the creditor alias table used to canonicalize issuer names.

    Bureaus report the same issuer under many spellings ("AMEX",
    "AMERICAN EXPRESS", "JPMCB CARD SERVICES"). The alias table maps those
    spellings onto one canonical name before names are compared.
    """

    model_config = ConfigDict(extra='forbid')

    creditor_aliases: list[tuple[str, str]] = Field(
        default_factory=lambda: list(DEFAULT_CREDITOR_ALIASES),
        description=(
            'Ordered list of [alias, canonical] pairs. Aliases are matched against '
            'cleaned names (lowercase alphanumerics and spaces). Exact matches win; '
            'otherwise the FIRST alias contained in the name, or containing it, is '
            'used, so more specific aliases should appear before generic ones.'
        ),
    )

    @field_validator('creditor_aliases')
    @classmethod
    def validate_and_clean_aliases(cls, v: list[tuple[str, str]]) -> list[tuple[str, str]]:
        """Lowercases and strips every pair, rejecting blanks and duplicate aliases."""
        cleaned_pairs = []
        seen_aliases = set()
        for i, (alias, canonical) in enumerate(v):
            alias_clean = alias.strip().lower()
            canonical_clean = canonical.strip().lower()
            if not alias_clean or not canonical_clean:
                raise ValueError(f'creditor_aliases[{i}] must have a non-empty alias and canonical name.')
            if alias_clean in seen_aliases:
                raise ValueError(f"Duplicate creditor alias '{alias_clean}' at position {i}.")
            seen_aliases.add(alias_clean)
            cleaned_pairs.append((alias_clean, canonical_clean))
        return cleaned_pairs


# ======================================================================================
# Matching Configurations
# ======================================================================================


class ScoringWeights(BaseModel):
    """
    Points awarded by each independent signal of the pairwise match score.

    Absent data on either side withholds a signal's points; no signal ever
    subtracts points.
    """

    model_config = ConfigDict(extra='forbid')

    date_opened: int = Field(default=50, ge=0, description='Both open dates present and identical.')
    credit_limit: int = Field(default=30, ge=0, description='Both credit limits present and identical.')
    balance: int = Field(
        default=20, ge=0, description='Both balances present and within `balance_tolerance`.'
    )
    creditor_name: int = Field(
        default=15, ge=0, description='Normalized creditor names present and equal.'
    )
    last4: int = Field(default=25, ge=0, description='Trailing four account digits equal.')
    first6: int = Field(default=20, ge=0, description='Leading six account digits (BIN) equal.')
    loan_type: int = Field(default=5, ge=0, description='Loan types equal, including both empty.')
    status: int = Field(default=5, ge=0, description='Statuses equal, including both empty.')

    @property
    def max_score(self) -> int:
        """The highest score any pair can reach."""
        return sum(self.model_dump().values())


class ScoringConfig(BaseModel):
    """Configuration for the cross-bureau pairwise match scorer."""

    model_config = ConfigDict(extra='forbid')

    weights: ScoringWeights = Field(
        default_factory=ScoringWeights,
        description='Points awarded by each matching signal.',
    )

    balance_tolerance: float = Field(
        default=0.01,
        gt=0.0,
        lt=1.0,
        description=(
            'Maximum relative difference |a - b| / |avg(a, b)| for two balances to count '
            'as equal. Bureaus report balances on different days, so exact equality is rare.'
        ),
    )


class GroupingConfig(BaseModel):
    """Configuration for the greedy cross-bureau grouper and the group ordering."""

    model_config = ConfigDict(extra='forbid')

    match_threshold: int = Field(
        default=50,
        ge=1,
        description=(
            'Minimum best pairwise score required to join an existing group. This is an '
            'absolute number of points, not a fraction of the maximum score.'
        ),
    )

    missing_date_sort_key: str = Field(
        default='9999',
        description='Stand-in for a missing open date when ordering records oldest first.',
    )

    missing_date_display_key: str = Field(
        default='0000',
        description='Stand-in for a missing open date when ordering groups newest first.',
    )


class InquiryConfig(BaseModel):
    """Configuration for automatic grouping of credit inquiries across bureaus."""

    model_config = ConfigDict(extra='forbid')

    window_days: float = Field(
        default=14,
        ge=0,
        description='Maximum absolute distance in days between two inquiries of one application.',
    )

    prefix_length: int = Field(
        default=8,
        ge=1,
        description='Upper bound on the normalized-name prefix length that must agree.',
    )

    min_name_length: int = Field(
        default=5,
        ge=1,
        description='Both normalized names must be at least this long for prefix matching.',
    )

    company_noise_tokens: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPANY_NOISE_TOKENS),
        description=(
            'Literal substrings removed from upper-cased company names, in alternation '
            'order. They are not anchored to word boundaries.'
        ),
    )

    soft_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOFT_INQUIRY_TYPES),
        description='Inquiry types (case-insensitive) treated as soft pulls.',
    )

    recent_years: int = Field(
        default=2,
        ge=1,
        description='Inquiries older than this many years are left out of active counts.',
    )

    @field_validator('company_noise_tokens')
    @classmethod
    def validate_noise_tokens(cls, v: list[str]) -> list[str]:
        """Upper-cases tokens and rejects anything that is not plain alphanumerics."""
        tokens = []
        for token in v:
            token_upper = token.strip().upper()
            if not token_upper.isalnum():
                raise ValueError(
                    f"Noise token '{token}' must be alphanumeric; names are stripped of "
                    'everything else before tokens are removed.'
                )
            tokens.append(token_upper)
        return tokens

    @field_validator('soft_types')
    @classmethod
    def validate_soft_types(cls, v: list[str]) -> list[str]:
        return [t.strip().lower() for t in v if t.strip()]


class WalletConfig(BaseModel):
    """Configuration for suggesting a user's wallet card for a reconciled account."""

    model_config = ConfigDict(extra='forbid')

    suggestion_threshold: int = Field(
        default=50,
        ge=0,
        le=100,
        description='Minimum confidence (0-100) for a wallet card to be suggested.',
    )

    issuer_contains_points: int = Field(default=40, ge=0)
    issuer_prefix_points: int = Field(default=20, ge=0)

    date_bands: list[tuple[float, int]] = Field(
        default_factory=lambda: [(7, 35), (30, 25), (60, 10)],
        description='Ordered [max_days, points] bands for open date vs. approval date.',
    )

    limit_bands: list[tuple[float, int]] = Field(
        default_factory=lambda: [(0.95, 25), (0.8, 15)],
        description='Ordered [min_ratio, points] bands for average limit vs. card limit.',
    )

    @field_validator('date_bands')
    @classmethod
    def validate_date_bands(cls, v: list[tuple[float, int]]) -> list[tuple[float, int]]:
        """Ensures day bands are ascending so the first matching band is the tightest."""
        days = [band[0] for band in v]
        if days != sorted(days):
            raise ValueError(f'date_bands must be in ascending order of days, got {days}.')
        return v

    @field_validator('limit_bands')
    @classmethod
    def validate_limit_bands(cls, v: list[tuple[float, int]]) -> list[tuple[float, int]]:
        """Ensures ratio bands are descending and lie in (0, 1]."""
        ratios = [band[0] for band in v]
        if ratios != sorted(ratios, reverse=True):
            raise ValueError(f'limit_bands must be in descending order of ratio, got {ratios}.')
        if any(not 0.0 < r <= 1.0 for r in ratios):
            raise ValueError(f'limit_bands ratios must lie in (0, 1], got {ratios}.')
        return v


# ======================================================================================
# Output Configuration
# ======================================================================================


class OutputConfig(BaseModel):
    """Configuration for logging verbosity."""

    model_config = ConfigDict(extra='forbid')

    log_level: int | str = Field(
        default='INFO',
        validate_default=True,
        description=(
            'The logging verbosity level. Can be specified as a standard logging integer '
            'or a case-insensitive string:\n'
            "- 'DEBUG' (10): Every grouping decision and score.\n"
            "- 'INFO' (20): Stage progress and summary counts (recommended default).\n"
            "- 'WARNING' (30): Only warnings about potential issues and errors.\n"
            "- 'ERROR' (40): Only error messages.\n"
            "- 'CRITICAL' (50): Only critical failures that halt execution."
        ),
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_and_normalize_log_level(cls, v: Any) -> int:
        """Converts string log levels to their integer equivalents and validates them."""

        log_level_map = {'DEBUG': 10, 'INFO': 20, 'WARNING': 30, 'ERROR': 40, 'CRITICAL': 50}

        if isinstance(v, str):
            upper_v = v.upper()
            if upper_v in log_level_map:
                return log_level_map[upper_v]
            raise ValueError(
                f"Invalid log level string: '{v}'. Must be one of {list(log_level_map.keys())}"
            )

        if isinstance(v, int) and not isinstance(v, bool):
            if v in log_level_map.values():
                return v
            raise ValueError(
                f'Invalid log level integer: {v}. Must be one of {list(log_level_map.values())}'
            )

        raise TypeError(f'log_level must be a string or an integer, not {type(v).__name__}')


# === Master Configuration ===


class ResolverConfig(BaseModel):
    """
    Master configuration for the cross-bureau reconciliation engine.

    Usage:
        # Load from YAML file
        config = load_config('resolver.yaml')

        # Or create with custom parameters
        config = ResolverConfig(grouping=GroupingConfig(match_threshold=60))

        # Initialize resolver
        resolver = BureauResolver(config=config)

    The configuration follows a hierarchical structure:
    - normalization: creditor alias table
    - scoring: pairwise signal weights and balance tolerance
    - grouping: join threshold and missing-date sort keys
    - inquiries: inquiry auto-grouping rules
    - wallet: wallet card suggestion bands
    - output: logging verbosity
    """

    model_config = ConfigDict(extra='forbid')

    normalization: NormalizationConfig = Field(
        default_factory=NormalizationConfig,
        description='Configuration for creditor name normalization.',
    )

    scoring: ScoringConfig = Field(
        default_factory=ScoringConfig,
        description='Configuration for the pairwise match score.',
    )

    grouping: GroupingConfig = Field(
        default_factory=GroupingConfig,
        description='Configuration for greedy grouping and group ordering.',
    )

    inquiries: InquiryConfig = Field(
        default_factory=InquiryConfig,
        description='Configuration for inquiry auto-grouping.',
    )

    wallet: WalletConfig = Field(
        default_factory=WalletConfig,
        description='Configuration for wallet card suggestions.',
    )

    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description='Configuration for logging.',
    )

    @model_validator(mode='after')
    def check_threshold_is_reachable(self) -> 'ResolverConfig':
        """
        Rejects a join threshold that no pair of records could ever reach.

        Such a threshold would silently turn every record into its own group.
        """
        max_score = self.scoring.weights.max_score
        if self.grouping.match_threshold > max_score:
            raise ValueError(
                f'grouping.match_threshold ({self.grouping.match_threshold}) exceeds the '
                f'maximum achievable score ({max_score}) for the configured weights.'
            )
        return self


# === Public API ===
__all__ = [
    # Main configuration
    'ResolverConfig',
    # Sub-configurations
    'NormalizationConfig',
    'ScoringWeights',
    'ScoringConfig',
    'GroupingConfig',
    'InquiryConfig',
    'WalletConfig',
    'OutputConfig',
    # Default tables
    'DEFAULT_CREDITOR_ALIASES',
    'DEFAULT_COMPANY_NOISE_TOKENS',
    'DEFAULT_SOFT_INQUIRY_TYPES',
]
