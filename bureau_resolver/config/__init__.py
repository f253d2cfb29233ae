# bureau_resolver/config/__init__.py
"""
Initializes the config sub-package.

This file makes the most important components of the configuration system
directly available when importing from `bureau_resolver.config`, simplifying
access for other parts of the application.
"""

from .loader import load_config, load_raw_config, save_config
from .schema import (
    DEFAULT_COMPANY_NOISE_TOKENS,
    DEFAULT_CREDITOR_ALIASES,
    DEFAULT_SOFT_INQUIRY_TYPES,
    GroupingConfig,
    InquiryConfig,
    NormalizationConfig,
    OutputConfig,
    ResolverConfig,
    ScoringConfig,
    ScoringWeights,
    WalletConfig,
)

# Defines the public API of this sub-package.
__all__ = [
    'ResolverConfig',
    'NormalizationConfig',
    'ScoringConfig',
    'ScoringWeights',
    'GroupingConfig',
    'InquiryConfig',
    'WalletConfig',
    'OutputConfig',
    'DEFAULT_CREDITOR_ALIASES',
    'DEFAULT_COMPANY_NOISE_TOKENS',
    'DEFAULT_SOFT_INQUIRY_TYPES',
    'load_config',
    'load_raw_config',
    'save_config',
]
