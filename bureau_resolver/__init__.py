# Expose the main classes to the top level of the package
from .config import ResolverConfig, load_config
from .models import (
    AccountGroup,
    AccountRecord,
    Bureau,
    InquiryGroup,
    InquiryGroupMetadata,
    InquiryRecord,
    WalletCard,
)
from .normalizer import normalize_creditor_name
from .refiner import get_account_for_bureau, get_best_account, get_bureaus_for_group
from .reporter import CreditInsights
from .resolver import BureauResolver, auto_group_inquiries, group_accounts_across_bureaus
from .scorer import MatchBreakdown
from .utils import extract_first6, extract_last4

# Define the package version
__version__ = '0.1.0'

__all__ = [
    'ResolverConfig',
    'load_config',
    'BureauResolver',
    'group_accounts_across_bureaus',
    'auto_group_inquiries',
    'Bureau',
    'AccountRecord',
    'InquiryRecord',
    'WalletCard',
    'InquiryGroupMetadata',
    'AccountGroup',
    'InquiryGroup',
    'MatchBreakdown',
    'CreditInsights',
    'normalize_creditor_name',
    'extract_last4',
    'extract_first6',
    'get_best_account',
    'get_account_for_bureau',
    'get_bureaus_for_group',
]
