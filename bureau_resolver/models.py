# bureau_resolver/models.py
"""
Record and group types shared by every stage of the reconciliation engine.

Input records are frozen Pydantic models: the persistence layer hands the
engine plain rows, and validating them here rejects unknown bureaus and
non-integer currency at the boundary so the matching code never has to.
Output groups are plain dataclasses; they are rebuilt on every call and
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator


class Bureau(str, Enum):
    """The three consumer credit bureaus."""

    EQUIFAX = 'equifax'
    EXPERIAN = 'experian'
    TRANSUNION = 'transunion'


def _coerce_date_string(v: Any) -> Any:
    """Turns date/datetime objects into ISO strings so dates stay string-comparable."""
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    return v


class AccountRecord(BaseModel):
    """
    One bureau's view of one tradeline at one point in time.

    Dates are ISO calendar-date strings and are compared as strings.
    Currency fields are integer cents.
    """

    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    bureau: Bureau
    account_name: str = ''
    account_number_masked: Optional[str] = None
    creditor_name: Optional[str] = None
    status: str = ''
    date_opened: Optional[str] = None
    date_updated: Optional[str] = None
    date_closed: Optional[str] = None
    credit_limit_cents: Optional[StrictInt] = None
    high_balance_cents: Optional[StrictInt] = None
    balance_cents: Optional[StrictInt] = None
    monthly_payment_cents: Optional[StrictInt] = None
    account_type: str = ''
    loan_type: str = ''
    responsibility: str = 'unknown'
    terms: Optional[str] = None
    payment_status: Optional[str] = None

    @field_validator('date_opened', 'date_updated', 'date_closed', mode='before')
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        return _coerce_date_string(v)

    @property
    def match_name(self) -> str:
        """The creditor name if reported, otherwise the account name."""
        return self.creditor_name if self.creditor_name is not None else self.account_name


class InquiryRecord(BaseModel):
    """One bureau's record of a hard or soft credit inquiry."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    bureau: Bureau
    company_name: str
    inquiry_date: str
    inquiry_type: Optional[str] = None
    snapshot_id: Optional[str] = None
    last_seen_snapshot_id: Optional[str] = None
    player_number: int = 1

    @field_validator('inquiry_date', mode='before')
    @classmethod
    def coerce_inquiry_date(cls, v: Any) -> Any:
        return _coerce_date_string(v)


class WalletCard(BaseModel):
    """A card the user added to their wallet, used to label reconciled accounts."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    name: str
    issuer_name: Optional[str] = None
    approval_date: Optional[str] = None
    credit_limit_cents: Optional[StrictInt] = None

    @field_validator('approval_date', mode='before')
    @classmethod
    def coerce_approval_date(cls, v: Any) -> Any:
        return _coerce_date_string(v)


class InquiryGroupMetadata(BaseModel):
    """User-supplied annotations stored with a persisted inquiry group."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    group_name: Optional[str] = None
    related_card_id: Optional[str] = None
    related_note: Optional[str] = None


@dataclass
class AccountGroup:
    """
    One real-world account as seen across bureaus.

    Attributes
    ----------
    id : str
        Taken from the first member placed in the group.
    display_name : str
        The most descriptive creditor name seen among the members.
    loan_type, date_opened : from the seed record.
    status : str
        "closed" if any member is closed, otherwise the seed's status.
    accounts : list of AccountRecord
        All members in placement order.
    by_bureau : dict
        Bureau -> members from that bureau. A bureau can hold more than one
        record when intra-bureau deduplication under-merged.
    """

    id: str
    display_name: str
    loan_type: str
    status: str
    date_opened: Optional[str]
    accounts: List[AccountRecord] = field(default_factory=list)
    by_bureau: Dict[Bureau, List[AccountRecord]] = field(default_factory=dict)

    @property
    def bureaus(self) -> List[Bureau]:
        return sorted(self.by_bureau, key=lambda b: b.value)


@dataclass
class InquiryGroup:
    """A cluster of inquiries believed to be one application reported to several bureaus."""

    id: str
    company_name: str
    display_name: str
    inquiry_date: str
    bureaus: Set[Bureau] = field(default_factory=set)
    inquiries: List[InquiryRecord] = field(default_factory=list)
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    related_card_id: Optional[str] = None
    related_note: Optional[str] = None
    is_dropped: bool = False

    @property
    def is_user_defined(self) -> bool:
        return self.group_id is not None


__all__ = [
    'Bureau',
    'AccountRecord',
    'InquiryRecord',
    'WalletCard',
    'InquiryGroupMetadata',
    'AccountGroup',
    'InquiryGroup',
]
