import itertools

import pytest

from bureau_resolver.config import ResolverConfig
from bureau_resolver.models import AccountRecord, Bureau, InquiryRecord, WalletCard
from bureau_resolver.resolver import BureauResolver

_ids = itertools.count(1)


def make_account(bureau="equifax", **fields) -> AccountRecord:
    data = {
        "id": fields.pop("id", f"acct-{next(_ids)}"),
        "bureau": bureau,
        "account_name": "",
        "status": "open",
        "loan_type": "credit_card",
        "account_type": "revolving",
    }
    data.update(fields)
    return AccountRecord.model_validate(data)


def make_inquiry(bureau="equifax", **fields) -> InquiryRecord:
    data = {
        "id": fields.pop("id", f"inq-{next(_ids)}"),
        "bureau": bureau,
        "company_name": "CAPITAL ONE",
        "inquiry_date": "2024-01-05",
    }
    data.update(fields)
    return InquiryRecord.model_validate(data)


def make_card(**fields) -> WalletCard:
    data = {"id": fields.pop("id", f"card-{next(_ids)}"), "name": "Sapphire Preferred"}
    data.update(fields)
    return WalletCard.model_validate(data)


@pytest.fixture
def resolver():
    return BureauResolver(config=ResolverConfig(output={"log_level": "WARNING"}))


@pytest.fixture
def chase_trio():
    """One Chase card as reported by all three bureaus."""
    common = {
        "date_opened": "2019-03-01",
        "credit_limit_cents": 1_000_000,
        "balance_cents": 50_000,
    }
    return [
        make_account(
            Bureau.EQUIFAX, id="eq-chase", creditor_name="JPMCB CARD SERVICES",
            account_number_masked="414709XXXXXX1234", **common,
        ),
        make_account(
            Bureau.EXPERIAN, id="ex-chase", creditor_name="CHASE",
            account_number_masked="XXXX1234", **common,
        ),
        make_account(
            Bureau.TRANSUNION, id="tu-chase", creditor_name="JPMCB CARD",
            account_number_masked="414709XXXXXX", **{**common, "balance_cents": 50_200},
        ),
    ]
