import pytest

from bureau_resolver.config import GroupingConfig, ScoringConfig
from bureau_resolver.normalizer import CreditorNormalizer
from bureau_resolver.scorer import MatchBreakdown, MatchScorer

from conftest import make_account


@pytest.fixture
def scorer():
    return MatchScorer(ScoringConfig(), GroupingConfig(), CreditorNormalizer())


def test_same_bureau_pair_scores_zero(scorer):
    record = make_account("experian", creditor_name="CHASE", date_opened="2020-01-01",
                          credit_limit_cents=500_000)
    assert scorer.score(record, record) == 0
    assert scorer.breakdown(record, record) == MatchBreakdown()


def test_alias_names_with_same_date_and_limit_score_95(scorer):
    a = make_account("equifax", creditor_name="AMEX", date_opened="2021-05-01",
                     credit_limit_cents=1_500_000, loan_type="charge_card", status="open")
    b = make_account("transunion", creditor_name="AMERICAN EXPRESS", date_opened="2021-05-01",
                     credit_limit_cents=1_500_000, loan_type="credit_card", status="paid")

    breakdown = scorer.breakdown(a, b)

    assert scorer.score(a, b) == 95
    assert breakdown.date_opened == 50
    assert breakdown.credit_limit == 30
    assert breakdown.creditor_name == 15
    assert breakdown.matched is True


def test_score_is_symmetric(scorer, chase_trio):
    for a in chase_trio:
        for b in chase_trio:
            assert scorer.score(a, b) == scorer.score(b, a)


def test_full_agreement_reaches_max_score(scorer):
    fields = dict(creditor_name="CHASE", date_opened="2019-03-01", credit_limit_cents=1_000_000,
                  balance_cents=25_000, account_number_masked="414709786075****")
    a = make_account("equifax", **fields)
    b = make_account("experian", **fields)

    assert scorer.score(a, b) == ScoringConfig().weights.max_score == 170


def test_zero_balances_earn_no_balance_points(scorer):
    a = make_account("equifax", balance_cents=0)
    b = make_account("experian", balance_cents=0)

    assert scorer.breakdown(a, b).balance == 0


def test_balances_within_one_percent_agree(scorer):
    assert scorer.balances_agree(100_000, 100_900)
    assert not scorer.balances_agree(100_000, 101_100)
    assert not scorer.balances_agree(None, 100_000)


def test_opposite_balances_do_not_divide_by_zero(scorer):
    assert not scorer.balances_agree(5_000, -5_000)


def test_credit_balances_always_agree(scorer):
    # A negative average makes the ratio negative, which is under any tolerance.
    a = make_account("equifax", balance_cents=-1_000)
    b = make_account("experian", balance_cents=-5_000)

    assert scorer.balances_agree(-1_000, -5_000)
    assert scorer.breakdown(a, b).balance == 20


def test_missing_data_withholds_signals(scorer):
    a = make_account("equifax", loan_type="", status="")
    b = make_account("transunion", loan_type="", status="")

    breakdown = scorer.breakdown(a, b)

    # Only the categorical signals agree on empty values.
    assert breakdown.total == 10
    assert breakdown.matched is False


def test_breakdown_dict_includes_total(scorer, chase_trio):
    eq, ex, _ = chase_trio
    result = scorer.breakdown(eq, ex).to_dict()

    assert result["last4"] == 25
    assert result["first6"] == 0
    assert result["total"] == 150
