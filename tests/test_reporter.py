from datetime import date

import pandas as pd
import pytest

from bureau_resolver.models import Bureau
from bureau_resolver.reporter import bureau_utilization, is_authorized_user, max_utilization

from conftest import make_account


@pytest.fixture
def resolved(resolver, chase_trio):
    closed_loan = [
        make_account("equifax", id="eq-loan", creditor_name="TD AUTO FINANCE", status="closed",
                     date_opened="2012-04-01", account_type="installment", loan_type="auto",
                     credit_limit_cents=2_000_000, balance_cents=0),
    ]
    records = chase_trio + closed_loan
    return records, resolver.resolve_accounts(records)


def test_credit_insights_over_open_revolving_groups(resolver, resolved):
    _, groups = resolved

    insights = resolver.calculate_credit_insights(groups, as_of=date(2024, 3, 15))

    assert insights.total_credit_limit_cents == 1_000_000
    # The last reported revolving balance in the group wins.
    assert insights.total_balance_cents == 50_200
    assert insights.utilization_percent == pytest.approx(5.02)
    assert insights.average_age_months == 60
    assert insights.oldest_group_id == "eq-chase"
    assert insights.open_count == 1
    assert insights.closed_count == 1
    assert insights.per_bureau_open_count[Bureau.EXPERIAN] == 1


def test_credit_insights_without_open_groups(resolver):
    insights = resolver.calculate_credit_insights([])

    assert insights.utilization_percent == 0.0
    assert insights.oldest_group_id is None


def test_utilization_helpers(resolved):
    _, groups = resolved
    chase = groups[0]

    assert max_utilization(chase) == pytest.approx(5.02)
    assert bureau_utilization(chase, Bureau.EQUIFAX) == pytest.approx(5.0)
    assert bureau_utilization(groups[1], Bureau.TRANSUNION) == -1
    assert not is_authorized_user(chase)


def test_charge_card_without_limit_reports_zero_utilization(resolver):
    [group] = resolver.resolve_accounts([make_account("experian", balance_cents=12_000)])

    assert bureau_utilization(group, Bureau.EXPERIAN) == 0


def test_review_dataframe_has_one_row_per_group(resolver, resolved):
    _, groups = resolved

    review_df = resolver.get_review_dataframe(groups)

    assert isinstance(review_df, pd.DataFrame)
    assert list(review_df["group_id"]) == ["eq-chase", "eq-loan"]
    assert review_df.loc[0, "bureaus"] == "equifax, experian, transunion"
    assert review_df.loc[0, "transunion_balance_cents"] == 50_200
    assert pd.isna(review_df.loc[1, "experian_limit_cents"])


def test_review_dataframe_for_no_groups_is_empty(resolver):
    review_df = resolver.get_review_dataframe([])

    assert review_df.empty
    assert "max_utilization" in review_df.columns


def test_reporter_rejects_non_group_input(resolver):
    with pytest.raises(TypeError):
        resolver.get_review_dataframe("not groups")
    with pytest.raises(TypeError):
        resolver.calculate_credit_insights([{"id": "x"}])


def test_debug_info_scores_every_cross_bureau_pair(resolver, resolved):
    _, groups = resolved

    [chase_info, loan_info] = resolver.get_matching_debug_info(groups)

    assert [m["score"] for m in chase_info["match_scores"]] == [150, 145, 125]
    assert all(m["matched"] for m in chase_info["match_scores"])
    assert chase_info["accounts"][0]["creditor"] == "JPMCB CARD SERVICES"
    assert loan_info["match_scores"] == []


def test_generate_report_counts(resolver, resolved):
    records, groups = resolved
    duplicate = make_account("experian", id="ex-chase-dup", creditor_name="CHASE",
                             account_number_masked="XXXX1234", date_opened="2019-03-01")

    report = resolver.generate_report(records + [duplicate], groups)

    assert report["summary"]["records_in"] == 5
    assert report["summary"]["records_after_dedup"] == 4
    assert report["summary"]["account_groups"] == 2
    assert report["summary"]["reduction_rate"] == pytest.approx(0.6)
    assert report["group_details"] == {
        "multi_bureau_groups": 1,
        "singleton_groups": 1,
        "open_groups": 1,
        "closed_groups": 1,
    }
    assert report["bureau_coverage"] == {1: 1, 3: 1}
