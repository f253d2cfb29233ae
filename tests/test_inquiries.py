from datetime import date

import pytest

from bureau_resolver.config import InquiryConfig
from bureau_resolver.inquiries import (
    InquiryGrouper,
    count_active_by_bureau,
    is_inquiry_active,
    is_soft_inquiry,
)
from bureau_resolver.models import Bureau, InquiryGroupMetadata

from conftest import make_card, make_inquiry


@pytest.fixture
def grouper():
    return InquiryGrouper(InquiryConfig())


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Capital One Bank USA, N.A.", "CAPITALONE"),
        ("CITIBANK", "CITI"),
        ("CITI CARDS", "CITICARDS"),
        ("Acme Corporation", "ACMEORATION"),
        ("", ""),
    ],
)
def test_normalize_company_name(grouper, raw, expected):
    assert grouper.normalize_company_name(raw) == expected


def test_similar_names_within_window_are_grouped(grouper):
    a = make_inquiry("equifax", company_name="CAPITAL ONE", inquiry_date="2024-01-05")
    b = make_inquiry("experian", company_name="CAPITAL ONE BANK USA NA", inquiry_date="2024-01-08")

    assert grouper.should_auto_group(a, b)


def test_similar_names_outside_window_are_not_grouped(grouper):
    a = make_inquiry("equifax", company_name="CAPITAL ONE", inquiry_date="2024-01-05")
    b = make_inquiry("experian", company_name="CAPITAL ONE BANK USA NA", inquiry_date="2024-01-25")

    assert not grouper.should_auto_group(a, b)


def test_short_names_must_match_exactly(grouper):
    a = make_inquiry(company_name="CITIBANK")
    b = make_inquiry(company_name="CITI CARDS")
    c = make_inquiry(company_name="CITI BANK NA")

    assert not grouper.should_auto_group(a, b)
    assert grouper.should_auto_group(a, c)


def test_prefix_is_capped_at_eight_characters(grouper):
    a = make_inquiry(company_name="BARCLAYSUS")
    b = make_inquiry(company_name="BARCLAYS DELAWARE")

    assert grouper.should_auto_group(a, b)


def test_unparseable_date_does_not_block_grouping(grouper):
    a = make_inquiry(company_name="DISCOVER", inquiry_date="not a date")
    b = make_inquiry(company_name="DISCOVER", inquiry_date="2024-01-05")

    assert grouper.should_auto_group(a, b)


def test_group_inquiries_auto_groups_in_input_order(grouper):
    inquiries = [
        make_inquiry("equifax", id="eq", company_name="CAPITAL ONE", inquiry_date="2024-01-05"),
        make_inquiry("experian", id="ex", company_name="AMEX", inquiry_date="2024-01-06"),
        make_inquiry("transunion", id="tu", company_name="CAPITAL ONE BANK", inquiry_date="2024-01-07"),
    ]

    groups = grouper.group_inquiries(inquiries)

    assert [g.id for g in groups] == ["eq", "ex"]
    assert [i.id for i in groups[0].inquiries] == ["eq", "tu"]
    assert groups[0].bureaus == {Bureau.EQUIFAX, Bureau.TRANSUNION}
    assert groups[0].display_name == "CAPITAL ONE"
    assert not groups[0].is_user_defined


def test_grouping_is_not_transitive(grouper):
    # B is within 14 days of both A and C, but A and C are 20 days apart.
    a = make_inquiry(id="a", company_name="DISCOVER", inquiry_date="2024-01-01")
    b = make_inquiry(id="b", company_name="DISCOVER", inquiry_date="2024-01-11")
    c = make_inquiry(id="c", company_name="DISCOVER", inquiry_date="2024-01-21")

    groups = grouper.group_inquiries([a, b, c])

    assert [[i.id for i in g.inquiries] for g in groups] == [["a", "b"], ["c"]]


def test_user_groups_come_first_and_keep_their_members(grouper):
    inquiries = [
        make_inquiry("equifax", id="auto", company_name="CHASE", inquiry_date="2024-03-01"),
        make_inquiry("experian", id="u2", company_name="JPMCB", inquiry_date="2024-02-10"),
        make_inquiry("transunion", id="u1", company_name="CHASE", inquiry_date="2024-02-01"),
    ]
    membership = {"u1": "grp", "u2": "grp"}
    metadata = {"grp": InquiryGroupMetadata(group_name="Sapphire app", related_note="approved")}

    groups = grouper.group_inquiries(inquiries, membership, metadata)

    assert [g.id for g in groups] == ["grp", "auto"]
    user_group = groups[0]
    assert user_group.is_user_defined
    assert user_group.inquiry_date == "2024-02-01"
    assert user_group.company_name == "CHASE"
    assert user_group.display_name == "Sapphire app"
    assert user_group.related_note == "approved"
    assert [i.id for i in groups[1].inquiries] == ["auto"]


def test_linked_wallet_card_names_the_group(grouper):
    card = make_card(id="card-1", name="Freedom Flex", issuer_name="Chase")
    inquiry = make_inquiry(id="i1", company_name="JPMCB CARD")

    groups = grouper.group_inquiries(
        [inquiry],
        group_membership={"i1": "grp"},
        group_metadata={"grp": InquiryGroupMetadata(group_name="mine", related_card_id="card-1")},
        wallet_cards=[card],
    )

    assert groups[0].display_name == "Chase"


def test_group_is_dropped_when_every_member_fell_off(grouper):
    latest = {(Bureau.EQUIFAX, 1): "snap-2", (Bureau.EXPERIAN, 1): "snap-9"}
    stale = make_inquiry("equifax", id="stale", company_name="CAPITAL ONE",
                         last_seen_snapshot_id="snap-1")
    current = make_inquiry("experian", id="current", company_name="CAPITAL ONE",
                           last_seen_snapshot_id="snap-9")

    assert not is_inquiry_active(stale, latest)
    assert is_inquiry_active(current, latest)

    [group] = grouper.group_inquiries([stale, current], latest_snapshot_ids=latest)
    assert not group.is_dropped

    [group] = grouper.group_inquiries([stale], latest_snapshot_ids=latest)
    assert group.is_dropped


def test_inquiry_without_tracking_data_is_active():
    inquiry = make_inquiry("transunion", last_seen_snapshot_id="snap-1", player_number=2)

    assert is_inquiry_active(inquiry, {(Bureau.TRANSUNION, 1): "snap-5"})
    assert is_inquiry_active(inquiry, None)


@pytest.mark.parametrize(
    "inquiry_type, expected",
    [("soft", True), ("Account_Review", True), ("promotional", True), ("hard", False), (None, False)],
)
def test_is_soft_inquiry(inquiry_type, expected):
    assert is_soft_inquiry(inquiry_type) is expected


def test_filter_groups_by_type_and_dropped_state(grouper):
    latest = {(Bureau.EQUIFAX, 1): "snap-2"}
    groups = grouper.group_inquiries(
        [
            make_inquiry(id="hard", company_name="AMEX", inquiry_type="hard"),
            make_inquiry(id="soft", company_name="DISCOVER", inquiry_type="promotional"),
            make_inquiry(id="gone", company_name="BARCLAYS", last_seen_snapshot_id="snap-1"),
        ],
        latest_snapshot_ids=latest,
    )

    assert [g.id for g in grouper.filter_groups(groups, "hard")] == ["hard"]
    assert [g.id for g in grouper.filter_groups(groups, "soft")] == ["soft"]
    assert [g.id for g in grouper.filter_groups(groups, "all", include_dropped=True)] == [
        "hard", "soft", "gone",
    ]
    with pytest.raises(ValueError):
        grouper.filter_groups(groups, "medium")


def test_count_active_by_bureau_counts_each_inquiry():
    inquiries = [
        make_inquiry("equifax", company_name="CAPITAL ONE", inquiry_date="2024-01-05"),
        make_inquiry("equifax", company_name="CAPITAL ONE", inquiry_date="2024-01-06"),
        make_inquiry("experian", company_name="AMEX", inquiry_date="2023-11-20"),
    ]

    assert count_active_by_bureau(inquiries, as_of=date(2024, 3, 15)) == {
        Bureau.EQUIFAX: 2,
        Bureau.EXPERIAN: 1,
        Bureau.TRANSUNION: 0,
    }


def test_stale_inquiry_in_a_live_group_is_not_counted(grouper):
    latest = {(Bureau.EQUIFAX, 1): "snap-2", (Bureau.EXPERIAN, 1): "snap-9"}
    stale = make_inquiry("equifax", company_name="CAPITAL ONE", last_seen_snapshot_id="snap-1")
    current = make_inquiry("experian", company_name="CAPITAL ONE", last_seen_snapshot_id="snap-9")

    [group] = grouper.group_inquiries([stale, current], latest_snapshot_ids=latest)
    assert not group.is_dropped

    counts = count_active_by_bureau(group.inquiries, latest, as_of=date(2024, 3, 15))
    assert counts[Bureau.EQUIFAX] == 0
    assert counts[Bureau.EXPERIAN] == 1


def test_old_and_undated_inquiries_are_not_counted():
    inquiries = [
        make_inquiry("transunion", inquiry_date="2022-03-15"),
        make_inquiry("transunion", inquiry_date="2022-03-14"),
        make_inquiry("transunion", inquiry_date="not a date"),
    ]

    counts = count_active_by_bureau(inquiries, as_of=date(2024, 3, 15))

    assert counts[Bureau.TRANSUNION] == 1
    assert count_active_by_bureau(inquiries, as_of=date(2024, 3, 15), recent_years=3)[
        Bureau.TRANSUNION
    ] == 2
