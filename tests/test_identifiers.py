import pytest

from bureau_resolver.utils import extract_first6, extract_last4


@pytest.mark.parametrize(
    "masked, expected",
    [
        ("xxxxxxxxxxxx 1234", "1234"),
        ("XXXX1234", "1234"),
        ("414709786075****", "6075"),
        ("XXXX1234 (closed)", "1234"),
        ("414709XXXXXX", None),
        ("XXXXXXXX", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_last4(masked, expected):
    assert extract_last4(masked) == expected


@pytest.mark.parametrize(
    "masked, expected",
    [
        ("414709786075****", "414709"),
        ("414709XXXXXX", "414709"),
        ("XXXX414709", None),
        ("41470", None),
        (None, None),
    ],
)
def test_extract_first6(masked, expected):
    assert extract_first6(masked) == expected


def test_non_ascii_digits_are_not_account_digits():
    assert extract_last4("XXXX١٢٣٤") is None
    assert extract_first6("٤١٤٧٠٩XXXXXX") is None
