import pytest

from radiko_cli.api.partial_key import DEFAULT_AUTHKEY, derive_partial_key


@pytest.mark.parametrize(
    "offset, length, expected",
    [
        (0, 3, "YmNk"),  # "bcd"
        (16, 10, "ZTFlZjJmZDY2Yw=="),  # "e1ef2fd66c"
        (38, 10, "ZmE="),  # clipped to "fa"
        (40, 5, ""),
        (100, 5, ""),
        (5, 0, ""),
    ],
)
def test_derive_partial_key(offset, length, expected):
    assert derive_partial_key(offset, length) == expected


def test_derive_partial_key_accepts_bytes():
    assert derive_partial_key(16, 10, DEFAULT_AUTHKEY.encode()) == "ZTFlZjJmZDY2Yw=="


def test_derive_partial_key_uses_given_key():
    assert derive_partial_key(1, 2, "abcd") == "YmM="


@pytest.mark.parametrize("offset, length", [(-1, 5), (0, -1)])
def test_derive_partial_key_rejects_negative_arguments(offset, length):
    with pytest.raises(ValueError):
        derive_partial_key(offset, length)
