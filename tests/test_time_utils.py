# tests/test_time_utils.py
from unittest.mock import patch

import pytest

from lambdas.common.errors import InvalidIsoDateConversionError
from lambdas.common.time_utils import (
    convert_date_to_unix_timestamp,
    convert_to_iso_date,
    get_diff_in_seconds,
    get_max_timestamp_from_date,
    get_timestamp_for_input_date,
    get_timestamps_for_period,
)


def test_input_date_at_utc_midnight():
    assert get_timestamp_for_input_date("20230101", 0) == "1672531200"


def test_input_date_last_possible_time():
    assert get_timestamp_for_input_date("20230101", 0, True) == "1672617599"


@pytest.mark.parametrize("offset, expected", [
    # Offsets are applied with the sign flipped
    (-4, "1672516800"),
    (5, "1672549200"),
])
def test_input_date_with_offset(offset, expected):
    assert get_timestamp_for_input_date("20230101", offset) == expected


@pytest.mark.parametrize("value", ["", "2023011", "2023-01-01", "20231301"])
def test_invalid_input_date_raises(value):
    with pytest.raises(InvalidIsoDateConversionError):
        get_timestamp_for_input_date(value)


def test_convert_to_iso_date():
    assert convert_to_iso_date("20230415") == "2023-04-15"


@pytest.mark.parametrize("value, expected", [
    ("2023-01-01T00:00:00Z", "1672531200"),
    ("2023-01-01T00:00:00.000Z", "1672531200"),
    ("2023-01-01T00:00:00", "1672531200"),
    ("2023-01-01T02:00:00+02:00", "1672531200"),
])
def test_convert_date_to_unix_timestamp(value, expected):
    assert convert_date_to_unix_timestamp(value) == expected


@pytest.mark.parametrize("value", [None, "", "yesterday"])
def test_convert_invalid_date_raises(value):
    with pytest.raises(InvalidIsoDateConversionError):
        convert_date_to_unix_timestamp(value)


def test_timestamps_for_period_end_yesterday():
    with patch("lambdas.common.time_utils.get_date_before", return_value="20230110"):
        period = get_timestamps_for_period(1)

    assert period == {"from": "1673308800", "to": "1673395199"}


def test_max_timestamp_from_date():
    with patch("lambdas.common.time_utils.get_current_date", return_value="2023-01-31"):
        assert get_max_timestamp_from_date(30, 0) == "1672531200"


def test_diff_in_seconds():
    assert get_diff_in_seconds(1000, 61000) == 60
    assert get_diff_in_seconds(1500, 2000) == 0
