from datetime import datetime, timedelta

from utils.time_utils import (
    format_sheet_date,
    format_sheet_timestamp,
    is_same_month,
    is_session_expired,
    local_now,
    parse_sheet_date,
    parse_sheet_timestamp,
    utc_now,
)


def test_format_sheet_timestamp():
    dt = datetime(2026, 3, 5, 9, 7, 1)

    assert format_sheet_date(dt) == "05/03/2026"
    assert format_sheet_timestamp(dt) == "05/03/2026 09:07:01"


def test_parse_is_day_first():
    assert parse_sheet_timestamp("05/03/2026 09:07:01") == datetime(2026, 3, 5, 9, 7, 1)
    assert parse_sheet_date("12/01/2026") == datetime(2026, 1, 12)


def test_parse_accepts_unpadded_and_date_only():
    assert parse_sheet_date("5/3/2026") == datetime(2026, 3, 5)
    assert parse_sheet_timestamp("5/3/2026, 9:07:01") == datetime(2026, 3, 5)


def test_parse_rejects_garbage():
    assert parse_sheet_timestamp("") is None
    assert parse_sheet_timestamp("ayer") is None
    assert parse_sheet_date("31/02/2026") is None


def test_local_timestamp_parses_back():
    now = local_now().replace(microsecond=0, tzinfo=None)

    assert parse_sheet_timestamp(format_sheet_timestamp(now)) == now


def test_is_same_month():
    ref = datetime(2026, 10, 19)

    assert is_same_month(datetime(2026, 10, 1), ref)
    assert not is_same_month(datetime(2026, 9, 30), ref)
    assert not is_same_month(datetime(2025, 10, 19), ref)


def test_is_session_expired():
    assert is_session_expired(utc_now() - timedelta(minutes=61), timeout_minutes=60)
    assert not is_session_expired(utc_now(), timeout_minutes=60)
    assert is_session_expired(None)
