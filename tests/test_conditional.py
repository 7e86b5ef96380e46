"""Tests for Last-Modified / If-Modified-Since handling."""

from datetime import datetime, timedelta, timezone

from fileserver.conditional import format_http_date, is_fresh, parse_http_date

MTIME = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def test_format_http_date():
    """Test IMF-fixdate rendering."""
    assert format_http_date(MTIME) == "Mon, 01 Jan 2024 00:00:00 GMT"


def test_format_http_date_converts_to_gmt():
    """Test non-UTC timestamps are rendered in GMT."""
    moment = datetime(2024, 1, 1, 2, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_http_date(moment) == "Mon, 01 Jan 2024 00:00:00 GMT"


def test_parse_http_date_round_trip():
    """Test parsing what format_http_date produces."""
    assert parse_http_date("Mon, 01 Jan 2024 00:00:00 GMT") == MTIME


def test_parse_http_date_absent_or_invalid():
    """Test absent and garbage values parse to None."""
    assert parse_http_date(None) is None
    assert parse_http_date("") is None
    assert parse_http_date("yesterday") is None


def test_not_fresh_without_header():
    """Test a missing header always serves the file."""
    assert is_fresh(None, MTIME) is False


def test_fresh_when_header_after_mtime():
    """Test a later If-Modified-Since reports fresh."""
    assert is_fresh(MTIME + timedelta(seconds=1), MTIME) is True


def test_not_fresh_when_header_equals_mtime():
    """Test freshness requires a strictly later timestamp."""
    assert is_fresh(MTIME, MTIME) is False


def test_not_fresh_when_header_before_mtime():
    """Test an older cached copy is not fresh."""
    assert is_fresh(MTIME - timedelta(days=1), MTIME) is False
