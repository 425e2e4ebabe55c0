"""Tests for timestamp parsing and bucket keys."""

from datetime import UTC, datetime

import pytest

from sessionlink.consumers.buffer import bucket_key, floor_to_interval, nearby_buckets
from sessionlink.utilities.tz import format_utc, parse_timestamp, to_utc


class TestParseTimestamp:
    """parse_timestamp fails softly and always returns UTC."""

    def test_zulu_with_milliseconds(self):
        assert parse_timestamp("2025-10-16T17:30:13.300Z") == datetime(
            2025, 10, 16, 17, 30, 13, 300000, tzinfo=UTC
        )

    def test_offset_is_converted_to_utc(self):
        dt = parse_timestamp("2025-10-16T20:25:00+02:00")
        assert dt == datetime(2025, 10, 16, 18, 25, tzinfo=UTC)
        assert dt.utcoffset().total_seconds() == 0

    def test_naive_defaults_to_utc(self):
        assert parse_timestamp("2025-10-16T20:25:00") == datetime(2025, 10, 16, 20, 25, tzinfo=UTC)

    def test_naive_uses_given_timezone(self):
        # Amsterdam is on CEST (+02:00) in mid October
        dt = parse_timestamp("2025-10-16T20:25:00", "Europe/Amsterdam")
        assert dt == datetime(2025, 10, 16, 18, 25, tzinfo=UTC)

    def test_unknown_timezone_falls_back_to_utc(self):
        dt = parse_timestamp("2025-10-16T20:25:00", "Mars/Olympus_Mons")
        assert dt == datetime(2025, 10, 16, 20, 25, tzinfo=UTC)

    @pytest.mark.parametrize("raw", ["not a date", "", None, "2025-13-45T99:00:00Z", 12345])
    def test_invalid_returns_none(self, raw):
        assert parse_timestamp(raw) is None

    def test_datetime_passthrough(self):
        dt = datetime(2025, 10, 16, 12, 0, tzinfo=UTC)
        assert parse_timestamp(dt) == dt

    def test_to_utc_rejects_naive(self):
        with pytest.raises(ValueError):
            to_utc(datetime(2025, 10, 16, 12, 0))

    def test_format_utc_drops_subseconds(self):
        assert format_utc(datetime(2025, 10, 16, 17, 0, 5, 123, tzinfo=UTC)) == "2025-10-16T17:00:05Z"

    def test_format_utc_pads_short_years(self):
        assert format_utc(datetime(999, 6, 1, 10, 0, tzinfo=UTC)) == "0999-06-01T10:00:00Z"

    def test_offset_beyond_year_9999_is_invalid(self):
        assert parse_timestamp("9999-12-31T23:30:00-02:00") is None


class TestBucketKey:
    """Bucket keys floor the start instant to the interval in UTC."""

    def test_floors_to_hour(self):
        assert bucket_key("2025-10-16T17:30:13.300Z") == "2025-10-16T17:00:00Z"

    def test_offset_timestamp_buckets_in_utc(self):
        assert bucket_key("2025-10-16T20:25:00+02:00") == "2025-10-16T18:00:00Z"

    def test_naive_timestamp_uses_default_tz(self):
        assert bucket_key("2025-10-16T20:25:00", default_tz="Europe/Amsterdam") == (
            "2025-10-16T18:00:00Z"
        )

    def test_exact_boundary_stays_in_its_bucket(self):
        assert bucket_key("2025-10-16T18:00:00Z") == "2025-10-16T18:00:00Z"

    def test_invalid_input_buckets_at_now(self):
        now = datetime(2025, 1, 1, 12, 34, 56, tzinfo=UTC)
        assert bucket_key("garbage", now=now) == "2025-01-01T12:00:00Z"

    def test_custom_interval(self):
        assert bucket_key("2025-10-16T17:31:00Z", interval_minutes=15) == "2025-10-16T17:30:00Z"

    def test_floor_to_interval_zeroes_seconds(self):
        dt = datetime(2025, 10, 16, 17, 59, 59, 999999, tzinfo=UTC)
        assert floor_to_interval(dt) == datetime(2025, 10, 16, 17, 0, tzinfo=UTC)


class TestNearbyBuckets:
    def test_previous_current_next(self):
        assert nearby_buckets("2025-10-16T17:00:00Z") == [
            "2025-10-16T16:00:00Z",
            "2025-10-16T17:00:00Z",
            "2025-10-16T18:00:00Z",
        ]

    def test_crosses_midnight(self):
        assert nearby_buckets("2025-10-16T00:00:00Z") == [
            "2025-10-15T23:00:00Z",
            "2025-10-16T00:00:00Z",
            "2025-10-16T01:00:00Z",
        ]

    def test_neighbours_match_bucket_keys_of_neighbouring_events(self):
        prev, _, nxt = nearby_buckets(bucket_key("2025-10-16T17:45:00Z"))
        assert prev == bucket_key("2025-10-16T16:10:00Z")
        assert nxt == bucket_key("2025-10-16T18:59:00Z")

    def test_last_bucket_of_year_9999_has_no_next(self):
        assert nearby_buckets("9999-12-31T23:00:00Z") == [
            "9999-12-31T22:00:00Z",
            "9999-12-31T23:00:00Z",
        ]

    def test_first_bucket_of_year_1_has_no_previous(self):
        assert nearby_buckets("0001-01-01T00:00:00Z") == [
            "0001-01-01T00:00:00Z",
            "0001-01-01T01:00:00Z",
        ]

    def test_years_below_1000_keep_all_neighbours(self):
        bucket = bucket_key("0999-06-01T10:30:00Z")

        assert bucket == "0999-06-01T10:00:00Z"
        assert nearby_buckets(bucket) == [
            "0999-06-01T09:00:00Z",
            "0999-06-01T10:00:00Z",
            "0999-06-01T11:00:00Z",
        ]
