"""Unit tests for job number formatting and allocation"""

from datetime import datetime, timedelta, timezone

import pytest

from cleanflow.conversion.sequence import (
    allocate_job_number,
    current_period,
    format_job_number,
    next_job_number,
    parse_job_number,
)


class TestJobNumberFormat:
    """Test <PREFIX>-<PERIOD>-<NNNN> formatting"""

    def test_zero_padded_to_four_digits(self):
        assert format_job_number("WO", "2026", 1) == "WO-2026-0001"
        assert format_job_number("WO", "2026", 42) == "WO-2026-0042"

    def test_grows_past_9999(self):
        """Test numbers past 9999 grow a digit instead of wrapping"""
        assert format_job_number("WO", "2026", 10000) == "WO-2026-10000"

    def test_rejects_non_positive_sequence(self):
        with pytest.raises(ValueError):
            format_job_number("WO", "2026", 0)

    def test_parse_round_trip_parts(self):
        parsed = parse_job_number("WO-2026-0042")
        assert parsed.sequence_key == "WO-2026"
        assert parsed.sequence_number == 42

    @pytest.mark.parametrize("value", ["", "WO-26-0001", "WO-2026-1", "wo-2026-0001", "WO2026-0001"])
    def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_job_number(value)

    def test_period_is_utc_year(self):
        """Test the period follows the UTC calendar year"""
        late_evening_in_new_york = datetime(
            2026, 12, 31, 20, 0, tzinfo=timezone(timedelta(hours=-5))
        )
        assert current_period(late_evening_in_new_york) == "2027"
        assert current_period(datetime(2026, 6, 1, tzinfo=timezone.utc)) == "2026"


class TestJobNumberAllocation:
    """Test allocation against existing jobs"""

    def test_first_number_in_period(self, uow):
        """Test an empty period starts at 0001"""
        with uow:
            assert next_job_number(uow, "2026") == "WO-2026-0001"

    def test_previous_maximum_plus_one(self, uow, make_job):
        """Test allocation continues from the period maximum"""
        make_job("WO-2026-0001")
        make_job("WO-2026-0007")
        make_job("WO-2025-0099")

        with uow:
            allocated = allocate_job_number(uow, "2026")

        assert allocated.job_number == "WO-2026-0008"
        assert allocated.sequence_key == "WO-2026"
        assert allocated.sequence_number == 8

    def test_numeric_not_lexicographic_maximum(self, uow, make_job):
        """Test 10000 sorts after 9999"""
        make_job("WO-2026-9999")
        make_job("WO-2026-10000")

        with uow:
            assert next_job_number(uow, "2026") == "WO-2026-10001"

    def test_prefixes_are_independent(self, uow, make_job):
        make_job("WO-2026-0005")

        with uow:
            assert next_job_number(uow, "2026", prefix="SR") == "SR-2026-0001"
