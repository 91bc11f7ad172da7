"""Tests for next run computation."""

import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import ModuleOptions, TimezoneOptions
from scheduler import (
    CronParseError,
    TimezoneError,
    get_next_run,
    get_next_runs,
    parse_cron_expression,
    resolve_timezone,
)
from scheduler.next_run import to_croniter_expression


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestGetNextRun:
    """Test single next-run lookups."""

    def test_every_minute(self):
        """The next minute boundary strictly after the reference is returned."""
        assert get_next_run("* * * * *", after=utc(2024, 1, 1, 10, 0)) == utc(2024, 1, 1, 10, 1)
        assert get_next_run("* * * * *", after=utc(2024, 1, 1, 10, 0, 30)) == utc(2024, 1, 1, 10, 1)

    def test_hourly_rolls_over_day(self):
        """Matches roll into the next day."""
        assert get_next_run("0 0 * * *", after=utc(2024, 1, 1, 23, 59)) == utc(2024, 1, 2, 0, 0)

    def test_weekday_and_day_must_both_match(self):
        """Day-of-month and day-of-week are combined with AND."""
        # 2024-09-13 is the first Friday the 13th after June 2024
        assert get_next_run("0 12 13 * 5", after=utc(2024, 6, 1)) == utc(2024, 9, 13, 12, 0)

    def test_sunday_is_zero(self):
        """Day of week 0 is Sunday."""
        # 2024-01-01 is a Monday
        assert get_next_run("0 9 * * 0", after=utc(2024, 1, 1)) == utc(2024, 1, 7, 9, 0)

    def test_leap_day(self):
        """Leap-day schedules find the next leap year."""
        assert get_next_run("0 0 29 2 *", after=utc(2024, 3, 1)) == utc(2028, 2, 29, 0, 0)

    def test_timezone_is_applied(self):
        """Fields are matched against wall time in the given zone."""
        run = get_next_run("0 9 * * *", "Asia/Tokyo", after=utc(2024, 1, 1, 0, 0))
        assert run == utc(2024, 1, 2, 0, 0)
        assert run.tzinfo == timezone.utc

    def test_skips_dst_gap(self):
        """Wall times that do not exist on a DST change day are skipped."""
        # Clocks jump from 02:00 to 03:00 in New York on 2024-03-10
        run = get_next_run("30 2 * * *", "America/New_York", after=utc(2024, 3, 9, 12, 0))
        assert run == utc(2024, 3, 11, 6, 30)

    def test_naive_reference_is_utc(self):
        """Naive reference times are read as UTC."""
        assert get_next_run("5 * * * *", after=datetime(2024, 1, 1, 10, 0)) == utc(2024, 1, 1, 10, 5)

    def test_accepts_parsed_expression(self):
        """A parsed expression can be reused."""
        parsed = parse_cron_expression("*/30 * * * *")
        assert get_next_run(parsed, after=utc(2024, 1, 1, 10, 10)) == utc(2024, 1, 1, 10, 30)

    def test_never_matches(self):
        """Impossible dates raise a ValueError."""
        with pytest.raises(ValueError, match="No occurrence"):
            get_next_run("0 0 31 2 *", after=utc(2024, 1, 1))

    def test_invalid_inputs(self):
        """Bad expressions and zones raise their own errors."""
        with pytest.raises(CronParseError):
            get_next_run("61 * * * *")
        with pytest.raises(TimezoneError):
            get_next_run("* * * * *", "Invalid/Zone")


class TestGetNextRuns:
    """Test run sequences."""

    def test_sequence(self):
        """Runs are consecutive matches."""
        runs = get_next_runs("0 */6 * * *", after=utc(2024, 1, 1, 1, 0), count=4)
        assert runs == [
            utc(2024, 1, 1, 6, 0),
            utc(2024, 1, 1, 12, 0),
            utc(2024, 1, 1, 18, 0),
            utc(2024, 1, 2, 0, 0),
        ]

    def test_strictly_increasing(self):
        """Every run is later than the one before."""
        runs = get_next_runs("*/7 1-23/4 * * *", "Europe/Berlin", after=utc(2024, 3, 30), count=20)
        assert all(a < b for a, b in zip(runs, runs[1:]))


class TestResolveTimezone:
    """Test effective zone resolution."""

    def test_task_zone_wins_when_flexible(self):
        """Flexible configuration keeps the task's zone."""
        options = ModuleOptions(timezone=TimezoneOptions(type="Europe/Paris"))
        assert resolve_timezone("Asia/Tokyo", options) == "Asia/Tokyo"
        assert resolve_timezone(None, options) == "Europe/Paris"

    def test_strict_forces_module_zone(self):
        """Strict configuration overrides the task's zone."""
        options = {"timezone": {"type": "Europe/Paris", "strict": True}}
        assert resolve_timezone("Asia/Tokyo", options) == "Europe/Paris"

    def test_defaults_to_utc(self):
        """Without any zone UTC is used."""
        assert resolve_timezone(None) == "UTC"
        assert resolve_timezone(None, {}) == "UTC"


class TestCroniterExpression:
    """Test how parsed sets are handed to croniter."""

    def test_renders_expanded_sets(self):
        """Each field becomes an explicit list."""
        parsed = parse_cron_expression("*/20 9-11 1 */4 0")
        assert to_croniter_expression(parsed) == "0,20,40 9,10,11 1 2,6,10 0"

    def test_month_step_semantics_are_kept(self):
        """*/n on months still starts from February."""
        assert get_next_run("0 0 1 */2 *", after=utc(2024, 1, 15)) == utc(2024, 2, 1, 0, 0)
        assert get_next_run("0 0 1 */2 *", after=utc(2024, 2, 15)) == utc(2024, 4, 1, 0, 0)

    def test_stepped_range_semantics_are_kept(self):
        """Stepped ranges keep every n-th element of the range."""
        runs = get_next_runs("1-30/10 0 * * *", after=utc(2024, 1, 1), count=3)
        assert runs == [utc(2024, 1, 1, 0, 1), utc(2024, 1, 1, 0, 11), utc(2024, 1, 1, 0, 21)]


class TestAmbiguousWallTimes:
    """Test the repeated hour when clocks fall back."""

    def test_result_is_after_reference_in_repeated_hour(self):
        """A reference in the second 01:xx hour never yields an earlier instant."""
        new_york = ZoneInfo("America/New_York")
        # 01:15 EST on 2024-11-03, the second pass through 01:xx (06:15 UTC)
        after = datetime(2024, 11, 3, 1, 15, fold=1, tzinfo=new_york)

        run = get_next_run("30 1 * * *", "America/New_York", after=after)
        assert run > after
        assert run == utc(2024, 11, 4, 6, 30)

    def test_first_pass_of_repeated_hour(self):
        """A reference before the repeated hour gets its first occurrence."""
        run = get_next_run("30 1 * * *", "America/New_York", after=utc(2024, 11, 3, 5, 0))
        assert run == utc(2024, 11, 3, 5, 30)
