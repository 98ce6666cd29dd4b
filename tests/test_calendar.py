"""
Tests for the Calendar timeline, repository registry and derived state.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from contrib_calendar.calendar import Calendar
from contrib_calendar.day import EPOCH, EPOCH_DAY_MAX, DateOutOfRangeError, Day
from contrib_calendar.filter import Filter
from contrib_calendar.repository import Repository

URL_A = "https://github.com/user/a"
URL_B = "https://github.com/user/b"
URL_C = "https://github.com/user/c"


def assert_timeline_invariants(calendar: Calendar) -> None:
    """Whole Sunday-to-Saturday weeks with no gaps."""
    days = calendar.days
    assert len(days) % 7 == 0
    if not days:
        return
    assert days[0].date.weekday() == 6  # Sunday
    assert days[-1].date.weekday() == 5  # Saturday
    for previous, current in zip(days, days[1:]):
        assert current.date - previous.date == timedelta(days=1)


def counts(days: list[Day]) -> list:
    return [day.contribution_count for day in days]


class TestDayLookup:
    """Tests for Calendar.day()."""

    def test_empty_calendar_creates_week(self):
        calendar = Calendar("test")

        day = calendar.day(date(2025, 1, 1))

        assert day.date == date(2025, 1, 1)
        assert calendar.days[0].date == date(2024, 12, 29)
        assert len(calendar.days) == 7
        assert_timeline_invariants(calendar)

    def test_same_day_returns_same_object(self):
        calendar = Calendar("test")
        day = calendar.day(date(2025, 1, 1))

        assert calendar.day(date(2025, 1, 1)) is day
        assert calendar.day(date(2025, 1, 3)) is calendar.days[5]
        assert len(calendar.days) == 7

    def test_extends_forward_to_saturday(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 10)])

        day = calendar.day(date(2025, 1, 20))

        assert day.date == date(2025, 1, 20)
        assert calendar.days[-1].date == date(2025, 1, 25)
        assert len(calendar.days) == 28
        assert_timeline_invariants(calendar)

    def test_extends_forward_by_one_week(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 10)])

        calendar.day(date(2025, 1, 5))

        assert len(calendar.days) == 14
        assert_timeline_invariants(calendar)

    def test_prepend_before_existing_range(self):
        """Looking up Dec 24 before a calendar holding only Jan 1."""
        calendar = Calendar("test", [Day(date(2025, 1, 1), 10)])

        calendar.day(date(2024, 12, 24)).contribution_count = 3

        weeks = list(calendar.weeks())
        assert len(weeks) == 2
        assert all(len(week) == 7 for week in weeks)
        assert weeks[0][0].date == date(2024, 12, 22)
        assert counts(weeks[0]) == [None, None, 3, None, None, None, None]
        assert counts(weeks[1]) == [None, None, None, 10, None, None, None]
        assert_timeline_invariants(calendar)

    def test_prepend_keeps_existing_day_objects(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 10)])
        existing = calendar.day(date(2025, 1, 1))

        calendar.day(date(2024, 11, 1))

        assert calendar.day(date(2025, 1, 1)) is existing
        assert_timeline_invariants(calendar)

    def test_accepts_iso_string(self):
        calendar = Calendar("test")
        assert calendar.day("2025-01-01").date == date(2025, 1, 1)

    def test_far_out_date_raises(self):
        calendar = Calendar("test")

        with pytest.raises(DateOutOfRangeError):
            calendar.day(date(9999, 12, 31))

        with pytest.raises(DateOutOfRangeError):
            calendar.day(date(1, 1, 1))

        assert calendar.days == []

    def test_week_past_the_bound_leaves_calendar_unchanged(self):
        """The last allowed day is a Wednesday; its Saturday is out of range."""
        last_allowed = EPOCH + timedelta(days=EPOCH_DAY_MAX)
        calendar = Calendar("test", [Day(last_allowed - timedelta(days=20), 1)])
        days_before = list(calendar.days)

        with pytest.raises(DateOutOfRangeError):
            calendar.day(last_allowed)

        assert calendar.days == days_before
        assert_timeline_invariants(calendar)

    def test_empty_calendar_near_the_bound(self):
        calendar = Calendar("test")

        with pytest.raises(DateOutOfRangeError):
            calendar.day(EPOCH + timedelta(days=EPOCH_DAY_MAX))

        assert calendar.days == []


class TestUpdateSummary:
    """Tests for Calendar.update_summary()."""

    def test_out_of_order_days_fill_three_weeks(self):
        calendar = Calendar("test")

        calendar.update_summary(
            [
                Day(date(2025, 1, 15), 4),
                Day(date(2025, 1, 1), 10),
                Day(date(2025, 1, 8), 7),
            ]
        )

        assert len(calendar.days) == 21
        assert calendar.days[0].date == date(2024, 12, 29)
        assert calendar.days[-1].date == date(2025, 1, 18)
        assert calendar.day(date(2025, 1, 1)).contribution_count == 10
        assert calendar.day(date(2025, 1, 8)).contribution_count == 7
        assert calendar.day(date(2025, 1, 15)).contribution_count == 4
        assert sum(1 for day in calendar.days if day.contribution_count is None) == 18
        assert_timeline_invariants(calendar)

    def test_existing_day_keeps_detail(self):
        """A summary update only changes the count of an existing day."""
        calendar = Calendar("test", [Day(date(2025, 1, 1), 1)])
        existing = calendar.day(date(2025, 1, 1))
        existing.set_repo_commits(calendar.intern_repository(URL_A), 2)

        calendar.update_summary([Day(date(2025, 1, 1), 5)])

        day = calendar.day(date(2025, 1, 1))
        assert day is existing
        assert day.contribution_count == 5
        assert day.repositories[URL_A].commit_count == 2

    def test_merges_with_existing_range(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 1)])
        calendar.update_summary([Day(date(2025, 2, 1), 2)])

        assert calendar.days[0].date == date(2024, 12, 29)
        assert calendar.days[-1].date == date(2025, 2, 1)
        assert calendar.day(date(2025, 1, 1)).contribution_count == 1
        assert_timeline_invariants(calendar)

    def test_out_of_range_update_changes_nothing(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 1)])
        last_allowed = EPOCH + timedelta(days=EPOCH_DAY_MAX)

        with pytest.raises(DateOutOfRangeError):
            calendar.update_summary(
                [Day(date(2025, 1, 1), 5), Day(last_allowed, 2)]
            )

        assert len(calendar.days) == 7
        assert calendar.day(date(2025, 1, 1)).contribution_count == 1

    def test_empty_update_is_noop(self):
        calendar = Calendar("test")
        calendar.update_summary([])
        assert calendar.days == []

    def test_day_sequence_keeps_invariants(self):
        calendar = Calendar("test")
        for requested in [date(2025, 3, 3), date(2024, 7, 4), date(2025, 6, 1)]:
            calendar.day(requested)
            assert_timeline_invariants(calendar)
        calendar.update_summary([Day(date(2023, 12, 31), 1), Day(date(2025, 6, 30), 2)])
        assert_timeline_invariants(calendar)


class TestRepositoryRegistry:
    """Tests for intern_repository and derived repository state."""

    def test_intern_returns_same_object(self):
        calendar = Calendar("test")

        first = calendar.intern_repository(URL_A)
        second = calendar.intern_repository({"url": URL_A, "isFork": True})

        assert first is second
        assert len(calendar.repositories) == 1
        # First sighting wins.
        assert second.is_fork is False

    def test_new_repository_defaults(self):
        repository = Calendar("test").intern_repository(
            {"url": URL_A, "isPrivate": True}
        )

        assert repository.is_private is True
        assert repository.hue == 285
        assert repository.contributions == 0

    def test_repo_day_shares_repository(self):
        calendar = Calendar("test", tz=timezone.utc)

        repo_day_1 = calendar.repo_day("2025-01-01T12:00:00Z", URL_A)
        repo_day_2 = calendar.repo_day("2025-01-02T12:00:00Z", {"url": URL_A})

        assert repo_day_1.repository is repo_day_2.repository
        assert repo_day_1.repository is calendar.repositories[URL_A]
        assert calendar.repo_day("2025-01-01T18:00:00Z", URL_A) is repo_day_1

    def test_naive_timestamps_are_utc(self):
        """A naive string and a naive datetime land on the same day."""
        plus_two = timezone(timedelta(hours=2))
        calendar = Calendar("test", tz=plus_two)

        from_string = calendar.repo_day("2025-01-01T23:00:00", URL_A)
        from_datetime = calendar.repo_day(datetime(2025, 1, 1, 23), URL_A)

        assert from_string is from_datetime
        assert calendar.day(date(2025, 1, 2)).repositories[URL_A] is from_string

    def test_hue_spacing(self):
        calendar = Calendar("test")
        for url, total in [(URL_C, 3), (URL_A, 10), (URL_B, 5)]:
            calendar.intern_repository(url).contributions = total

        calendar.update_repo_colors()

        hues = [repository.hue for repository in calendar.most_used_repos()]
        assert hues == [285, 340, 35]
        assert calendar.repositories[URL_C].hue == 35

    def test_most_used_ties_keep_insertion_order(self):
        calendar = Calendar("test")
        for url in [URL_B, URL_A, URL_C]:
            calendar.intern_repository(url).contributions = 1

        assert [r.url for r in calendar.most_used_repos()] == [URL_B, URL_A, URL_C]

    def test_most_used_with_filter(self):
        calendar = Calendar("test")
        calendar.intern_repository(URL_A).contributions = 1
        calendar.intern_repository(URL_B).contributions = 2

        repos = calendar.most_used_repos(Filter.with_only_repos(URL_A))

        assert [r.url for r in repos] == [URL_A]

    def test_update_repo_counts_recomputes(self):
        calendar = Calendar("test")
        repository = calendar.intern_repository(URL_A)
        repository.contributions = 100
        calendar.day(date(2025, 1, 1)).set_repo_commits(repository, 2)
        calendar.day(date(2025, 1, 2)).set_repo_commits(repository, 3)

        calendar.update_repo_counts()

        assert repository.contributions == 5

    def test_repo_urls(self):
        calendar = Calendar("test")
        calendar.intern_repository(URL_A)
        calendar.intern_repository(Repository(URL_B))

        assert list(calendar.repo_urls()) == [URL_A, URL_B]


class TestDerivedViews:
    """Tests for max_contributions, weeks and trimmed_days."""

    def test_max_contributions(self):
        calendar = Calendar(
            "test", [Day(date(2025, 1, 1), 4), Day(date(2025, 1, 2), 9)]
        )
        assert calendar.max_contributions() == 9

    def test_max_contributions_without_summary_is_zero(self):
        calendar = Calendar("test")
        assert calendar.max_contributions() == 0

        calendar.day(date(2025, 1, 1))
        assert calendar.max_contributions() == 0

    def test_weeks_is_restartable(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 1), Day(date(2025, 1, 20), 2)])

        first = list(calendar.weeks())
        second = list(calendar.weeks())

        assert len(first) == 4
        assert first == second
        assert all(week[0].date.weekday() == 6 for week in first)

    def test_weeks_of_empty_calendar(self):
        assert list(Calendar("test").weeks()) == []

    def test_trimmed_days(self):
        calendar = Calendar("test", [Day(date(2025, 1, 1), 1), Day(date(2025, 1, 9), 0)])

        trimmed = calendar.trimmed_days()

        assert trimmed[0].date == date(2025, 1, 1)
        assert trimmed[-1].date == date(2025, 1, 9)
        assert len(trimmed) == 9

    def test_trimmed_days_without_data(self):
        calendar = Calendar("test")
        calendar.day(date(2025, 1, 1))
        assert calendar.trimmed_days() == []
