"""
The contribution calendar.

A Calendar is a gap-free run of Days that always starts on a Sunday and ends
on a Saturday, plus a registry of the repositories those days refer to.
Pages of contribution data are merged into it one at a time as they arrive.
"""

import logging
from collections import Counter
from datetime import date, datetime, timezone, tzinfo

from contrib_calendar.contributions import (
    Contributions,
    clean_nodes,
    parse_contributions,
)
from contrib_calendar.day import (
    EPOCH_DAY_MAX,
    EPOCH_DAY_MIN,
    DateOutOfRangeError,
    Day,
    RepositoryDay,
    days_since_sunday,
    from_epoch_days,
    parse_iso,
    to_epoch_days,
    to_local_date,
)
from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.repository import DEFAULT_HUE, Repository

logger = logging.getLogger(__name__)

HUE_STEP = 55
LOCAL_URL_PREFIX = "local:"


class Calendar:
    """A user's contribution calendar over a date range."""

    def __init__(
        self,
        name: str,
        days: list[Day] | None = None,
        tz: tzinfo | None = None,
    ):
        """
        Initialize the calendar.

        Args:
            name: Display name of the user
            days: Summary days to start with, in any order
            tz: Timezone used to project event timestamps onto calendar
                dates. Defaults to the system local timezone.
        """
        self.name = name
        self.tz = tz
        self.days: list[Day] = []
        self.repositories: dict[str, Repository] = {}
        self.update_summary(days or [])

    @classmethod
    def from_contributions(cls, *contributions, tz: tzinfo | None = None):
        """
        Build a Calendar from one or more pages of contributions.

        Returns:
            A Calendar named after the first page, or None if no pages
            were passed
        """
        if not contributions:
            return None

        pages = [parse_contributions(page) for page in contributions]
        calendar = cls(pages[0].name, tz=tz)
        for page in pages:
            calendar.update_from_contributions(page)
        return calendar

    def update_from_contributions(self, contributions) -> int:
        """
        Merge a page of contributions into this calendar.

        This is idempotent: progressive loading re-applies every page each
        time another one arrives, so applying a page twice must leave the
        calendar as it was after the first time. Commit and creation counts
        are therefore overwritten, and issues, PRs and reviews are sets of
        URLs.

        Args:
            contributions: A Contributions page or its JSON-shaped dict

        Returns:
            The number of specific contributions found in the page

        Raises:
            PayloadError: If the page is malformed
        """
        page: Contributions = parse_contributions(contributions)
        count = 0

        summary = page.summary_days()
        if summary:
            self.update_summary(
                [Day(day_date, day_count) for day_date, day_count in summary]
            )

        for entry in clean_nodes(page.commits):
            for node in clean_nodes(entry.contributions.nodes):
                # If GitHub ever returned separate nodes for the same
                # repository and date, this would keep only the last one.
                # The day would then fail to add up.
                self.repo_day(node.occurred_at, entry.repository).set_commits(
                    node.commit_count
                )
                count += node.commit_count

        for node in clean_nodes(page.issues):
            self.repo_day(node.occurred_at, node.issue.repository).issues.add(
                node.issue.url
            )
            count += 1

        for node in clean_nodes(page.prs):
            self.repo_day(node.occurred_at, node.pull_request.repository).prs.add(
                node.pull_request.url
            )
            count += 1

        for node in clean_nodes(page.repositories):
            self.repo_day(node.occurred_at, node.repository).set_create(1)
            count += 1

        for node in clean_nodes(page.reviews):
            review = node.pull_request_review
            self.repo_day(node.occurred_at, review.repository).reviews.add(
                review.url
            )
            count += 1

        self.update_repo_counts()
        self.update_repo_colors()
        return count

    def update_from_local(self, contributions: dict[str, list]) -> None:
        """
        Merge commits from local sources into the existing date range.

        Each source becomes a repository with the URL ``local:<name>``. Its
        commit count on a day is overwritten with the number of instants
        falling on that day. Instants outside the calendar are dropped.

        Args:
            contributions: Mapping of source name to commit instants
        """
        if not self.days:
            logger.debug("Calendar is empty; ignoring local contributions")
            return

        first_epoch_day = self.first_epoch_day()
        last_epoch_day = first_epoch_day + len(self.days) - 1

        for name, instants in contributions.items():
            repository = self.intern_repository(f"{LOCAL_URL_PREFIX}{name}")
            commits_by_day = Counter(
                to_epoch_days(self._instant_date(instant)) for instant in instants
            )

            for epoch_day in sorted(commits_by_day):
                if not first_epoch_day <= epoch_day <= last_epoch_day:
                    logger.debug(
                        "Dropping local commits for %s on epoch day %d",
                        name,
                        epoch_day,
                    )
                    continue
                self.days[epoch_day - first_epoch_day].set_repo_commits(
                    repository, commits_by_day[epoch_day]
                )

        self.update_repo_counts()
        self.update_repo_colors()

    def update_repo_counts(self) -> None:
        """Recalculate the total contributions for every repository."""
        for repository in self.repositories.values():
            repository.contributions = 0

        for day in self.days:
            for repo_day in day.repositories.values():
                repo_day.repository.contributions += repo_day.count()

    def update_repo_colors(self) -> None:
        """
        Assign hues to repositories from most to least used.

        Each successive hue is 55 degrees past the previous one, so the most
        active repositories get the most distinct colors.
        """
        for rank, repository in enumerate(self.most_used_repos()):
            repository.hue = (DEFAULT_HUE + HUE_STEP * rank) % 360

    def most_used_repos(self, filter: Filter = ALL_ON) -> list[Repository]:
        """Return repositories enabled by ``filter``, most contributions first."""
        # sorted() is stable, so ties keep their registration order.
        return sorted(
            self.filtered_repos(filter),
            key=lambda repository: repository.contributions,
            reverse=True,
        )

    def filtered_repos(self, filter: Filter = ALL_ON) -> list[Repository]:
        """Get the repositories enabled by ``filter``."""
        return [
            repository
            for repository in self.repositories.values()
            if filter.is_on(repository.url)
        ]

    def repo_urls(self):
        """Return all repository URLs."""
        return self.repositories.keys()

    def intern_repository(self, source) -> Repository:
        """
        Return the registered Repository for ``source``, creating it on miss.

        Flags are taken from the first sighting only.
        """
        repository = Repository.from_source(source)
        existing = self.repositories.get(repository.url)
        if existing is not None:
            return existing
        self.repositories[repository.url] = repository
        return repository

    def repo_day(self, time, source) -> RepositoryDay:
        """Get the RepositoryDay for a time and repository, creating it if needed."""
        day = self.day(self._instant_date(time))
        repository = self.intern_repository(source)
        return day.repo_day(repository)

    def first_epoch_day(self) -> int:
        return self.days[0].epoch_day()

    def day(self, requested) -> Day:
        """
        Get the Day for a local date, creating it if needed.

        New days are added so that the calendar still starts on a Sunday,
        ends on a Saturday and has no gaps. If any of those days would be
        out of range, nothing is added.

        Raises:
            DateOutOfRangeError: If the date, or the rest of its week, is
                more than about 1000 years from 1970
        """
        requested_date = to_local_date(requested, self.tz)
        requested_epoch_day = to_epoch_days(requested_date)
        sunday = requested_epoch_day - days_since_sunday(requested_date)

        if not self.days:
            self.days = self._new_days(sunday, sunday + 6)
            return self.days[requested_epoch_day - sunday]

        first_epoch_day = self.first_epoch_day()
        relative_day = requested_epoch_day - first_epoch_day

        if relative_day >= len(self.days):
            # Pad through the Saturday of the requested week.
            self.days.extend(
                self._new_days(first_epoch_day + len(self.days), sunday + 6)
            )

        if relative_day >= 0:
            return self.days[relative_day]

        # Before the first day: prepend from the requested week's Sunday.
        self.days[:0] = self._new_days(sunday, first_epoch_day - 1)
        return self.days[requested_epoch_day - sunday]

    def _new_days(self, first_epoch_day: int, last_epoch_day: int) -> list[Day]:
        """Build empty days for an inclusive span, all or none."""
        if first_epoch_day < EPOCH_DAY_MIN or last_epoch_day > EPOCH_DAY_MAX:
            raise DateOutOfRangeError(
                f"Epoch days {first_epoch_day} to {last_epoch_day} are outside "
                f"[{EPOCH_DAY_MIN}, {EPOCH_DAY_MAX}]"
            )
        return [
            Day(from_epoch_days(epoch_day))
            for epoch_day in range(first_epoch_day, last_epoch_day + 1)
        ]

    def update_summary(self, new_days: list[Day]) -> None:
        """
        Update summary contribution counts, adding Days as needed.

        For existing days only ``contribution_count`` changes, so detail is
        kept. New days are inserted as given. ``new_days`` may be in any
        order and may leave gaps; gaps are filled with empty days.

        Raises:
            DateOutOfRangeError: If the padded range would be too far from
                1970. The calendar is left unchanged.
        """
        if not new_days:
            return

        first_day = min(self.days + new_days, key=lambda day: day.date)
        first_epoch_day = first_day.epoch_day() - days_since_sunday(first_day.date)
        last_epoch_day = max(day.epoch_day() for day in self.days + new_days)

        # Round the span up to whole weeks so it ends on a Saturday.
        week_count = -(-(last_epoch_day - first_epoch_day + 1) // 7)
        last_epoch_day = first_epoch_day + week_count * 7 - 1
        if first_epoch_day < EPOCH_DAY_MIN or last_epoch_day > EPOCH_DAY_MAX:
            raise DateOutOfRangeError("Summary days are too far from 1970")

        days_by_epoch_day = {day.epoch_day(): day for day in self.days}
        for day in new_days:
            epoch_day = day.epoch_day()
            existing = days_by_epoch_day.get(epoch_day)
            if existing is not None:
                existing.contribution_count = day.contribution_count
            else:
                days_by_epoch_day[epoch_day] = day

        self.days = [
            days_by_epoch_day.get(epoch_day) or Day(from_epoch_days(epoch_day))
            for epoch_day in range(first_epoch_day, last_epoch_day + 1)
        ]

    def trimmed_days(self) -> list[Day]:
        """Return the days from the first to the last one with data."""
        with_data = [i for i, day in enumerate(self.days) if day.has_data()]
        if not with_data:
            return []
        return self.days[with_data[0] : with_data[-1] + 1]

    def max_contributions(self) -> int:
        """
        Get the largest summary count on any one day.

        Returns 0 if no day has a summary count.
        """
        return max(
            (
                day.contribution_count
                for day in self.days
                if day.contribution_count is not None
            ),
            default=0,
        )

    def weeks(self):
        """Yield the days in 7-day lists, each starting on Sunday."""
        for i in range(0, len(self.days), 7):
            yield self.days[i : i + 7]

    def _instant_date(self, value) -> date:
        # Event timestamps without an offset are UTC.
        if isinstance(value, str):
            value = parse_iso(value)
        if isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return to_local_date(value, self.tz)
