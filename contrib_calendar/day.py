"""
Per-day contribution records.

A Day holds the externally reported contribution count for one local
calendar date, plus a RepositoryDay for every repository with known
activity on that date.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo

from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.repository import Repository

EPOCH = date(1970, 1, 1)

# 1000 years before and after 1970.
EPOCH_DAY_MIN = -365000
EPOCH_DAY_MAX = 365000


class DateOutOfRangeError(ValueError):
    """Raised when a date is too far from 1970 to be placed in a calendar."""

    pass


def parse_iso(text: str) -> date | datetime:
    """
    Parse an ISO-8601 date or timestamp.

    A bare ``YYYY-MM-DD`` gives a date; anything longer gives a datetime.
    A trailing ``Z`` is read as UTC.
    """
    text = text.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_local_date(value, tz: tzinfo | None = None) -> date:
    """
    Project a date, datetime or ISO-8601 string onto a local calendar date.

    Aware datetimes are converted to ``tz`` (the system local timezone when
    None) before the time of day is dropped. Naive datetimes and plain dates
    are taken as already local.

    Raises:
        ValueError: If a string cannot be parsed
        TypeError: For any other kind of value
    """
    if isinstance(value, str):
        value = parse_iso(value)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value

    raise TypeError(f"Expected a date, datetime or ISO string, got {value!r}")


def to_epoch_days(value: date) -> int:
    """Convert a date to days since 1970-01-01."""
    if isinstance(value, datetime):
        value = value.date()
    return (value - EPOCH).days


def from_epoch_days(epoch_day: int) -> date:
    """Convert days since 1970-01-01 back to a date."""
    if not EPOCH_DAY_MIN <= epoch_day <= EPOCH_DAY_MAX:
        raise DateOutOfRangeError(
            f"Epoch day {epoch_day} is outside "
            f"[{EPOCH_DAY_MIN}, {EPOCH_DAY_MAX}]"
        )
    return EPOCH + timedelta(days=epoch_day)


def days_since_sunday(value: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    return (value.weekday() + 1) % 7


@dataclass
class RepositoryDay:
    """Activity for a single repository on a single day."""

    repository: Repository
    commit_count: int = 0
    created: int = 0  # Repository creations this day (typically 0, sometimes 1)
    issues: set[str] = field(default_factory=set)
    prs: set[str] = field(default_factory=set)
    reviews: set[str] = field(default_factory=set)

    def add_commits(self, count: int) -> None:
        """Add to the commit count."""
        self.commit_count += count

    def set_commits(self, count: int) -> None:
        """Overwrite the commit count."""
        self.commit_count = count

    def add_create(self, count: int = 1) -> None:
        """Add to the repository creation count."""
        self.created += count

    def set_create(self, count: int) -> None:
        """Overwrite the repository creation count."""
        self.created = count

    def url(self) -> str:
        return self.repository.url

    def count(self) -> int:
        """
        Return the known contribution count for this repository on this day.

        Only includes the event types tracked here (commits, creations,
        issues, PRs and reviews). The summary count for the day may include
        contributions of other kinds.
        """
        return (
            self.created
            + self.commit_count
            + len(self.issues)
            + len(self.prs)
            + len(self.reviews)
        )


@dataclass
class Day:
    """A single local calendar date in the contribution calendar."""

    date: date
    contribution_count: int | None = None
    repositories: dict[str, RepositoryDay] = field(default_factory=dict)

    def epoch_day(self) -> int:
        return to_epoch_days(self.date)

    def has_data(self) -> bool:
        """
        Check if query results covered this day.

        The day doesn't need any contributions; it just needs a summary count
        or some known activity.
        """
        return (
            self.contribution_count is not None
            or self.known_contribution_count() > 0
        )

    def adds_up(self) -> bool:
        """Check if known contributions match the summary count."""
        return self.contribution_count == self.known_contribution_count()

    def known_contribution_count(self) -> int:
        """Sum the contributions known from specific repositories."""
        return sum(repo_day.count() for repo_day in self.repositories.values())

    def unknown_count(self) -> int:
        """
        Return contributions in the summary count not explained by detail.

        Negative when more specific events are known than the summary
        reports (or when there is no summary yet).
        """
        return (self.contribution_count or 0) - self.known_contribution_count()

    def filtered_repos(self, filter: Filter = ALL_ON) -> list[RepositoryDay]:
        """Get the RepositoryDays enabled by ``filter``."""
        return [
            repo_day
            for repo_day in self.repositories.values()
            if filter.is_on(repo_day.url())
        ]

    def filtered_count(self, filter: Filter = ALL_ON) -> int:
        """
        Count contributions for repositories enabled by ``filter``.

        Unknown contributions can't be attributed to a repository, so they
        are always included.
        """
        known = sum(repo_day.count() for repo_day in self.filtered_repos(filter))
        return known + max(self.unknown_count(), 0)

    def issue_count(self, filter: Filter = ALL_ON) -> int:
        return sum(len(repo_day.issues) for repo_day in self.filtered_repos(filter))

    def pr_count(self, filter: Filter = ALL_ON) -> int:
        return sum(len(repo_day.prs) for repo_day in self.filtered_repos(filter))

    def review_count(self, filter: Filter = ALL_ON) -> int:
        return sum(len(repo_day.reviews) for repo_day in self.filtered_repos(filter))

    def has_repo(self, url: str) -> bool:
        """Was there a known contribution to ``url`` on this day?"""
        return url in self.repositories

    def repo_day(self, repository: Repository) -> RepositoryDay:
        """Get the RepositoryDay for ``repository``, creating it if needed."""
        repo_day = self.repositories.get(repository.url)
        if repo_day is None:
            repo_day = RepositoryDay(repository)
            self.repositories[repository.url] = repo_day
        return repo_day

    def set_repo_commits(self, repository: Repository, count: int) -> None:
        """Overwrite the commit count for ``repository`` on this day."""
        self.repo_day(repository).set_commits(count)
