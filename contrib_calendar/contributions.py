"""
Typed view of one page of GitHub contribution data.

Pages arrive as JSON-shaped dicts from the GraphQL client or from a static
snapshot. They are validated here before being merged into a Calendar, so
that a missing URL or an unparseable timestamp fails with the path of the
offending field instead of being silently skipped.
"""

import datetime as dt
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class PayloadError(ValueError):
    """Raised when a contributions payload is malformed."""

    pass


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageInfo(_Model):
    has_next_page: bool = False
    end_cursor: str | None = None


class RepositoryRef(_Model):
    url: str
    is_fork: bool = False
    is_private: bool = False

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("url must not be empty")
        return value


class ContributionDay(_Model):
    date: dt.date
    contribution_count: int


class ContributionWeek(_Model):
    contribution_days: list[ContributionDay]


class ContributionCalendar(_Model):
    total_contributions: int | None = None
    weeks: list[ContributionWeek]


class CommitNode(_Model):
    commit_count: int
    occurred_at: dt.datetime


class CommitContributions(_Model):
    nodes: list[CommitNode | None] | None = None
    page_info: PageInfo | None = None


class CommitContributionsByRepository(_Model):
    repository: RepositoryRef
    contributions: CommitContributions


class Entity(_Model):
    """An issue, pull request or review, identified by URL."""

    url: str
    repository: RepositoryRef


class IssueContribution(_Model):
    occurred_at: dt.datetime
    issue: Entity


class PullRequestContribution(_Model):
    occurred_at: dt.datetime
    pull_request: Entity


class PullRequestReviewContribution(_Model):
    occurred_at: dt.datetime
    pull_request_review: Entity


class RepositoryContribution(_Model):
    occurred_at: dt.datetime
    repository: RepositoryRef


class Contributions(_Model):
    """One page of contribution results for a user."""

    login: str | None = None
    name: str = ""
    calendar: ContributionCalendar | None = None
    commits: list[CommitContributionsByRepository | None] = []
    issues: list[IssueContribution | None] = []
    prs: list[PullRequestContribution | None] = []
    repositories: list[RepositoryContribution | None] = []
    reviews: list[PullRequestReviewContribution | None] = []

    @field_validator("name", mode="before")
    @classmethod
    def name_or_empty(cls, value):
        return value or ""

    def summary_days(self) -> list[tuple[dt.date, int]]:
        """Flatten the summary calendar into (date, count) pairs."""
        if self.calendar is None:
            return []
        return [
            (day.date, day.contribution_count)
            for week in self.calendar.weeks
            for day in week.contribution_days
        ]


def clean_nodes(nodes) -> list:
    """Drop null entries from a GraphQL node list (which may itself be null)."""
    return [node for node in (nodes or []) if node is not None]


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def parse_contributions(data) -> Contributions:
    """
    Validate a JSON-shaped contributions page.

    Args:
        data: A Contributions instance (returned as-is) or a mapping

    Returns:
        The validated Contributions

    Raises:
        PayloadError: If a required field is missing or has the wrong type.
            The message names the offending field path.
    """
    if isinstance(data, Contributions):
        return data
    if not isinstance(data, Mapping):
        raise PayloadError(
            f"Contributions payload must be an object, got {type(data).__name__}"
        )

    try:
        return Contributions.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{_format_location(error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise PayloadError(f"Malformed contributions payload: {problems}") from e
