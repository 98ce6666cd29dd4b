"""
Summaries over a run of days.

Provides the totals, top repositories and sparkline segments shown next to
the calendar, plus the intensity levels used to shade each day.
"""

from dataclasses import dataclass, field

from contrib_calendar.day import Day
from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.repository import Repository

TOP_REPO_COUNT = 6
SPARKLINE_SEGMENTS = 50


@dataclass
class RepoCounts:
    """Per-day contribution counts for one repository."""

    repository: Repository
    counts: list[int | None] = field(default_factory=list)  # None: no data
    total: int = 0


@dataclass
class DaysSummary:
    """Totals for a run of days, scoped by a filter."""

    first_date: str | None
    last_date: str | None
    contributions: int
    issues: int
    prs: int
    reviews: int
    top_repos: list[RepoCounts]
    hidden_count: int


def contribution_level(count: int, max_count: int) -> int:
    """
    Calculate intensity level for heatmap shading.

    Args:
        count: Contributions on the day
        max_count: Largest count on any day, e.g. Calendar.max_contributions()

    Returns:
        Level from 0-4, 0 only when there were no contributions
    """
    if count <= 0:
        return 0
    if max_count <= 0 or count >= max_count:
        return 4
    return min(4, 1 + int(4 * count / max_count))


def chunk(items: list, chunk_count: int) -> list[list]:
    """Split ``items`` into at most ``chunk_count`` chunks of nearly equal size."""
    chunk_length = max(1.0, len(items) / chunk_count)
    chunks = []
    i = 0.0
    while round(i) < len(items):
        chunks.append(items[round(i) : round(i + chunk_length)])
        i += chunk_length
    return chunks


def pluralize(singular: str, count: int = 2) -> str:
    """Make a noun plural (very incomplete)."""
    if count == 1:
        return singular
    if singular.endswith("y"):
        return singular[:-1] + "ies"
    return singular + "s"


def count_noun(count: int, noun: str) -> str:
    """Return "<count> <noun(s)>"."""
    return f"{count} {pluralize(noun, count)}"


def find_top_repos(days: list[Day], filter: Filter = ALL_ON) -> list[RepoCounts]:
    """
    Count contributions per repository for each of ``days``.

    Days with no data at all get None rather than 0, so sparklines can tell
    "nothing happened" from "not loaded yet".

    Returns:
        RepoCounts sorted by total, highest first
    """
    by_url: dict[str, RepoCounts] = {}
    for i, day in enumerate(days):
        for repo_day in day.filtered_repos(filter):
            repo_counts = by_url.get(repo_day.url())
            if repo_counts is None:
                repo_counts = RepoCounts(
                    repo_day.repository,
                    [0 if d.has_data() else None for d in days],
                )
                by_url[repo_day.url()] = repo_counts
            repo_counts.counts[i] = repo_day.count()
            repo_counts.total += repo_day.count()

    return sorted(by_url.values(), key=lambda r: r.total, reverse=True)


def _segment_counts(counts: list[int | None]) -> list[int | None]:
    segments = []
    for segment in chunk(counts, SPARKLINE_SEGMENTS):
        if all(count is None for count in segment):
            segments.append(None)
        else:
            segments.append(sum(count or 0 for count in segment))
    return segments


def summarize_days(
    days: list[Day],
    filter: Filter = ALL_ON,
    top: int = TOP_REPO_COUNT,
) -> DaysSummary:
    """
    Summarize contributions over ``days``.

    Args:
        days: Days in chronological order, e.g. Calendar.trimmed_days()
        filter: Repositories to include
        top: Number of top repositories to return

    Returns:
        DaysSummary with totals, the top repositories (counts chunked into
        sparkline segments) and how many repositories the filter hides
    """
    top_repos = find_top_repos(days, filter)[:top]
    for repo_counts in top_repos:
        repo_counts.counts = _segment_counts(repo_counts.counts)

    all_repos = {
        url for day in days for url in day.repositories
    }
    shown_repos = {
        repo_day.url() for day in days for repo_day in day.filtered_repos(filter)
    }

    return DaysSummary(
        first_date=days[0].date.isoformat() if days else None,
        last_date=days[-1].date.isoformat() if days else None,
        contributions=sum(day.filtered_count(filter) for day in days),
        issues=sum(day.issue_count(filter) for day in days),
        prs=sum(day.pr_count(filter) for day in days),
        reviews=sum(day.review_count(filter) for day in days),
        top_repos=top_repos,
        hidden_count=len(all_repos) - len(shown_repos),
    )
