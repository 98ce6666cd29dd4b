"""
FastAPI web application for contrib-calendar.

Provides a read-only JSON API over a user's contribution calendar.
"""

from fastapi import FastAPI, HTTPException, Query

from contrib_calendar import config
from contrib_calendar.calendar import Calendar
from contrib_calendar.contributions import PayloadError
from contrib_calendar.day import Day, RepositoryDay
from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.github_client import GitHubClient, GitHubClientError
from contrib_calendar.static_data import StaticDataError, load_static_data
from contrib_calendar.summary import contribution_level, summarize_days

app = FastAPI(
    title="contrib-calendar",
    description="A calendar of GitHub contributions",
    version="0.1.0",
)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def _load_pages() -> list[dict]:
    """
    Load contributions pages from the static snapshot or the API.

    Raises:
        HTTPException: on configuration, snapshot or GitHub API errors
    """
    if config.STATIC_DATA_PATH:
        try:
            pages = load_static_data(config.STATIC_DATA_PATH)
        except StaticDataError as e:
            raise HTTPException(status_code=500, detail=str(e))
        if pages is None:
            raise HTTPException(
                status_code=500, detail="Static data is out of date"
            )
        return pages

    try:
        config.validate_config()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")

    client = GitHubClient(
        config.GITHUB_TOKEN, config.GITHUB_USERNAME, config.GITHUB_GRAPHQL_URL
    )
    try:
        return client.fetch_all()
    except GitHubClientError as e:
        raise HTTPException(status_code=502, detail=str(e))


def _load_calendar() -> Calendar:
    """Build the calendar, raising HTTPException if there is none."""
    pages = _load_pages()
    try:
        calendar = Calendar.from_contributions(*pages)
    except PayloadError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if calendar is None:
        raise HTTPException(status_code=404, detail="No contributions found")
    return calendar


def _filter(only: list[str]) -> Filter:
    return Filter.with_only_repos(*only) if only else ALL_ON


def _repo_day_to_dict(repo_day: RepositoryDay) -> dict:
    return {
        "url": repo_day.url(),
        "count": repo_day.count(),
        "commits": repo_day.commit_count,
        "created": repo_day.created,
        "issues": sorted(repo_day.issues),
        "prs": sorted(repo_day.prs),
        "reviews": sorted(repo_day.reviews),
        "color": repo_day.repository.color(),
    }


def _day_to_dict(day: Day, filter: Filter, max_count: int) -> dict:
    count = day.filtered_count(filter)
    return {
        "date": day.date.isoformat(),
        "contributionCount": day.contribution_count,
        "count": count,
        "unknownCount": day.unknown_count(),
        "level": contribution_level(count, max_count),
        "repositories": [
            _repo_day_to_dict(repo_day) for repo_day in day.filtered_repos(filter)
        ],
    }


@app.get("/api/calendar")
def get_calendar(only: list[str] = Query(default=[])):
    """
    Get the contribution calendar.

    Args:
        only: Repository URLs to restrict the counts to. All if empty.

    Returns:
        JSON with Sunday-first weeks of days and the maximum daily count
    """
    calendar = _load_calendar()
    filter = _filter(only)
    max_count = calendar.max_contributions()
    return {
        "name": calendar.name,
        "maxContributions": max_count,
        "weeks": [
            [_day_to_dict(day, filter, max_count) for day in week]
            for week in calendar.weeks()
        ],
    }


@app.get("/api/repositories")
def get_repositories(only: list[str] = Query(default=[])):
    """
    Get repositories ordered from most to least contributions.

    Returns:
        JSON with the repositories list
    """
    calendar = _load_calendar()
    return {
        "repositories": [
            {
                "url": repository.url,
                "isFork": repository.is_fork,
                "isPrivate": repository.is_private,
                "contributions": repository.contributions,
                "hue": repository.hue,
                "color": repository.color(),
            }
            for repository in calendar.most_used_repos(_filter(only))
        ]
    }


@app.get("/api/summary")
def get_summary(only: list[str] = Query(default=[])):
    """
    Get totals and top repositories over the days with data.

    Returns:
        JSON with contribution, issue, PR and review totals
    """
    calendar = _load_calendar()
    summary = summarize_days(calendar.trimmed_days(), _filter(only))
    return {
        "firstDate": summary.first_date,
        "lastDate": summary.last_date,
        "contributions": summary.contributions,
        "issues": summary.issues,
        "prs": summary.prs,
        "reviews": summary.reviews,
        "hiddenCount": summary.hidden_count,
        "topRepos": [
            {
                "url": repo_counts.repository.url,
                "total": repo_counts.total,
                "segments": repo_counts.counts,
            }
            for repo_counts in summary.top_repos
        ],
    }
