"""
CLI display functions for contrib-calendar.
"""

from contrib_calendar.calendar import Calendar
from contrib_calendar.day import Day
from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.summary import (
    DaysSummary,
    contribution_level,
    count_noun,
)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
LEVEL_SYMBOLS = ["·", "░", "▒", "▓", "█"]
NO_DATA_SYMBOL = " "
UNKNOWN_SYMBOL = "?"


def day_symbol(
    day: Day, max_count: int, filter: Filter = ALL_ON, mark_unknown: bool = False
) -> str:
    """
    Get the grid symbol for a day.

    Args:
        day: The day to draw
        max_count: Largest count on any day, for scaling
        filter: Repositories to include
        mark_unknown: Show days with unexplained contributions as "?"
    """
    if not day.has_data():
        return NO_DATA_SYMBOL
    if mark_unknown and day.unknown_count() > 0:
        return UNKNOWN_SYMBOL
    return LEVEL_SYMBOLS[contribution_level(day.filtered_count(filter), max_count)]


def display_calendar(
    calendar: Calendar, filter: Filter = ALL_ON, mark_unknown: bool = False
) -> None:
    """
    Display the calendar as a grid with one column per week.

    Args:
        calendar: Calendar to display
        filter: Repositories to include
        mark_unknown: Show days with unexplained contributions as "?"
    """
    weeks = list(calendar.weeks())
    if not weeks:
        print("No contributions loaded.")
        print()
        return

    max_count = calendar.max_contributions()
    first, last = weeks[0][0].date, weeks[-1][-1].date

    print(f"Contributions for {calendar.name or 'unknown user'}:")
    print(f"  {first.isoformat()} to {last.isoformat()}")
    for weekday, name in enumerate(DAY_NAMES):
        row = "".join(
            day_symbol(week[weekday], max_count, filter, mark_unknown)
            for week in weeks
        )
        print(f"  {name} {row.rstrip()}")

    legend = " ".join(LEVEL_SYMBOLS)
    print(f"  Less {legend} More")
    print()


def display_repositories(
    calendar: Calendar, filter: Filter = ALL_ON, limit: int = 10
) -> None:
    """
    Display the most used repositories with their totals.

    Args:
        calendar: Calendar to display
        filter: Repositories to include
        limit: Maximum number of repositories to list
    """
    repositories = calendar.most_used_repos(filter)
    print("Top Repositories:")
    if not repositories:
        print("  (none)")
        print()
        return

    for repository in repositories[:limit]:
        flags = []
        if repository.is_fork:
            flags.append("fork")
        if repository.is_private:
            flags.append("private")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(
            f"  {repository.contributions:>5}  hue {repository.hue:>3}  "
            f"{repository.url}{suffix}"
        )

    hidden = len(repositories) - limit
    if hidden > 0:
        print(f"  ...and {count_noun(hidden, 'more repository')}")
    print()


def format_day(day: Day, filter: Filter = ALL_ON) -> list[str]:
    """
    Format the per-repository breakdown of one day.

    Returns:
        Lines of text, without trailing newlines
    """
    lines = [f"{day.date.isoformat()}: {count_noun(day.filtered_count(filter), 'contribution')}"]
    for repo_day in sorted(
        day.filtered_repos(filter), key=lambda r: r.count(), reverse=True
    ):
        parts = []
        if repo_day.created:
            parts.append("created")
        if repo_day.commit_count:
            parts.append(count_noun(repo_day.commit_count, "commit"))
        if repo_day.issues:
            parts.append(count_noun(len(repo_day.issues), "issue"))
        if repo_day.prs:
            parts.append(count_noun(len(repo_day.prs), "PR"))
        if repo_day.reviews:
            parts.append(count_noun(len(repo_day.reviews), "review"))
        lines.append(f"  {repo_day.url()}: {', '.join(parts)}")

    unknown = day.unknown_count()
    if unknown > 0:
        lines.append(f"  {count_noun(unknown, 'unknown contribution')}")
    return lines


def display_day(day: Day, filter: Filter = ALL_ON) -> None:
    """Display the per-repository breakdown of one day."""
    for line in format_day(day, filter):
        print(line)
    print()


def display_summary(summary: DaysSummary) -> None:
    """
    Display totals for a run of days.

    Args:
        summary: DaysSummary from summarize_days()
    """
    if summary.first_date is None:
        print("No days with data.")
        print()
        return

    if summary.first_date == summary.last_date:
        title = summary.first_date
    else:
        title = f"{summary.first_date} to {summary.last_date}"

    print(f"📊 {title}")
    if summary.hidden_count > 0:
        print(f"   {count_noun(summary.hidden_count, 'repository')} hidden")
    print(f"   Contributions: {summary.contributions}")
    print(f"   Issues:        {summary.issues}")
    print(f"   PRs:           {summary.prs}")
    print(f"   Reviews:       {summary.reviews}")
    print()
