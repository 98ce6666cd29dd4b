"""
contrib-calendar: a calendar of GitHub contributions

Entry point for the command-line application.
"""

import argparse
import logging
from datetime import date

from contrib_calendar import config
from contrib_calendar.calendar import Calendar
from contrib_calendar.cli import (
    display_calendar,
    display_day,
    display_repositories,
    display_summary,
)
from contrib_calendar.contributions import PayloadError
from contrib_calendar.day import DateOutOfRangeError
from contrib_calendar.filter import ALL_ON, Filter
from contrib_calendar.github_client import GitHubClient, GitHubClientError
from contrib_calendar.local_scanner import LocalScanError, scan_directory
from contrib_calendar.static_data import (
    StaticDataError,
    load_static_data,
    write_static_data,
)
from contrib_calendar.summary import summarize_days


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="contrib-calendar",
        description="Show a calendar of GitHub contributions.",
    )
    parser.add_argument(
        "--user", default=config.GITHUB_USERNAME, help="GitHub login (default: token owner)"
    )
    parser.add_argument(
        "--static",
        default=config.STATIC_DATA_PATH,
        metavar="PATH",
        help="Load contributions from a static snapshot instead of the API",
    )
    parser.add_argument(
        "--write-static",
        metavar="PATH",
        help="Save fetched contributions as a static snapshot",
    )
    parser.add_argument(
        "--local",
        default=config.LOCAL_REPOS_DIR,
        metavar="DIR",
        help="Also count commits in the git repositories inside DIR",
    )
    parser.add_argument(
        "--only",
        action="append",
        default=[],
        metavar="URL",
        help="Only show this repository (may be repeated)",
    )
    parser.add_argument(
        "--mark-unknown",
        action="store_true",
        help="Show ? on days with contributions not tied to a repository",
    )
    parser.add_argument(
        "--day",
        type=date.fromisoformat,
        metavar="YYYY-MM-DD",
        help="Also show the per-repository breakdown of one day",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    return parser.parse_args(argv)


def fetch_calendar(user: str | None) -> tuple[Calendar | None, list[dict]]:
    """
    Fetch contributions from GitHub, merging each page as it arrives.

    Returns:
        The calendar (None if there were no pages) and the raw pages

    Raises:
        ValueError: On configuration errors
        GitHubClientError: On API errors
    """
    config.validate_config()
    client = GitHubClient(config.GITHUB_TOKEN, user, config.GITHUB_GRAPHQL_URL)

    pages = []
    calendar = None
    for page in client.query_contributions():
        pages.append(page)
        if calendar is None:
            calendar = Calendar.from_contributions(page)
        else:
            count = calendar.update_from_contributions(page)
            print(f"  ...loaded page {len(pages)} ({count} contributions)")
    return calendar, pages


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("contrib-calendar - Your contributions, day by day")
    print("-" * 50)

    try:
        if args.static:
            pages = load_static_data(args.static)
            if pages is None:
                print(f"\nStatic data in {args.static} is out of date; regenerate it.")
                return 1
            calendar = Calendar.from_contributions(*pages)
        else:
            print(f"\nFetching contributions for {args.user or 'token owner'}...\n")
            calendar, pages = fetch_calendar(args.user)

        if calendar is None:
            print("No contributions found.")
            return 0

        if args.write_static:
            write_static_data(args.write_static, pages)
            print(f"Saved {len(pages)} pages to {args.write_static}\n")

        if args.local:
            calendar.update_from_local(scan_directory(args.local))

        selected_day = calendar.day(args.day) if args.day else None

    except ValueError as e:
        # PayloadError and DateOutOfRangeError are ValueErrors too.
        kind = (
            "Data"
            if isinstance(e, (PayloadError, DateOutOfRangeError))
            else "Configuration"
        )
        print(f"\n{kind} Error:\n{e}")
        return 1
    except (GitHubClientError, StaticDataError, LocalScanError) as e:
        print(f"\nError: {e}")
        return 1

    filter = Filter.with_only_repos(*args.only) if args.only else ALL_ON

    display_calendar(calendar, filter, mark_unknown=args.mark_unknown)
    display_repositories(calendar, filter)
    display_summary(summarize_days(calendar.trimmed_days(), filter))
    if selected_day is not None:
        display_day(selected_day, filter)
    return 0


if __name__ == "__main__":
    exit(main())
