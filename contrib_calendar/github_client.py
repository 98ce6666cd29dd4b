"""
GitHub GraphQL client for fetching contribution data.

Contributions come back in five independently paginated lists. Each request
asks for the next page of every list that still has one, and each response
is yielded as one Contributions page for the caller to merge.
"""

import logging

import requests

from contrib_calendar.contributions import clean_nodes

logger = logging.getLogger(__name__)

GRAPHQL_URL = "https://api.github.com/graphql"

CURSORS = ["commitCursor", "issueCursor", "prCursor", "repoCursor", "reviewCursor"]

CONTRIBUTIONS_QUERY_TEMPLATE = """query ( $includeCommits:Boolean!, $login:String, {{CURSORS}} ) {
  {{USER_OR_VIEWER}} {
    login
    name
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            contributionLevel
            date
          }
        }
      }
      commitContributionsByRepository(maxRepositories: 100)
        @include(if: $includeCommits)
      {
        repository {
          isFork
          isPrivate
          url
        }
        contributions(first: 100, after: $commitCursor) {
          nodes {
            commitCount
            isRestricted
            occurredAt
          }
          pageInfo {
            hasNextPage
            endCursor
          }
        }
      }
      issueContributions(first: 100, after: $issueCursor) {
        nodes {
          isRestricted
          occurredAt
          issue {
            repository {
              isFork
              isPrivate
              url
            }
            url
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
      pullRequestContributions(first: 100, after: $prCursor) {
        nodes {
          isRestricted
          occurredAt
          pullRequest {
            repository {
              isFork
              isPrivate
              url
            }
            url
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
      pullRequestReviewContributions(first: 100, after: $reviewCursor) {
        nodes {
          isRestricted
          occurredAt
          pullRequestReview {
            repository {
              isFork
              isPrivate
              url
            }
            url
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
      repositoryContributions(first: 100, after: $repoCursor) {
        nodes {
          isRestricted
          occurredAt
          repository {
            isFork
            isPrivate
            url
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
    }
  }
}"""

# Response field holding each cursor's connection.
_CONNECTIONS = {
    "issueCursor": "issueContributions",
    "prCursor": "pullRequestContributions",
    "repoCursor": "repositoryContributions",
    "reviewCursor": "pullRequestReviewContributions",
}


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


def build_query(username: str | None = None) -> str:
    """Fill in the query template for a user, or for the token owner."""
    query = CONTRIBUTIONS_QUERY_TEMPLATE.replace(
        "{{CURSORS}}", ", ".join(f"${name}:String" for name in CURSORS)
    )
    if username:
        return query.replace("{{USER_OR_VIEWER}}", "user(login: $login)")
    return query.replace("{{USER_OR_VIEWER}}", "viewer")


class GitHubClient:
    """Client for the GitHub GraphQL contributions API."""

    def __init__(
        self,
        token: str,
        username: str | None = None,
        graphql_url: str = GRAPHQL_URL,
    ):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub personal access token
            username: Login to fetch contributions for. Defaults to the
                owner of the token.
            graphql_url: GraphQL endpoint
        """
        self.token = token
        self.username = username
        self.graphql_url = graphql_url
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
            }
        )

    def _post(self, query: str, variables: dict) -> dict:
        """
        Run one GraphQL request.

        Raises:
            GitHubClientError: If the request or the query fails
        """
        response = self.session.post(
            self.graphql_url, json={"query": query, "variables": variables}
        )

        if response.status_code == 401:
            raise GitHubClientError(
                "Authentication failed. Check your GITHUB_TOKEN is valid."
            )
        elif response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining", "unknown")
            raise GitHubClientError(
                f"API rate limit exceeded or access forbidden. "
                f"Remaining requests: {remaining}"
            )
        elif not response.ok:
            raise GitHubClientError(
                f"GitHub API error: {response.status_code} - {response.text}"
            )

        logger.debug(
            "Rate limit used: %s/%s",
            response.headers.get("X-RateLimit-Used", "?"),
            response.headers.get("X-RateLimit-Limit", "?"),
        )

        body = response.json()
        if body.get("errors"):
            messages = "; ".join(
                error.get("message", str(error)) for error in body["errors"]
            )
            raise GitHubClientError(f"GraphQL error: {messages}")

        return body.get("data") or {}

    def query_contributions(self):
        """
        Fetch contributions page by page.

        Yields:
            One JSON-shaped Contributions dict per request, in arrival order

        Raises:
            GitHubClientError: If a request fails or the user doesn't exist
        """
        query = build_query(self.username)
        page_info = {
            name: {"endCursor": None, "hasNextPage": True} for name in CURSORS
        }
        page_number = 0

        while any(info["hasNextPage"] for info in page_info.values()):
            include_commits = page_info["commitCursor"]["hasNextPage"]
            variables = {
                "includeCommits": include_commits,
                **{name: page_info[name]["endCursor"] for name in CURSORS},
            }
            if self.username:
                variables["login"] = self.username

            data = self._post(query, variables)
            user = data.get("user") or data.get("viewer")
            if not user:
                raise GitHubClientError(
                    f"User '{self.username or 'viewer'}' not found on GitHub."
                )

            page_number += 1
            logger.info("Fetched contributions page %d", page_number)

            collection = user["contributionsCollection"]
            commits = collection.get("commitContributionsByRepository") or []
            yield {
                "login": user.get("login"),
                "name": user.get("name") or "",
                "calendar": collection.get("contributionCalendar"),
                "commits": commits,
                "issues": clean_nodes(collection["issueContributions"]["nodes"]),
                "prs": clean_nodes(collection["pullRequestContributions"]["nodes"]),
                "repositories": clean_nodes(
                    collection["repositoryContributions"]["nodes"]
                ),
                "reviews": clean_nodes(
                    collection["pullRequestReviewContributions"]["nodes"]
                ),
            }

            if include_commits:
                # Follow the first repository that still has more commits.
                next_info = next(
                    (
                        entry["contributions"]["pageInfo"]
                        for entry in clean_nodes(commits)
                        if entry["contributions"]["pageInfo"]["hasNextPage"]
                    ),
                    None,
                )
                page_info["commitCursor"] = next_info or {
                    "endCursor": None,
                    "hasNextPage": False,
                }

            for name, connection in _CONNECTIONS.items():
                if page_info[name]["hasNextPage"]:
                    page_info[name] = collection[connection]["pageInfo"]

    def fetch_all(self) -> list[dict]:
        """Fetch every page of contributions."""
        return list(self.query_contributions())
