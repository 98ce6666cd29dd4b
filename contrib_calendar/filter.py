"""
Repository visibility filter.

Maintains a default state (all on or all off) and per-repository overrides.
"""

from dataclasses import dataclass, field


@dataclass
class Filter:
    """Decides which repositories are visible, keyed by URL."""

    default_state: bool = True
    states: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def with_only_repos(cls, *urls: str) -> "Filter":
        """Create a filter that only shows the given repositories."""
        filter = cls(default_state=False)
        for url in urls:
            filter.states[url] = True
        return filter

    def is_on(self, url: str) -> bool:
        """Check whether a repository should be visible."""
        return self.states.get(url, self.default_state)

    def clone(self) -> "Filter":
        """Return an independent copy of this filter."""
        return Filter(default_state=self.default_state, states=dict(self.states))

    def switch_repo(self, url: str, enabled: bool) -> None:
        """Enable or disable a repository by its URL."""
        self.states[url] = enabled


ALL_ON = Filter()
