"""
Repository records shared across the contribution calendar.
"""

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_HUE = 285


@dataclass
class Repository:
    """A repository seen in contribution data, identified by its URL."""

    url: str
    is_fork: bool = False
    is_private: bool = False
    hue: int = DEFAULT_HUE  # Assigned by Calendar.update_repo_colors()
    contributions: int = 0  # Recomputed by Calendar.update_repo_counts()

    @classmethod
    def from_source(cls, source) -> "Repository":
        """
        Build a Repository from a URL, a mapping, or a payload model.

        Args:
            source: A bare URL string, a mapping with "url" and optional
                "isFork"/"isPrivate" keys, or an object with url, is_fork
                and is_private attributes.

        Returns:
            A new Repository (not registered anywhere)
        """
        if isinstance(source, Repository):
            return cls(source.url, source.is_fork, source.is_private)
        if isinstance(source, str):
            url, is_fork, is_private = source, False, False
        elif isinstance(source, Mapping):
            url = source.get("url")
            is_fork = bool(source.get("isFork", source.get("is_fork", False)))
            is_private = bool(
                source.get("isPrivate", source.get("is_private", False))
            )
        else:
            url = getattr(source, "url", None)
            is_fork = bool(getattr(source, "is_fork", False))
            is_private = bool(getattr(source, "is_private", False))

        if not url or not isinstance(url, str):
            raise ValueError(f"Repository source has no url: {source!r}")

        return cls(url, is_fork, is_private)

    def color(self, lightness: float = 55, chroma: float = 0.2) -> str:
        """Return an OKLCH CSS color for this repository."""
        return f"oklch({lightness}% {chroma} {self.hue}deg)"
