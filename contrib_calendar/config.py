"""
Configuration management for contrib-calendar.

Loads GitHub credentials and data locations from environment variables.
"""

import os
from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITHUB_USERNAME = os.getenv("GITHUB_USERNAME") or None
GITHUB_GRAPHQL_URL = os.getenv("GITHUB_GRAPHQL_URL", "https://api.github.com/graphql")
STATIC_DATA_PATH = os.getenv("CONTRIB_CALENDAR_STATIC_PATH") or None
LOCAL_REPOS_DIR = os.getenv("CONTRIB_CALENDAR_LOCAL_DIR") or None


def validate_config():
    """Validate that required configuration is present."""
    missing = []

    if not GITHUB_TOKEN or GITHUB_TOKEN == "your_token_here":
        missing.append("GITHUB_TOKEN")

    if missing:
        raise ValueError(
            f"Missing required configuration: {', '.join(missing)}\n"
            "Please copy .env.example to .env and fill in your values.\n"
            "Get a GitHub token at: https://github.com/settings/tokens"
        )
