"""Services module."""
from services.github_client import GitHubClient

__all__ = [
    "GitHubClient",
]
