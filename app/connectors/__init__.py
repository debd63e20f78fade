"""
app/connectors package marker.
"""

from app.connectors.base import BaseSourceClient
from app.connectors.github_issues_client import GitHubIssuesClient

__all__ = [
    "BaseSourceClient",
    "GitHubIssuesClient",
]
