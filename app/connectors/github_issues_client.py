"""
app/connectors/github_issues_client.py

GitHub issues client: one page of a repository's issues, newest first.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import GitHubSettings
from app.connectors.base import BaseSourceClient

logger = logging.getLogger(__name__)


class GitHubIssuesClient(BaseSourceClient):
    """
    Reads issues for an ``owner/repo`` origin from the GitHub REST API.
    """

    def __init__(
        self,
        *,
        settings: GitHubSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="github",
            timeout_seconds=settings.timeout_seconds,
            rate_limit_per_second=settings.rate_limit_per_second,
            session=session,
        )
        self._settings = settings

    def fetch_raw_page(self, origin: str, page_size: int) -> Any:
        url = f"{self._settings.base_url}/repos/{origin.strip('/')}/issues"
        logger.info("Fetching issues from GitHub url=%s per_page=%s", url, page_size)
        return self._request_json(
            method="GET",
            url=url,
            params={
                "per_page": page_size,
                "sort": "created",
                "direction": "desc",
            },
            headers=self._headers(),
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._settings.user_agent,
        }
        if self._settings.token:
            headers["Authorization"] = f"Bearer {self._settings.token}"
        return headers
