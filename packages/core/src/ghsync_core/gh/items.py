from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from github import Github

from ghsync_core.models import ALL_SYNC_TYPES, SYNC_TYPES, ItemCategory, RemoteItem

logger = logging.getLogger(__name__)

_REPO_FROM_URL_RE = re.compile(r"github\.com/([^/]+/[^/]+)/")

_QUERIES: dict[ItemCategory, str] = {
    ItemCategory.PR_REVIEW: "is:pr is:open review-requested:{user}",
    ItemCategory.PR_CREATED: "is:pr is:open author:{user}",
    ItemCategory.ISSUE_ASSIGNED: "is:issue is:open assignee:{user}",
    ItemCategory.ISSUE_CREATED: "is:issue is:open author:{user}",
}


@dataclass
class RepoInfo:
    full_name: str  # "owner/repo"
    name: str
    owner: str
    is_private: bool


def repo_from_url(url: str) -> str:
    """Extract "owner/repo" from an html_url like https://github.com/o/r/pull/1."""
    match = _REPO_FROM_URL_RE.search(url or "")
    return match.group(1) if match else "unknown"


def _to_iso(value) -> str:
    return value.isoformat() if value is not None else ""


def to_remote_item(issue, category: ItemCategory) -> RemoteItem:
    """Map a PyGithub search result (Issue) to a RemoteItem."""
    return RemoteItem(
        id=issue.id,
        category=category,
        title=issue.title or "",
        url=issue.html_url,
        repo=repo_from_url(issue.html_url),
        number=issue.number,
        state=issue.state or "open",
        created_at=_to_iso(issue.created_at),
        updated_at=_to_iso(issue.updated_at),
    )


class GitHubItemSource:
    """Fetches the open PRs and issues the authenticated user cares about.

    Absence from fetch_open_items() is the only closure signal the
    reconciler gets; there is no separate "closed" query.
    """

    def __init__(
        self,
        token: str,
        sync_types: list[str] | None = None,
        repo_filter: dict | None = None,
        client: Github | None = None,
    ):
        self._gh = client if client is not None else Github(token)
        self._sync_types = list(sync_types) if sync_types else list(ALL_SYNC_TYPES)
        self._repo_filter = repo_filter or {"mode": "all", "repos": []}
        self._username: str | None = None

    def get_username(self) -> str:
        if self._username is None:
            self._username = self._gh.get_user().login
        return self._username

    def fetch_open_items(self) -> list[RemoteItem]:
        """Run one search per enabled sync type and return the matching items.

        Raises on any API failure; a partial result would look like closures.
        """
        username = self.get_username()
        items: list[RemoteItem] = []
        for sync_type in self._sync_types:
            category = SYNC_TYPES[sync_type]
            query = _QUERIES[category].format(user=username)
            logger.debug("Searching GitHub: %s", query)
            items.extend(to_remote_item(issue, category) for issue in self._gh.search_issues(query))
        return [item for item in items if self._should_include_repo(item.repo)]

    def _should_include_repo(self, repo_full_name: str) -> bool:
        if self._repo_filter.get("mode", "all") == "all":
            return True
        return repo_full_name in (self._repo_filter.get("repos") or [])

    def list_repos_grouped(self) -> dict[str, list[RepoInfo]]:
        """Return every repo the user can access, grouped by owner, sorted by name."""
        grouped: dict[str, list[RepoInfo]] = {}
        for repo in self._gh.get_user().get_repos(sort="full_name"):
            owner = repo.owner.login if repo.owner else "unknown"
            grouped.setdefault(owner, []).append(
                RepoInfo(full_name=repo.full_name, name=repo.name, owner=owner, is_private=bool(repo.private))
            )
        for repos in grouped.values():
            repos.sort(key=lambda r: r.name.lower())
        return grouped
