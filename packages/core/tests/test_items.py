"""Tests for the GitHub item source."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from ghsync_core.gh.items import GitHubItemSource, repo_from_url, to_remote_item
from ghsync_core.models import ItemCategory


def _issue(id, repo="owner/repo", number=1, title="Fix bug", kind="pull"):
    issue = MagicMock()
    issue.id = id
    issue.title = title
    issue.number = number
    issue.state = "open"
    issue.html_url = f"https://github.com/{repo}/{kind}/{number}"
    issue.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    issue.updated_at = None
    return issue


def _client(results_by_query=None, login="octocat"):
    client = MagicMock()
    client.get_user.return_value.login = login
    results_by_query = results_by_query or {}
    client.search_issues.side_effect = lambda q: results_by_query.get(q, [])
    return client


class TestRepoFromUrl:
    def test_pull_url(self):
        assert repo_from_url("https://github.com/owner/repo/pull/12") == "owner/repo"

    def test_issue_url(self):
        assert repo_from_url("https://github.com/o-r/my.repo/issues/3") == "o-r/my.repo"

    def test_unknown(self):
        assert repo_from_url("https://example.com/x") == "unknown"
        assert repo_from_url(None) == "unknown"


class TestToRemoteItem:
    def test_maps_fields(self):
        item = to_remote_item(_issue(99, number=7, title="Add cache"), ItemCategory.PR_CREATED)
        assert item.id == 99
        assert item.category == ItemCategory.PR_CREATED
        assert item.title == "Add cache"
        assert item.repo == "owner/repo"
        assert item.number == 7
        assert item.state == "open"
        assert item.created_at == "2026-01-01T00:00:00+00:00"
        assert item.updated_at == ""


class TestFetchOpenItems:
    def test_runs_one_query_per_sync_type(self):
        client = _client()
        GitHubItemSource("tok", client=client).fetch_open_items()

        queries = [c.args[0] for c in client.search_issues.call_args_list]
        assert queries == [
            "is:pr is:open review-requested:octocat",
            "is:pr is:open author:octocat",
            "is:issue is:open assignee:octocat",
            "is:issue is:open author:octocat",
        ]

    def test_only_enabled_sync_types(self):
        client = _client()
        GitHubItemSource("tok", sync_types=["issues-assigned"], client=client).fetch_open_items()
        client.search_issues.assert_called_once_with("is:issue is:open assignee:octocat")

    def test_categorises_results(self):
        client = _client(
            {
                "is:pr is:open review-requested:octocat": [_issue(1)],
                "is:issue is:open assignee:octocat": [_issue(2, kind="issues")],
            }
        )
        items = GitHubItemSource("tok", client=client).fetch_open_items()

        assert [(i.id, i.category) for i in items] == [
            (1, ItemCategory.PR_REVIEW),
            (2, ItemCategory.ISSUE_ASSIGNED),
        ]

    def test_username_fetched_once(self):
        client = _client()
        source = GitHubItemSource("tok", client=client)
        source.fetch_open_items()
        source.fetch_open_items()
        assert client.get_user.call_count == 1

    def test_repo_filter_selected(self):
        client = _client(
            {
                "is:pr is:open author:octocat": [_issue(1, repo="owner/keep"), _issue(2, repo="owner/drop")],
            }
        )
        source = GitHubItemSource(
            "tok",
            sync_types=["prs-created"],
            repo_filter={"mode": "selected", "repos": ["owner/keep"]},
            client=client,
        )
        assert [i.id for i in source.fetch_open_items()] == [1]

    def test_repo_filter_all(self):
        client = _client({"is:pr is:open author:octocat": [_issue(1, repo="a/b"), _issue(2, repo="c/d")]})
        source = GitHubItemSource("tok", sync_types=["prs-created"], repo_filter={"mode": "all"}, client=client)
        assert len(source.fetch_open_items()) == 2

    def test_api_error_propagates(self):
        client = _client()
        client.search_issues.side_effect = RuntimeError("rate limited")
        with pytest.raises(RuntimeError):
            GitHubItemSource("tok", client=client).fetch_open_items()


class TestListReposGrouped:
    def _repo(self, full_name, private=False):
        repo = MagicMock()
        owner, name = full_name.split("/")
        repo.full_name = full_name
        repo.name = name
        repo.owner.login = owner
        repo.private = private
        return repo

    def test_groups_by_owner_sorted(self):
        client = _client()
        client.get_user.return_value.get_repos.return_value = [
            self._repo("me/zeta"),
            self._repo("org/api", private=True),
            self._repo("me/Alpha"),
        ]
        grouped = GitHubItemSource("tok", client=client).list_repos_grouped()

        assert list(grouped) == ["me", "org"]
        assert [r.name for r in grouped["me"]] == ["Alpha", "zeta"]
        assert grouped["org"][0].is_private is True
