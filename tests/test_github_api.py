"""
Tests for the GitHub client, with requests.request patched out.
"""

import datetime as dt

import pytest
import requests

import config
import github_api
from github_api import GitHubAPIError, GitHubNotFound, count_active_days, fetch_user_stats, search_users

from conftest import FakeResponse

USER = {
    "login": "octocat",
    "avatar_url": "https://avatars.example/octocat.png",
    "name": "The Octocat",
    "bio": "hello",
    "followers": 42,
    "public_repos": 120,
    "created_at": "2011-01-25T18:44:36Z",
}

CALENDAR = {
    "data": {
        "user": {
            "contributionsCollection": {
                "contributionCalendar": {
                    "totalContributions": 9,
                    "weeks": [
                        {"contributionDays": [
                            {"date": "2026-01-01", "contributionCount": 3},
                            {"date": "2026-01-02", "contributionCount": 0},
                        ]},
                        {"contributionDays": [
                            {"date": "2026-01-08", "contributionCount": 6},
                        ]},
                    ],
                }
            }
        }
    }
}


class FakeGitHub:
    """Routes requests.request calls by URL; records every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "params": params, "json": json})
        handler = self.routes[url]
        if callable(handler):
            return handler(params)
        return handler


def _repos_page(params):
    page = params["page"]
    if page == 1:
        return FakeResponse(payload=[{"stargazers_count": 1}] * 100)
    return FakeResponse(payload=[{"stargazers_count": 2}] * 10)


def _routes(user=None, calendar=None):
    base = config.GITHUB_API_BASE
    return {
        f"{base}/users/octocat": FakeResponse(payload=user or USER),
        f"{base}/users/octocat/repos": _repos_page,
        f"{base}/search/commits": FakeResponse(payload={"total_count": 1500}),
        config.GITHUB_GRAPHQL: FakeResponse(payload=calendar or CALENDAR),
    }


@pytest.fixture
def fake_github(monkeypatch):
    def install(routes):
        fake = FakeGitHub(routes)
        monkeypatch.setattr(github_api.requests, "request", fake)
        return fake

    return install


class TestFetchUserStats:
    def test_collects_all_metrics_with_token(self, fake_github, with_token):
        fake = fake_github(_routes())

        stats = fetch_user_stats("octocat")

        assert stats.data_mode == "graphql"
        assert stats.profile == {
            "username": "octocat",
            "avatar_url": USER["avatar_url"],
            "name": "The Octocat",
            "bio": "hello",
        }
        m = stats.metrics
        assert (m.followers, m.public_repos, m.total_stars, m.total_commits, m.active_days) == (42, 120, 120, 1500, 2)
        assert m.account_created_at == dt.datetime(2011, 1, 25, 18, 44, 36, tzinfo=dt.timezone.utc)
        assert fake.calls[0]["headers"]["Authorization"] == "Bearer test-token"
        assert fake.calls[-1]["json"]["variables"] == {"username": "octocat"}

    def test_calls_are_sequential_in_order(self, fake_github, with_token):
        fake = fake_github(_routes())

        fetch_user_stats("octocat")

        urls = [c["url"].replace(config.GITHUB_API_BASE, "") for c in fake.calls]
        assert urls == ["/users/octocat", "/users/octocat/repos", "/users/octocat/repos", "/search/commits", "/graphql"]

    def test_without_token_skips_calendar(self, fake_github, no_token):
        fake = fake_github(_routes())

        stats = fetch_user_stats("octocat")

        assert stats.data_mode == "rest"
        assert stats.metrics.active_days == 0
        assert all(c["method"] == "GET" for c in fake.calls)
        assert "Authorization" not in fake.calls[0]["headers"]

    def test_repo_pagination_is_bounded(self, fake_github, no_token, monkeypatch):
        monkeypatch.setattr(config, "MAX_REPO_PAGES", 3)
        routes = _routes()
        routes[f"{config.GITHUB_API_BASE}/users/octocat/repos"] = FakeResponse(payload=[{"stargazers_count": 1}] * 100)
        fake = fake_github(routes)

        stats = fetch_user_stats("octocat")

        assert stats.metrics.total_stars == 300
        assert sum(1 for c in fake.calls if c["url"].endswith("/repos")) == 3

    def test_page_cap_logs_undercount(self, fake_github, no_token, monkeypatch, caplog):
        monkeypatch.setattr(config, "MAX_REPO_PAGES", 2)
        routes = _routes()
        routes[f"{config.GITHUB_API_BASE}/users/octocat/repos"] = FakeResponse(payload=[{"stargazers_count": 1}] * 100)
        fake_github(routes)

        with caplog.at_level("WARNING", logger="github_api"):
            fetch_user_stats("octocat")

        assert "lower bound" in caplog.text

    def test_short_last_page_does_not_warn(self, fake_github, no_token, caplog):
        fake_github(_routes())

        with caplog.at_level("WARNING", logger="github_api"):
            fetch_user_stats("octocat")

        assert "lower bound" not in caplog.text

    def test_unknown_user_raises_not_found(self, fake_github, with_token):
        routes = _routes()
        routes[f"{config.GITHUB_API_BASE}/users/octocat"] = FakeResponse(status_code=404, text="Not Found")
        fake_github(routes)

        with pytest.raises(GitHubNotFound) as exc:
            fetch_user_stats("octocat")
        assert exc.value.status_code == 404

    def test_upstream_error_aborts(self, fake_github, with_token):
        routes = _routes()
        routes[f"{config.GITHUB_API_BASE}/search/commits"] = FakeResponse(status_code=422, text="Validation Failed")
        fake = fake_github(routes)

        with pytest.raises(GitHubAPIError) as exc:
            fetch_user_stats("octocat")
        assert exc.value.status_code == 422
        assert not any(c["url"] == config.GITHUB_GRAPHQL for c in fake.calls)

    def test_graphql_errors_raise(self, fake_github, with_token):
        fake_github(_routes(calendar={"errors": [{"message": "boom"}]}))

        with pytest.raises(GitHubAPIError, match="boom"):
            fetch_user_stats("octocat")

    def test_graphql_null_user_is_not_found(self, fake_github, with_token):
        fake_github(_routes(calendar={"data": {"user": None}}))

        with pytest.raises(GitHubNotFound):
            fetch_user_stats("octocat")

    def test_missing_created_at_raises(self, fake_github, with_token):
        fake_github(_routes(user={**USER, "created_at": None}))

        with pytest.raises(GitHubAPIError, match="created_at"):
            fetch_user_stats("octocat")

    def test_transport_errors_are_wrapped(self, monkeypatch, with_token):
        def boom(*args, **kwargs):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(github_api.requests, "request", boom)

        with pytest.raises(GitHubAPIError, match="connection refused"):
            fetch_user_stats("octocat")


class TestSearchUsers:
    def test_maps_items(self, fake_github, no_token):
        items = [{"login": f"user{i}", "avatar_url": f"https://a/{i}", "id": i} for i in range(7)]
        fake = fake_github({f"{config.GITHUB_API_BASE}/search/users": FakeResponse(payload={"items": items})})

        result = search_users("user")

        assert result == [{"login": f"user{i}", "avatar_url": f"https://a/{i}"} for i in range(5)]
        assert fake.calls[0]["params"] == {"q": "user in:login", "per_page": 5}

    def test_no_items(self, fake_github, no_token):
        fake_github({f"{config.GITHUB_API_BASE}/search/users": FakeResponse(payload={"total_count": 0})})

        assert search_users("zzz") == []


def test_count_active_days_ignores_empty_and_duplicate_days():
    calendar = {
        "weeks": [
            {"contributionDays": [{"date": "2026-01-01", "contributionCount": 1}]},
            {"contributionDays": [
                {"date": "2026-01-01", "contributionCount": 1},
                {"date": "2026-01-02", "contributionCount": 0},
                {"date": "2026-01-03", "contributionCount": None},
            ]},
            {},
        ]
    }

    assert count_active_days(calendar) == 1
    assert count_active_days({}) == 0


def test_count_active_days_counts_each_undated_day():
    calendar = {
        "weeks": [
            {"contributionDays": [
                {"contributionCount": 1},
                {"date": None, "contributionCount": 2},
                {"date": "2026-01-05", "contributionCount": 4},
                {"contributionCount": 0},
            ]},
        ]
    }

    assert count_active_days(calendar) == 3
