"""
Thin GitHub REST + GraphQL client: everything GitScore needs about one user.

Calls are sequential and not retried; the first upstream failure aborts the lookup.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

import config
from scoring import MetricsInput

logger = logging.getLogger(__name__)

REPOS_PER_PAGE = 100


# -----------------------------
# Errors
# -----------------------------
class GitHubAPIError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubNotFound(GitHubAPIError):
    pass


# -----------------------------
# HTTP helpers
# -----------------------------
def _headers() -> Dict[str, str]:
    h = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "gitscore",
        "X-GitHub-Api-Version": config.API_VERSION,
    }
    if config.GITHUB_TOKEN:
        h["Authorization"] = f"Bearer {config.GITHUB_TOKEN}"
    return h


def _request_json(method: str, url: str, *, params: Optional[dict] = None, json: Optional[dict] = None) -> Any:
    try:
        resp = requests.request(
            method, url, headers=_headers(), params=params, json=json, timeout=config.REQUEST_TIMEOUT
        )
        if resp.status_code == 404:
            raise GitHubNotFound(f"GitHub resource not found: {url}", status_code=404)
        if resp.status_code >= 400:
            raise GitHubAPIError(f"GitHub error {resp.status_code}: {resp.text[:600]}", status_code=resp.status_code)
        return resp.json()
    except requests.RequestException as e:
        raise GitHubAPIError(f"GitHub request failed: {e}") from e


def _graphql(query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
    if not config.GITHUB_TOKEN:
        raise GitHubAPIError("GraphQL requires GITHUB_TOKEN. Set env var GITHUB_TOKEN.")
    data = _request_json("POST", config.GITHUB_GRAPHQL, json={"query": query, "variables": variables})
    if not isinstance(data, dict):
        raise GitHubAPIError("GitHub GraphQL returned a non-object payload.")
    if data.get("errors"):
        # Show only first few errors to keep messages short
        raise GitHubAPIError(f"GitHub GraphQL errors: {data['errors'][:3]}")
    return data.get("data") or {}


def _dateparse(s: Optional[str]) -> Optional[dt.datetime]:
    if not s:
        return None
    try:
        return dt.datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


# -----------------------------
# GraphQL
# -----------------------------
CALENDAR_QUERY = """
query($username:String!) {
  user(login:$username) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


def count_active_days(contribution_calendar: Dict[str, Any]) -> int:
    """
    Number of calendar days with at least one contribution.

    Repeated dates count once; entries without a date each count on their own.
    """
    days = set()
    undated = 0
    for w in (contribution_calendar.get("weeks") or []):
        for d in (w.get("contributionDays") or []):
            if int(d.get("contributionCount") or 0) > 0:
                if d.get("date"):
                    days.add(d["date"])
                else:
                    undated += 1
    return len(days) + undated


# -----------------------------
# Fetchers
# -----------------------------
@dataclass(frozen=True)
class UserStats:
    profile: Dict[str, Any]
    metrics: MetricsInput
    data_mode: str


def fetch_total_stars(username: str) -> int:
    total = 0
    max_pages = max(1, config.MAX_REPO_PAGES)
    for page in range(1, max_pages + 1):
        repos = _request_json(
            "GET",
            f"{config.GITHUB_API_BASE}/users/{username}/repos",
            params={"per_page": REPOS_PER_PAGE, "page": page},
        )
        if not isinstance(repos, list):
            break
        total += sum(int(r.get("stargazers_count") or 0) for r in repos)
        if len(repos) < REPOS_PER_PAGE:
            break
    else:
        logger.warning(
            "Stopped counting stars for %s after %d full pages of repos; total is a lower bound",
            username,
            max_pages,
        )
    return total


def fetch_total_commits(username: str) -> int:
    data = _request_json(
        "GET",
        f"{config.GITHUB_API_BASE}/search/commits",
        params={"q": f"author:{username}", "per_page": 1},
    )
    return int((data or {}).get("total_count") or 0)


def fetch_active_days(username: str) -> int:
    data = _graphql(CALENDAR_QUERY, {"username": username})
    user = data.get("user")
    if not user:
        raise GitHubNotFound("User not found (GraphQL).", status_code=404)
    calendar = (user.get("contributionsCollection") or {}).get("contributionCalendar") or {}
    return count_active_days(calendar)


def fetch_user_stats(username: str) -> UserStats:
    user = _request_json("GET", f"{config.GITHUB_API_BASE}/users/{username}")
    created_at = _dateparse((user or {}).get("created_at"))
    if created_at is None:
        raise GitHubAPIError(f"GitHub user payload for {username!r} has no usable created_at")

    login = user.get("login") or username
    total_stars = fetch_total_stars(login)
    total_commits = fetch_total_commits(login)

    if config.GITHUB_TOKEN:
        active_days = fetch_active_days(login)
        mode = "graphql"
    else:
        logger.info("No GITHUB_TOKEN configured; skipping contribution calendar for %s", login)
        active_days = 0
        mode = "rest"

    profile = {
        "username": login,
        "avatar_url": user.get("avatar_url"),
        "name": user.get("name"),
        "bio": user.get("bio"),
    }
    metrics = MetricsInput(
        followers=int(user.get("followers") or 0),
        public_repos=int(user.get("public_repos") or 0),
        total_stars=total_stars,
        total_commits=total_commits,
        active_days=active_days,
        account_created_at=created_at,
    )
    return UserStats(profile=profile, metrics=metrics, data_mode=mode)


def search_users(query: str, limit: int = 5) -> List[Dict[str, Any]]:
    data = _request_json(
        "GET",
        f"{config.GITHUB_API_BASE}/search/users",
        params={"q": f"{query} in:login", "per_page": limit},
    )
    items = (data or {}).get("items") or []
    return [{"login": u.get("login"), "avatar_url": u.get("avatar_url")} for u in items[:limit]]
