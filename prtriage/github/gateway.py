"""Synchronous wrapper around the GitHub REST endpoints used by the reports."""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .config import BASE_URL, POOL_SIZE
from .http_client import NotFoundError, build_session, get_json, paged_get, request
from .models import Comment, Commit, Label, PullRequest, Status, Tag, parse_timestamp

VERSION_RE = re.compile(r"^[vV]?(\d+)((?:\.\d+)*)")

PullCacheKey = Tuple[str, str, str]


def version_key(name: str) -> Optional[Tuple[int, ...]]:
    """Parse the leading dotted-numeric part of a tag name, or None if it has none."""
    match = VERSION_RE.match(name or "")
    if not match:
        return None
    parts = [match.group(1)] + [p for p in match.group(2).split(".") if p]
    return tuple(int(p) for p in parts)


def sort_tags(tags: List[Tag]) -> List[Tag]:
    """Versioned tags newest first; tags without a version keep their order at the end."""
    versioned = [t for t in tags if version_key(t.name) is not None]
    others = [t for t in tags if version_key(t.name) is None]
    versioned.sort(key=lambda t: version_key(t.name), reverse=True)
    return versioned + others


def _matcher(pattern: Optional[str]):
    regex = re.compile(pattern) if pattern else None
    return lambda name: regex is None or bool(regex.search(name or ""))


class GitHubGateway:
    """Thin wrapper around the GitHub REST API returning fully paginated results.

    Listing calls exhaust pagination before returning. Nothing is retried:
    NotFoundError/NetworkError propagate to the caller.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        verify_identity: bool = True,
        pool_size: int = POOL_SIZE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or build_session(token, pool_size=pool_size)
        self.login: Optional[str] = None
        self._pull_cache: Dict[PullCacheKey, List[PullRequest]] = {}
        if token and verify_identity:
            self.login = self.whoami()

    def _url(self, path: str) -> str:
        path = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return get_json(self.session, self._url(path), params=params)

    def _list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return paged_get(self.session, self._url(path), params=params)

    def whoami(self) -> str:
        """Identity check for the configured token."""
        return self._get("/user").get("login") or ""

    # repositories -----------------------------------------------------------

    def list_repositories(self, owner: str, name_pattern: Optional[str] = None) -> List[str]:
        """Sorted, de-duplicated repository names under `owner` matching the regex."""
        try:
            payload = self._list(f"/orgs/{owner}/repos")
        except NotFoundError:
            payload = self._list(f"/users/{owner}/repos")
        matches = _matcher(name_pattern)
        return sorted({repo["name"] for repo in payload if repo.get("name") and matches(repo["name"])})

    # pull requests ----------------------------------------------------------

    def list_pull_requests(self, repo: str, state: str = "open", sort: str = "updated") -> List[PullRequest]:
        """All pull requests for `repo`, memoized per (repo, state, sort) for this gateway."""
        key: PullCacheKey = (repo, state, sort)
        if key not in self._pull_cache:
            payload = self._list(f"/repos/{repo}/pulls", params={"state": state, "sort": sort})
            self._pull_cache[key] = [PullRequest.from_api(item, repo=repo) for item in payload]
        return list(self._pull_cache[key])

    def clear_cache(self) -> None:
        self._pull_cache.clear()

    def fetch_pull_request(self, repo: str, number: int) -> PullRequest:
        return PullRequest.from_api(self._get(f"/repos/{repo}/pulls/{number}"), repo=repo)

    def fetch_pull_request_commits(self, repo: str, number: int) -> List[Commit]:
        return [Commit.from_api(c) for c in self._list(f"/repos/{repo}/pulls/{number}/commits")]

    def fetch_issue_comments(self, repo: str, number: int) -> List[Comment]:
        return [Comment.from_api(c) for c in self._list(f"/repos/{repo}/issues/{number}/comments")]

    def fetch_statuses(self, repo: str, sha: str) -> List[Status]:
        """Commit statuses for `sha`, most recent first."""
        return [Status.from_api(s) for s in self._list(f"/repos/{repo}/commits/{sha}/statuses")]

    def pr_mergeable(self, repo: str, number: int) -> Optional[bool]:
        return self.fetch_pull_request(repo, number).mergeable

    # labels -----------------------------------------------------------------

    def fetch_labels(self, repo: str) -> List[Label]:
        return [Label.from_api(item) for item in self._list(f"/repos/{repo}/labels")]

    def add_label(self, repo: str, name: str, color: str) -> Label:
        resp = request(self.session, "POST", self._url(f"/repos/{repo}/labels"),
                       json={"name": name, "color": color})
        return Label.from_api(resp.json())

    def update_label(self, repo: str, name: str, color: str) -> Label:
        resp = request(self.session, "PATCH", self._url(f"/repos/{repo}/labels/{quote(name, safe='')}"),
                       json={"color": color})
        return Label.from_api(resp.json())

    def delete_label(self, repo: str, name: str) -> None:
        request(self.session, "DELETE", self._url(f"/repos/{repo}/labels/{quote(name, safe='')}"))

    def labels_for_issue(self, repo: str, number: int) -> List[Label]:
        return [Label.from_api(item) for item in self._list(f"/repos/{repo}/issues/{number}/labels")]

    def pr_has_label(self, repo: str, number: int, label: str) -> bool:
        return any(existing.name == label for existing in self.labels_for_issue(repo, number))

    def add_label_to_pr(self, repo: str, number: int, label: str) -> None:
        request(self.session, "POST", self._url(f"/repos/{repo}/issues/{number}/labels"),
                json={"labels": [label]})

    def remove_label_from_pr(self, repo: str, number: int, label: str) -> None:
        request(self.session, "DELETE",
                self._url(f"/repos/{repo}/issues/{number}/labels/{quote(label, safe='')}"))

    def add_comment_to_pr(self, repo: str, number: int, body: str) -> None:
        request(self.session, "POST", self._url(f"/repos/{repo}/issues/{number}/comments"),
                json={"body": body})

    # tags and commits -------------------------------------------------------

    def fetch_tags(self, repo: str, name_pattern: Optional[str] = None) -> List[Tag]:
        """Tags matching the regex, highest version first; unversioned tags trail."""
        matches = _matcher(name_pattern)
        tags = [Tag.from_api(item) for item in self._list(f"/repos/{repo}/tags")]
        return sort_tags([t for t in tags if matches(t.name)])

    def fetch_commit(self, repo: str, sha: str) -> Dict[str, Any]:
        return self._get(f"/repos/{repo}/commits/{sha}")

    def commit_date(self, repo: str, sha: str) -> Optional[dt.datetime]:
        commit = self.fetch_commit(repo, sha)
        return parse_timestamp((((commit.get("commit") or {}).get("author")) or {}).get("date"))

    def count_commits_since(self, repo: str, since: dt.datetime) -> int:
        since_iso = since.astimezone(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return len(self._list(f"/repos/{repo}/commits", params={"since": since_iso}))

    # people -----------------------------------------------------------------

    def fetch_owner(self, login: str) -> Dict[str, Any]:
        return self._get(f"/users/{login}")

    def organization_members(self, org: str) -> List[str]:
        return [m["login"] for m in self._list(f"/orgs/{org}/members") if m.get("login")]


__all__ = [
    "VERSION_RE",
    "version_key",
    "sort_tags",
    "GitHubGateway",
]
