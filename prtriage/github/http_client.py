"""HTTP helpers for the GitHub REST API: session setup, errors, and pagination.

Calls are made exactly once; nothing here retries, sleeps, or rotates tokens.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from requests.adapters import DEFAULT_POOLSIZE, HTTPAdapter
from requests.utils import parse_header_links

from .config import PER_PAGE, POOL_SIZE, REQUEST_TIMEOUT, USER_AGENT


class GitHubError(RuntimeError):
    """Base error for a failed GitHub API call."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class NotFoundError(GitHubError):
    """The requested resource does not exist (HTTP 404/410)."""


class NetworkError(GitHubError):
    """Transport failure or any other non-success HTTP status."""


NOT_FOUND_STATUSES = {404, 410}


def build_session(token: Optional[str] = None, pool_size: int = POOL_SIZE) -> requests.Session:
    """Return a session carrying the GitHub media type, user agent and bearer token.

    The connection pool holds at least one connection per enrichment worker.
    """
    session = requests.Session()
    adapter = HTTPAdapter(pool_maxsize=max(pool_size, DEFAULT_POOLSIZE))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
    )
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


def error_message(resp: requests.Response) -> str:
    """Extract GitHub's error message from a response body, falling back to raw text."""
    try:
        body = resp.json()
    except ValueError:
        body = {"text": (resp.text or "")[:300]}
    if not isinstance(body, dict):
        body = {"text": str(body)[:300]}
    return str(body.get("message") or body.get("error") or body.get("text") or "")


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {error_message(resp)}")


def request(session: requests.Session, method: str, url: str, **kwargs: Any) -> requests.Response:
    """Perform a single REST call, raising NotFoundError/NetworkError on failure."""
    timeout = kwargs.pop("timeout", REQUEST_TIMEOUT)
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        print(f"[error] {method} {url} failed: {exc}")
        raise NetworkError(str(exc), url=url) from exc

    if 200 <= resp.status_code < 300:
        return resp

    log_http_error(resp, url)
    message = f"HTTP {resp.status_code} for {url}: {error_message(resp)}"
    if resp.status_code in NOT_FOUND_STATUSES:
        raise NotFoundError(message, status=resp.status_code, url=url)
    raise NetworkError(message, status=resp.status_code, url=url)


def get_json(session: requests.Session, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """GET a single resource and decode its JSON body."""
    return request(session, "GET", url, params=params).json()


def next_page_url(resp: requests.Response) -> Optional[str]:
    """Return the rel="next" target from a Link header, if any."""
    header = (resp.headers or {}).get("Link")
    if not header:
        return None
    for link in parse_header_links(header):
        if link.get("rel") == "next" and link.get("url"):
            return link["url"]
    return None


def paged_get(session: requests.Session,
              url: str,
              params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Follow Link headers until the last page and return every entry."""
    query = dict(params or {})
    query.setdefault("per_page", PER_PAGE)

    results: List[Dict[str, Any]] = []
    next_url: Optional[str] = url
    first = True
    while next_url:
        # the next link already embeds the original query string
        resp = request(session, "GET", next_url, params=query if first else None)
        first = False
        batch = resp.json()
        if not isinstance(batch, list):
            raise NetworkError(f"expected a JSON list from {next_url}", status=resp.status_code, url=next_url)
        results.extend(batch)
        next_url = next_page_url(resp)
    return results


__all__ = [
    "GitHubError",
    "NotFoundError",
    "NetworkError",
    "build_session",
    "error_message",
    "log_http_error",
    "request",
    "get_json",
    "next_page_url",
    "paged_get",
]
