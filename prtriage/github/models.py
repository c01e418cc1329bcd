"""Typed snapshots of the GitHub objects the reports work with."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union


def parse_timestamp(raw: Optional[Union[str, dt.datetime, dt.date]]) -> Optional[dt.datetime]:
    """Parse GitHub/ISO timestamps into timezone-aware UTC datetimes."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, dt.datetime):
        value = raw
    elif isinstance(raw, dt.date):
        value = dt.datetime(raw.year, raw.month, raw.day)
    else:
        text = str(raw).strip()
        if text.endswith(" UTC"):
            text = text[:-4]
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _login(obj: Optional[Dict[str, Any]]) -> Optional[str]:
    return (obj or {}).get("login")


@dataclass(frozen=True)
class Repository:
    """Repository identity: owning namespace plus name."""

    owner: str
    name: str
    owner_type: str = "Organization"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> Optional["Repository"]:
        if not payload:
            return None
        owner = payload.get("owner") or {}
        name = payload.get("name")
        login = owner.get("login")
        if not name or not login:
            full_name = payload.get("full_name") or ""
            if "/" not in full_name:
                return None
            login, name = full_name.split("/", 1)
        return cls(owner=login, name=name, owner_type=owner.get("type") or "Organization")

    @classmethod
    def parse(cls, full_name: str) -> "Repository":
        owner, _, name = full_name.partition("/")
        if not owner or not name:
            raise ValueError(f"expected 'owner/name', got {full_name!r}")
        return cls(owner=owner, name=name)


@dataclass(frozen=True)
class PullRequest:
    """Immutable snapshot of a pull request as listed by the API."""

    number: int
    repository: Optional[Repository]
    author: Optional[str]
    created_at: dt.datetime
    title: str = ""
    html_url: str = ""
    state: str = "open"
    updated_at: Optional[dt.datetime] = None
    closed_at: Optional[dt.datetime] = None
    merged_at: Optional[dt.datetime] = None
    head_sha: Optional[str] = None
    mergeable: Optional[bool] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def repo_name(self) -> str:
        return self.repository.name if self.repository else ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any], repo: Optional[str] = None) -> "PullRequest":
        base_repo = (payload.get("base") or {}).get("repo")
        repository = Repository.from_api(base_repo)
        if repository is None and repo:
            repository = Repository.parse(repo)
        created = parse_timestamp(payload.get("created_at"))
        if created is None:
            raise ValueError(f"pull request {payload.get('number')} has no created_at")
        return cls(
            number=int(payload["number"]),
            repository=repository,
            author=_login(payload.get("user")),
            created_at=created,
            title=payload.get("title") or "",
            html_url=payload.get("html_url") or "",
            state=payload.get("state") or "open",
            updated_at=parse_timestamp(payload.get("updated_at")),
            closed_at=parse_timestamp(payload.get("closed_at")),
            merged_at=parse_timestamp(payload.get("merged_at")),
            head_sha=(payload.get("head") or {}).get("sha"),
            mergeable=payload.get("mergeable"),
            raw=payload,
        )


@dataclass(frozen=True)
class Comment:
    author: Optional[str]
    body: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Comment":
        return cls(
            author=_login(payload.get("user")),
            body=payload.get("body") or "",
            created_at=parse_timestamp(payload.get("created_at")),
            updated_at=parse_timestamp(payload.get("updated_at")),
        )


@dataclass(frozen=True)
class Status:
    state: Optional[str]
    context: str = ""
    created_at: Optional[dt.datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Status":
        return cls(
            state=payload.get("state"),
            context=payload.get("context") or "",
            created_at=parse_timestamp(payload.get("created_at")),
        )


@dataclass(frozen=True)
class Commit:
    sha: Optional[str]
    author: Optional[str] = None
    message: str = ""
    date: Optional[dt.datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Commit":
        inner = payload.get("commit") or {}
        git_author = inner.get("author") or {}
        return cls(
            sha=payload.get("sha"),
            author=_login(payload.get("author")) or git_author.get("name"),
            message=inner.get("message") or "",
            date=parse_timestamp(git_author.get("date")),
        )


@dataclass(frozen=True)
class Label:
    name: str
    color: str

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Label":
        return cls(name=payload.get("name") or "", color=payload.get("color") or "")


LabelSpec = Label


@dataclass(frozen=True)
class Tag:
    name: str
    sha: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Tag":
        return cls(name=payload.get("name") or "", sha=(payload.get("commit") or {}).get("sha"))


class DetailKind(Enum):
    """Secondary collections the enrichment fetcher can attach to a pull request."""

    STATUSES = "statuses"
    COMMITS = "pull_request_commits"
    COMMENTS = "issue_comments"
    PULL_REQUEST = "pull_request"


FetchFilter = FrozenSet[DetailKind]
DEFAULT_FILTER: FetchFilter = frozenset({DetailKind.STATUSES, DetailKind.COMMITS, DetailKind.COMMENTS})
FULL_FILTER: FetchFilter = frozenset(DetailKind)
NO_DETAILS: FetchFilter = frozenset()


@dataclass
class EnrichedPullRequest:
    """A pull request plus whichever detail collections were requested.

    A collection left as None was not fetched; an empty list was fetched and
    is genuinely empty.
    """

    pull: PullRequest
    statuses: Optional[List[Status]] = None
    commits: Optional[List[Commit]] = None
    comments: Optional[List[Comment]] = None
    detail: Optional[PullRequest] = None

    @property
    def last_comment(self) -> Optional[Comment]:
        return self.comments[-1] if self.comments else None


RECENCY_ATTRIBUTES = ("created_at", "updated_at", "closed_at", "merged_at")


@dataclass(frozen=True)
class RecencyLimit:
    """Keep only pull requests whose `attribute` timestamp is strictly after `cutoff`."""

    attribute: str
    cutoff: dt.datetime

    def __post_init__(self) -> None:
        if self.attribute not in RECENCY_ATTRIBUTES:
            raise ValueError(f"unsupported recency attribute {self.attribute!r}")
        if self.cutoff.tzinfo is None:
            object.__setattr__(self, "cutoff", self.cutoff.replace(tzinfo=dt.timezone.utc))

    @classmethod
    def parse(cls, attribute: str, value: Union[str, dt.datetime, dt.date]) -> "RecencyLimit":
        cutoff = parse_timestamp(value)
        if cutoff is None:
            raise ValueError(f"cannot parse recency cutoff {value!r}")
        return cls(attribute=attribute, cutoff=cutoff)

    def retains(self, pull: PullRequest) -> bool:
        value = getattr(pull, self.attribute)
        return value is not None and value > self.cutoff


Membership = Dict[str, str]


__all__ = [
    "parse_timestamp",
    "Repository",
    "PullRequest",
    "Comment",
    "Status",
    "Commit",
    "Label",
    "LabelSpec",
    "Tag",
    "DetailKind",
    "FetchFilter",
    "DEFAULT_FILTER",
    "FULL_FILTER",
    "NO_DETAILS",
    "EnrichedPullRequest",
    "RECENCY_ATTRIBUTES",
    "RecencyLimit",
    "Membership",
]
