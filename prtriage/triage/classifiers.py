"""Pure filters over fetched pull requests.

Every filter accepts any iterable (empty in, empty out) and treats a detail
collection that was not fetched, or a field GitHub left null, as "does not
match" rather than as an error.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Iterable, List, Optional, Set, Union

from prtriage.github.config import STALE_DAYS
from prtriage.github.models import EnrichedPullRequest, Membership, PullRequest

PullLike = Union[PullRequest, EnrichedPullRequest]

MENTION_RE = re.compile(r"@([\w-]+)")


def _pull(item: PullLike) -> PullRequest:
    return item.pull if isinstance(item, EnrichedPullRequest) else item


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def needs_rebase(items: Iterable[EnrichedPullRequest]) -> List[PullRequest]:
    """Pulls whose full detail says mergeable is explicitly False (unknown is not a rebase need)."""
    return [item.pull for item in items if item.detail is not None and item.detail.mergeable is False]


def needs_squash(items: Iterable[EnrichedPullRequest]) -> List[EnrichedPullRequest]:
    return [item for item in items if item.commits is not None and len(item.commits) > 1]


def bad_status(items: Iterable[EnrichedPullRequest]) -> List[EnrichedPullRequest]:
    """Records whose most recent status exists and is not "success"."""
    return [item for item in items if item.statuses and item.statuses[0].state != "success"]


def uncommented(items: Iterable[EnrichedPullRequest]) -> List[PullRequest]:
    return [item.pull for item in items if item.comments is not None and not item.comments]


def merged(items: Iterable[PullLike]) -> List[PullRequest]:
    return [_pull(item) for item in items if _pull(item).merged_at is not None]


def unmerged(items: Iterable[PullLike]) -> List[PullRequest]:
    return [_pull(item) for item in items if _pull(item).merged_at is None]


def stale_no_activity(items: Iterable[PullLike],
                      cutoff_days: int = STALE_DAYS,
                      now: Optional[dt.datetime] = None) -> List[PullRequest]:
    """Pulls last updated more than `cutoff_days` ago."""
    boundary = (now or _utcnow()) - dt.timedelta(days=cutoff_days)
    stale = []
    for item in items:
        pull = _pull(item)
        if pull.updated_at is not None and pull.updated_at < boundary:
            stale.append(pull)
    return stale


def last_comment_by_owner(items: Iterable[EnrichedPullRequest], members: Membership) -> List[PullRequest]:
    """Pulls whose most recent comment was written by a member of the owning organisation."""
    hits = []
    for item in items:
        last = item.last_comment
        if last is not None and last.author in members:
            hits.append(item.pull)
    return hits


def no_personnel_comments(items: Iterable[EnrichedPullRequest], members: Membership) -> List[PullRequest]:
    """Pulls where no comment author is a member; unfetched comments never match."""
    hits = []
    for item in items:
        if item.comments is None:
            continue
        if not any(comment.author in members for comment in item.comments):
            hits.append(item.pull)
    return hits


def mentioned_logins(body: Optional[str]) -> Set[str]:
    """Logins @-mentioned in a comment body, trailing dashes stripped."""
    logins = set()
    for match in MENTION_RE.finditer(body or ""):
        login = match.group(1).rstrip("-")
        if login:
            logins.add(login)
    return logins


def mentions_member(items: Iterable[EnrichedPullRequest], members: Membership) -> List[PullRequest]:
    """Pulls whose most recent comment @-mentions a member."""
    hits = []
    for item in items:
        last = item.last_comment
        if last is not None and mentioned_logins(last.body) & set(members):
            hits.append(item.pull)
    return hits


def sort_pulls(items: Iterable[PullLike]) -> List[PullRequest]:
    """Order by repository name, then pull number ascending."""
    return sorted((_pull(item) for item in items), key=lambda pull: (pull.repo_name, pull.number))


def _source_pulls(pulls: Optional[Iterable[PullLike]], repo: Optional[str], gateway) -> List[PullRequest]:
    if pulls is None and repo is None:
        raise ValueError("one of `pulls` or `repo` must be provided")
    if pulls is not None:
        return [_pull(item) for item in pulls]
    if gateway is None:
        raise ValueError(f"a gateway is required to list pull requests for {repo}")
    return gateway.list_pull_requests(repo)


def pulls_newer_than(time: dt.datetime,
                     pulls: Optional[Iterable[PullLike]] = None,
                     repo: Optional[str] = None,
                     gateway=None) -> List[PullRequest]:
    return [p for p in _source_pulls(pulls, repo, gateway) if p.updated_at is not None and p.updated_at > time]


def pulls_older_than(time: dt.datetime,
                     pulls: Optional[Iterable[PullLike]] = None,
                     repo: Optional[str] = None,
                     gateway=None) -> List[PullRequest]:
    return [p for p in _source_pulls(pulls, repo, gateway) if p.updated_at is not None and p.updated_at < time]


def pulls_in_range(start: dt.datetime,
                   end: dt.datetime,
                   pulls: Optional[Iterable[PullLike]] = None,
                   repo: Optional[str] = None,
                   gateway=None) -> List[PullRequest]:
    """Pulls updated strictly between `start` and `end`."""
    return [
        p for p in _source_pulls(pulls, repo, gateway)
        if p.updated_at is not None and start < p.updated_at < end
    ]


__all__ = [
    "MENTION_RE",
    "needs_rebase",
    "needs_squash",
    "bad_status",
    "uncommented",
    "merged",
    "unmerged",
    "stale_no_activity",
    "last_comment_by_owner",
    "no_personnel_comments",
    "mentioned_logins",
    "mentions_member",
    "sort_pulls",
    "pulls_newer_than",
    "pulls_older_than",
    "pulls_in_range",
]
