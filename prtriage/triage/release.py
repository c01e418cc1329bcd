"""Release-readiness checks: how long since the newest tag and how much has landed since."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class ReleaseInfo:
    repo: str
    tag: str
    tag_date: dt.datetime
    commits_since: int

    def as_row(self) -> dict:
        return {
            "repo": self.repo,
            "tag": self.tag,
            "date": self.tag_date.isoformat(),
            "commits": self.commits_since,
        }


def latest_release(gateway, repo: str, tag_pattern: Optional[str] = None) -> Optional[ReleaseInfo]:
    """Newest matching tag of `repo` with its commit date and the commit count since; None without tags."""
    tags = gateway.fetch_tags(repo, tag_pattern)
    if not tags:
        return None
    newest = tags[0]
    if not newest.sha:
        return None
    tag_date = gateway.commit_date(repo, newest.sha)
    if tag_date is None:
        return None
    return ReleaseInfo(
        repo=repo,
        tag=newest.name,
        tag_date=tag_date,
        commits_since=gateway.count_commits_since(repo, tag_date),
    )


def due_for_release(infos: Iterable[ReleaseInfo],
                    commit_threshold: Optional[int] = None,
                    days_threshold: Optional[int] = None,
                    now: Optional[dt.datetime] = None) -> List[ReleaseInfo]:
    """Repos over the commit threshold and/or older than the day threshold.

    When both thresholds are given a repo must exceed both.
    """
    if commit_threshold is None and days_threshold is None:
        raise ValueError("one of commit_threshold or days_threshold must be specified")
    now = now or dt.datetime.now(dt.timezone.utc)
    due = []
    for info in infos:
        if commit_threshold is not None and info.commits_since <= commit_threshold:
            continue
        if days_threshold is not None and info.tag_date >= now - dt.timedelta(days=days_threshold):
            continue
        due.append(info)
    return due


__all__ = ["ReleaseInfo", "latest_release", "due_for_release"]
