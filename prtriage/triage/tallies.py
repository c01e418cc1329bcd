"""Date-bucketed counts of pull-request activity used by the CSV reports."""

from __future__ import annotations

import datetime as dt
from typing import Any, Container, Dict, Iterable, List, Optional, Tuple

from prtriage.github.models import EnrichedPullRequest, Membership, PullRequest

WEDNESDAY = 2


def _day_start(day: dt.date) -> dt.datetime:
    return dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc)


def _days(start: dt.date, end: dt.date) -> Iterable[dt.date]:
    day = start
    while day <= end:
        yield day
        day += dt.timedelta(days=1)


def next_weekday(weekday: int, today: Optional[dt.date] = None) -> dt.date:
    """The next date strictly after `today` that falls on `weekday` (Monday == 0)."""
    today = today or dt.date.today()
    ahead = (weekday - today.weekday()) % 7 or 7
    return today + dt.timedelta(days=ahead)


def is_open_on(pull: PullRequest, day: dt.date) -> bool:
    """Whether `pull` was open at some point on `day`."""
    if pull.created_at.date() > day:
        return False
    if pull.state == "closed":
        return pull.closed_at is not None and pull.closed_at.date() >= day
    return pull.state == "open"


def daily_open_counts(pulls: Iterable[PullRequest],
                      members: Membership,
                      start: dt.date,
                      end: dt.date) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Per-day open and created counts, split between members and the community.

    Returns (open_rows, created_rows).
    """
    pulls = list(pulls)
    open_rows: List[Dict[str, Any]] = []
    created_rows: List[Dict[str, Any]] = []
    for day in _days(start, end):
        open_member = open_community = 0
        created_member = created_community = 0
        for pull in pulls:
            is_member = pull.author in members
            if pull.created_at.date() == day:
                if is_member:
                    created_member += 1
                else:
                    created_community += 1
            if is_open_on(pull, day):
                if is_member:
                    open_member += 1
                else:
                    open_community += 1
        stamp = day.strftime("%Y-%m-%d")
        open_rows.append({
            "date": stamp,
            "community": open_community,
            "member": open_member,
            "total": open_community + open_member,
        })
        created_rows.append({"date": stamp, "member": created_member, "community": created_community})
    return open_rows, created_rows


def _between(value: Optional[dt.datetime], left: dt.datetime, right: dt.datetime) -> bool:
    return value is not None and left < value < right


def weekly_work_done(closed_items: Iterable[EnrichedPullRequest],
                     members: Membership,
                     weeks: int = 10,
                     week_end: Optional[dt.date] = None) -> List[Dict[str, Any]]:
    """Closed-unmerged, merged and member-comment counts for each of the last `weeks` weeks.

    Weeks end on `week_end` (default: next Wednesday) and run backwards.
    """
    items = list(closed_items)
    member_comments = [
        comment
        for item in items
        for comment in (item.comments or [])
        if comment.author in members
    ]
    right = _day_start(week_end or next_weekday(WEDNESDAY))
    rows = []
    for _ in range(weeks):
        left = right - dt.timedelta(days=7)
        closed = sum(
            1 for item in items
            if item.pull.merged_at is None and _between(item.pull.closed_at, left, right)
        )
        merged = sum(
            1 for item in items
            if item.pull.merged_at is not None and _between(item.pull.closed_at, left, right)
        )
        commented = sum(1 for comment in member_comments if _between(comment.created_at, left, right))
        rows.append({
            "week ending on": right.date().isoformat(),
            "closed": closed,
            "commented": commented,
            "merged": merged,
        })
        right = left
    return rows


def quarterly_counts(pulls: Iterable[PullRequest],
                     excluded_authors: Container[str],
                     begin: dt.date,
                     end: dt.date) -> Dict[str, int]:
    """Created, merged and closed-unmerged counts for community pulls inside (begin, end)."""
    left, right = _day_start(begin), _day_start(end)
    counts = {"created": 0, "merged": 0, "closed": 0}
    for pull in pulls:
        if pull.author in excluded_authors:
            continue
        if _between(pull.created_at, left, right):
            counts["created"] += 1
        if pull.merged_at is not None:
            if _between(pull.merged_at, left, right):
                counts["merged"] += 1
        elif _between(pull.closed_at, left, right):
            counts["closed"] += 1
    return counts


__all__ = [
    "WEDNESDAY",
    "next_weekday",
    "is_open_on",
    "daily_open_counts",
    "weekly_work_done",
    "quarterly_counts",
]
