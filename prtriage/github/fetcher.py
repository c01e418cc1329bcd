"""Concurrent enrichment of pull requests with statuses, commits and comments.

A fixed pool of worker threads drains a shared stack of pull requests. Each
worker pops one pull request under `queue_lock`, performs its network calls
with no lock held, and appends the assembled record under `results_lock`.
Result order depends on scheduling; sort explicitly when order matters.
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional

from .config import FETCH_POLICY, POOL_SIZE
from .models import (
    DEFAULT_FILTER,
    DetailKind,
    EnrichedPullRequest,
    FetchFilter,
    PullRequest,
    RecencyLimit,
)

FAIL_FAST = "fail-fast"
BEST_EFFORT = "best-effort"
POLICIES = (FAIL_FAST, BEST_EFFORT)


def apply_recency_limit(pulls: Iterable[PullRequest], limit: Optional[RecencyLimit]) -> List[PullRequest]:
    """Keep pulls whose limited timestamp is strictly after the cutoff; all pulls when no limit."""
    if limit is None:
        return list(pulls)
    return [pull for pull in pulls if limit.retains(pull)]


def fetch_pr_information(gateway, repo: str, pull: PullRequest, kinds: FetchFilter = DEFAULT_FILTER) -> EnrichedPullRequest:
    """Fetch each requested detail kind for one pull request."""
    record = EnrichedPullRequest(pull=pull)
    if DetailKind.STATUSES in kinds:
        # no head sha means no statuses can exist for it
        record.statuses = gateway.fetch_statuses(repo, pull.head_sha) if pull.head_sha else []
    if DetailKind.COMMITS in kinds:
        record.commits = gateway.fetch_pull_request_commits(repo, pull.number)
    if DetailKind.PULL_REQUEST in kinds:
        record.detail = gateway.fetch_pull_request(repo, pull.number)
    if DetailKind.COMMENTS in kinds:
        record.comments = gateway.fetch_issue_comments(repo, pull.number)
    return record


def enrich_pulls(
    gateway,
    repo: str,
    pulls: Iterable[PullRequest],
    kinds: FetchFilter = DEFAULT_FILTER,
    pool_size: int = POOL_SIZE,
    policy: str = FETCH_POLICY,
) -> List[EnrichedPullRequest]:
    """Enrich `pulls` using exactly `pool_size` worker threads.

    With the fail-fast policy the first error stops further pops, the workers
    are joined and the error is re-raised; records already built are
    discarded. With best-effort the failing pull request is logged and
    skipped.
    """
    if pool_size < 1:
        raise ValueError(f"pool_size must be at least 1, got {pool_size}")
    if policy not in POLICIES:
        raise ValueError(f"unknown fetch policy {policy!r}; expected one of {', '.join(POLICIES)}")

    pending: List[PullRequest] = list(pulls)
    results: List[EnrichedPullRequest] = []
    failures: List[BaseException] = []
    queue_lock = threading.Lock()
    results_lock = threading.Lock()
    stop = threading.Event()

    def next_pull() -> Optional[PullRequest]:
        with queue_lock:
            if stop.is_set() or not pending:
                return None
            return pending.pop()

    def worker() -> None:
        while True:
            pull = next_pull()
            if pull is None:
                return
            try:
                record = fetch_pr_information(gateway, repo, pull, kinds)
            except Exception as exc:
                if policy == BEST_EFFORT:
                    print(f"[warn] skipping {repo}#{pull.number}: {exc}")
                    continue
                with results_lock:
                    failures.append(exc)
                stop.set()
                return
            with results_lock:
                results.append(record)

    threads = [
        threading.Thread(target=worker, name=f"enrich-{repo}-{i}", daemon=True)
        for i in range(pool_size)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    if failures:
        raise failures[0]
    return results


def fetch_enriched(
    gateway,
    repo: str,
    state: str = "open",
    sort: str = "updated",
    kinds: FetchFilter = DEFAULT_FILTER,
    limit: Optional[RecencyLimit] = None,
    pool_size: int = POOL_SIZE,
    policy: str = FETCH_POLICY,
) -> List[EnrichedPullRequest]:
    """List `repo`'s pull requests, apply `limit`, then enrich them concurrently."""
    pulls = gateway.list_pull_requests(repo, state=state, sort=sort)
    retained = apply_recency_limit(pulls, limit)
    return enrich_pulls(gateway, repo, retained, kinds=kinds, pool_size=pool_size, policy=policy)


__all__ = [
    "FAIL_FAST",
    "BEST_EFFORT",
    "POLICIES",
    "apply_recency_limit",
    "fetch_pr_information",
    "enrich_pulls",
    "fetch_enriched",
]
