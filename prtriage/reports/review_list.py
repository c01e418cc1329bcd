"""One row per open pull request with its last comment, for review planning."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import FULL_FILTER, EnrichedPullRequest, Membership
from prtriage.triage import classifiers
from prtriage.triage.membership import MembershipDirectory

from .config import (
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)
from .output import ensure_dir, rows_table, save_json, write_html


def _age_days(now: dt.datetime, then: Optional[dt.datetime]) -> int:
    if then is None:
        return 0
    return round((now - then).total_seconds() / 86400)


def review_rows(repo: str, items: List[EnrichedPullRequest], members: Membership,
                now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    """Build the review rows for one repository's enriched pulls."""
    now = now or dt.datetime.now(dt.timezone.utc)
    no_member = {p.number for p in classifiers.no_personnel_comments(items, members)}
    mentioned = {p.number for p in classifiers.mentions_member(items, members)}

    rows = []
    for item in sorted(items, key=lambda i: i.pull.number):
        pull = item.pull
        last = item.last_comment
        rows.append({
            "repo": repo,
            "pr": pull.number,
            "url": pull.html_url,
            "age": _age_days(now, pull.created_at),
            "owner": pull.author or "",
            "title": pull.title,
            "last_comment": last.body if last else "",
            "by": (last.author or "") if last else "",
            "age_comment": _age_days(now, last.updated_at or last.created_at) if last else 0,
            "num_comments": len(item.comments or []),
            "no_comment_from_member": pull.number in no_member,
            "last_comment_mentions_member": pull.number in mentioned,
        })
    return rows


def build_parser():
    parser = build_arg_parser("review_list", "HTML list of open pull requests that require review.")
    parser.add_argument("--json", action="store_true", help="Also dump the rows to review.json")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    gateway = build_gateway(settings)
    directory = MembershipDirectory(gateway)
    open_prs: List[Dict[str, Any]] = []

    for repo in selected_repos(gateway, settings):
        print(f"  fetching pull requests for {repo}...")
        try:
            items = fetch_enriched(gateway, repo, kinds=FULL_FILTER,
                                   pool_size=settings.pool_size, policy=settings.policy)
            open_prs.extend(review_rows(repo, items, directory.for_pulls(items)))
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")

    if settings.verbose:
        for row in open_prs:
            print(row)

    ensure_dir(settings.output_dir)
    write_html(settings.output_dir / "review.html", "PRs that require review",
               rows_table(open_prs, links={"pr": "url"}))
    if args.json:
        save_json(settings.output_dir / "review.json", open_prs)


__all__ = ["review_rows", "build_parser", "main"]
