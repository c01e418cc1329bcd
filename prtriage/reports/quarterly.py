"""Community pull requests created, merged and closed within a date range."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import NO_DETAILS, PullRequest
from prtriage.triage.membership import MembershipDirectory
from prtriage.triage.tallies import quarterly_counts

from .config import (
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)
from .daily_open import combined_membership
from .output import ensure_dir, save_json


def _date(value: str) -> dt.date:
    return dt.date.fromisoformat(value)


def build_parser():
    parser = build_arg_parser("quarterly", "Quarterly community pull-request metrics.")
    parser.add_argument("--begin", type=_date, required=True, help="Quarter start (YYYY-MM-DD)")
    parser.add_argument("--end", type=_date, required=True, help="Quarter end (YYYY-MM-DD)")
    parser.add_argument("--exclude", nargs="*",
                        help="Logins to exclude; defaults to the owning organisation's members")
    parser.add_argument("-o", "--overview", action="store_true", help="Write the counts to quarterly.json")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    gateway = build_gateway(settings)
    pulls: List[PullRequest] = []
    for repo in selected_repos(gateway, settings):
        try:
            for state in ("open", "closed"):
                items = fetch_enriched(gateway, repo, state=state, kinds=NO_DETAILS,
                                       pool_size=settings.pool_size, policy=settings.policy)
                pulls.extend(item.pull for item in items)
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")

    if args.exclude is not None:
        excluded = set(args.exclude)
    else:
        excluded = set(combined_membership(MembershipDirectory(gateway), pulls))

    counts = quarterly_counts(pulls, excluded, args.begin, args.end)
    print(f"created: {counts['created']}")
    print(f"merged: {counts['merged']}")
    print(f"closed: {counts['closed']}")
    if args.overview:
        ensure_dir(settings.output_dir)
        save_json(settings.output_dir / "quarterly.json", counts)


__all__ = ["build_parser", "main"]
