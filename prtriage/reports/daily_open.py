"""CSV tallies of open and newly created pull requests per day, members vs community."""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import NO_DETAILS, Membership, PullRequest
from prtriage.triage.membership import MembershipDirectory
from prtriage.triage.tallies import daily_open_counts

from .config import (
    add_modules_argument,
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)
from .output import ensure_dir, write_csv


def combined_membership(directory: MembershipDirectory, pulls: List[PullRequest]) -> Membership:
    """Union of the member lists of every owner present in `pulls`."""
    by_owner: Dict[str, List[PullRequest]] = defaultdict(list)
    for pull in pulls:
        if pull.repository is not None:
            by_owner[pull.repository.owner].append(pull)
    members: Membership = {}
    for owner_pulls in by_owner.values():
        members.update(directory.for_pulls(owner_pulls))
    return members


def build_parser():
    parser = build_arg_parser("daily_open", "Tally open and created pull requests per day.")
    add_modules_argument(parser)
    parser.add_argument("--days", type=int, default=20, help="Number of days back from today to tally")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    gateway = build_gateway(settings)
    all_pulls: List[PullRequest] = []
    for repo in selected_repos(gateway, settings):
        print(f"  fetching pull requests for {repo}...")
        try:
            for state in ("open", "closed"):
                items = fetch_enriched(gateway, repo, state=state, kinds=NO_DETAILS,
                                       pool_size=settings.pool_size, policy=settings.policy)
                all_pulls.extend(item.pull for item in items)
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")

    members = combined_membership(MembershipDirectory(gateway), all_pulls)
    end = dt.date.today()
    start = end - dt.timedelta(days=args.days)
    open_rows, created_rows = daily_open_counts(all_pulls, members, start, end)

    ensure_dir(settings.output_dir)
    write_csv(settings.output_dir / "daily_open_prs.csv", ["date", "community", "member", "total"], open_rows)
    write_csv(settings.output_dir / "created_per_day.csv", ["date", "member", "community"], created_rows)


__all__ = ["combined_membership", "build_parser", "main"]
