"""Weekly CSV of pull requests closed, merged and commented on by members."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import DetailKind, EnrichedPullRequest, Membership, RecencyLimit
from prtriage.triage.membership import MembershipDirectory
from prtriage.triage.tallies import WEDNESDAY, next_weekday, weekly_work_done

from .config import (
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)
from .output import ensure_dir, write_csv

HEADER = ["week ending on", "closed", "commented", "merged"]


def build_parser():
    parser = build_arg_parser("work_done", "Weekly tally of closed, merged and commented pull requests.")
    parser.add_argument("--weeks", type=int, default=10, help="Number of weeks to show")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    week_end = next_weekday(WEDNESDAY)
    since = week_end - dt.timedelta(days=7 * args.weeks)
    limit = RecencyLimit.parse("closed_at", since)

    gateway = build_gateway(settings)
    directory = MembershipDirectory(gateway)
    closed: List[EnrichedPullRequest] = []
    members: Membership = {}
    for repo in selected_repos(gateway, settings):
        try:
            items = fetch_enriched(gateway, repo, state="closed", kinds=frozenset({DetailKind.COMMENTS}),
                                   limit=limit, pool_size=settings.pool_size, policy=settings.policy)
            members.update(directory.for_pulls(items))
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")
            continue
        closed.extend(items)
        print(f"repo {repo}")

    rows = weekly_work_done(closed, members, weeks=args.weeks, week_end=week_end)
    ensure_dir(settings.output_dir)
    write_csv(settings.output_dir / "work_done.csv", HEADER, rows)


__all__ = ["HEADER", "build_parser", "main"]
