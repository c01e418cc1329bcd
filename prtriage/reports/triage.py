"""Per-repository triage summary with optional overview CSVs and an HTML work list."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import FULL_FILTER, PullRequest
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
from .output import ensure_dir, pulls_table, write_csv, write_html

REBASE_LABEL = "needs-rebase"
SUMMARY_HEADER = ("repo, last comment, needs rebase, fails test, needs squash, no comments, "
                  "total open, has mention, no activity 40 days")


@dataclass
class TriageTotals:
    needs_closing: List[PullRequest] = field(default_factory=list)
    needs_prompt: List[PullRequest] = field(default_factory=list)
    uncommented: List[PullRequest] = field(default_factory=list)
    no_member_comments: List[PullRequest] = field(default_factory=list)
    mentioned: List[PullRequest] = field(default_factory=list)
    rebase_without_label: List[PullRequest] = field(default_factory=list)
    no_activity: List[PullRequest] = field(default_factory=list)
    rebase: int = 0
    bad_status: int = 0
    squash: int = 0
    open: int = 0
    unmerged: int = 0
    merged: int = 0


def triage_repo(gateway, repo: str, totals: TriageTotals, directory: MembershipDirectory,
                pool_size: int, policy: str, now: Optional[dt.datetime] = None) -> str:
    """Classify one repository's open pulls into `totals`; return its summary line."""
    now = now or dt.datetime.now(dt.timezone.utc)
    items = fetch_enriched(gateway, repo, kinds=FULL_FILTER, pool_size=pool_size, policy=policy)
    members = directory.for_pulls(items)

    last_comment = classifiers.last_comment_by_owner(items, members)
    totals.needs_closing += classifiers.pulls_older_than(now - dt.timedelta(days=30), pulls=last_comment)
    totals.needs_prompt += classifiers.pulls_older_than(now - dt.timedelta(days=15), pulls=last_comment)

    uncommented = classifiers.uncommented(items)
    totals.uncommented += uncommented
    totals.no_member_comments += classifiers.no_personnel_comments(items, members)
    mentioned = classifiers.mentions_member(items, members)
    totals.mentioned += mentioned

    rebase = classifiers.needs_rebase(items)
    totals.rebase += len(rebase)
    for pull in rebase:
        if not gateway.pr_has_label(repo, pull.number, REBASE_LABEL):
            totals.rebase_without_label.append(pull)

    no_activity = classifiers.stale_no_activity(items, now=now)
    totals.no_activity += no_activity
    bad_status = classifiers.bad_status(items)
    totals.bad_status += len(bad_status)
    squash = classifiers.needs_squash(items)
    totals.squash += len(squash)
    totals.open += len(items)
    totals.unmerged += len(classifiers.unmerged(items))
    totals.merged += len(classifiers.merged(items))

    return (f"{repo}, {len(last_comment)}, {len(rebase)}, {len(bad_status)}, {len(squash)}, "
            f"{len(uncommented)}, {len(items)}, {len(mentioned)}, {len(no_activity)}")


def report_sections(totals: TriageTotals) -> List[str]:
    sections = [
        ("PRs that have 0 comments:", totals.uncommented),
        ("Last comment from a member, no response for 15 days (needs ping):", totals.needs_prompt),
        ("Last comment from a member, no response for 30 days (needs closed):", totals.needs_closing),
        ("PRs that have yet to be commented on by a member:", totals.no_member_comments),
        ("PRs where the community asked for help (mentioned a member):", totals.mentioned),
        ("PRs that require rebase (needs comment and a label):", totals.rebase_without_label),
        ("PRs that require closing, no activity for 40 days:", totals.no_activity),
    ]
    html: List[str] = []
    for title, pulls in sections:
        html.extend(pulls_table(title, pulls))
    return html


def write_overview(totals: TriageTotals, out_dir) -> None:
    write_csv(
        out_dir / "overview.csv",
        ["needs closed", "needs rebase", "fails tests", "needs squashed", "total PRs", "uncommented"],
        [{
            "needs closed": len(totals.needs_closing),
            "needs rebase": totals.rebase,
            "fails tests": totals.bad_status,
            "needs squashed": totals.squash,
            "total PRs": totals.open,
            "uncommented": len(totals.uncommented),
        }],
    )
    write_csv(
        out_dir / "totals.csv",
        ["total unmerged PRs", "total merged PRs", "total open PRs", "total uncommented open PRs"],
        [{
            "total unmerged PRs": totals.unmerged,
            "total merged PRs": totals.merged,
            "total open PRs": totals.open,
            "total uncommented open PRs": len(totals.uncommented),
        }],
    )


def build_parser():
    parser = build_arg_parser("triage", "Summarise open pull requests that need triage.")
    parser.add_argument("-o", "--overview", action="store_true", help="Output overview, summary totals to csv")
    parser.add_argument("-w", "--work", action="store_true", help="Output PRs that need work to HTML")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    gateway = build_gateway(settings)
    directory = MembershipDirectory(gateway)
    totals = TriageTotals()

    print(SUMMARY_HEADER)
    for repo in selected_repos(gateway, settings):
        try:
            print(triage_repo(gateway, repo, totals, directory, settings.pool_size, settings.policy))
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")

    ensure_dir(settings.output_dir)
    if args.overview:
        write_overview(totals, settings.output_dir)
    if args.work:
        write_html(settings.output_dir / "report.html", "PRs that Require Triage", report_sections(totals))


__all__ = ["REBASE_LABEL", "TriageTotals", "triage_repo", "report_sections", "write_overview", "build_parser", "main"]
