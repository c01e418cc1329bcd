"""List or count pull requests per repository, optionally narrowed by a triage filter."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from prtriage.github.fetcher import fetch_enriched
from prtriage.github.http_client import GitHubError
from prtriage.github.models import DEFAULT_FILTER, FULL_FILTER, DetailKind, PullRequest
from prtriage.triage import classifiers
from prtriage.triage.membership import MembershipDirectory

from .config import (
    ReportSettings,
    build_arg_parser,
    build_gateway,
    exit_with_usage,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)


def build_parser():
    parser = build_arg_parser("pull_requests", "List open pull requests per repository.")
    parser.add_argument("-a", "--after", type=int, help="Pull requests last updated after DAYS days ago.")
    parser.add_argument("-b", "--before", type=int, help="Pull requests last updated before DAYS days ago.")
    parser.add_argument("-c", "--count", action="store_true", help="Only print the count of pull requests.")
    parser.add_argument("-e", "--show-empty", action="store_true", help="List repos with no pull requests")
    parser.add_argument("-s", "--sort", action="store_true", help="Sort output based on number of pull requests")
    parser.add_argument("--no-response", action="store_true",
                        help="Select PRs which had no response in the last 30 days")
    parser.add_argument("--needs-closing", action="store_true",
                        help="Select PRs where the last comment is from an owner and nothing happened for 30 days")
    parser.add_argument("--bad-status", dest="filter", action="store_const", const="bad_status",
                        help="Select PRs where the status is bad")
    parser.add_argument("--needs-squashed", dest="filter", action="store_const", const="needs_squashed",
                        help="Select PRs that need squashed")
    parser.add_argument("--needs-rebase", dest="filter", action="store_const", const="needs_rebase",
                        help="Select PRs that need a rebase")
    parser.add_argument("--no-comments", dest="filter", action="store_const", const="no_comments",
                        help="Select PRs where there are no comments")
    parser.add_argument("--no-member-comments", dest="filter", action="store_const", const="no_member_comments",
                        help="Select PRs where there are no comments from organisation members")
    parser.add_argument("--stale", dest="filter", action="store_const", const="stale",
                        help="Select PRs with no activity for 40 days")
    return parser


def select_pulls(gateway, repo: str, filter_name: Optional[str], settings: ReportSettings,
                 directory: MembershipDirectory) -> List[PullRequest]:
    """Open pulls of `repo`, narrowed by the named filter."""
    if filter_name is None:
        return gateway.list_pull_requests(repo)
    if filter_name == "stale":
        return classifiers.stale_no_activity(gateway.list_pull_requests(repo))

    kinds = FULL_FILTER if filter_name == "needs_rebase" else DEFAULT_FILTER
    if filter_name in ("no_comments", "last_comment_owner", "no_member_comments"):
        kinds = frozenset({DetailKind.COMMENTS})
    items = fetch_enriched(gateway, repo, kinds=kinds, pool_size=settings.pool_size, policy=settings.policy)

    if filter_name == "needs_rebase":
        return classifiers.needs_rebase(items)
    if filter_name == "bad_status":
        return [item.pull for item in classifiers.bad_status(items)]
    if filter_name == "needs_squashed":
        return [item.pull for item in classifiers.needs_squash(items)]
    if filter_name == "no_comments":
        return classifiers.uncommented(items)
    members = directory.for_pulls(items)
    if filter_name == "last_comment_owner":
        return classifiers.last_comment_by_owner(items, members)
    return classifiers.no_personnel_comments(items, members)


def format_entry(entry: Dict[str, Any], count_only: bool) -> List[str]:
    lines = [f"=== {entry['repo']} ==="]
    count = entry["pull_count"]
    if count == 0:
        lines.append("  no open pull requests")
    elif count == 1:
        lines.append("  1 open pull request")
    else:
        lines.append(f"  {count} open pull requests")
    if not count_only:
        for pull in entry["pulls"]:
            lines.append(f"  {pull.html_url} - {pull.title}")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    before, after = args.before, args.after
    filter_name = args.filter
    if args.no_response:
        before = 30
    if args.needs_closing:
        before = 30
        filter_name = "last_comment_owner"
    if before is not None and after is not None:
        exit_with_usage(parser, "Only one of -a and -b can be specified")

    gateway = build_gateway(settings)
    directory = MembershipDirectory(gateway)
    now = dt.datetime.now(dt.timezone.utc)
    repo_data: List[Dict[str, Any]] = []

    for repo in selected_repos(gateway, settings):
        try:
            pulls = select_pulls(gateway, repo, filter_name, settings, directory)
        except GitHubError as exc:
            if settings.verbose:
                print(f"[warn] Unable to fetch pull requests for {repo}: {exc}")
            continue

        if before is not None:
            pulls = classifiers.pulls_older_than(now - dt.timedelta(days=before), pulls=pulls)
        elif after is not None:
            pulls = classifiers.pulls_newer_than(now - dt.timedelta(days=after), pulls=pulls)

        if not pulls and not args.show_empty:
            continue
        repo_data.append({"repo": repo, "pulls": classifiers.sort_pulls(pulls), "pull_count": len(pulls)})

    if args.sort:
        repo_data.sort(key=lambda entry: -entry["pull_count"])

    for entry in repo_data:
        print("\n".join(format_entry(entry, args.count)))


__all__ = ["build_parser", "select_pulls", "format_entry", "main"]
