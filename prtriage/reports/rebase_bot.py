"""Comment on and label pull requests that have merge conflicts; unlabel ones that merge again."""

from __future__ import annotations

from typing import List, Optional, Sequence

from prtriage.github.http_client import GitHubError
from prtriage.github.models import PullRequest

from .config import (
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)

REBASE_LABEL = "needs-rebase"
REBASE_COMMENT = (
    "Thanks @{author} for your work, but can't be merged as it has conflicts. "
    "Please rebase them on the current master, fix the conflicts and repush here. "
    "https://git-scm.com/book/en/v2/Git-Branching-Rebasing"
)


def handle_pull(gateway, repo: str, pull: PullRequest, no_op: bool) -> str:
    """Reconcile the rebase label and comment for one pull; returns the action taken."""
    mergeable = gateway.pr_mergeable(repo, pull.number)
    has_label = gateway.pr_has_label(repo, pull.number, REBASE_LABEL)

    if mergeable is None:
        # GitHub has not computed mergeability yet
        return "unknown"
    if mergeable is False:
        if has_label:
            print(f"{repo} {pull.number} already labeled")
            return "already-labeled"
        print(f"{repo} {pull.number} adding comment and label")
        if not no_op:
            gateway.add_comment_to_pr(repo, pull.number, REBASE_COMMENT.format(author=pull.author))
            gateway.add_label_to_pr(repo, pull.number, REBASE_LABEL)
        return "labeled"
    if has_label:
        print(f"{repo} {pull.number} removing label")
        if not no_op:
            gateway.remove_label_from_pr(repo, pull.number, REBASE_LABEL)
        return "unlabeled"
    return "clean"


def build_parser():
    parser = build_arg_parser("rebase_bot", "Flag pull requests with merge conflicts.")
    parser.add_argument("-m", "--merge-conflicts", action="store_true",
                        help="Comment / label PRs that have merge conflicts")
    parser.add_argument("-N", "--no-op", action="store_true", help="No-op, don't actually edit the PRs")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    if args.no_op:
        print("RUNNING IN NO-OP MODE")
    else:
        print("MAKING CHANGES TO YOUR REPOS")

    if not args.merge_conflicts:
        return

    gateway = build_gateway(settings)
    actions: List[str] = []
    for repo in selected_repos(gateway, settings):
        try:
            for pull in gateway.list_pull_requests(repo):
                actions.append(handle_pull(gateway, repo, pull, args.no_op))
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")
    if settings.verbose:
        print(f"[info] {actions.count('labeled')} labeled, {actions.count('unlabeled')} unlabeled")


__all__ = ["REBASE_LABEL", "REBASE_COMMENT", "handle_pull", "build_parser", "main"]
