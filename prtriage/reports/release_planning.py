"""List modules whose last release is old enough, or far enough behind, to need a new one."""

from __future__ import annotations

from typing import List, Optional, Sequence

from prtriage.github.http_client import GitHubError
from prtriage.triage.release import ReleaseInfo, due_for_release, latest_release

from .config import (
    add_modules_argument,
    build_arg_parser,
    build_gateway,
    exit_with_usage,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)
from .output import ensure_dir, rows_table, save_json, write_html


def build_parser():
    parser = build_arg_parser("release_planning", "Modules due for a release.")
    add_modules_argument(parser)
    parser.add_argument("-c", "--commit-threshold", type=int,
                        help="Number of commits since the last release")
    parser.add_argument("-g", "--tag-regex", help="Tag regex")
    parser.add_argument("-m", "--time-threshold", type=int,
                        help="Days since the last release")
    parser.add_argument("-o", "--output", action="store_true",
                        help="Write ModulesRelease.html and ModulesRelease.json")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))
    if args.commit_threshold is None and args.time_threshold is None:
        exit_with_usage(parser, "Missing options: -m or -c")

    gateway = build_gateway(settings)
    infos: List[ReleaseInfo] = []
    for repo in selected_repos(gateway, settings):
        try:
            info = latest_release(gateway, repo, args.tag_regex)
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")
            continue
        if info is None:
            if settings.verbose:
                print(f"[info] {repo} has no matching tags")
            continue
        infos.append(info)

    due = due_for_release(infos, commit_threshold=args.commit_threshold, days_threshold=args.time_threshold)
    for info in due:
        print(f"{info.repo} last release {info.tag} on {info.tag_date.date()}, "
              f"{info.commits_since} commits since")

    if args.output:
        rows = [info.as_row() for info in due]
        ensure_dir(settings.output_dir)
        write_html(settings.output_dir / "ModulesRelease.html", "Modules due for release", rows_table(rows))
        save_json(settings.output_dir / "ModulesRelease.json", rows)


__all__ = ["build_parser", "main"]
