"""Check repositories against the standard label set and optionally fix them."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from prtriage.github.config import DEFAULT_LABELS
from prtriage.github.http_client import GitHubError
from prtriage.triage.labels import apply_plan, plan_labels

from .config import (
    build_arg_parser,
    build_gateway,
    missing_options,
    parse_args,
    require_options,
    resolve_settings,
    selected_repos,
)


def load_desired_labels(path: Optional[str]) -> List[Dict[str, Any]]:
    """Desired labels from a JSON file of {name, color} objects, or the built-in set."""
    if not path:
        return list(DEFAULT_LABELS)
    with Path(path).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def build_parser():
    parser = build_arg_parser("labels", "Compare repository labels with the desired label set.")
    parser.add_argument("-f", "--fix-labels", action="store_true", help="Add missing and recolor incorrect labels")
    parser.add_argument("--delete-extra", action="store_true", help="With -f, also delete labels not in the set")
    parser.add_argument("--labels-file", help="JSON list of {name, color} objects to use as the desired set")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parse_args(parser, argv)
    settings = resolve_settings(args)
    require_options(parser, missing_options(settings))

    desired = load_desired_labels(args.labels_file)
    print(f"Checking for the following labels: {[label['name'] for label in desired]}")

    gateway = build_gateway(settings)
    for repo in selected_repos(gateway, settings):
        try:
            plan = plan_labels(gateway, repo, desired)
            print(f"{repo}, missing={[l.name for l in plan.missing]}, "
                  f"incorrect={[l.name for l in plan.incorrect]}, extra={plan.extra}")
            if args.fix_labels and not plan.is_clean:
                apply_plan(gateway, plan, delete_extra=args.delete_extra)
        except GitHubError as exc:
            print(f"[warn] skipping {repo}: {exc}")


__all__ = ["load_desired_labels", "build_parser", "main"]
