"""Report commands; `prtriage <command> [options]` dispatches to each module's `main`."""

from __future__ import annotations

import sys
from typing import Callable, Dict, List, Optional

from . import (
    daily_open,
    labels,
    pull_requests,
    quarterly,
    rebase_bot,
    release_planning,
    review_list,
    triage,
    work_done,
)

COMMANDS: Dict[str, Callable[[Optional[List[str]]], None]] = {
    "pull-requests": pull_requests.main,
    "triage": triage.main,
    "review-list": review_list.main,
    "labels": labels.main,
    "rebase-bot": rebase_bot.main,
    "daily-open": daily_open.main,
    "work-done": work_done.main,
    "release-planning": release_planning.main,
    "quarterly": quarterly.main,
}


def usage() -> str:
    return "usage: prtriage <command> [options]\ncommands: " + ", ".join(sorted(COMMANDS))


def main(argv: Optional[List[str]] = None) -> None:
    """Run the named report command with the remaining arguments."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in ("-h", "--help"):
        print(usage())
        sys.exit(0 if args else 1)
    command = args[0]
    if command not in COMMANDS:
        print(f"[error] unknown command: {command}")
        print(usage())
        sys.exit(1)
    COMMANDS[command](args[1:])


__all__ = ["COMMANDS", "usage", "main"]
