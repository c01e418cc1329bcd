"""Command-line configuration shared by the report commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from prtriage.github.config import FETCH_POLICY, GITHUB_TOKEN, OUTPUT_DIR, POOL_SIZE, SUPPORTED_MODULES_REGEX
from prtriage.github.fetcher import POLICIES
from prtriage.github.gateway import GitHubGateway

# preset -> (namespace, repository regex)
PRESETS: Dict[str, Tuple[str, str]] = {
    "puppetlabs": ("puppetlabs", "^puppetlabs-"),
    "puppetlabs-supported": ("puppetlabs", SUPPORTED_MODULES_REGEX),
    "community": ("puppet-community", "^puppet-"),
    "voxpupuli": ("voxpupuli", "^puppet-"),
}


@dataclass(frozen=True)
class ReportSettings:
    """Resolved runtime settings shared by every report command."""

    namespace: Optional[str]
    repo_regex: str
    token: Optional[str]
    verbose: bool
    pool_size: int
    policy: str
    output_dir: Path
    modules_file: Optional[Path] = None


def build_arg_parser(prog: str, description: str) -> argparse.ArgumentParser:
    """Return a parser carrying the repository-selection and fetch options."""

    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("-n", "--namespace", help="GitHub namespace. Required.")
    parser.add_argument("-r", "--repo-regex", help="Repository regex")
    parser.add_argument("-t", "--oauth-token", default=GITHUB_TOKEN, help="OAuth token. Required.")
    parser.add_argument("-v", "--verbose", action="store_true", help="More output")
    parser.add_argument("--workers", type=int, default=POOL_SIZE,
                        help="Worker threads used to enrich pull requests")
    parser.add_argument("--fetch-policy", choices=POLICIES, default=FETCH_POLICY,
                        help="How a failed per-PR fetch is handled")
    parser.add_argument("--output-dir", default=OUTPUT_DIR, help="Directory for CSV/HTML/JSON output")

    presets = parser.add_mutually_exclusive_group()
    presets.add_argument("--puppetlabs", dest="preset", action="store_const", const="puppetlabs",
                         help="Select Puppet Labs' modules")
    presets.add_argument("--puppetlabs-supported", dest="preset", action="store_const",
                         const="puppetlabs-supported", help="Select only Puppet Labs' supported modules")
    presets.add_argument("--community", dest="preset", action="store_const", const="community",
                         help="Select community modules")
    presets.add_argument("--voxpupuli", dest="preset", action="store_const", const="voxpupuli",
                         help="Select Voxpupuli modules")
    return parser


def add_modules_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--modules", help="JSON list of {github_namespace, repo_name} entries")


def parse_args(parser: argparse.ArgumentParser, argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; accepts argv overrides for testing."""

    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> ReportSettings:
    """Return immutable settings; a preset supplies namespace and regex."""

    namespace = args.namespace
    repo_regex = args.repo_regex
    preset = getattr(args, "preset", None)
    if preset:
        namespace, repo_regex = PRESETS[preset]
    modules = getattr(args, "modules", None)
    return ReportSettings(
        namespace=namespace,
        repo_regex=repo_regex or ".*",
        token=args.oauth_token,
        verbose=bool(args.verbose),
        pool_size=int(args.workers),
        policy=args.fetch_policy,
        output_dir=Path(args.output_dir),
        modules_file=Path(modules) if modules else None,
    )


def missing_options(settings: ReportSettings, require_namespace: bool = True) -> List[str]:
    missing = []
    if require_namespace and not settings.namespace and settings.modules_file is None:
        missing.append("-n")
    if not settings.token:
        missing.append("-t")
    return missing


def exit_with_usage(parser: argparse.ArgumentParser, message: str) -> None:
    print(message)
    print(parser.format_help())
    sys.exit(1)


def require_options(parser: argparse.ArgumentParser, missing: List[str]) -> None:
    """Print the missing options with usage and exit non-zero when any are missing."""
    if missing:
        exit_with_usage(parser, f"Missing options: {', '.join(missing)}")


def load_module_list(path: Path) -> List[str]:
    """Read `owner/repo` names from a JSON module list."""
    with Path(path).open("r", encoding="utf-8") as handle:
        entries = json.load(handle)
    repos = []
    for entry in entries:
        namespace = entry.get("github_namespace")
        name = entry.get("repo_name")
        if namespace and name:
            repos.append(f"{namespace}/{name}")
    return repos


def build_gateway(settings: ReportSettings) -> GitHubGateway:
    return GitHubGateway(token=settings.token, pool_size=settings.pool_size)


def selected_repos(gateway: GitHubGateway, settings: ReportSettings) -> List[str]:
    """Full `owner/name` repositories chosen by the module list or namespace + regex."""
    if settings.modules_file is not None:
        return load_module_list(settings.modules_file)
    names = gateway.list_repositories(settings.namespace, settings.repo_regex)
    return [f"{settings.namespace}/{name}" for name in names]


__all__ = [
    "PRESETS",
    "ReportSettings",
    "build_arg_parser",
    "add_modules_argument",
    "parse_args",
    "resolve_settings",
    "missing_options",
    "exit_with_usage",
    "require_options",
    "load_module_list",
    "build_gateway",
    "selected_repos",
]
