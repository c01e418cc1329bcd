"""GitHub access layer: REST gateway, data model and concurrent enrichment."""

from .fetcher import apply_recency_limit, enrich_pulls, fetch_enriched, fetch_pr_information
from .gateway import GitHubGateway
from .http_client import GitHubError, NetworkError, NotFoundError
from .models import (
    DEFAULT_FILTER,
    FULL_FILTER,
    NO_DETAILS,
    DetailKind,
    EnrichedPullRequest,
    LabelSpec,
    PullRequest,
    RecencyLimit,
)

__all__ = [
    "GitHubGateway",
    "GitHubError",
    "NetworkError",
    "NotFoundError",
    "DetailKind",
    "DEFAULT_FILTER",
    "FULL_FILTER",
    "NO_DETAILS",
    "EnrichedPullRequest",
    "LabelSpec",
    "PullRequest",
    "RecencyLimit",
    "apply_recency_limit",
    "enrich_pulls",
    "fetch_enriched",
    "fetch_pr_information",
]
