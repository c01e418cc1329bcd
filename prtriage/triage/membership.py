"""Organisation membership lookups keyed by the owner of a batch of pull requests."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from prtriage.github.models import EnrichedPullRequest, Membership, PullRequest, Repository

OWNER = "owner"
MEMBER = "member"


def _pulls(items: Iterable) -> List[PullRequest]:
    return [item.pull if isinstance(item, EnrichedPullRequest) else item for item in items]


def owner_of(items: Iterable) -> Optional[Repository]:
    """The single repository owner shared by `items`; None for an empty batch.

    Raises ValueError when the batch spans more than one owner or a pull
    carries no repository.
    """
    owners: Dict[str, Repository] = {}
    for pull in _pulls(items):
        if pull.repository is None:
            raise ValueError(f"pull request #{pull.number} has no base repository")
        owners.setdefault(pull.repository.owner, pull.repository)
    if len(owners) > 1:
        raise ValueError(
            "membership lookup needs pull requests from a single owner, got: "
            + ", ".join(sorted(owners))
        )
    return next(iter(owners.values()), None)


def membership_of(gateway, items: Iterable) -> Membership:
    """Members of the owner shared by `items`: the user alone, or every organisation member."""
    repository = owner_of(items)
    if repository is None:
        return {}
    if repository.owner_type == "User":
        return {repository.owner: OWNER}
    return {login: MEMBER for login in gateway.organization_members(repository.owner)}


class MembershipDirectory:
    """Per-invocation memo so each owner's member list is fetched only once."""

    def __init__(self, gateway) -> None:
        self.gateway = gateway
        self._by_owner: Dict[str, Membership] = {}

    def for_pulls(self, items: Iterable) -> Membership:
        items = list(items)
        repository = owner_of(items)
        if repository is None:
            return {}
        if repository.owner not in self._by_owner:
            self._by_owner[repository.owner] = membership_of(self.gateway, items)
        return self._by_owner[repository.owner]


__all__ = ["OWNER", "MEMBER", "owner_of", "membership_of", "MembershipDirectory"]
