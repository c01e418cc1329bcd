"""Classification, label reconciliation and tallying over fetched pull requests."""

from .classifiers import (
    bad_status,
    last_comment_by_owner,
    mentions_member,
    merged,
    needs_rebase,
    needs_squash,
    no_personnel_comments,
    pulls_in_range,
    pulls_newer_than,
    pulls_older_than,
    sort_pulls,
    stale_no_activity,
    uncommented,
    unmerged,
)
from .labels import LabelPlan, apply_plan, extra_labels, incorrect_labels, missing_labels, plan_labels
from .membership import MembershipDirectory, membership_of, owner_of

__all__ = [
    "bad_status",
    "last_comment_by_owner",
    "mentions_member",
    "merged",
    "needs_rebase",
    "needs_squash",
    "no_personnel_comments",
    "pulls_in_range",
    "pulls_newer_than",
    "pulls_older_than",
    "sort_pulls",
    "stale_no_activity",
    "uncommented",
    "unmerged",
    "LabelPlan",
    "apply_plan",
    "extra_labels",
    "incorrect_labels",
    "missing_labels",
    "plan_labels",
    "MembershipDirectory",
    "membership_of",
    "owner_of",
]
