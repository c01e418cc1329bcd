"""Label reconciliation: diff a repository's labels against a desired set and apply fixes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Union

from prtriage.github.models import Label, LabelSpec

LabelLike = Union[Label, Dict[str, Any]]


def normalize_color(color: str) -> str:
    return (color or "").lstrip("#").lower()


def as_label(value: LabelLike) -> Label:
    if isinstance(value, Label):
        return Label(name=value.name, color=normalize_color(value.color))
    return Label(name=value["name"], color=normalize_color(value.get("color", "")))


def _labels(values: Iterable[LabelLike]) -> List[Label]:
    return [as_label(v) for v in values]


def missing_labels(actual: Iterable[LabelLike], desired: Iterable[LabelLike]) -> List[LabelSpec]:
    """Desired labels whose name does not exist in the repository."""
    present = {label.name for label in _labels(actual)}
    return [spec for spec in _labels(desired) if spec.name not in present]


def incorrect_labels(actual: Iterable[LabelLike], desired: Iterable[LabelLike]) -> List[LabelSpec]:
    """Existing labels with a desired name but a different color, carrying the desired color."""
    wanted = {spec.name: spec for spec in _labels(desired)}
    fixes = []
    for label in _labels(actual):
        spec = wanted.get(label.name)
        if spec is not None and normalize_color(spec.color) != normalize_color(label.color):
            fixes.append(Label(name=label.name, color=normalize_color(spec.color)))
    return fixes


def extra_labels(actual: Iterable[LabelLike], desired: Iterable[LabelLike]) -> List[str]:
    """Names of existing labels that are not in the desired set."""
    keep = {spec.name for spec in _labels(desired)}
    return [label.name for label in _labels(actual) if label.name not in keep]


@dataclass
class LabelPlan:
    repo: str
    missing: List[LabelSpec] = field(default_factory=list)
    incorrect: List[LabelSpec] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.missing or self.incorrect or self.extra)


def plan_labels(gateway, repo: str, desired: Sequence[LabelLike]) -> LabelPlan:
    """Diff `repo`'s labels against `desired` using a single label fetch."""
    actual = gateway.fetch_labels(repo)
    return LabelPlan(
        repo=repo,
        missing=missing_labels(actual, desired),
        incorrect=incorrect_labels(actual, desired),
        extra=extra_labels(actual, desired),
    )


def apply_plan(gateway, plan: LabelPlan, delete_extra: bool = True) -> None:
    """Delete extra, update incorrect, add missing; one call per label and no rollback."""
    if delete_extra:
        for name in plan.extra:
            print(f"  deleting label {name!r} from {plan.repo}")
            gateway.delete_label(plan.repo, name)
    for label in plan.incorrect:
        print(f"  recoloring label {label.name!r} in {plan.repo} to {label.color}")
        gateway.update_label(plan.repo, label.name, label.color)
    for label in plan.missing:
        print(f"  adding label {label.name!r} to {plan.repo}")
        gateway.add_label(plan.repo, label.name, label.color)


__all__ = [
    "normalize_color",
    "as_label",
    "missing_labels",
    "incorrect_labels",
    "extra_labels",
    "LabelPlan",
    "plan_labels",
    "apply_plan",
]
