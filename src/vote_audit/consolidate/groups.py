"""Grouping of raw candidate-name spellings into canonical identities."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Sequence

from vote_audit.consolidate.similarity import (
    DEFAULT_MAX_EDIT_DISTANCE,
    DEFAULT_MAX_LENGTH_GAP,
    name_similar,
    prefix_key,
)

LOGGER = logging.getLogger(__name__)

ConsolidationMethod = Literal["edit_distance", "prefix_key"]


@dataclass(slots=True)
class NameGroup:
    """One canonical candidate and every raw spelling merged into it."""

    canonical_name: str
    variants: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.canonical_name not in self.variants:
            self.variants.insert(0, self.canonical_name)

    def add_variant(self, name: str) -> None:
        if name not in self.variants:
            self.variants.append(name)


@dataclass(frozen=True, slots=True)
class Consolidation:
    """Read-only result of name consolidation.

    `groups` keeps creation order, which is also the tie-break order used by
    scoring and ranking downstream.
    """

    groups: tuple[NameGroup, ...]
    canonical_by_variant: dict[str, str]
    corrected_votes: dict[str, int]

    @property
    def canonical_names(self) -> list[str]:
        return [group.canonical_name for group in self.groups]

    def group_for(self, canonical_name: str) -> NameGroup:
        for group in self.groups:
            if group.canonical_name == canonical_name:
                return group
        raise KeyError(canonical_name)


def _group_by_edit_distance(
    ordered_names: Sequence[str],
    *,
    max_distance: int,
    max_length_gap: int,
) -> list[NameGroup]:
    groups: list[NameGroup] = []
    for name in ordered_names:
        for group in groups:
            if name_similar(
                name,
                group.canonical_name,
                max_distance=max_distance,
                max_length_gap=max_length_gap,
            ):
                group.add_variant(name)
                break
        else:
            groups.append(NameGroup(canonical_name=name))
    return groups


def _group_by_prefix_key(ordered_names: Sequence[str], *, key_length: int) -> list[NameGroup]:
    groups_by_key: dict[str, NameGroup] = {}
    for name in ordered_names:
        key = prefix_key(name, key_length)
        group = groups_by_key.get(key)
        if group is None:
            groups_by_key[key] = NameGroup(canonical_name=name)
        else:
            group.add_variant(name)
    return list(groups_by_key.values())


def consolidate_names(
    name_counts: Sequence[tuple[str, int]],
    *,
    method: ConsolidationMethod = "edit_distance",
    max_distance: int = DEFAULT_MAX_EDIT_DISTANCE,
    max_length_gap: int = DEFAULT_MAX_LENGTH_GAP,
    key_length: int = 8,
    logger: logging.Logger | None = None,
) -> Consolidation:
    """Partition raw names into groups and total their votes.

    `name_counts` must already be ordered most frequent first so that dominant
    spellings become canonicals. Each name is placed exactly once.
    """

    effective_logger = logger or LOGGER
    counts: dict[str, int] = {}
    for name, votes in name_counts:
        counts[name] = counts.get(name, 0) + int(votes)
    ordered_names = list(counts)

    if method == "edit_distance":
        groups = _group_by_edit_distance(
            ordered_names,
            max_distance=max_distance,
            max_length_gap=max_length_gap,
        )
    elif method == "prefix_key":
        groups = _group_by_prefix_key(ordered_names, key_length=key_length)
    else:
        raise ValueError(f"Unknown consolidation method: {method}")

    canonical_by_variant: dict[str, str] = {}
    corrected_votes: dict[str, int] = {}
    for group in groups:
        total = 0
        for variant in group.variants:
            canonical_by_variant[variant] = group.canonical_name
            total += counts[variant]
        corrected_votes[group.canonical_name] = total

    merged = sum(1 for group in groups if len(group.variants) > 1)
    effective_logger.info(
        "consolidate.done method=%s raw_names=%s groups=%s merged_groups=%s",
        method,
        len(ordered_names),
        len(groups),
        merged,
    )
    return Consolidation(
        groups=tuple(groups),
        canonical_by_variant=canonical_by_variant,
        corrected_votes=corrected_votes,
    )
