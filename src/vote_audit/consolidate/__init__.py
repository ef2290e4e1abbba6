"""Candidate-name consolidation."""

from vote_audit.consolidate.groups import Consolidation, NameGroup, consolidate_names
from vote_audit.consolidate.similarity import fold_name, levenshtein, name_similar, prefix_key

__all__ = [
    "Consolidation",
    "NameGroup",
    "consolidate_names",
    "fold_name",
    "levenshtein",
    "name_similar",
    "prefix_key",
]
