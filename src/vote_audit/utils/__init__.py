"""Shared utility helpers."""

from vote_audit.utils.paths import write_json_atomically
from vote_audit.utils.time_utils import now_utc

__all__ = [
    "write_json_atomically",
    "now_utc",
]
