"""Ingestion package for vote log parsing."""

from vote_audit.ingest.read_log import (
    CANDIDATE_MARKER,
    InputUnavailableError,
    LogReadResult,
    ParsedLine,
    parse_vote_line,
    parse_vote_lines,
    read_vote_log_with_rejects,
)

__all__ = [
    "CANDIDATE_MARKER",
    "InputUnavailableError",
    "LogReadResult",
    "ParsedLine",
    "parse_vote_line",
    "parse_vote_lines",
    "read_vote_log_with_rejects",
]
