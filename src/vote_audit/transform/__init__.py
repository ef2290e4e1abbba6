"""Transform package with timestamp parsing and record typing."""

from vote_audit.transform.normalize import (
    RECORD_COLUMNS,
    RECORD_SCHEMA,
    NormalizeResult,
    empty_records_df,
    normalize_vote_rows,
    parse_timestamp_expr,
)

__all__ = [
    "RECORD_COLUMNS",
    "RECORD_SCHEMA",
    "NormalizeResult",
    "empty_records_df",
    "normalize_vote_rows",
    "parse_timestamp_expr",
]
