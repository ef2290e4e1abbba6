"""Read free-text vote log files into a raw Polars DataFrame."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import polars as pl

LOGGER = logging.getLogger(__name__)

CANDIDATE_MARKER = "candidate:"

RAW_COLUMNS: tuple[str, ...] = (
    "raw_ip",
    "raw_candidate",
    "raw_time",
)

REJECT_MISSING_TIME = "missing_time"
REJECT_MISSING_CANDIDATE = "missing_candidate"

# A value stops at end of line or where the next labeled field begins.
_NEXT_LABEL = r"(?=,\s*(?:ip|candidate|time):|$)"
IP_PATTERN = re.compile(r"ip: ([^,\n]+)")
CANDIDATE_PATTERN = re.compile(r"candidate: (.+?)" + _NEXT_LABEL)
TIME_PATTERN = re.compile(r"time: (.+?)" + _NEXT_LABEL)


class InputUnavailableError(OSError):
    """Raised when the vote log cannot be opened or read at all."""


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Labeled fields pulled out of one qualifying log line."""

    ip: str | None
    candidate: str
    time: str


@dataclass(frozen=True, slots=True)
class LogReadResult:
    """Container for parsed raw rows and rejected-line metadata."""

    data: pl.DataFrame
    rejects: pl.DataFrame
    lines_total: int
    lines_qualifying: int


def _empty_raw_df() -> pl.DataFrame:
    """Return empty raw frame with stable schema."""

    schema: dict[str, pl.DataType] = {column: pl.String for column in RAW_COLUMNS}
    schema["raw_line"] = pl.String
    schema["source_line_no"] = pl.Int64
    return pl.DataFrame(schema=schema)


def empty_reject_df() -> pl.DataFrame:
    """Return empty reject frame with stable schema."""

    return pl.DataFrame(
        schema={
            "source_line_no": pl.Int64,
            "raw_line": pl.String,
            "reason": pl.String,
        }
    )


def _search(pattern: re.Pattern[str], line: str) -> str | None:
    match = pattern.search(line)
    return match.group(1) if match else None


def parse_vote_line(line: str) -> ParsedLine | str | None:
    """Extract labeled fields from one log line.

    Returns ``None`` for lines that are not candidate records, a reject reason
    string for candidate lines missing a required field, and a `ParsedLine`
    otherwise. The timestamp is left as text; parsing happens in normalization.
    """

    if CANDIDATE_MARKER not in line:
        return None

    stripped = line.rstrip("\r\n")
    time_value = _search(TIME_PATTERN, stripped)
    if time_value is None or not time_value.strip():
        return REJECT_MISSING_TIME

    candidate_value = _search(CANDIDATE_PATTERN, stripped)
    candidate = candidate_value.strip() if candidate_value is not None else ""
    if not candidate:
        return REJECT_MISSING_CANDIDATE

    return ParsedLine(ip=_search(IP_PATTERN, stripped), candidate=candidate, time=time_value.strip())


def parse_vote_lines(
    lines: Iterable[str],
    *,
    source: str = "<memory>",
    logger: logging.Logger | None = None,
) -> LogReadResult:
    """Parse an iterable of log lines into raw rows plus rejects.

    `source_line_no` is 1-based over every line of the input, including the
    non-qualifying ones, so rejects point back at the original file.
    """

    effective_logger = logger or LOGGER
    rows: list[dict[str, object]] = []
    reject_rows: list[dict[str, object]] = []
    lines_total = 0
    lines_qualifying = 0

    for line_no, raw_line in enumerate(lines, start=1):
        lines_total += 1
        parsed = parse_vote_line(raw_line)
        if parsed is None:
            continue
        lines_qualifying += 1

        if isinstance(parsed, str):
            effective_logger.warning(
                "read_vote_log.rejected_line source=%s line=%s reason=%s",
                source,
                line_no,
                parsed,
            )
            reject_rows.append(
                {
                    "source_line_no": line_no,
                    "raw_line": raw_line.strip(),
                    "reason": parsed,
                }
            )
            continue

        rows.append(
            {
                "raw_ip": parsed.ip,
                "raw_candidate": parsed.candidate,
                "raw_time": parsed.time,
                "raw_line": raw_line.strip(),
                "source_line_no": line_no,
            }
        )

    if rows:
        data = pl.DataFrame(
            rows,
            schema_overrides={
                **{column: pl.String for column in RAW_COLUMNS},
                "raw_line": pl.String,
                "source_line_no": pl.Int64,
            },
        )
    else:
        data = _empty_raw_df()

    rejects = (
        pl.DataFrame(
            reject_rows,
            schema_overrides={
                "source_line_no": pl.Int64,
                "raw_line": pl.String,
                "reason": pl.String,
            },
        )
        if reject_rows
        else empty_reject_df()
    )
    return LogReadResult(
        data=data,
        rejects=rejects,
        lines_total=lines_total,
        lines_qualifying=lines_qualifying,
    )


def read_vote_log_with_rejects(
    path: Path,
    logger: logging.Logger | None = None,
) -> LogReadResult:
    """Read one vote log file into raw columns.

    Raises `InputUnavailableError` when the file is missing or unreadable.
    """

    effective_logger = logger or LOGGER
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            raw_lines = handle.readlines()
    except OSError as exc:
        raise InputUnavailableError(f"Vote log is not readable: {path} ({exc})") from exc

    result = parse_vote_lines(raw_lines, source=str(path), logger=effective_logger)
    effective_logger.info(
        "read_vote_log.done path=%s lines=%s qualifying=%s rows=%s rejects=%s",
        path,
        result.lines_total,
        result.lines_qualifying,
        result.data.height,
        result.rejects.height,
    )
    return result
