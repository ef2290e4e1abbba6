"""Normalization of raw vote log rows into typed vote records."""

from __future__ import annotations

from dataclasses import dataclass

import polars as pl

from vote_audit.ingest.read_log import RAW_COLUMNS, empty_reject_df

REJECT_TIMESTAMP_PARSE_ERROR = "timestamp_parse_error"

RECORD_COLUMNS: tuple[str, ...] = (
    "ip",
    "candidate_raw",
    "timestamp",
    "source_line_no",
)

RECORD_SCHEMA: dict[str, pl.DataType] = {
    "ip": pl.String,
    "candidate_raw": pl.String,
    "timestamp": pl.Datetime("us"),
    "source_line_no": pl.Int64,
}

NAIVE_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%.f",
    "%Y-%m-%d %H:%M:%S%.f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%a, %d %b %Y %H:%M:%S GMT",
)

DATE_ONLY_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d.%m.%Y",
)

OFFSET_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%.f%z",
    "%Y-%m-%d %H:%M:%S%.f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %z",
)


@dataclass(frozen=True, slots=True)
class NormalizeResult:
    """Typed vote rows plus rows dropped during timestamp parsing."""

    records: pl.DataFrame
    rejects: pl.DataFrame


def empty_records_df() -> pl.DataFrame:
    """Return empty record frame with stable schema."""

    return pl.DataFrame(schema=RECORD_SCHEMA)


def parse_timestamp_expr(column: str) -> pl.Expr:
    """Parse a text column against every accepted format, first match wins.

    Offset-aware values are converted to UTC and stored as naive datetimes so
    all records share one comparable dtype. Date-only values map to midnight.
    """

    text = pl.col(column).cast(pl.String, strict=False).str.strip_chars().str.replace(r"Z$", "+00:00")
    naive = [text.str.strptime(pl.Datetime("us"), format=fmt, strict=False) for fmt in NAIVE_TIMESTAMP_FORMATS]
    aware = [
        text.str.strptime(pl.Datetime("us", "UTC"), format=fmt, strict=False).dt.replace_time_zone(None)
        for fmt in OFFSET_TIMESTAMP_FORMATS
    ]
    dates = [
        text.str.strptime(pl.Date, format=fmt, strict=False).cast(pl.Datetime("us"))
        for fmt in DATE_ONLY_FORMATS
    ]
    return pl.coalesce([*naive, *aware, *dates])


def normalize_vote_rows(raw_df: pl.DataFrame) -> NormalizeResult:
    """Type raw log rows and split off rows whose timestamp does not parse."""

    missing = sorted({*RAW_COLUMNS, "raw_line", "source_line_no"}.difference(raw_df.columns))
    if missing:
        raise ValueError(f"Raw vote frame missing required columns: {', '.join(missing)}")

    if raw_df.height == 0:
        return NormalizeResult(records=empty_records_df(), rejects=empty_reject_df())

    parsed = raw_df.with_columns(parse_timestamp_expr("raw_time").alias("timestamp"))

    rejects = parsed.filter(pl.col("timestamp").is_null()).select(
        [
            pl.col("source_line_no").cast(pl.Int64),
            pl.col("raw_line"),
            pl.lit(REJECT_TIMESTAMP_PARSE_ERROR).alias("reason"),
        ]
    )

    records = parsed.filter(pl.col("timestamp").is_not_null()).select(
        [
            pl.col("raw_ip").alias("ip"),
            pl.col("raw_candidate").alias("candidate_raw"),
            pl.col("timestamp").cast(pl.Datetime("us")),
            pl.col("source_line_no").cast(pl.Int64),
        ]
    )
    return NormalizeResult(records=records, rejects=rejects)
