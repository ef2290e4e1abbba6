"""In-memory record store for one analysis run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

import polars as pl

from vote_audit.transform.normalize import RECORD_COLUMNS, RECORD_SCHEMA, empty_records_df


@dataclass(frozen=True, slots=True)
class VoteRecord:
    """One accepted vote: who voted (by IP), for which raw name, and when."""

    ip: str | None
    candidate_raw: str
    timestamp: datetime


class RecordStore:
    """Holds the typed vote records of a single run.

    The backing frame is never mutated; every query returns fresh values.
    """

    def __init__(self, frame: pl.DataFrame | None = None) -> None:
        if frame is None:
            frame = empty_records_df()
        missing = sorted(set(RECORD_COLUMNS).difference(frame.columns))
        if missing:
            raise ValueError(f"Record frame missing required columns: {', '.join(missing)}")
        self._frame = frame.select(list(RECORD_COLUMNS))

    @classmethod
    def from_records(cls, records: Iterable[VoteRecord]) -> "RecordStore":
        """Build a store from Python values, numbering rows in input order."""

        rows = [
            {
                "ip": record.ip,
                "candidate_raw": record.candidate_raw,
                "timestamp": record.timestamp,
                "source_line_no": line_no,
            }
            for line_no, record in enumerate(records, start=1)
        ]
        if not rows:
            return cls()
        return cls(pl.DataFrame(rows, schema=RECORD_SCHEMA))

    @property
    def frame(self) -> pl.DataFrame:
        return self._frame

    @property
    def total_votes(self) -> int:
        return self._frame.height

    @property
    def is_empty(self) -> bool:
        return self._frame.height == 0

    def __len__(self) -> int:
        return self._frame.height

    def name_counts(self) -> list[tuple[str, int]]:
        """Distinct raw names with occurrence counts, most frequent first.

        Equal counts keep the order in which the names first appear in the log.
        """

        if self.is_empty:
            return []
        counts = (
            self._frame.with_row_index("__row_idx")
            .group_by("candidate_raw")
            .agg(
                [
                    pl.len().alias("votes"),
                    pl.col("__row_idx").min().alias("first_seen"),
                ]
            )
            .sort(["votes", "first_seen"], descending=[True, False])
        )
        return [(str(name), int(votes)) for name, votes in counts.select(["candidate_raw", "votes"]).iter_rows()]
