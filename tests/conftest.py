"""
Pytest configuration and fixtures for vote_audit tests.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from vote_audit.features.extract import CandidateFeatures
from vote_audit.records import RecordStore, VoteRecord

BASE_TIME = datetime(2024, 3, 1, 10, 0, 0)


@pytest.fixture
def base_time():
    """Fixed reference instant for building vote timestamps."""
    return BASE_TIME


@pytest.fixture
def make_store():
    """Factory: build a RecordStore from (ip, name, seconds_offset) tuples."""

    def _make(rows):
        return RecordStore.from_records(
            VoteRecord(ip=ip, candidate_raw=name, timestamp=BASE_TIME + timedelta(seconds=offset))
            for ip, name, offset in rows
        )

    return _make


@pytest.fixture
def make_features():
    """Factory: CandidateFeatures with quiet defaults that trigger no rule."""

    def _make(**overrides):
        values = {
            "candidate": "Test Candidate",
            "total_votes": 10,
            "unique_ips": 10,
            "votes_per_ip": 1.0,
            "max_votes_from_single_ip": 1,
            "time_range_seconds": 36000.0,
            "time_clustering_ratio": 0.1,
        }
        values.update(overrides)
        return CandidateFeatures(**values)

    return _make


@pytest.fixture
def mixed_rows():
    """Honest candidates spread over hours plus two stuffed candidates."""
    rows = []
    for i in range(30):
        rows.append((f"10.0.1.{i}", "Anna Lee", i * 3600))
    for i in range(2):
        rows.append((f"10.0.2.{i}", "Ana Lee", i * 3600 + 1800))
    for i in range(20):
        rows.append((f"10.0.3.{i}", "Boris Chen", i * 3600 + 60))
    for i in range(10):
        rows.append((f"10.0.4.{i}", "Carl Diaz", i * 3600 + 120))
    for i in range(40):
        rows.append(("192.168.0.66", "Victor Stuff", 50000 + i * 0.5))
    for i in range(25):
        rows.append((f"172.16.0.{i}", "Wendy Bot", 70000 + i * 10 / 24))
    return rows


@pytest.fixture
def vote_log_lines():
    """Raw log lines in several field orders, with noise and bad records."""
    return [
        "2024-03-01 09:59:59 server started\n",
        "ip: 10.0.0.1, candidate: Jon Smith, time: 2024-03-01 10:00:00\n",
        "ip: 10.0.0.1, candidate: Jon Smith, time: 2024-03-01 10:00:01\n",
        "time: 2024-03-01T10:00:02, ip: 10.0.0.1, candidate: Jon Smyth\n",
        "ip: 10.0.0.2, candidate: Anna Lee, time: 2024-03-01 11:00:00\n",
        "ip: 10.0.0.3, candidate: Anna Lee\n",
        "ip: 10.0.0.4, candidate: Anna Lee, time: yesterday-ish\n",
        "heartbeat ok\n",
    ]


@pytest.fixture
def vote_log_file(tmp_path, vote_log_lines):
    """Vote log written to a temp file."""
    path = tmp_path / "votes.txt"
    path.write_text("".join(vote_log_lines), encoding="utf-8")
    return path


@pytest.fixture
def settings_file(tmp_path):
    """Minimal project layout with a settings YAML under configs/."""
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    path = config_dir / "settings.yaml"
    path.write_text(
        "\n".join(
            [
                "paths:",
                "  input_file: ./data/votes.txt",
                "  logs_root: ./logs",
                "scoring:",
                "  policy: concentration",
                "  exempt_names: []",
                "ranking:",
                "  fraud_count: 2",
                "  ranking_size: 20",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return path
