"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from vote_audit.config import SETTINGS_FILE_ENV, load_settings
from vote_audit.pipeline import AnalysisOptions
from vote_audit.scoring.rules import CONCENTRATION_RULES, SLIDING_WINDOW_RULES


class TestLoadSettings:
    """Tests for YAML defaults, env overrides and path resolution."""

    def test_paths_resolve_against_project_root(self, settings_file, tmp_path):
        settings = load_settings(settings_file)
        assert settings.paths.input_file == (tmp_path / "data" / "votes.txt").resolve()
        assert settings.paths.logs_root == (tmp_path / "logs").resolve()

    def test_paths_section_fields(self, settings_file):
        """Only the input log and the log directory are configurable paths."""
        settings = load_settings(settings_file)
        assert set(settings.as_dict()["paths"]) == {"input_file", "logs_root"}

    def test_defaults_fill_missing_sections(self, settings_file):
        settings = load_settings(settings_file)
        assert settings.consolidation.method == "edit_distance"
        assert settings.consolidation.max_edit_distance == 2
        assert settings.features.cluster_window_fraction == pytest.approx(0.05)
        assert settings.ranking.backfill is False

    def test_env_overrides_yaml(self, settings_file, monkeypatch):
        monkeypatch.setenv("VOTE_AUDIT_RANKING__FRAUD_COUNT", "3")
        monkeypatch.setenv("VOTE_AUDIT_SCORING__POLICY", "sliding_window")
        settings = load_settings(settings_file)
        assert settings.ranking.fraud_count == 3
        assert settings.scoring.policy == "sliding_window"

    def test_settings_file_from_env(self, settings_file, monkeypatch):
        monkeypatch.setenv(SETTINGS_FILE_ENV, str(settings_file))
        settings = load_settings()
        assert settings.ranking.ranking_size == 20

    def test_invalid_policy(self, settings_file, monkeypatch):
        monkeypatch.setenv("VOTE_AUDIT_SCORING__POLICY", "magic")
        with pytest.raises(ValidationError):
            load_settings(settings_file)


class TestAnalysisOptions:
    """Tests for settings-to-options translation."""

    def test_default_policy(self, settings_file):
        options = AnalysisOptions.from_settings(load_settings(settings_file))
        assert options.rules is CONCENTRATION_RULES
        assert options.ranking.fraud_count == 2
        assert options.exempt_names == ()

    def test_alternate_policy(self, settings_file, monkeypatch):
        monkeypatch.setenv("VOTE_AUDIT_SCORING__POLICY", "sliding_window")
        monkeypatch.setenv("VOTE_AUDIT_SCORING__EXEMPT_NAMES", '["Jon Smith"]')
        options = AnalysisOptions.from_settings(load_settings(settings_file))
        assert options.rules is SLIDING_WINDOW_RULES
        assert options.exempt_names == ("Jon Smith",)
