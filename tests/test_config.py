"""Tests for ideaplan.lib.config module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from ideaplan.lib.config import CONFIG_FILENAME, PlannerConfig, load_planner_config


class TestDefaults:
    def test_none_returns_defaults(self):
        assert load_planner_config(None) == PlannerConfig()

    def test_missing_file_keeps_config_dir(self, tmp_path):
        config = load_planner_config(tmp_path)
        assert config.config_dir == tmp_path
        assert config.max_confidence == 0.9
        assert config.data_dir is None

    def test_default_values(self):
        config = PlannerConfig()
        assert (config.default_confidence, config.base_confidence) == (0.5, 0.3)
        assert (config.increment_per_answer, config.max_confidence) == (0.6, 0.9)
        assert (config.min_questions, config.max_questions) == (3, 10)
        assert (config.max_idea_length, config.max_answer_length) == (10000, 500)
        assert config.hours_per_week == 40
        assert config.default_team_size == 1


class TestLoadPlannerConfig:
    """Tests for load_planner_config() reading planner.env."""

    def test_reads_values(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(
            "# tuned for a bigger team\n"
            "HOURS_PER_WEEK=30\n"
            "DEFAULT_TEAM_SIZE=3\n"
            'CLARIFY_COMPLETE_THRESHOLD="0.7"\n'
            "MAX_QUESTIONS=6\n"
        )
        config = load_planner_config(tmp_path)
        assert config.hours_per_week == 30
        assert config.default_team_size == 3
        assert config.complete_threshold == 0.7
        assert config.max_questions == 6

    def test_relative_data_dir_resolved(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("DATA_DIR=state\n")
        assert load_planner_config(tmp_path).data_dir == tmp_path / "state"

    def test_absolute_data_dir_kept(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("DATA_DIR=/var/lib/ideaplan\n")
        assert load_planner_config(tmp_path).data_dir == Path("/var/lib/ideaplan")

    @patch("ideaplan.lib.config.envparse.load_env")
    def test_invalid_number_falls_back_with_warning(self, mock_load_env, tmp_path, caplog):
        (tmp_path / CONFIG_FILENAME).write_text("")
        mock_load_env.return_value = {"HOURS_PER_WEEK": "forty"}
        config = load_planner_config(tmp_path)
        assert config.hours_per_week == 40
        assert "Invalid HOURS_PER_WEEK 'forty'" in caplog.text

    @patch("ideaplan.lib.config.envparse.load_env")
    def test_out_of_range_falls_back(self, mock_load_env, tmp_path, caplog):
        (tmp_path / CONFIG_FILENAME).write_text("")
        mock_load_env.return_value = {"CONFIDENCE_MAX": "1.5", "DEFAULT_TEAM_SIZE": "0"}
        config = load_planner_config(tmp_path)
        assert config.max_confidence == 0.9
        assert config.default_team_size == 1
        assert "out of range" in caplog.text

    @patch("ideaplan.lib.config.envparse.load_env")
    def test_base_above_max_uses_defaults(self, mock_load_env, tmp_path, caplog):
        (tmp_path / CONFIG_FILENAME).write_text("")
        mock_load_env.return_value = {"CONFIDENCE_BASE": "0.8", "CONFIDENCE_MAX": "0.6"}
        config = load_planner_config(tmp_path)
        assert (config.base_confidence, config.max_confidence) == (0.3, 0.9)
        assert "exceeds CONFIDENCE_MAX" in caplog.text

    @patch("ideaplan.lib.config.envparse.load_env")
    def test_min_above_max_questions_uses_defaults(self, mock_load_env, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("")
        mock_load_env.return_value = {"MIN_QUESTIONS": "8", "MAX_QUESTIONS": "4"}
        config = load_planner_config(tmp_path)
        assert (config.min_questions, config.max_questions) == (3, 10)

    def test_shell_substitution_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("DATA_DIR=$(rm -rf /)\n")
        with pytest.raises(ValueError, match="Forbidden pattern"):
            load_planner_config(tmp_path)
