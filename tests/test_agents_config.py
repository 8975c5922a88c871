"""Tests for agents_config module."""

from unittest.mock import patch

import pytest

from ideaplan.lib.agents_config import (
    DEFAULT_STAGE_COMMANDS,
    AgentsConfig,
    get_stage_binary,
    get_stage_command,
    load_agents_config,
    missing_binaries,
)


class TestLoadAgentsConfig:
    """Tests for load_agents_config()."""

    def test_returns_defaults_when_no_config_dir(self):
        assert load_agents_config(None).stages == DEFAULT_STAGE_COMMANDS

    def test_returns_defaults_when_file_missing(self, tmp_path):
        assert load_agents_config(tmp_path).stages == DEFAULT_STAGE_COMMANDS

    def test_loads_custom_config(self, tmp_path):
        (tmp_path / "agents.yaml").write_text(
            "stages:\n"
            "  analyze_idea: claude -p --model opus --output-format json\n"
        )
        config = load_agents_config(tmp_path)
        assert config.stages["analyze_idea"] == "claude -p --model opus --output-format json"
        # Other stages should still have defaults
        assert config.stages["decompose_tasks"] == DEFAULT_STAGE_COMMANDS["decompose_tasks"]

    def test_unknown_stage_ignored(self, tmp_path, caplog):
        (tmp_path / "agents.yaml").write_text("stages:\n  implement: codex exec\n")
        config = load_agents_config(tmp_path)
        assert "implement" not in config.stages
        assert "Ignoring unknown stages" in caplog.text

    def test_handles_invalid_yaml(self, tmp_path):
        (tmp_path / "agents.yaml").write_text("stages: [unclosed\n")
        assert load_agents_config(tmp_path).stages == DEFAULT_STAGE_COMMANDS

    def test_non_mapping_ignored(self, tmp_path):
        (tmp_path / "agents.yaml").write_text("- just\n- a list\n")
        assert load_agents_config(tmp_path).stages == DEFAULT_STAGE_COMMANDS


class TestGetStageCommand:
    """Tests for get_stage_command()."""

    def test_default_uses_stdin_and_json(self):
        result = get_stage_command(AgentsConfig(), "analyze_idea", "do stuff")
        assert result.cmd == ["claude", "-p", "--output-format", "json"]
        assert result.prompt_via_stdin is True
        assert result.output_format == "json"
        assert result.get_stdin_input("do stuff") == "do stuff"

    def test_prompt_as_argument(self):
        config = AgentsConfig(stages={"refine_idea": "my-llm --fast {prompt}"})
        result = get_stage_command(config, "refine_idea", 'say "hi"')
        assert result.cmd == ["my-llm", "--fast", 'say "hi"']
        assert result.prompt_via_stdin is False
        assert result.output_format is None
        assert result.get_stdin_input('say "hi"') is None

    def test_output_format_equals_form(self):
        config = AgentsConfig(stages={"refine_idea": "my-llm --output-format=json"})
        assert get_stage_command(config, "refine_idea", "p").output_format == "json"

    def test_unknown_stage(self):
        with pytest.raises(ValueError, match="Unknown stage"):
            get_stage_command(AgentsConfig(), "implement", "p")


class TestBinaries:
    def test_get_stage_binary(self):
        assert get_stage_binary(AgentsConfig(), "generate_questions") == "claude"

    def test_missing_binaries_groups_stages(self):
        with patch("ideaplan.lib.agents_config.shutil.which", return_value=None):
            missing = missing_binaries(AgentsConfig())
        assert set(missing) == {"claude"}
        assert sorted(missing["claude"]) == sorted(DEFAULT_STAGE_COMMANDS)

    def test_nothing_missing(self):
        with patch("ideaplan.lib.agents_config.shutil.which", return_value="/usr/bin/claude"):
            assert missing_binaries(AgentsConfig()) == {}
