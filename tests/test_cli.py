"""Tests for the ideaplan CLI."""

import json
from unittest.mock import patch

import pytest

from conftest import FakeContentGenerator
from ideaplan.cli import build_parser, exit_code_for, main
from ideaplan.errors import ConflictError, GenerationError, NotFoundError, ValidationError
from ideaplan.lib.constants import EXIT_CONFLICT, EXIT_GENERATION_ERROR, EXIT_INVALID, EXIT_OK


@pytest.fixture
def fake_generator():
    fake = FakeContentGenerator()
    with patch("ideaplan.cli.get_generator", return_value=fake):
        yield fake


def run(tmp_path, *argv):
    return main(["--config-dir", str(tmp_path), *argv])


class TestParser:
    def test_clarify_answer(self):
        args = build_parser().parse_args(["clarify", "answer", "idea-1", "q_2", "-a", "Teams"])
        assert (args.idea_id, args.question_id, args.answer) == ("idea-1", "q_2", "Teams")

    def test_breakdown_run_options(self):
        args = build_parser().parse_args(["breakdown", "run", "idea-1", "-t", "3", "-w", "6", "--json"])
        assert (args.team_size, args.weeks, args.json) == (3, 6, True)

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["clarify"])


class TestExitCodes:
    @pytest.mark.parametrize("error,code", [
        (ValidationError("idea_id", "bad"), EXIT_INVALID),
        (NotFoundError("clarification", "x"), EXIT_INVALID),
        (GenerationError("analyze_idea", "boom"), EXIT_GENERATION_ERROR),
        (ConflictError("busy"), EXIT_CONFLICT),
    ])
    def test_mapping(self, error, code):
        assert exit_code_for(error) == code


class TestClarifyCommands:
    def test_start_persists_under_config_dir(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "clarify", "start", "idea-1", "A todo app") == EXIT_OK
        out = capsys.readouterr().out
        assert "Clarification: idea-1" in out
        assert "0/3 answered" in out
        assert (tmp_path / ".ideaplan" / "clarification_sessions" / "idea-1.json").exists()

    def test_start_from_file(self, tmp_path, fake_generator):
        idea_file = tmp_path / "idea.txt"
        idea_file.write_text("From a file")
        assert run(tmp_path, "clarify", "start", "idea-1", "--file", str(idea_file)) == EXIT_OK
        stored = json.loads((tmp_path / ".ideaplan" / "clarification_sessions" / "idea-1.json").read_text())
        assert stored["idea_text"] == "From a file"

    def test_missing_idea_file(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "clarify", "start", "idea-1", "--file", str(tmp_path / "nope.txt")) == EXIT_INVALID
        assert "Cannot read idea file" in capsys.readouterr().out
        assert fake_generator.calls == []

    def test_invalid_idea_id(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "clarify", "start", "bad id", "An idea") == EXIT_INVALID
        assert "ERROR:" in capsys.readouterr().out

    def test_answer_all_then_complete(self, tmp_path, fake_generator, capsys):
        run(tmp_path, "clarify", "start", "idea-1", "A todo app")
        for qid in ("q_1", "q_2", "q_3"):
            assert run(tmp_path, "clarify", "answer", "idea-1", qid, "-a", f"answer {qid}") == EXIT_OK
        assert "Clarification complete" in capsys.readouterr().out

        assert run(tmp_path, "clarify", "complete", "idea-1") == EXIT_OK
        assert "A refined idea." in capsys.readouterr().out

    def test_answer_interactive(self, tmp_path, fake_generator, capsys):
        run(tmp_path, "clarify", "start", "idea-1", "A todo app")
        with patch("builtins.input", return_value="typed answer"):
            assert run(tmp_path, "clarify", "answer", "idea-1", "q_1") == EXIT_OK
        run(tmp_path, "clarify", "show", "idea-1")
        assert "-> typed answer" in capsys.readouterr().out

    def test_answer_unknown_session(self, tmp_path, fake_generator):
        assert run(tmp_path, "clarify", "answer", "idea-1", "q_1", "-a", "x") == EXIT_INVALID

    def test_show_missing(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "clarify", "show", "idea-1") == EXIT_INVALID
        assert "No clarification" in capsys.readouterr().out

    def test_generation_failure(self, tmp_path, fake_generator, capsys):
        fake_generator.fail_on.add("generate_questions")
        assert run(tmp_path, "clarify", "start", "idea-1", "An idea") == EXIT_GENERATION_ERROR
        assert "retryable" in capsys.readouterr().out


class TestBreakdownCommands:
    def test_run_with_idea_text(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "breakdown", "run", "idea-1", "--idea", "A todo app", "-t", "2") == EXIT_OK
        out = capsys.readouterr().out
        assert "Breakdown: bd_" in out
        assert "Critical path:" in out
        assert "Team:       2" in out

    def test_run_uses_clarification(self, tmp_path, fake_generator, capsys):
        run(tmp_path, "clarify", "start", "idea-1", "A todo app")
        capsys.readouterr()
        assert run(tmp_path, "breakdown", "run", "idea-1", "--json") == EXIT_OK
        session = json.loads(capsys.readouterr().out)
        assert session["idea_id"] == "idea-1"
        assert len(session["tasks"]["tasks"]) == 3

    def test_run_without_text(self, tmp_path, fake_generator, capsys):
        assert run(tmp_path, "breakdown", "run", "idea-1") == EXIT_INVALID
        assert "No idea text" in capsys.readouterr().out

    def test_show_roundtrip(self, tmp_path, fake_generator, capsys):
        run(tmp_path, "breakdown", "run", "idea-1", "--idea", "A todo app", "--json")
        created = json.loads(capsys.readouterr().out)
        assert run(tmp_path, "breakdown", "show", "idea-1", "--json") == EXIT_OK
        assert json.loads(capsys.readouterr().out) == created

    def test_show_missing(self, tmp_path, fake_generator):
        assert run(tmp_path, "breakdown", "show", "idea-1") == EXIT_INVALID
