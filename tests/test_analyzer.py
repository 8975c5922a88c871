"""Tests for ideaplan.breakdown.analyzer module."""

import pytest

from conftest import make_analysis
from ideaplan.breakdown.analyzer import IdeaAnalyzer, complexity_level
from ideaplan.errors import GenerationError


@pytest.fixture
def analyzer(generator, config):
    return IdeaAnalyzer(generator, config)


class TestComplexityLevel:
    @pytest.mark.parametrize("score,level", [(1, "simple"), (3, "simple"), (4, "medium"), (7, "medium"), (8, "complex"), (10, "complex")])
    def test_thresholds(self, score, level):
        assert complexity_level(score) == level


class TestAnalyze:
    """Tests for analyze()."""

    def test_normalizes_payload(self, analyzer):
        analysis = analyzer.analyze("idea", {"q_1": "teams"})
        assert [d.id for d in analysis.deliverables] == ["d_1", "d_2", "d_3"]
        assert [d.estimated_hours for d in analysis.deliverables] == [40, 40, 20]
        assert analysis.complexity.score == 6
        assert analysis.complexity.level == "medium"
        assert analysis.scope.estimated_weeks == 4
        assert analysis.risk_factors == ["Scope creep", "Vendor lock-in"]
        assert analysis.overall_confidence == 0.8

    def test_deliverable_confidence_defaults_to_overall(self, analyzer):
        analysis = analyzer.analyze("idea", {})
        assert all(d.confidence == 0.8 for d in analysis.deliverables)

    def test_score_clamped(self, analyzer, generator):
        generator.analysis = make_analysis(complexity={"score": 42})
        analysis = analyzer.analyze("idea", {})
        assert analysis.complexity.score == 10
        assert analysis.complexity.level == "complex"

        generator.analysis = make_analysis(complexity={"score": -3})
        assert analyzer.analyze("idea", {}).complexity.score == 1

    def test_defaults_when_sections_missing(self, analyzer, generator):
        generator.analysis = {"deliverables": [{"title": "MVP", "estimatedHours": 10}]}
        analysis = analyzer.analyze("idea", {})
        assert analysis.complexity.score == 5
        assert analysis.complexity.level == "medium"
        assert analysis.scope.size == "medium"
        assert analysis.scope.estimated_weeks == 8
        assert analysis.scope.team_size == 1
        assert analysis.overall_confidence == 0.7
        assert analysis.deliverables[0].priority == 1

    def test_team_size_from_options(self, analyzer, generator):
        generator.analysis = make_analysis(scope={})
        assert analyzer.analyze("idea", {}, {"team_size": 3}).scope.team_size == 3

    def test_team_size_from_payload_wins(self, analyzer, generator):
        generator.analysis = make_analysis(scope={"teamSize": 5})
        assert analyzer.analyze("idea", {}, {"team_size": 3}).scope.team_size == 5

    def test_depends_on_carried(self, analyzer, generator):
        payload = make_analysis()
        payload["deliverables"][1]["dependsOn"] = ["D1"]
        generator.analysis = payload
        assert analyzer.analyze("idea", {}).deliverables[1].depends_on == ["D1"]

    @pytest.mark.parametrize("payload", [
        {},
        {"deliverables": []},
        {"deliverables": [{"title": "No hours"}]},
        {"deliverables": [{"estimatedHours": 5}]},
        {"deliverables": [{"title": "Negative", "estimatedHours": -1}]},
        {"deliverables": [{"title": "   ", "estimatedHours": 1}]},
    ])
    def test_invalid_payload(self, analyzer, generator, payload):
        generator.analysis = payload
        with pytest.raises(GenerationError) as exc:
            analyzer.analyze("idea", {})
        assert exc.value.stage == "analyze_idea"

    def test_generator_failure_propagates(self, analyzer, generator):
        generator.fail_on.add("analyze_idea")
        with pytest.raises(GenerationError):
            analyzer.analyze("idea", {})

    @pytest.mark.parametrize("overrides,field", [
        ({"deliverables": [{"title": "MVP", "estimatedHours": float("inf")}]}, "estimatedHours"),
        ({"deliverables": [{"title": "MVP", "estimatedHours": float("nan")}]}, "estimatedHours"),
        ({"complexity": {"score": float("inf")}}, "complexity.score"),
        ({"overallConfidence": float("nan")}, "overallConfidence"),
    ])
    def test_non_finite_numbers_rejected(self, analyzer, generator, overrides, field):
        # json.loads("1e999") is inf, and the schema takes it as a number
        generator.analysis = make_analysis(**overrides)
        with pytest.raises(GenerationError) as exc:
            analyzer.analyze("idea", {})
        assert exc.value.stage == "analyze_idea"
        assert field in str(exc.value)
