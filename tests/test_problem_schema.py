import pytest

from prepdeck.errors import SchemaViolation
from prepdeck.schemas.problem import (
    DEFAULT_SCORING_DIMENSIONS,
    DsaProblem,
    SystemDesignProblem,
    TheoryProblem,
    problem_to_document,
    validate_problem,
)
from tests.factories import dsa_problem


def test_valid_dsa_problem_parses_to_dsa_variant():
    problem = validate_problem(dsa_problem())
    assert isinstance(problem, DsaProblem)
    assert problem.visibility == "private"
    assert problem.content.hints == []
    assert problem.content.evaluation.test_cases == []


def test_document_survives_a_storage_round_trip():
    raw = dsa_problem(visibility="public", role="Frontend Engineer", round={"index": 2, "type": "dsa"})
    problem = validate_problem(raw)
    again = validate_problem(problem_to_document(problem))
    assert again == problem
    assert problem_to_document(again)["round"] == {"index": 2, "type": "dsa"}


def test_system_design_gets_default_scoring_dimensions():
    raw = dsa_problem(kind="system_design", content={"prompt": "Design a URL shortener", "difficulty": "hard"})
    problem = validate_problem(raw)
    assert isinstance(problem, SystemDesignProblem)
    assert problem.content.scoring_dimensions == DEFAULT_SCORING_DIMENSIONS


def test_theory_questions_are_typed():
    raw = dsa_problem(
        kind="theory",
        content={
            "prompt": "Event loop",
            "difficulty": "medium",
            "questions": [{"type": "mcq", "question": "What runs first?", "options": ["a", "b"]}],
        },
    )
    problem = validate_problem(raw)
    assert isinstance(problem, TheoryProblem)
    assert problem.content.questions[0].options == ["a", "b"]


def test_dsa_requires_io_formats():
    raw = dsa_problem(content={"prompt": "x", "difficulty": "easy"})
    with pytest.raises(SchemaViolation) as info:
        validate_problem(raw)
    locs = [".".join(d["loc"]) for d in info.value.details]
    assert any("inputFormat" in loc for loc in locs)


@pytest.mark.parametrize(
    "overrides",
    [
        {"kind": "puzzle"},
        {"schemaVersion": "2.0.0"},
        {"id": "not-a-uuid"},
        {"visibility": "friends"},
        {"source": "import"},
        {"createdAt": "yesterday"},
        {"round": {"index": 0}},
    ],
)
def test_invalid_envelopes_are_rejected(overrides):
    with pytest.raises(SchemaViolation):
        validate_problem(dsa_problem(**overrides))


def test_strings_are_not_coerced_to_numbers():
    raw = dsa_problem()
    raw["content"]["estimatedTimeMin"] = "30"
    with pytest.raises(SchemaViolation):
        validate_problem(raw)


def test_rubric_weight_is_bounded():
    raw = dsa_problem()
    raw["content"]["evaluation"] = {"rubric": [{"criterion": "Correctness", "weight": 1.5}]}
    with pytest.raises(SchemaViolation):
        validate_problem(raw)


def test_unknown_fields_are_dropped():
    problem = validate_problem(dsa_problem(legacyField="x"))
    assert "legacyField" not in problem_to_document(problem)
