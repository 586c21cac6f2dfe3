import asyncio
import json

import pytest
from sql_genius.flows import (
    ProblemGenerationError,
    generate_sql_practice_problem,
    validate_sql_query,
)
from sql_genius.schemas import Difficulty

SCHEMA = 'CREATE TABLE "Users" (\n  "id" INTEGER PRIMARY KEY\n);'
DATA = 'INSERT INTO "Users" ("id") VALUES (1);'


def _validate(client, expected=None, query="SELECT id FROM Users;"):
    return asyncio.run(validate_sql_query(query, SCHEMA, DATA, expected, client))


def test_validate_without_expected_solution(fake_client):
    reply = json.dumps(
        {
            "isSyntaxValid": True,
            "syntaxFeedback": "Query syntax is valid.",
            "isSolutionCorrect": None,
            "solutionFeedback": None,
            "resultSet": '[{"id":1}]',
        }
    )
    client = fake_client(reply=reply)
    result = _validate(client)
    assert result.is_syntax_valid is True
    assert result.result_set == [{"id": 1}]
    assert result.is_solution_correct is None
    assert result.solution_feedback is None
    assert "Expected Solution Query" not in client.prompts[0]


def test_validate_includes_expected_solution_in_prompt(fake_client):
    reply = json.dumps(
        {
            "isSyntaxValid": True,
            "syntaxFeedback": "Query syntax is valid.",
            "isSolutionCorrect": False,
            "solutionFeedback": "Your query does not filter by id.",
            "resultSet": [],
        }
    )
    client = fake_client(reply=reply)
    result = _validate(client, expected="SELECT id FROM Users WHERE id = 1;")
    assert result.is_solution_correct is False
    assert result.solution_feedback == "Your query does not filter by id."
    assert result.result_set == []
    assert "WHERE id = 1" in client.prompts[0]


def test_validate_model_call_raises(fake_client):
    result = _validate(fake_client(error=RuntimeError("quota exceeded")))
    dumped = result.model_dump(by_alias=True, exclude={"suggested_correct_syntax_query"})
    assert dumped == {
        "isSyntaxValid": False,
        "syntaxFeedback": "AI processing error: quota exceeded",
        "isSolutionCorrect": None,
        "solutionFeedback": None,
        "resultSet": None,
    }


@pytest.mark.parametrize("reply", ["not json at all", '{"syntaxFeedback": "ok"}', "[]"])
def test_validate_bad_structure_falls_back(fake_client, reply):
    result = _validate(fake_client(reply=reply))
    assert result.is_syntax_valid is False
    assert result.syntax_feedback.startswith("AI processing error:")
    assert "valid response structure" in result.syntax_feedback
    assert result.result_set is None
    assert result.is_solution_correct is None


def test_validate_tolerates_code_fences_and_backslashes(fake_client):
    reply = '```json\n{"isSyntaxValid": true, "syntaxFeedback": "Use \\d here", "resultSet": null}\n```'
    result = _validate(fake_client(reply=reply))
    assert result.is_syntax_valid is True
    assert result.syntax_feedback == "Use \\d here"
    assert result.result_set is None


def test_generate_problem(fake_client):
    reply = json.dumps(
        {"problemStatement": "Find all users with id 1.", "expectedSolution": "SELECT * FROM Users WHERE id = 1;"}
    )
    client = fake_client(reply=reply)
    problem = asyncio.run(generate_sql_practice_problem(SCHEMA, DATA, Difficulty.HARD, client))
    assert problem.problem_statement == "Find all users with id 1."
    assert problem.expected_solution == "SELECT * FROM Users WHERE id = 1;"
    assert problem.difficulty == Difficulty.HARD
    assert "Difficulty Level: hard" in client.prompts[0]


def test_generate_problem_without_solution(fake_client):
    client = fake_client(reply='{"problemStatement": "Count users."}')
    problem = asyncio.run(generate_sql_practice_problem(SCHEMA, DATA, "easy", client))
    assert problem.expected_solution is None


@pytest.mark.parametrize(
    "client_kwargs",
    [
        {"error": RuntimeError("network down")},
        {"reply": "{not json"},
        {"reply": '{"expectedSolution": "SELECT 1;"}'},
    ],
)
def test_generate_problem_failures_propagate(fake_client, client_kwargs):
    with pytest.raises(ProblemGenerationError):
        asyncio.run(generate_sql_practice_problem(SCHEMA, DATA, "medium", fake_client(**client_kwargs)))
