"""The two model-backed operations: generate a practice problem, validate a query."""

import json
import logging
from typing import Optional

from .guardrails import validate_problem_payload, validate_validation_payload
from .llm import loads_model_json
from .prompts import build_generate_problem_prompt, build_validate_query_prompt
from .schemas import Difficulty, PracticeProblem, QueryValidationResult

_log = logging.getLogger("sql_genius.flows")

AI_PROCESSING_ERROR_PREFIX = "AI processing error:"
STRUCTURE_ERROR_MESSAGE = (
    "The AI failed to return a valid response structure. Please try again."
)


class ProblemGenerationError(Exception):
    """The model could not produce a usable practice problem."""


def ai_error_result(message: str) -> QueryValidationResult:
    return QueryValidationResult(
        is_syntax_valid=False,
        syntax_feedback=f"{AI_PROCESSING_ERROR_PREFIX} {message}",
        is_solution_correct=None,
        solution_feedback=None,
        result_set=None,
    )


async def generate_sql_practice_problem(
    database_schema: str,
    sample_data: str,
    difficulty: Difficulty,
    client,
) -> PracticeProblem:
    difficulty = Difficulty(difficulty)
    prompt = build_generate_problem_prompt(database_schema, sample_data, difficulty.value)
    try:
        text = await client.generate_json(prompt)
        data = loads_model_json(text)
    except json.JSONDecodeError as exc:
        _log.warning("problem_json_invalid difficulty=%s", difficulty.value)
        raise ProblemGenerationError("The AI returned malformed JSON.") from exc
    except Exception as exc:
        _log.error("problem_generation_failed difficulty=%s", difficulty.value, exc_info=True)
        raise ProblemGenerationError(str(exc) or "The AI request failed.") from exc

    valid, cleaned, reasons = validate_problem_payload(data)
    if not valid:
        _log.warning(
            "problem_validation_failed difficulty=%s reasons=%s",
            difficulty.value,
            ",".join(reasons),
        )
        raise ProblemGenerationError(STRUCTURE_ERROR_MESSAGE)

    return PracticeProblem(
        problem_statement=cleaned["problem_statement"],
        expected_solution=cleaned["expected_solution"],
        difficulty=difficulty,
    )


async def validate_sql_query(
    user_query: str,
    db_schema: str,
    sample_data: str,
    expected_solution_query: Optional[str],
    client,
) -> QueryValidationResult:
    """
    Ask the model to check syntax, compare against an expected solution and
    simulate the result set. Never raises: every failure becomes a result
    with ``is_syntax_valid=False`` and all later stages set to None.
    """
    expected = (expected_solution_query or "").strip() or None
    prompt = build_validate_query_prompt(user_query, db_schema, sample_data, expected)
    try:
        text = await client.generate_json(prompt)
    except Exception as exc:
        _log.error("validation_call_failed", exc_info=True)
        message = str(exc) or "An unexpected error occurred during AI validation."
        return ai_error_result(message)

    try:
        data = loads_model_json(text)
    except (json.JSONDecodeError, ValueError):
        _log.warning("validation_fallback reason=json_invalid")
        return ai_error_result(STRUCTURE_ERROR_MESSAGE)

    valid, cleaned, reasons = validate_validation_payload(
        data, expected_solution_supplied=expected is not None
    )
    if not valid:
        _log.warning("validation_fallback reason=%s", ",".join(reasons))
        return ai_error_result(STRUCTURE_ERROR_MESSAGE)
    if reasons:
        _log.info("validation_cleaned reasons=%s", ",".join(reasons))
    return QueryValidationResult(**cleaned)
