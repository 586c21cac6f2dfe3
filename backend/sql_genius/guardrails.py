import json
import logging
from typing import Any, Dict, List, Optional, Tuple

# Central caps for model output
MAX_STATEMENT_LEN = 4000
MAX_QUERY_LEN = 8000
MAX_FEEDBACK_LEN = 2000
MAX_RESULT_ROWS = 500

_log = logging.getLogger("sql_genius.guardrails")

_SCALARS = (str, int, float, bool)


def _is_row(row: Any) -> bool:
    return isinstance(row, dict) and all(isinstance(k, str) for k in row)


def _cell(value: Any) -> Any:
    if value is None or isinstance(value, _SCALARS):
        return value
    # nested arrays/objects are shown as text
    return json.dumps(value, separators=(",", ":"))


def decode_result_set(value: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Decode the simulated result set from a model payload.

    The model may send it three ways:
      - missing / null: not applicable -> None
      - raw text: a JSON-encoded array, decoded here
      - rows: an already structured list

    Anything that does not end up as a list of row objects degrades to None.
    This never raises.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            _log.warning("result_set_parse_failed length=%s", len(value))
            return None
    if not isinstance(value, list):
        _log.warning("result_set_not_array type=%s", type(value).__name__)
        return None
    if not all(_is_row(row) for row in value):
        _log.warning("result_set_bad_rows count=%s", len(value))
        return None
    if len(value) > MAX_RESULT_ROWS:
        _log.warning("result_set_truncated count=%s", len(value))
        value = value[:MAX_RESULT_ROWS]
    return [{k: _cell(v) for k, v in row.items()} for row in value]


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_problem_payload(data: Any) -> Tuple[bool, Dict[str, Any], List[str]]:
    """
    Validate model output for a generated practice problem.

    Returns: (valid, cleaned, reasons)
      - cleaned has problem_statement and expected_solution
      - reasons: short reason codes for logging
    """
    reasons: List[str] = []
    if not isinstance(data, dict):
        return False, {}, ["not_object"]

    statement = data.get("problemStatement")
    solution = data.get("expectedSolution")

    valid = True
    if not isinstance(statement, str) or not statement.strip():
        valid = False
        reasons.append("statement_empty")
    elif len(statement) > MAX_STATEMENT_LEN:
        valid = False
        reasons.append("statement_too_long")

    if solution is not None and not isinstance(solution, str):
        valid = False
        reasons.append("solution_type")
    elif isinstance(solution, str) and len(solution) > MAX_QUERY_LEN:
        valid = False
        reasons.append("solution_too_long")

    cleaned = {
        "problem_statement": statement.strip() if isinstance(statement, str) else "",
        "expected_solution": _optional_text(solution) if isinstance(solution, str) else None,
    }
    return valid, cleaned, reasons


def validate_validation_payload(
    data: Any,
    expected_solution_supplied: bool,
) -> Tuple[bool, Dict[str, Any], List[str]]:
    """
    Validate and sanitize model output for a query validation.

    Returns: (valid, cleaned, reasons). When valid is False the payload did
    not match the required shape and cleaned must not be used. When valid is
    True, cleaned obeys the stage gating rules: stage 2 fields are None unless
    syntax passed and an expected solution was supplied; the result set is
    None unless syntax passed.
    """
    reasons: List[str] = []
    if not isinstance(data, dict):
        return False, {}, ["not_object"]

    syntax_ok = data.get("isSyntaxValid")
    syntax_feedback = data.get("syntaxFeedback")

    valid = True
    if not isinstance(syntax_ok, bool):
        valid = False
        reasons.append("syntax_flag")
    if not isinstance(syntax_feedback, str):
        valid = False
        reasons.append("syntax_feedback")
    if not valid:
        return False, {}, reasons
    if len(syntax_feedback) > MAX_FEEDBACK_LEN:
        syntax_feedback = syntax_feedback[:MAX_FEEDBACK_LEN]
        reasons.append("syntax_feedback_truncated")

    suggestion = data.get("suggestedCorrectSyntaxQuery")
    is_correct = data.get("isSolutionCorrect")
    solution_feedback = data.get("solutionFeedback")

    if is_correct is not None and not isinstance(is_correct, bool):
        reasons.append("solution_flag_dropped")
        is_correct = None

    cleaned: Dict[str, Any] = {
        "is_syntax_valid": syntax_ok,
        "syntax_feedback": syntax_feedback,
        "suggested_correct_syntax_query": None,
        "is_solution_correct": None,
        "solution_feedback": None,
        "result_set": None,
    }

    if not syntax_ok:
        if isinstance(suggestion, str) and len(suggestion) <= MAX_QUERY_LEN:
            cleaned["suggested_correct_syntax_query"] = _optional_text(suggestion)
        return True, cleaned, reasons

    if expected_solution_supplied and is_correct is not None:
        cleaned["is_solution_correct"] = is_correct
        feedback = _optional_text(solution_feedback)
        if feedback is not None and len(feedback) > MAX_FEEDBACK_LEN:
            feedback = feedback[:MAX_FEEDBACK_LEN]
            reasons.append("solution_feedback_truncated")
        cleaned["solution_feedback"] = feedback

    cleaned["result_set"] = decode_result_set(data.get("resultSet"))
    return True, cleaned, reasons
