import pytest
from sql_genius.flows import ai_error_result
from sql_genius.history import classify_validation, notification_for, problem_history_label
from sql_genius.schemas import Difficulty, HistoryStatus, PracticeProblem, QueryValidationResult


def _result(**kw):
    base = {"is_syntax_valid": True, "syntax_feedback": "Query syntax is valid."}
    base.update(kw)
    return QueryValidationResult(**base)


@pytest.mark.parametrize(
    "result, expected",
    [
        (_result(is_syntax_valid=False, syntax_feedback="Syntax Error"), HistoryStatus.ERROR_SYNTAX),
        (ai_error_result("boom"), HistoryStatus.ERROR_AI_PROCESSING),
        (_result(is_solution_correct=True), HistoryStatus.VALIDATED_CORRECT_SOLUTION),
        (_result(is_solution_correct=False), HistoryStatus.VALIDATED_INCORRECT_SOLUTION),
        (_result(), HistoryStatus.VALIDATED_SYNTAX_ONLY),
        # syntax failure takes priority over a stray solution verdict
        (
            _result(is_syntax_valid=False, syntax_feedback="Syntax Error", is_solution_correct=True),
            HistoryStatus.ERROR_SYNTAX,
        ),
    ],
)
def test_classify_validation(result, expected):
    assert classify_validation(result) == expected


def test_notification_titles():
    correct = _result(is_solution_correct=True, solution_feedback="Correct!")
    note = notification_for(correct, classify_validation(correct))
    assert (note.title, note.description, note.variant) == ("Correct Solution!", "Correct!", "default")

    wrong = _result(is_solution_correct=False)
    note = notification_for(wrong, classify_validation(wrong))
    assert note.title == "Incorrect Solution"
    assert note.description == "Check feedback for details."
    assert note.variant == "destructive"

    err = ai_error_result("boom")
    assert notification_for(err, classify_validation(err)).title == "AI Error"


def test_notification_description_truncated():
    long = _result(is_syntax_valid=False, syntax_feedback="x" * 150)
    note = notification_for(long, classify_validation(long))
    assert note.description == "x" * 100 + "..."


def test_problem_history_label():
    problem = PracticeProblem(problem_statement="y" * 80, difficulty=Difficulty.MEDIUM)
    assert problem_history_label(problem) == "Generated medium problem: " + "y" * 50 + "..."
