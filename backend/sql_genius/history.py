from .flows import AI_PROCESSING_ERROR_PREFIX
from .schemas import HistoryStatus, Notification, PracticeProblem, QueryValidationResult

MAX_NOTIFICATION_LEN = 100
PROBLEM_LABEL_LEN = 50


def classify_validation(result: QueryValidationResult) -> HistoryStatus:
    # syntax failure wins over any solution verdict
    if not result.is_syntax_valid:
        if result.syntax_feedback.startswith(AI_PROCESSING_ERROR_PREFIX):
            return HistoryStatus.ERROR_AI_PROCESSING
        return HistoryStatus.ERROR_SYNTAX
    if result.is_solution_correct is True:
        return HistoryStatus.VALIDATED_CORRECT_SOLUTION
    if result.is_solution_correct is False:
        return HistoryStatus.VALIDATED_INCORRECT_SOLUTION
    return HistoryStatus.VALIDATED_SYNTAX_ONLY


def _truncate(text: str) -> str:
    if len(text) > MAX_NOTIFICATION_LEN:
        return text[:MAX_NOTIFICATION_LEN] + "..."
    return text


def notification_for(result: QueryValidationResult, status: HistoryStatus) -> Notification:
    """Short user-facing summary of a validation outcome."""
    title = "Query Processed"
    description = result.syntax_feedback
    variant = "default"

    if status == HistoryStatus.ERROR_AI_PROCESSING:
        title, variant = "AI Error", "destructive"
    elif status == HistoryStatus.ERROR_SYNTAX:
        title, variant = "Syntax Error", "destructive"
    elif status == HistoryStatus.VALIDATED_CORRECT_SOLUTION:
        title = "Correct Solution!"
        description = result.solution_feedback or result.syntax_feedback
    elif status == HistoryStatus.VALIDATED_INCORRECT_SOLUTION:
        title, variant = "Incorrect Solution", "destructive"
        description = result.solution_feedback or "Check feedback for details."
    elif status == HistoryStatus.VALIDATED_SYNTAX_ONLY:
        title = "Syntax Valid"

    return Notification(
        title=title,
        description=_truncate(description or "Review the output for details."),
        variant=variant,
    )


def problem_history_label(problem: PracticeProblem) -> str:
    return (
        f"Generated {problem.difficulty.value} problem: "
        f"{problem.problem_statement[:PROBLEM_LABEL_LEN]}..."
    )
