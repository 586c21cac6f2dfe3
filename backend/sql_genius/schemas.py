from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A single cell of a sample row or simulated result row
Scalar = Union[bool, int, float, str, None]
SampleRow = Dict[str, Scalar]
# table id -> ordered rows
SampleData = Dict[str, List[SampleRow]]
QueryResultRow = Dict[str, Scalar]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON (what the browser client sends)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SqlDataType(str, Enum):
    TEXT = "TEXT"
    VARCHAR = "VARCHAR(255)"
    INTEGER = "INTEGER"
    REAL = "REAL"
    NUMERIC = "NUMERIC"
    DECIMAL = "DECIMAL"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    DATETIME = "DATETIME"
    BLOB = "BLOB"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class HistoryStatus(str, Enum):
    VALIDATED_CORRECT_SOLUTION = "validated_correct_solution"
    VALIDATED_INCORRECT_SOLUTION = "validated_incorrect_solution"
    VALIDATED_SYNTAX_ONLY = "validated_syntax_only"
    ERROR_SYNTAX = "error_syntax"
    ERROR_AI_PROCESSING = "error_ai_processing"
    GENERATED_PROBLEM = "generated_problem"


class ColumnDefinition(CamelModel):
    id: str
    name: str
    type: SqlDataType = SqlDataType.TEXT
    is_primary_key: bool = False
    is_not_null: bool = False
    is_unique: bool = False
    check_constraint: Optional[str] = None


class TableDefinition(CamelModel):
    id: str
    name: str
    columns: List[ColumnDefinition] = Field(default_factory=list)


class PracticeProblem(CamelModel):
    problem_statement: str
    expected_solution: Optional[str] = None
    difficulty: Difficulty


class QueryValidationResult(CamelModel):
    # Syntax stage (always evaluated)
    is_syntax_valid: bool
    syntax_feedback: str
    suggested_correct_syntax_query: Optional[str] = None
    # Solution-match stage: None means "not checked", never False
    is_solution_correct: Optional[bool] = None
    solution_feedback: Optional[str] = None
    # Simulation stage: [] is "no rows", None is "not applicable"
    result_set: Optional[List[QueryResultRow]] = None


class QueryHistoryItem(CamelModel):
    id: str
    sql: str
    timestamp: datetime
    status: HistoryStatus
    feedback: Optional[str] = None
    validation_result: Optional[QueryValidationResult] = None


class Notification(CamelModel):
    title: str
    description: str
    variant: str = "default"  # 'default' | 'destructive'


# ---- HTTP request / response models ----


class GenerateProblemRequest(CamelModel):
    database_schema: str
    sample_data: str
    difficulty: Difficulty = Difficulty.EASY


class GenerateProblemResponse(CamelModel):
    problem_statement: str
    expected_solution: Optional[str] = None


class ValidateQueryRequest(CamelModel):
    user_query: str
    db_schema: str
    sample_data: str
    expected_solution_query: Optional[str] = None


class CreateTableRequest(CamelModel):
    name: str


class AddColumnRequest(CamelModel):
    name: str
    type: SqlDataType = SqlDataType.TEXT
    is_primary_key: bool = False
    is_not_null: bool = False
    is_unique: bool = False
    check_constraint: Optional[str] = None


class AddRowRequest(CamelModel):
    values: SampleRow = Field(default_factory=dict)


class WorkspaceProblemRequest(CamelModel):
    difficulty: Difficulty = Difficulty.EASY


class RunQueryRequest(CamelModel):
    query: str


class RunQueryResponse(CamelModel):
    result: QueryValidationResult
    status: HistoryStatus
    notification: Notification


class WorkspaceOut(CamelModel):
    id: str
    tables: List[TableDefinition]
    sample_data: SampleData
    current_problem: Optional[PracticeProblem] = None
    current_query: str = ""
    validation_result: Optional[QueryValidationResult] = None
    busy: bool = False


class SqlTextOut(CamelModel):
    database_schema: str
    sample_data: str
