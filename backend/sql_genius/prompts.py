from typing import Optional

GENERATE_PROBLEM_TEMPLATE = """You are an expert SQL problem generator. You will generate SQL practice problems based on a user-provided database schema and sample data.

Database Schema:
```sql
{database_schema}
```

Sample Data:
```sql
{sample_data}
```

Difficulty Level: {difficulty}

Generate a relevant and challenging SQL practice problem, suitable for the given difficulty level. Provide the practice problem as the "problemStatement" output.

Optionally, if you are able to, provide the "expectedSolution" - the SQL query that would solve the problem.

Return ONLY a compact JSON object with keys: problemStatement (string), expectedSolution (string, optional). No code fences or extra text.
"""

VALIDATE_QUERY_TEMPLATE = """You are an expert SQL validator and teaching assistant. You will receive a user's SQL query, a database schema, sample data, and an optional expected solution query. Your task is to perform up to three types of validation and simulation:

User's SQL Query:
```sql
{user_query}
```

Database Schema (CREATE TABLE statements):
```sql
{db_schema}
```

Sample Data (INSERT statements):
```sql
{sample_data}
```
{expected_block}
Follow these steps:

1.  Syntax Validation:
    *   Determine if the userQuery is syntactically valid SQL based on the provided schema.
    *   Set "isSyntaxValid" to true or false.
    *   If valid, set "syntaxFeedback" to "Query syntax is valid."
    *   If invalid, set "syntaxFeedback" to a specific error message (e.g., "Syntax Error: Unexpected token near 'FROM' at line X, column Y.") and provide "suggestedCorrectSyntaxQuery" if possible.

2.  Solution Correctness Validation (only if isSyntaxValid is true AND an expected solution query was provided):
    *   Compare the logic and expected output of the user's query against the expected solution. The match does not need to be word-for-word but should be logically equivalent.
    *   Set "isSolutionCorrect" to true or false.
    *   If correct, set "solutionFeedback" to "Correct! Your query matches the expected solution logic."
    *   If incorrect, set "solutionFeedback" to an explanation of why it is incorrect.
    *   If no expected solution query was provided, or if isSyntaxValid is false, set "isSolutionCorrect" and "solutionFeedback" to null.

3.  Data Simulation (only if isSyntaxValid is true AND the user's query is a SELECT or similar data-retrieving statement):
    *   Simulate the execution of the query against the schema and sample data.
    *   Set "resultSet" to a JSON-encoded STRING containing an array of row objects whose keys are column names (e.g., "[{{\\"id\\": 1}}]").
    *   If the query runs but returns no rows, use the string "[]".
    *   If the query is not a SELECT statement (e.g., INSERT, UPDATE, DDL), or simulation is not possible, set "resultSet" to null.

Important notes for your JSON response:
*   Return ONLY a JSON object with keys: isSyntaxValid, syntaxFeedback, suggestedCorrectSyntaxQuery, isSolutionCorrect, solutionFeedback, resultSet. No code fences or extra text.
*   If no expected solution query is provided, isSolutionCorrect and solutionFeedback MUST be null. They should not be false or an empty string.
*   If isSyntaxValid is false, then isSolutionCorrect, solutionFeedback and resultSet MUST be null.
"""

_EXPECTED_BLOCK = """
Expected Solution Query (for comparison if user's query is syntactically valid):
```sql
{expected_solution_query}
```
"""


def build_generate_problem_prompt(database_schema: str, sample_data: str, difficulty: str) -> str:
    return GENERATE_PROBLEM_TEMPLATE.format(
        database_schema=database_schema,
        sample_data=sample_data,
        difficulty=difficulty,
    )


def build_validate_query_prompt(
    user_query: str,
    db_schema: str,
    sample_data: str,
    expected_solution_query: Optional[str] = None,
) -> str:
    expected_block = ""
    if expected_solution_query:
        expected_block = _EXPECTED_BLOCK.format(expected_solution_query=expected_solution_query)
    return VALIDATE_QUERY_TEMPLATE.format(
        user_query=user_query,
        db_schema=db_schema,
        sample_data=sample_data,
        expected_block=expected_block,
    )
