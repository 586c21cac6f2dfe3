import logging
from typing import List

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .flows import ProblemGenerationError, generate_sql_practice_problem, validate_sql_query
from .history import classify_validation, notification_for, problem_history_label
from .llm import GeminiClient
from .schemas import (
    AddColumnRequest,
    AddRowRequest,
    ColumnDefinition,
    CreateTableRequest,
    GenerateProblemRequest,
    GenerateProblemResponse,
    HistoryStatus,
    PracticeProblem,
    QueryHistoryItem,
    QueryValidationResult,
    RunQueryRequest,
    RunQueryResponse,
    SampleRow,
    SqlTextOut,
    TableDefinition,
    ValidateQueryRequest,
    WorkspaceOut,
    WorkspaceProblemRequest,
)
from .workspace import (
    BusyError,
    DuplicateNameError,
    NotFoundError,
    Workspace,
    WorkspaceError,
    WorkspaceRegistry,
)

logging.basicConfig(level=settings.log_level.upper())
_log = logging.getLogger("sql_genius.api")

app = FastAPI(title="SQL Genius")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

registry = WorkspaceRegistry()


def get_registry() -> WorkspaceRegistry:
    return registry


def get_llm_client() -> GeminiClient:
    return GeminiClient()


def _http_error(exc: WorkspaceError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (BusyError, DuplicateNameError)):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def get_workspace(workspace_id: str, reg: WorkspaceRegistry = Depends(get_registry)) -> Workspace:
    try:
        return reg.get(workspace_id)
    except WorkspaceError as exc:
        raise _http_error(exc)


def _workspace_out(ws: Workspace) -> WorkspaceOut:
    return WorkspaceOut(
        id=ws.id,
        tables=ws.tables,
        sample_data=ws.sample_data,
        current_problem=ws.current_problem,
        current_query=ws.current_query,
        validation_result=ws.validation_result,
        busy=ws.busy,
    )


@app.get("/health")
def health():
    return {"ok": True}


# ---- stateless operations ----


@app.post("/generate_problem", response_model=GenerateProblemResponse)
async def generate_problem(req: GenerateProblemRequest, client=Depends(get_llm_client)):
    try:
        problem = await generate_sql_practice_problem(
            req.database_schema, req.sample_data, req.difficulty, client
        )
    except ProblemGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return GenerateProblemResponse(
        problem_statement=problem.problem_statement,
        expected_solution=problem.expected_solution,
    )


@app.post("/validate_query", response_model=QueryValidationResult)
async def validate_query(req: ValidateQueryRequest, client=Depends(get_llm_client)):
    if not req.user_query.strip():
        raise HTTPException(status_code=400, detail="Please enter an SQL query.")
    return await validate_sql_query(
        req.user_query, req.db_schema, req.sample_data, req.expected_solution_query, client
    )


# ---- workspaces ----


@app.post("/workspaces", response_model=WorkspaceOut, status_code=201)
def create_workspace(reg: WorkspaceRegistry = Depends(get_registry)):
    ws = reg.create()
    _log.info("workspace_created id=%s", ws.id)
    return _workspace_out(ws)


@app.get("/workspaces/{workspace_id}", response_model=WorkspaceOut)
def read_workspace(ws: Workspace = Depends(get_workspace)):
    return _workspace_out(ws)


@app.delete("/workspaces/{workspace_id}", status_code=204)
def delete_workspace(workspace_id: str, reg: WorkspaceRegistry = Depends(get_registry)):
    try:
        reg.delete(workspace_id)
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.post("/workspaces/{workspace_id}/tables", response_model=TableDefinition, status_code=201)
def add_table(req: CreateTableRequest, ws: Workspace = Depends(get_workspace)):
    try:
        return ws.add_table(req.name)
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.delete("/workspaces/{workspace_id}/tables/{table_id}", status_code=204)
def remove_table(table_id: str, ws: Workspace = Depends(get_workspace)):
    try:
        ws.remove_table(table_id)
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.post(
    "/workspaces/{workspace_id}/tables/{table_id}/columns",
    response_model=ColumnDefinition,
    status_code=201,
)
def add_column(table_id: str, req: AddColumnRequest, ws: Workspace = Depends(get_workspace)):
    try:
        return ws.add_column(
            table_id,
            req.name,
            type=req.type,
            is_primary_key=req.is_primary_key,
            is_not_null=req.is_not_null,
            is_unique=req.is_unique,
            check_constraint=req.check_constraint,
        )
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.delete("/workspaces/{workspace_id}/tables/{table_id}/columns/{column_id}", status_code=204)
def remove_column(table_id: str, column_id: str, ws: Workspace = Depends(get_workspace)):
    try:
        ws.remove_column(table_id, column_id)
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.post("/workspaces/{workspace_id}/tables/{table_id}/rows", response_model=SampleRow, status_code=201)
def add_sample_row(table_id: str, req: AddRowRequest, ws: Workspace = Depends(get_workspace)):
    try:
        return ws.add_sample_row(table_id, req.values)
    except WorkspaceError as exc:
        raise _http_error(exc)


@app.get("/workspaces/{workspace_id}/sql", response_model=SqlTextOut)
def workspace_sql(ws: Workspace = Depends(get_workspace)):
    return SqlTextOut(database_schema=ws.schema_text(), sample_data=ws.data_text())


@app.post("/workspaces/{workspace_id}/problem", response_model=PracticeProblem)
async def workspace_problem(
    req: WorkspaceProblemRequest,
    ws: Workspace = Depends(get_workspace),
    client=Depends(get_llm_client),
):
    if not ws.tables:
        raise HTTPException(status_code=400, detail="Please define tables and columns first.")
    try:
        ws.begin_ai_action()
    except WorkspaceError as exc:
        raise _http_error(exc)
    ws.validation_result = None
    ws.current_query = ""
    try:
        problem = await generate_sql_practice_problem(
            ws.schema_text(), ws.data_text(), req.difficulty, client
        )
    except ProblemGenerationError as exc:
        ws.set_problem(None)
        raise HTTPException(
            status_code=502,
            detail=f"Could not generate a problem. Please try again. ({exc})",
        )
    finally:
        ws.end_ai_action()

    ws.set_problem(problem)
    ws.record(
        problem_history_label(problem),
        HistoryStatus.GENERATED_PROBLEM,
        feedback=problem.problem_statement,
    )
    return problem


@app.post("/workspaces/{workspace_id}/run", response_model=RunQueryResponse)
async def run_query(
    req: RunQueryRequest,
    ws: Workspace = Depends(get_workspace),
    client=Depends(get_llm_client),
):
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Please enter an SQL query.")
    try:
        ws.begin_ai_action()
    except WorkspaceError as exc:
        raise _http_error(exc)
    ws.current_query = req.query
    ws.validation_result = None
    expected = ws.current_problem.expected_solution if ws.current_problem else None
    try:
        result = await validate_sql_query(
            req.query, ws.schema_text(), ws.data_text(), expected, client
        )
    finally:
        ws.end_ai_action()

    ws.validation_result = result
    status = classify_validation(result)
    ws.record(
        req.query,
        status,
        feedback=result.solution_feedback or result.syntax_feedback,
        validation_result=result,
    )
    _log.info("query_validated workspace=%s status=%s", ws.id, status.value)
    return RunQueryResponse(result=result, status=status, notification=notification_for(result, status))


@app.get("/workspaces/{workspace_id}/history", response_model=List[QueryHistoryItem])
def read_history(ws: Workspace = Depends(get_workspace)):
    return ws.history


@app.delete("/workspaces/{workspace_id}/history", status_code=204)
def clear_history(ws: Workspace = Depends(get_workspace)):
    ws.clear_history()


@app.post("/workspaces/{workspace_id}/history/{item_id}/load", response_model=WorkspaceOut)
def load_history_item(item_id: str, ws: Workspace = Depends(get_workspace)):
    try:
        ws.load_query(item_id)
    except WorkspaceError as exc:
        raise _http_error(exc)
    return _workspace_out(ws)


def run() -> None:
    uvicorn.run("sql_genius.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
