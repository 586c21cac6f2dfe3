"""In-memory workspace state: schema, sample rows, current problem and history.

A ``Workspace`` lives only as long as the server process; nothing is
persisted. Every mutation goes through a method here so the invariants
(unique names, cascading deletes, bounded history) hold in one place.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .config import settings
from .schemas import (
    ColumnDefinition,
    HistoryStatus,
    PracticeProblem,
    QueryHistoryItem,
    QueryValidationResult,
    SampleData,
    SampleRow,
    SqlDataType,
    TableDefinition,
)
from .sql_formatter import format_sample_data_for_ai, format_schema_for_ai

_log = logging.getLogger("sql_genius.workspace")


class WorkspaceError(Exception):
    """Base class for user-facing workspace errors."""


class InvalidInputError(WorkspaceError):
    pass


class DuplicateNameError(WorkspaceError):
    pass


class NotFoundError(WorkspaceError):
    pass


class BusyError(WorkspaceError):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class Workspace:
    def __init__(self, workspace_id: Optional[str] = None, history_limit: Optional[int] = None):
        self.id = workspace_id or _new_id()
        self.history_limit = history_limit or settings.history_limit
        self.tables: List[TableDefinition] = []
        self.sample_data: SampleData = {}
        self.current_problem: Optional[PracticeProblem] = None
        self.current_query: str = ""
        self.validation_result: Optional[QueryValidationResult] = None
        self.history: List[QueryHistoryItem] = []
        self.busy = False

    # ---- schema ----

    def get_table(self, table_id: str) -> TableDefinition:
        for table in self.tables:
            if table.id == table_id:
                return table
        raise NotFoundError(f"Table {table_id} not found.")

    def add_table(self, name: str) -> TableDefinition:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Table name cannot be empty.")
        if any(t.name.lower() == name.lower() for t in self.tables):
            raise DuplicateNameError("A table with this name already exists.")
        table = TableDefinition(id=_new_id(), name=name, columns=[])
        self.tables.append(table)
        _log.info("table_added workspace=%s table=%s", self.id, name)
        return table

    def remove_table(self, table_id: str) -> None:
        table = self.get_table(table_id)
        self.tables = [t for t in self.tables if t.id != table_id]
        self.sample_data.pop(table_id, None)
        _log.info("table_removed workspace=%s table=%s", self.id, table.name)

    def add_column(
        self,
        table_id: str,
        name: str,
        type: SqlDataType = SqlDataType.TEXT,
        is_primary_key: bool = False,
        is_not_null: bool = False,
        is_unique: bool = False,
        check_constraint: Optional[str] = None,
    ) -> ColumnDefinition:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Column name cannot be empty.")
        table = self.get_table(table_id)
        if any(c.name.lower() == name.lower() for c in table.columns):
            raise DuplicateNameError("A column with this name already exists in this table.")
        check = (check_constraint or "").strip() or None
        column = ColumnDefinition(
            id=_new_id(),
            name=name,
            type=type,
            is_primary_key=is_primary_key,
            is_not_null=is_not_null,
            is_unique=is_unique,
            check_constraint=check,
        )
        table.columns.append(column)
        return column

    def remove_column(self, table_id: str, column_id: str) -> None:
        table = self.get_table(table_id)
        column = next((c for c in table.columns if c.id == column_id), None)
        if column is None:
            raise NotFoundError(f"Column {column_id} not found.")
        table.columns = [c for c in table.columns if c.id != column_id]
        for row in self.sample_data.get(table_id, []):
            row.pop(column.name, None)

    # ---- sample data ----

    def add_sample_row(self, table_id: str, values: Optional[SampleRow] = None) -> SampleRow:
        table = self.get_table(table_id)
        row: SampleRow = dict(values or {})
        for col in table.columns:
            row.setdefault(col.name, None)
        self.sample_data.setdefault(table_id, []).append(row)
        return row

    def schema_text(self) -> str:
        return format_schema_for_ai(self.tables)

    def data_text(self) -> str:
        return format_sample_data_for_ai(self.tables, self.sample_data)

    # ---- problem / history ----

    def set_problem(self, problem: Optional[PracticeProblem]) -> None:
        self.current_problem = problem

    def record(
        self,
        sql: str,
        status: HistoryStatus,
        feedback: Optional[str] = None,
        validation_result: Optional[QueryValidationResult] = None,
    ) -> QueryHistoryItem:
        item = QueryHistoryItem(
            id=_new_id(),
            sql=sql,
            timestamp=datetime.now(timezone.utc),
            status=status,
            feedback=feedback,
            validation_result=validation_result,
        )
        # newest first, bounded
        self.history = [item] + self.history[: self.history_limit - 1]
        return item

    def clear_history(self) -> None:
        self.history = []

    def load_query(self, item_id: str) -> str:
        for item in self.history:
            if item.id == item_id:
                self.current_query = item.sql
                return item.sql
        raise NotFoundError(f"History item {item_id} not found.")

    # ---- single in-flight AI action ----

    def begin_ai_action(self) -> None:
        if self.busy:
            raise BusyError("Another AI request is still running for this workspace.")
        self.busy = True

    def end_ai_action(self) -> None:
        self.busy = False


class WorkspaceRegistry:
    """Process-local map of workspace id to ``Workspace``."""

    def __init__(self):
        self._workspaces: Dict[str, Workspace] = {}

    def create(self) -> Workspace:
        workspace = Workspace()
        self._workspaces[workspace.id] = workspace
        return workspace

    def get(self, workspace_id: str) -> Workspace:
        try:
            return self._workspaces[workspace_id]
        except KeyError:
            raise NotFoundError(f"Workspace {workspace_id} not found.") from None

    def delete(self, workspace_id: str) -> None:
        self.get(workspace_id)
        del self._workspaces[workspace_id]

    def __len__(self) -> int:
        return len(self._workspaces)
