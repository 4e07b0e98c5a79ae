from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Generator, List, Mapping, Optional

from .errors import StorageError
from .models import TaskEntity
from .repositories import Repository, _mutable_only

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    user_id: str = "user_id"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"
    due_date: str = "due_date"
    priority: str = "priority"
    time_cost: str = "time_cost"


_COLS = _Cols()
_FIELDS = (
    _COLS.id,
    _COLS.user_id,
    _COLS.title,
    _COLS.completed,
    _COLS.created_at,
    _COLS.due_date,
    _COLS.priority,
    _COLS.time_cost,
)


def _to_db(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field == _COLS.completed:
        return 1 if value else 0
    if field in (_COLS.due_date, _COLS.created_at):
        return value.isoformat()
    return value


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    Rows come back ordered by created_at DESC. That order is only a hint;
    the query engine re-sorts in memory.
    """

    name = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("SQLite task store ready at %s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            logger.exception("Cannot open SQLite database %s", self._db_path)
            raise StorageError("Task storage unavailable") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("SQLite operation failed")
            raise StorageError("Task storage operation failed") from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.user_id} TEXT NOT NULL,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.priority} TEXT NULL,
                    {_COLS.time_cost} INTEGER NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_user_id ON {_COLS.table}({_COLS.user_id})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_due_date ON {_COLS.table}({_COLS.due_date})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        due = row[_COLS.due_date]
        cost = row[_COLS.time_cost]
        return {
            "id": str(row[_COLS.id]),
            "user_id": str(row[_COLS.user_id]),
            "title": str(row[_COLS.title]),
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "due_date": date.fromisoformat(due) if due is not None else None,
            "priority": row[_COLS.priority],
            "time_cost": int(cost) if cost is not None else None,
        }

    def _select_one(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)
        ).fetchone()

    def find_all_for_user(self, user_id: str) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                WHERE {_COLS.user_id} = ?
                ORDER BY {_COLS.created_at} DESC
                """,
                (user_id,),
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select_one(conn, task_id)
            return self._row_to_entity(row) if row else None

    def insert(self, entity: TaskEntity) -> TaskEntity:
        fields = _FIELDS
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_COLS.table} ({', '.join(fields)}) VALUES ({', '.join('?' for _ in fields)})",
                [_to_db(f, entity[f]) for f in fields],  # type: ignore[literal-required]
            )
            row = self._select_one(conn, entity["id"])
            assert row is not None
            return self._row_to_entity(row)

    def update_fields(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        values = _mutable_only(changes)
        with self._conn() as conn:
            if self._select_one(conn, task_id) is None:
                return None
            if values:
                assignments = ", ".join(f"{name} = ?" for name in values)
                conn.execute(
                    f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                    [*(_to_db(k, v) for k, v in values.items()), task_id],
                )
            row = self._select_one(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0
