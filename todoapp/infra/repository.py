from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from todoapp.domain.clock import as_utc
from todoapp.domain.entities import TodoEntity
from todoapp.domain.enums import Priority, SortOption
from todoapp.domain.errors import StoreError
from todoapp.domain.filters import TodoFilters

from .models import TodoModel

logger = logging.getLogger(__name__)

_ORDERING = {
    SortOption.CREATED_DESC: (TodoModel.created_at.desc(), TodoModel.id.desc()),
    SortOption.CREATED_ASC: (TodoModel.created_at.asc(), TodoModel.id.asc()),
    SortOption.PRIORITY: (TodoModel.priority.asc(), TodoModel.due_at.asc()),
    SortOption.DUE_DATE_ASC: (TodoModel.due_at.asc(), TodoModel.priority.asc()),
    SortOption.DUE_DATE_DESC: (TodoModel.due_at.desc(), TodoModel.priority.asc()),
}

_MUTABLE_FIELDS = ("title", "description", "due_at", "reminder_at", "is_completed")


def _to_entity(model: TodoModel) -> TodoEntity:
    return TodoEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        priority=Priority(model.priority),
        due_at=as_utc(model.due_at),
        reminder_at=as_utc(model.reminder_at),
        is_completed=bool(model.is_completed),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


class TodoRepository:
    """SQLAlchemy-backed todo store.

    Every method opens its own session. Driver errors surface as ``StoreError``.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("store %s failed: %s", operation, exc)
            raise StoreError(f"{operation} failed") from exc

    def get_todo(self, todo_id: int) -> Optional[TodoEntity]:
        with self._session("get_todo") as session:
            todo = session.get(TodoModel, todo_id)
            return _to_entity(todo) if todo else None

    def list_todos(self) -> list[TodoEntity]:
        with self._session("list_todos") as session:
            stmt = select(TodoModel).order_by(TodoModel.id.asc())
            return [_to_entity(todo) for todo in session.scalars(stmt)]

    def list_active(self, filters: TodoFilters) -> list[TodoEntity]:
        with self._session("list_active") as session:
            stmt = select(TodoModel).where(TodoModel.is_completed.is_(False))
            if filters.search:
                stmt = stmt.where(TodoModel.title.ilike(f"%{filters.search}%"))
            stmt = stmt.order_by(*_ORDERING[filters.sort])
            return [_to_entity(todo) for todo in session.scalars(stmt)]

    def list_completed(self) -> list[TodoEntity]:
        with self._session("list_completed") as session:
            stmt = (
                select(TodoModel)
                .where(TodoModel.is_completed.is_(True))
                .order_by(TodoModel.due_at.asc())
            )
            return [_to_entity(todo) for todo in session.scalars(stmt)]

    def create_todo(self, data: dict) -> TodoEntity:
        with self._session("create_todo") as session:
            if isinstance(data.get("priority"), Priority):
                data = {**data, "priority": int(data["priority"])}
            todo = TodoModel(**data)
            session.add(todo)
            session.commit()
            session.refresh(todo)
            return _to_entity(todo)

    def update_todo(self, entity: TodoEntity) -> Optional[TodoEntity]:
        with self._session("update_todo") as session:
            todo = session.get(TodoModel, entity.id)
            if not todo:
                return None
            for key in _MUTABLE_FIELDS:
                setattr(todo, key, getattr(entity, key))
            todo.priority = int(entity.priority)
            session.commit()
            session.refresh(todo)
            return _to_entity(todo)

    def delete_todo(self, todo_id: int) -> None:
        with self._session("delete_todo") as session:
            todo = session.get(TodoModel, todo_id)
            if not todo:
                return
            session.delete(todo)
            session.commit()

    def mark_complete(self, todo_id: int) -> bool:
        return self._set_completed(todo_id, True)

    def mark_incomplete(self, todo_id: int) -> bool:
        return self._set_completed(todo_id, False)

    def _set_completed(self, todo_id: int, value: bool) -> bool:
        with self._session("mark_complete" if value else "mark_incomplete") as session:
            todo = session.get(TodoModel, todo_id)
            if not todo:
                return False
            todo.is_completed = value
            session.commit()
            return True

    def delete_all(self) -> list[int]:
        with self._session("delete_all") as session:
            ids = list(session.scalars(select(TodoModel.id)))
            session.execute(delete(TodoModel))
            session.commit()
            return ids

    def delete_all_completed(self) -> list[int]:
        with self._session("delete_all_completed") as session:
            ids = list(
                session.scalars(select(TodoModel.id).where(TodoModel.is_completed.is_(True)))
            )
            session.execute(delete(TodoModel).where(TodoModel.is_completed.is_(True)))
            session.commit()
            return ids

    def get_counts(self) -> dict[str, int]:
        with self._session("get_counts") as session:
            total = session.scalar(select(func.count()).select_from(TodoModel)) or 0
            completed = session.scalar(
                select(func.count())
                .select_from(TodoModel)
                .where(TodoModel.is_completed.is_(True))
            ) or 0
            return {
                "total": total,
                "completed": completed,
                "active": total - completed,
            }
