from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from todoapp.domain.clock import utcnow

from .db import Base


class TodoModel(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    priority = Column(Integer, nullable=False, default=2)
    due_at = Column(DateTime(timezone=True), nullable=False)
    reminder_at = Column(DateTime(timezone=True), nullable=True, index=True)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
