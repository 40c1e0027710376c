from __future__ import annotations

from enum import IntEnum, StrEnum


class Priority(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @classmethod
    def from_label(cls, label: str | None) -> Priority:
        mapping = {"high": cls.HIGH, "medium": cls.MEDIUM, "low": cls.LOW}
        return mapping.get((label or "").strip().lower(), cls.MEDIUM)

    @property
    def label(self) -> str:
        return self.name.capitalize()


class SortOption(StrEnum):
    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"
    PRIORITY = "priority"
    DUE_DATE_ASC = "due_date_asc"
    DUE_DATE_DESC = "due_date_desc"
