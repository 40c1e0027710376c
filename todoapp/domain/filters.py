from __future__ import annotations

from dataclasses import dataclass

from .enums import SortOption


@dataclass(frozen=True)
class TodoFilters:
    search: str | None = None
    sort: SortOption = SortOption.CREATED_DESC
