"""
BabyJournal Backend — Structured List Filters
==============================================

What:  Builds the WHERE clause of a list query from optional filter values.
How:   Each `add_*` call appends one SQLAlchemy predicate with bound
       parameters (user input never becomes SQL text). The same predicate
       list feeds both the page query and the count query, so the total
       always describes exactly the rows being paged through.

Example:
    builder = (
        FilterBuilder()
        .equals(Event.journal_id, journal_id)
        .equals(Event.kind, "feeding")
        .flag(Event.favorite, True)
        .contains_any([Event.description, Event.notes], "bottle")
    )
    page = builder.apply(select(Event)).order_by(...).limit(10)
    count = builder.apply(select(func.count()).select_from(Event))
"""

from typing import Any, List, Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.sql import ColumnElement, Select


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class FilterBuilder:
    """Accumulates conjunctive predicates; empty filter values add nothing."""

    def __init__(self) -> None:
        self._predicates: List[ColumnElement] = []

    @property
    def predicates(self) -> List[ColumnElement]:
        return list(self._predicates)

    def equals(self, column, value: Optional[Any]) -> "FilterBuilder":
        if value is not None and value != "":
            self._predicates.append(column == value)
        return self

    def on_or_after(self, column, value: Optional[Any]) -> "FilterBuilder":
        if value is not None:
            self._predicates.append(column >= value)
        return self

    def on_or_before(self, column, value: Optional[Any]) -> "FilterBuilder":
        if value is not None:
            self._predicates.append(column <= value)
        return self

    def flag(self, column, only_true: bool) -> "FilterBuilder":
        if only_true:
            self._predicates.append(column.is_(True))
        return self

    def contains_any(self, columns: Sequence, term: Optional[str]) -> "FilterBuilder":
        """Case-insensitive substring match on any of `columns`."""
        if term is None or not term.strip():
            return self
        pattern = f"%{_escape_like(term.strip())}%"
        self._predicates.append(
            or_(*(column.ilike(pattern, escape="\\") for column in columns))
        )
        return self

    def apply(self, statement: Select) -> Select:
        if not self._predicates:
            return statement
        return statement.where(and_(*self._predicates))
