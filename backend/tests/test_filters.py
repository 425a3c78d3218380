"""
BabyJournal Backend — FilterBuilder Tests
==========================================
"""

import datetime as dt

from sqlalchemy import func, select
from sqlalchemy.dialects import sqlite

from babyjournal.models import Event
from babyjournal.services.filters import FilterBuilder


def _compile(statement):
    return statement.compile(dialect=sqlite.dialect())


class TestFilterBuilder:

    def test_empty_values_add_no_predicates(self):
        builder = (
            FilterBuilder()
            .equals(Event.kind, None)
            .equals(Event.kind, "")
            .on_or_after(Event.date, None)
            .on_or_before(Event.date, None)
            .flag(Event.favorite, False)
            .contains_any([Event.description], "   ")
        )
        assert builder.predicates == []
        assert "WHERE" not in str(_compile(builder.apply(select(Event))))

    def test_values_are_bound_parameters(self):
        builder = FilterBuilder().equals(Event.kind, "feeding'; DROP TABLE events; --")
        compiled = _compile(builder.apply(select(Event)))
        assert "DROP TABLE" not in str(compiled)
        assert "feeding'; DROP TABLE events; --" in compiled.params.values()

    def test_date_range_and_flag(self):
        builder = (
            FilterBuilder()
            .on_or_after(Event.date, dt.date(2024, 1, 1))
            .on_or_before(Event.date, dt.date(2024, 1, 31))
            .flag(Event.favorite, True)
        )
        sql = str(_compile(builder.apply(select(Event))))
        assert "events.date >= ?" in sql
        assert "events.date <= ?" in sql
        assert "events.favorite IS" in sql
        assert len(builder.predicates) == 3

    def test_search_matches_any_column(self):
        builder = FilterBuilder().contains_any([Event.description, Event.notes], "bottle")
        compiled = _compile(builder.apply(select(Event)))
        sql = str(compiled)
        assert " OR " in sql
        assert sql.count("LIKE") == 2
        assert list(compiled.params.values()).count("%bottle%") == 2

    def test_search_escapes_wildcards(self):
        builder = FilterBuilder().contains_any([Event.notes], "50%_off")
        compiled = _compile(builder.apply(select(Event)))
        assert "%50\\%\\_off%" in compiled.params.values()

    def test_same_predicates_feed_page_and_count(self):
        builder = FilterBuilder().equals(Event.journal_id, "j1").equals(Event.kind, "sleep")
        page = str(_compile(builder.apply(select(Event)).limit(10)))
        count = str(_compile(builder.apply(select(func.count()).select_from(Event))))
        where = "WHERE events.journal_id = ? AND events.kind = ?"
        assert where in page
        assert where in count
        assert "LIMIT" not in count
