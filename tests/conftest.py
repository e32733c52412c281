import copy
import itertools
import os

import pytest

# Keep test runs off the real services and the log directory
os.environ["LOG_FILE"] = ""
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_KEY", None)

import db


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Mimics the subset of the Supabase query builder used by db.py."""

    def __init__(self, rows, ids):
        self.rows = rows
        self.ids = ids
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        if self.action == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("user_id", f"user-{next(self.ids)}")
            self.rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        matched = [row for row in self.rows if self._matches(row)]
        if self.action == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
        elif self.action == "delete":
            for row in matched:
                self.rows.remove(row)
        else:
            if self.order_by:
                column, desc = self.order_by
                matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
            if self.max_rows is not None:
                matched = matched[:self.max_rows]
        return FakeResponse(copy.deepcopy(matched))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.ids = itertools.count(1)

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, []), self.ids)


@pytest.fixture
def store():
    fake = FakeSupabase()
    db.set_client(fake)
    yield fake
    db.set_client(None)
