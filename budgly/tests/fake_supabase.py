# tests/fake_supabase.py
"""In-memory stand-in for the bits of the Supabase client the app uses.

Supports table(...).select/insert/update/delete with eq/order/limit and
execute(), returning objects with a ``data`` attribute like postgrest does.
"""
import copy
import itertools
from types import SimpleNamespace


class FakeQuery:
    def __init__(self, table, action, payload=None):
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = []
        self.order_by = None
        self.limit_to = None

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        return SimpleNamespace(data=self.table.run(self))


class FakeTable:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.rows = []

    def select(self, columns="*"):
        return FakeQuery(self, "select")

    def insert(self, record):
        return FakeQuery(self, "insert", record)

    def update(self, payload):
        return FakeQuery(self, "update", payload)

    def delete(self):
        return FakeQuery(self, "delete")

    def run(self, query):
        if query.action == "insert":
            row = copy.deepcopy(query.payload)
            row.setdefault("id", str(next(self.client.ids)))
            self.rows.append(row)
            return [copy.deepcopy(row)]

        if query.action == "update":
            # lets a test sneak in a concurrent write right before ours lands
            for hook in list(self.client.before_update):
                hook(self, query)
            matched = [row for row in self.rows if query._matches(row)]
            for row in matched:
                row.update(copy.deepcopy(query.payload))
            self.client.update_calls += 1
            return [copy.deepcopy(row) for row in matched]

        if query.action == "delete":
            matched = [row for row in self.rows if query._matches(row)]
            self.rows = [row for row in self.rows if not query._matches(row)]
            return matched

        result = [copy.deepcopy(row) for row in self.rows if query._matches(row)]
        if query.order_by is not None:
            column, desc = query.order_by
            result.sort(key=lambda row: row.get(column) or "", reverse=desc)
        if query.limit_to is not None:
            result = result[:query.limit_to]
        return result


class FakeSupabase:
    def __init__(self):
        self.ids = itertools.count(1)
        self.tables = {}
        self.before_update = []
        self.update_calls = 0

    def table(self, name):
        if name not in self.tables:
            self.tables[name] = FakeTable(self, name)
        return self.tables[name]

    def rows(self, name):
        return self.table(name).rows
