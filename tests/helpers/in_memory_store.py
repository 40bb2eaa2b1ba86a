"""
RecordStore em memória para os testes.

Permite simular falhas do banco externo por tabela ou por registro e guarda
todas as chamadas de escrita para conferência.
"""
from __future__ import annotations

import itertools
from copy import deepcopy
from datetime import datetime
from typing import Any

from field_billing.core.domain.events.exceptions import RecordStoreError
from field_billing.core.domain.repositories.record_store import Record, RecordStore


class InMemoryRecordStore(RecordStore):
    def __init__(self, tables: dict[str, list[Record]] | None = None):
        self.tables: dict[str, list[Record]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }
        self.failing_tables: set[str] = set()
        self.failing_records: set[tuple[str, Any]] = set()
        self.writes: list[tuple[str, str, Any]] = []
        self._ids = itertools.count(1)

    # ---------------------------------------------------------------- falhas
    def fail_table(self, table: str) -> None:
        self.failing_tables.add(table)

    def fail_record(self, table: str, record_id: Any) -> None:
        self.failing_records.add((table, record_id))

    def heal(self) -> None:
        self.failing_tables.clear()
        self.failing_records.clear()

    def _check(self, table: str, record_id: Any = None) -> None:
        if table in self.failing_tables or (table, record_id) in self.failing_records:
            raise RecordStoreError(f"{table} indisponível", table=table, status_code=503)

    # ---------------------------------------------------------------- RecordStore
    def fetch_all(self, table, *, filters=None, order_by=None):
        self._check(table)
        rows = self.tables.get(table, [])
        return [
            deepcopy(r) for r in rows
            if all(r.get(col) == val for col, val in (filters or {}).items())
        ]

    def update(self, table, record_id, fields, *, id_column="id"):
        self._check(table, record_id)
        self.writes.append(("update", table, record_id))
        for row in self.tables.get(table, []):
            if row.get(id_column) == record_id:
                row.update(deepcopy(fields))

    def insert(self, table, record):
        self._check(table)
        row = {"id": f"{table}-{next(self._ids)}", "created_at": datetime(2025, 1, 1, 8, 0).isoformat()}
        row.update(deepcopy(record))
        self.tables.setdefault(table, []).append(row)
        self.writes.append(("insert", table, row["id"]))
        return deepcopy(row)

    def delete(self, table, filters):
        self._check(table)
        if not filters:
            raise RecordStoreError("delete sem filtros", table=table)
        self.tables[table] = [
            r for r in self.tables.get(table, [])
            if not all(r.get(col) == val for col, val in filters.items())
        ]
        self.writes.append(("delete", table, tuple(sorted(filters.items()))))

    # ---------------------------------------------------------------- util
    def row(self, table: str, record_id: Any, id_column: str = "id") -> Record | None:
        for r in self.tables.get(table, []):
            if r.get(id_column) == record_id:
                return r
        return None
