from __future__ import annotations

from typing import Any

import requests

from field_billing.adapters.api_clients.base_api_client import BaseAPIClient
from field_billing.core.domain.events.exceptions import RecordStoreError
from field_billing.core.domain.repositories.record_store import Record, RecordStore

REST_PREFIX = "rest/v1/"


def _eq(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class RecordStoreClient(BaseAPIClient, RecordStore):
    """
    Cliente da API REST do banco externo (PostgREST / Supabase).

    `fetch_all` pagina com offset/limit em páginas fixas até receber uma
    página incompleta; as páginas são concatenadas antes de retornar.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        retries: int = 3,
        page_size: int = 1000,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            default_headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            retries=retries,
            session=session,
        )
        if page_size <= 0:
            raise ValueError("page_size deve ser positivo")
        self.page_size = page_size

    # ------------------------------------------------------------------ erros --
    def _raise_for(self, exc: Exception, *, method: str, path: str, status_code: int | None) -> None:
        table = path.removeprefix(REST_PREFIX)
        raise RecordStoreError(
            f"{method} {table} falhou: {exc}",
            table=table,
            status_code=status_code,
        ) from exc

    @staticmethod
    def _filters(filters: dict[str, Any] | None) -> list[tuple[str, str]]:
        return [(col, _eq(val)) for col, val in (filters or {}).items()]

    def _json(self, resp: requests.Response, table: str) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise RecordStoreError(f"Resposta inválida de {table}", table=table, status_code=resp.status_code) from exc

    # ------------------------------------------------------------------ RecordStore --
    def fetch_all(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[Record]:
        rows: list[Record] = []
        offset = 0
        base = [("select", "*"), *self._filters(filters)]
        if order_by:
            base.append(("order", order_by))

        while True:
            params = [*base, ("offset", offset), ("limit", self.page_size)]
            page = self._json(self._request("GET", REST_PREFIX + table, params=params), table) or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size

        self.log.info("record_store.fetched", table=table, rows=len(rows), pages=offset // self.page_size + 1)
        return rows

    def update(self, table: str, record_id: Any, fields: Record, *, id_column: str = "id") -> None:
        self._request(
            "PATCH",
            REST_PREFIX + table,
            params=[(id_column, _eq(record_id))],
            json=fields,
            headers={"Prefer": "return=minimal"},
        )

    def insert(self, table: str, record: Record) -> Record:
        resp = self._request(
            "POST",
            REST_PREFIX + table,
            json=record,
            headers={"Prefer": "return=representation"},
        )
        body = self._json(resp, table)
        if isinstance(body, list):
            body = body[0] if body else None
        if not isinstance(body, dict):
            raise RecordStoreError(f"Inserção em {table} não retornou o registro", table=table)
        return body

    def delete(self, table: str, filters: dict[str, Any]) -> None:
        if not filters:
            raise RecordStoreError(f"Delete sem filtros recusado em {table}", table=table)
        self._request("DELETE", REST_PREFIX + table, params=self._filters(filters))
