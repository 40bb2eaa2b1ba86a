from __future__ import annotations

from typing import Any
from urllib.parse import urljoin

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class BaseAPIClient:
    """
    Utilitário HTTP com:
      • retry exponencial em 429/5xx (apenas métodos idempotentes)
      • timeout configurável
      • erros HTTP convertidos pela subclasse em `_raise_for()`
    """

    RETRY_STATUSES = (429, 500, 502, 503, 504)

    def __init__(
        self,
        *,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        retries: int = 3,
        backoff_factor: float = 0.3,
        session: requests.Session | None = None,
    ) -> None:
        self.log = structlog.get_logger(__name__).bind(component=type(self).__name__)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout

        self.session = session or requests.Session()
        if default_headers:
            self.session.headers.update(default_headers)

        self._mount_retries(retries, backoff_factor)

    def _mount_retries(self, retries: int, backoff_factor: float) -> None:
        retry_cfg = Retry(
            total=retries,
            backoff_factor=backoff_factor,
            status_forcelist=self.RETRY_STATUSES,
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_cfg)
        for scheme in ("https://", "http://"):
            self.session.mount(scheme, adapter)

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _raise_for(self, exc: Exception, *, method: str, path: str, status_code: int | None) -> None:
        raise exc

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        url = self._url(path)
        log = self.log.bind(method=method, url=url)
        log.debug("Enviando requisição", params=params)
        try:
            resp = self.session.request(
                method, url, params=params, json=json, headers=headers, timeout=self.timeout
            )
            log.debug("Resposta recebida", status_code=resp.status_code)
            resp.raise_for_status()
            return resp
        except requests.RequestException as exc:
            status = exc.response.status_code if exc.response is not None else None
            log.error("Falha na requisição", error=str(exc), status_code=status)
            self._raise_for(exc, method=method, path=path, status_code=status)
            raise
