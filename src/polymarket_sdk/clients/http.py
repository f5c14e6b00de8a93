"""Shared httpx request handling for the CLOB and relayer clients."""

from typing import Any, Dict, Optional

import httpx
import structlog

from ..errors import RemoteError, ServerRejectedError


logger = structlog.get_logger("polymarket_sdk.clients.http")


class BaseHTTPClient:
    """Thin async JSON client. Does not retry."""

    error_class = RemoteError

    def __init__(
        self,
        host: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self._host = host.rstrip("/")
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def host(self) -> str:
        return self._host

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[str] = None,
        stage: str = "submission",
    ) -> Any:
        request_headers = dict(headers or {})
        if content is not None:
            request_headers.setdefault("Content-Type", "application/json")

        try:
            response = await self._http_client.request(
                method,
                f"{self._host}{path}",
                params=params,
                headers=request_headers,
                content=content.encode("utf-8") if content is not None else None,
            )
        except httpx.HTTPError as exc:
            logger.warning("http.request_failed", method=method, path=path, error=str(exc))
            raise self.error_class(f"{method} {path} failed: {exc}", stage=stage) from exc

        if not response.is_success:
            logger.warning(
                "http.request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise ServerRejectedError(
                f"{method} {path} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
                stage=stage,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise self.error_class(
                f"{method} {path} returned invalid JSON: {response.text}", stage=stage
            ) from exc


__all__ = ["BaseHTTPClient"]
