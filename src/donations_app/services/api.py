"""Async HTTP client shared by the login and donation gateways."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from donations_app.core import exceptions


@dataclass
class ApiResponse:
    status_code: int
    payload: Any

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiResponse":
        try:
            data = response.json()
        except json.JSONDecodeError:
            data = {"raw": response.text}
        return cls(status_code=response.status_code, payload=data)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> "ApiResponse":
        if self.ok:
            return self
        message = "Request failed"
        if isinstance(self.payload, dict):
            message = str(self.payload.get("message") or self.payload.get("detail") or message)
        raise exceptions.GatewayError(
            code=exceptions.HTTP_STATUS,
            message=message,
            status_code=self.status_code,
            details=self.payload,
        )


class ApiClient:
    """Thin wrapper around :class:`httpx.AsyncClient` that normalises failures."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or httpx.AsyncClient(timeout=timeout)

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        return await self._send("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        payload: Dict[str, Any],
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        return await self._send("POST", path, json=payload, headers=headers)

    @property
    def closed(self) -> bool:
        return self._session.is_closed

    async def aclose(self) -> None:
        await self._session.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = await self._session.request(method, url, **kwargs)
        except httpx.TimeoutException as error:
            raise exceptions.GatewayError(
                code=exceptions.TIMEOUT,
                message=f"{method} {path} timed out",
            ) from error
        except httpx.HTTPError as error:
            raise exceptions.GatewayError(
                code=exceptions.TRANSPORT,
                message=str(error) or f"{method} {path} failed",
            ) from error
        return ApiResponse.from_response(response)
