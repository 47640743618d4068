# Overview: Async HTTP client for the inventory API; unwraps the response envelope.

from __future__ import annotations

from typing import Any

import httpx


class ApiError(Exception):
    """A failed API call, carrying the server's error code and HTTP status."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"ApiError(code={self.code!r}, status_code={self.status_code}, message={self.message!r})"


def _clean_params(filters: dict | None) -> dict:
    return {k: v for k, v in (filters or {}).items() if v not in (None, "")}


class Resource:
    """CRUD calls for one collection endpoint."""

    def __init__(self, client: "ApiClient", path: str):
        self.client = client
        self.path = path

    async def get_all(self, filters: dict | None = None) -> list[dict]:
        return await self.client.request("GET", self.path, params=_clean_params(filters))

    async def get_by_id(self, entity_id: str) -> dict:
        return await self.client.request("GET", f"{self.path}/{entity_id}")

    async def create(self, data: dict) -> dict:
        return await self.client.request("POST", self.path, json=data)

    async def update(self, entity_id: str, data: dict) -> dict:
        return await self.client.request("PUT", f"{self.path}/{entity_id}", json=data)

    async def delete(self, entity_id: str) -> None:
        await self.client.request("DELETE", f"{self.path}/{entity_id}")


class RollResource(Resource):
    async def get_by_barcode(self, barcode: str) -> dict:
        return await self.client.request("GET", f"{self.path}/barcode/{barcode}")

    async def summary(self) -> list[dict]:
        return await self.client.request("GET", f"{self.path}/summary")

    async def colors(self) -> list[str]:
        return await self.client.request("GET", f"{self.path}/colors")


class CatalogResource(Resource):
    async def materials(self) -> list[str]:
        return await self.client.request("GET", f"{self.path}/materials")


class ApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Successful calls return the envelope's `data`; failures raise ApiError.
    Network failures surface as ApiError(code="NETWORK_ERROR", status_code=0).
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.token = token
        self.rolls = RollResource(self, "/api/rolls")
        self.catalogs = CatalogResource(self, "/api/catalogs")
        self.users = Resource(self, "/api/users")

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._http.request(
                method, path, json=json, params=params or None, headers=headers
            )
        except httpx.HTTPError as exc:
            raise ApiError(f"Network error: {exc}", "NETWORK_ERROR", 0) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(
                "Invalid response from server", "INVALID_RESPONSE", response.status_code
            ) from exc

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            error = error or {}
            raise ApiError(
                error.get("message", "Request failed"),
                error.get("code", "INTERNAL_ERROR"),
                error.get("statusCode", response.status_code),
                error.get("details"),
            )
        return body.get("data")

    async def login(self, email: str, password: str) -> dict:
        """Authenticate and keep the returned bearer token for later calls."""
        data = await self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    async def logout(self) -> None:
        try:
            await self.request("POST", "/api/auth/logout")
        finally:
            self.token = None

    async def me(self) -> dict:
        return await self.request("GET", "/api/auth/me")
