"""Async HTTP client for the Globetrotter API.

The session token lives in the client's cookie jar and is sent as a bearer
header on every request.
"""

import asyncio
import json
from typing import Any, List, Optional, Tuple

import httpx

from globetrotter.core.logger import logger

TOKEN_COOKIE = "auth_token"
TRIPS_BASE = "/api/trips"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GlobetrotterApi:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    @property
    def token(self) -> Optional[str]:
        return self._client.cookies.get(TOKEN_COOKIE)

    def set_token(self, token: Optional[str]):
        if token:
            self._client.cookies.set(TOKEN_COOKIE, token)
        else:
            self._client.cookies.delete(TOKEN_COOKIE)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        resp = await self._client.request(method, url, headers=headers, **kwargs)
        if resp.is_error:
            try:
                message = resp.json().get("error") or resp.reason_phrase
            except (ValueError, AttributeError):
                message = resp.text or resp.reason_phrase
            logger.warning(f"{method} {url} failed with {resp.status_code}: {message}")
            raise ApiError(resp.status_code, message)
        return resp.json() if resp.content else None

    # Auth

    async def signup(self, name: str, email: str, password: str, country: str, phone: str) -> dict:
        data = await self._request("POST", "/api/auth/signup", json={
            "name": name, "email": email, "password": password, "country": country, "phone": phone,
        })
        self.set_token(data["token"])
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.set_token(data["token"])
        return data["user"]

    def logout(self):
        self.set_token(None)

    async def me(self) -> dict:
        data = await self._request("GET", "/api/auth/me")
        return data["user"]

    async def ping_health(self) -> bool:
        try:
            await self._request("GET", "/api/health")
        except (ApiError, httpx.HTTPError):
            return False
        return True

    # Trips

    async def fetch_trips(self) -> List[dict]:
        data = await self._request("GET", f"{TRIPS_BASE}/")
        return data if isinstance(data, list) else []

    async def create_trip(self, payload: dict, cover_photo: Optional[Tuple[str, bytes]] = None) -> dict:
        if cover_photo is None:
            return await self._request("POST", f"{TRIPS_BASE}/", json=payload)

        # Multipart: nested values travel as JSON strings
        form = {}
        for key, value in payload.items():
            if value is None:
                continue
            form[key] = json.dumps(value) if isinstance(value, (list, dict)) else str(value)
        file_name, content = cover_photo
        return await self._request("POST", f"{TRIPS_BASE}/", data=form, files={"cover_photo": (file_name, content)})

    async def update_trip(self, trip_id: str, payload: dict) -> dict:
        return await self._request("PUT", f"{TRIPS_BASE}/{trip_id}", json=payload)

    async def delete_trip(self, trip_id: str) -> dict:
        return await self._request("DELETE", f"{TRIPS_BASE}/{trip_id}")

    async def fetch_trip_by_id(self, trip_id: str) -> dict:
        """Owner endpoint first; on any API failure fall back to the public endpoint."""
        try:
            return await self._request("GET", f"{TRIPS_BASE}/{trip_id}")
        except ApiError as owner_error:
            try:
                return await self._request("GET", f"{TRIPS_BASE}/public/{trip_id}")
            except ApiError:
                raise owner_error

    async def fetch_public_trips(self, limit: int = 100, retries: int = 3, backoff: float = 0.5) -> List[dict]:
        """Guest feed. Network failures and 5xx responses are retried with exponential backoff."""
        for attempt in range(retries):
            try:
                data = await self._request("GET", f"{TRIPS_BASE}/public", params={"limit": limit})
                return data.get("trips", []) if isinstance(data, dict) else []
            except ApiError as e:
                if e.status_code < 500 or attempt == retries - 1:
                    raise
            except httpx.TransportError:
                if attempt == retries - 1:
                    raise
            logger.info(f"Retrying public trips fetch (attempt {attempt + 2}/{retries})")
            await asyncio.sleep(backoff * 2 ** attempt)
        return []

    async def plan_itinerary(self, request: dict) -> dict:
        return await self._request("POST", "/api/ai/plan", json=request)
