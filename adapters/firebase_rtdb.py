#Description: Firebase Realtime Database REST transport (push/set/get/remove under a path).

import httpx

from utils.config import settings
from utils.errors import PersistenceError

class FirebaseTransport:
    def __init__(self, db_url: str | None = None, auth_token: str | None = None,
                 client: httpx.AsyncClient | None = None):
        db_url = db_url or settings.FIREBASE_DB_URL
        if not db_url:
            raise PersistenceError("FIREBASE_DB_URL is not set")
        self.db_url = db_url.rstrip("/")
        self.auth_token = auth_token if auth_token is not None else settings.FIREBASE_AUTH_TOKEN
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    def _url(self, path: str) -> str:
        return f"{self.db_url}/{path.strip('/')}.json"

    def _params(self) -> dict | None:
        return {"auth": self.auth_token} if self.auth_token else None

    async def _request(self, method: str, path: str, json=None):
        try:
            r = await self.client.request(method, self._url(path), params=self._params(), json=json)
            r.raise_for_status()
            return r.json() if r.content else None
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"Firebase {method} {path} failed: {e}") from e

    async def push(self, path: str, value) -> str:
        # POST generates the key server side: {"name": "-Nxyz..."}
        body = await self._request("POST", path, json=value)
        if not isinstance(body, dict) or not body.get("name"):
            raise PersistenceError(f"Firebase push to {path} returned no key")
        return body["name"]

    async def set(self, path: str, value) -> None:
        if value is None:
            await self.remove(path)
            return
        await self._request("PUT", path, json=value)

    async def get(self, path: str):
        return await self._request("GET", path)

    async def remove(self, path: str) -> None:
        await self._request("DELETE", path)

    async def aclose(self):
        await self.client.aclose()
