#Description: KuCoin public REST adapter (no API keys) with response envelope checks.

import httpx

from utils.config import settings
from utils.errors import DataUnavailableError

class KuCoinBaseAdapter:
    SUCCESS_CODE = "200000"

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        self.base_url = (base_url or settings.KUCOIN_BASE_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    async def get(self, path: str, params: dict | None = None):
        url = self.base_url + path
        try:
            r = await self.client.get(url, params=params)
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DataUnavailableError(f"KuCoin {path} failed: {e}") from e
        # KuCoin wraps every payload as {"code": "200000", "data": ...}
        if not isinstance(body, dict) or body.get("code") != self.SUCCESS_CODE:
            code = body.get("code") if isinstance(body, dict) else None
            raise DataUnavailableError(f"KuCoin {path} returned code {code}")
        return body.get("data")

    async def aclose(self):
        await self.client.aclose()
