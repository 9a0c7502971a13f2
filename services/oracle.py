#Description: Client for the external signal classifier (POST features, read its decision).

import httpx
from pydantic import ValidationError

from models.schemas import FeatureVector, OracleDecision
from utils.config import settings
from utils.errors import OracleUnavailableError

class SignalOracleClient:
    def __init__(self, url: str | None = None, client: httpx.AsyncClient | None = None):
        self.url = url or settings.ORACLE_URL
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    async def decide(self, features: FeatureVector, threshold: float) -> OracleDecision:
        """The answer is taken as-is; no local override of side or probability."""
        try:
            r = await self.client.post(self.url, json={"features": features, "threshold": threshold})
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OracleUnavailableError(f"Oracle request failed: {e}") from e
        if not isinstance(body, dict):
            raise OracleUnavailableError(f"Oracle returned a non-object body: {body!r}")
        try:
            return OracleDecision(**{k: v for k, v in body.items() if k != "raw"}, raw=body)
        except ValidationError as e:
            raise OracleUnavailableError(f"Oracle returned an unusable decision: {body!r}") from e

    async def aclose(self):
        await self.client.aclose()
