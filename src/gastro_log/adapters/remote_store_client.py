"""HTTP client for the Gastro Log cloud API."""

from dataclasses import dataclass

import httpx

from gastro_log.config import normalize_base_url
from gastro_log.domain.logs import LogRecord
from gastro_log.services.classification import IngredientClassifier
from gastro_log.services.safe_list import RemoteSafeListStore
from gastro_log.services.sync import RemoteLogStore, TokenProvider


@dataclass
class HttpxRemoteStoreClient(RemoteLogStore, RemoteSafeListStore):
    """Cloud API client implemented with httpx.

    Every call raises ``httpx.HTTPError`` on transport or status failures;
    callers decide how to degrade.
    """

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 15.0) -> "HttpxRemoteStoreClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=normalize_base_url(base_url),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def get_logs(self, token: str) -> list[LogRecord]:
        """Fetch all logs for the signed-in user."""
        response = await self.http_client.get(
            f"{self.base_url}/api/logs",
            headers=_auth_headers(token),
            timeout=self.timeout,
        )
        response.raise_for_status()
        logs = response.json().get("logs") or []
        return [LogRecord.model_validate(item) for item in logs]

    async def save_logs(self, token: str, records: list[LogRecord]) -> int:
        """Upsert logs by id."""
        response = await self.http_client.post(
            f"{self.base_url}/api/logs",
            headers=_auth_headers(token),
            json={"logs": [record.to_wire() for record in records]},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return int(response.json().get("count") or 0)

    async def delete_log(self, token: str, log_id: str) -> None:
        """Delete a log by id."""
        response = await self.http_client.delete(
            f"{self.base_url}/api/logs/{log_id}",
            headers=_auth_headers(token),
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def get_safe_list(self, token: str) -> list[str]:
        """Fetch the user's safe-list."""
        response = await self.http_client.get(
            f"{self.base_url}/api/safelist",
            headers=_auth_headers(token),
            timeout=self.timeout,
        )
        response.raise_for_status()
        items = response.json().get("items") or []
        return [str(item) for item in items]

    async def save_safe_list(self, token: str, items: list[str]) -> None:
        """Replace the user's safe-list."""
        response = await self.http_client.post(
            f"{self.base_url}/api/safelist",
            headers=_auth_headers(token),
            json={"items": list(items)},
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def get_medications(self, token: str) -> list[str]:
        """Fetch medication names the user has entered before."""
        response = await self.http_client.get(
            f"{self.base_url}/api/medications",
            headers=_auth_headers(token),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return [str(name) for name in response.json().get("medications") or []]

    async def save_medications(self, token: str, names: list[str]) -> None:
        """Add medication names to the user's history."""
        response = await self.http_client.post(
            f"{self.base_url}/api/medications",
            headers=_auth_headers(token),
            json={"medications": list(names)},
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def analyze(
        self, token: str, image: str | None, memo: str | None, model: str | None
    ) -> list[str]:
        """Ask the cloud API to classify a meal."""
        payload: dict[str, object] = {"memo": memo or ""}
        if image is not None:
            payload["image"] = image
        if model is not None:
            payload["model"] = model
        response = await self.http_client.post(
            f"{self.base_url}/api/analyze",
            headers=_auth_headers(token),
            json=payload,
            timeout=max(self.timeout, 60.0),
        )
        response.raise_for_status()
        return [str(item) for item in response.json().get("ingredients") or []]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


@dataclass
class RemoteAnalyzeClassifier(IngredientClassifier):
    """Classifier that goes through the cloud API's analyze endpoint."""

    client: HttpxRemoteStoreClient
    token_provider: TokenProvider

    async def classify(
        self, *, image: str | None, memo: str | None, model: str | None
    ) -> list[str]:
        """Classify a meal using the signed-in user's token."""
        token = await self.token_provider.get_token()
        if token is None:
            raise RuntimeError("Sign in to analyze meals")
        return await self.client.analyze(token, image=image, memo=memo, model=model)


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
