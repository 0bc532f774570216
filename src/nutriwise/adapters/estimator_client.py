"""HTTP transport for the `{action, payload}` estimator endpoint."""

from dataclasses import dataclass

import httpx

from nutriwise.errors import (
    EstimatorError,
    MalformedResponseError,
    TransientEstimatorError,
)
from nutriwise.services.estimator import EstimatorClient

_BUSY_STATUSES = {429, 503}
_MAX_TEXT_ERROR_LENGTH = 200


@dataclass
class HttpxEstimatorClient(EstimatorClient):
    """HTTPX-backed estimator client."""

    url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 60

    @classmethod
    def create(cls, url: str) -> "HttpxEstimatorClient":
        """Create an estimator client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def call(self, action: str, payload: dict[str, object]) -> object:
        """POST an action and return the decoded JSON body."""
        try:
            response = await self.http_client.post(
                self.url,
                json={"action": action, "payload": payload},
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise EstimatorError(f"Estimator request failed: {exc}") from exc

        if response.status_code in _BUSY_STATUSES:
            raise TransientEstimatorError(
                f"Server is busy (Status {response.status_code})"
            )

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            text = response.text
            if len(text) < _MAX_TEXT_ERROR_LENGTH:
                raise MalformedResponseError(text)
            raise MalformedResponseError(
                f"Server Error ({response.status_code}): Check server logs."
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Estimator returned invalid JSON") from exc
        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise EstimatorError(message or "API request failed")
        return data

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
