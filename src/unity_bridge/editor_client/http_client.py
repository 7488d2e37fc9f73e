"""
HTTP Client for the editor bridge health endpoint.
"""

import httpx

from ..config import get_config
from ..protocol.errors import TransportError


class EditorHealthClient:
    """HTTP client for probing the editor bridge."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the editor bridge (default from config)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url or get_config().health_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str, params: dict | None = None) -> dict:
        """Make a GET request.

        Returns:
            JSON response as dictionary

        Raises:
            TransportError: If the request fails
        """
        client = await self._get_client()

        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(f"HTTP {e.response.status_code}: {e.response.text}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"Invalid JSON from editor bridge: {e}") from e

    async def health_check(self) -> dict:
        """Check if the editor bridge is running.

        Returns:
            Health status dictionary with 'ok', 'status', 'version' fields

        Raises:
            TransportError: If the bridge is not running or unreachable
        """
        try:
            return await self.get("/health")
        except TransportError as e:
            raise TransportError(
                "Editor bridge is not running or unreachable. "
                f"Ensure the Unity Editor is open with the bridge enabled. Error: {e.detail}"
            ) from e

    async def is_available(self) -> bool:
        """Check if the editor bridge is available (non-throwing)."""
        try:
            await self.health_check()
            return True
        except TransportError:
            return False
