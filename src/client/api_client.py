"""HTTP client for consuming the Minimal Client API."""
from uuid import UUID
from typing import Optional
from httpx import AsyncClient, Response

from src.client.schemas import (
    ClientRequest,
    ClientResponse,
    LoginUserRequest,
    RegisterUserRequest,
    TokenResponse,
)


class MinimalApiClient:
    """HTTP client for interacting with the Minimal Client API."""

    def __init__(self, base_url: str, client: Optional[AsyncClient] = None):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:8000")
            client: Optional httpx.AsyncClient instance. If not provided, a new one will be created.
        """
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._access_token: str | None = None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._owns_client:
            self._client = AsyncClient(base_url=self.base_url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self._client:
            await self._client.aclose()

    @property
    def client(self) -> AsyncClient:
        """Get the underlying httpx client."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async context manager.")
        return self._client

    def use_token(self, access_token: str | None) -> None:
        """Send the given bearer token on subsequent requests (None to stop)."""
        self._access_token = access_token

    def _headers(self) -> dict[str, str]:
        if self._access_token is None:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    async def register(self, request: RegisterUserRequest) -> TokenResponse:
        """
        Create an account and remember the issued token.

        Raises:
            httpx.HTTPStatusError: If the request fails (400 or 422)
        """
        response: Response = await self.client.post("/registro", json=request.model_dump(mode="json"))
        response.raise_for_status()
        token = TokenResponse(**response.json())
        self.use_token(token.access_token)
        return token

    async def login(self, request: LoginUserRequest) -> TokenResponse:
        """
        Sign in and remember the issued token.

        Raises:
            httpx.HTTPStatusError: If the request fails (400 or 422)
        """
        response: Response = await self.client.post("/login", json=request.model_dump(mode="json"))
        response.raise_for_status()
        token = TokenResponse(**response.json())
        self.use_token(token.access_token)
        return token

    async def list_clients(self) -> list[ClientResponse]:
        response: Response = await self.client.get("/cliente", headers=self._headers())
        response.raise_for_status()
        return [ClientResponse(**client) for client in response.json()]

    async def get_client(self, client_id: UUID) -> ClientResponse:
        """
        Get a client by ID.

        Raises:
            httpx.HTTPStatusError: If the request fails (e.g., 404 if not found)
        """
        response: Response = await self.client.get(f"/cliente/{client_id}", headers=self._headers())
        response.raise_for_status()
        return ClientResponse(**response.json())

    async def create_client(self, request: ClientRequest) -> ClientResponse:
        """
        Create a new client. Requires a token.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.post(
            "/cliente",
            json=request.model_dump(mode="json", exclude_none=True),
            headers=self._headers(),
        )
        response.raise_for_status()
        return ClientResponse(**response.json())

    async def update_client(self, client_id: UUID, request: ClientRequest) -> None:
        """
        Replace a client's fields. Requires a token.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.put(
            f"/cliente/{client_id}",
            json=request.model_dump(mode="json", exclude_none=True),
            headers=self._headers(),
        )
        response.raise_for_status()

    async def delete_client(self, client_id: UUID) -> None:
        """
        Delete a client. Requires a token carrying the delete claim.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.delete(f"/cliente/{client_id}", headers=self._headers())
        response.raise_for_status()
