"""
Profile Store Client
HTTP client for the REST profile store (json-server style /users resource)
"""

import time
import httpx
import logging
from typing import Dict, Any, List, Optional

from shared.utils.logger import get_request_logger

logger = logging.getLogger(__name__)


class ProfileStoreError(Exception):
    """Profile store request failed (network error or non-2xx response)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ProfileStoreClient:
    """HTTP client for the profile store"""

    def __init__(
        self,
        base_url: str = "http://localhost:8088/users",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = httpx.Timeout(timeout)
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.request_logger = get_request_logger()

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={'Content-Type': 'application/json'}
        )

    async def __aenter__(self):
        self._client = self._new_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
        start = time.monotonic()
        status_code = None
        try:
            response = await client.request(method, url, **kwargs)
            status_code = response.status_code
            return response
        except httpx.HTTPError as e:
            logger.error(f"Profile store {method} {url} failed: {e}")
            raise ProfileStoreError(f"Profile store unreachable: {e}") from e
        finally:
            self.request_logger.log_request(method, url, status_code, time.monotonic() - start)

    async def _request(self, method: str, url: str, allow_not_found: bool = False, **kwargs) -> Optional[Any]:
        """
        Issue a request and decode the JSON body

        Args:
            method: HTTP method
            url: Absolute URL under the profile store base URL
            allow_not_found: Return None on 404 instead of raising

        Returns:
            Decoded JSON body, or None for an allowed 404
        """
        if self._client is not None:
            response = await self._send(self._client, method, url, **kwargs)
        else:
            async with self._new_client() as client:
                response = await self._send(client, method, url, **kwargs)

        if allow_not_found and response.status_code == 404:
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Profile store {method} {url} returned {response.status_code}")
            raise ProfileStoreError(
                f"Profile store returned {response.status_code} for {method} {url}",
                status_code=response.status_code
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ProfileStoreError(
                f"Profile store returned invalid JSON for {method} {url}",
                status_code=response.status_code
            ) from e

    async def create_user(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a user record

        Args:
            record: Full user record, sent as the JSON body

        Returns:
            dict: Persisted record including store-assigned fields
        """
        result = await self._request("POST", self.base_url, json=record)
        logger.info(f"Profile record created: {result.get('id') if isinstance(result, dict) else None}")
        return result

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a user record by id

        Returns:
            dict: User record or None if the store has no such record
        """
        return await self._request("GET", f"{self.base_url}/{user_id}", allow_not_found=True)

    async def find_users_by_email(self, email: str) -> List[Dict[str, Any]]:
        """
        Query user records by email

        Returns:
            list: Matching records in store order (possibly empty)
        """
        result = await self._request("GET", self.base_url, params={"email": email})
        if not isinstance(result, list):
            raise ProfileStoreError(f"Profile store returned {type(result).__name__} for email query, expected list")
        return result
