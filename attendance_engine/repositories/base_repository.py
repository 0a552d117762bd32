"""
Base repository for the upstream REST stores (roster and attendance).

Each repository wraps a shared `httpx.AsyncClient`, issues exactly one
request per call and converts transport and status failures into
`RecordStoreError`. Retries are left to callers.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from attendance_engine.core.exceptions import ErrorCode, RecordStoreError

logger = logging.getLogger(__name__)


def create_store_client(
    base_url: str,
    timeout_seconds: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Generic HTTP client for an upstream store."""
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_seconds,
        headers={"Accept": "application/json"},
        transport=transport,
    )


class BaseStoreRepository:
    """Read-only access to one upstream store."""

    store_name = "store"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _get_list(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        empty_on_not_found: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        GET a JSON array.

        Args:
            path: Path relative to the client's base URL
            params: Query parameters (None values are dropped)
            empty_on_not_found: Treat HTTP 404 as an empty result

        Raises:
            RecordStoreError: unreachable store, error status or non-array payload
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug(f"{self.store_name} GET {path} params={query}")

        try:
            response = await self.client.get(path, params=query)
        except httpx.TimeoutException as e:
            logger.error(f"{self.store_name} timeout on {path}: {e}")
            raise RecordStoreError(
                f"{self.store_name} timed out",
                store=self.store_name,
                path=path,
                error_code=ErrorCode.TIMEOUT_ERROR,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{self.store_name} unreachable on {path}: {e}")
            raise RecordStoreError(
                f"{self.store_name} unreachable: {e}",
                store=self.store_name,
                path=path,
            ) from e

        if response.status_code == 404 and empty_on_not_found:
            return []
        if response.is_error:
            logger.warning(f"{self.store_name} returned {response.status_code} for {path}")
            raise RecordStoreError(
                f"{self.store_name} returned HTTP {response.status_code}",
                store=self.store_name,
                path=path,
                upstream_status=response.status_code,
            )

        # Some deployments answer 204 or an empty body for "no rows".
        if response.status_code == 204 or not response.content:
            return []

        try:
            payload = response.json()
        except ValueError as e:
            raise RecordStoreError(
                f"{self.store_name} returned invalid JSON",
                store=self.store_name,
                path=path,
                upstream_status=response.status_code,
            ) from e

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise RecordStoreError(
                f"{self.store_name} returned {type(payload).__name__}, expected a list",
                store=self.store_name,
                path=path,
                upstream_status=response.status_code,
            )
        return payload
