"""
Import Source

Turns a remote JSON payload into ImportItem objects for the store.

Two payload shapes are accepted:
1. {"products": [{"title": ..., "price": ..., "category": ...}, ...]}
2. A bare array of the same item objects

Anything else is rejected with MalformedImportSource and the
whole batch is skipped. We never import half of a payload.

The HTTP side is deliberately thin: fetch() only returns the decoded
JSON. Interpretation happens in extract_import_items() so the store
can be fed from any provider.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_notes.models.expense import ImportItem


logger = structlog.get_logger(__name__)


class ImportSourceError(Exception):
    """Base exception for import errors."""
    pass


class MalformedImportSource(ImportSourceError):
    """Import payload shape not recognized, or an item is invalid."""
    pass


class ImportFetchError(ImportSourceError):
    """Could not fetch the import payload from the remote source."""
    pass


def extract_import_items(payload: Any) -> list[ImportItem]:
    """
    Normalize an import payload into a list of ImportItem.

    Already-built ImportItem objects are accepted as items.

    Raises:
        MalformedImportSource: If the shape is unrecognized or any item
            fails validation. No partial list is ever returned.
    """
    if isinstance(payload, dict):
        if "products" not in payload:
            raise MalformedImportSource(
                f"Expected a 'products' key, got keys: {sorted(payload)[:10]}"
            )
        raw_items = payload["products"]
    else:
        raw_items = payload

    if not isinstance(raw_items, (list, tuple)):
        raise MalformedImportSource(
            f"Expected a list of items, got {type(raw_items).__name__}"
        )

    items = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, ImportItem):
            items.append(raw)
            continue
        if not isinstance(raw, dict):
            raise MalformedImportSource(
                f"Item {index} is {type(raw).__name__}, expected an object"
            )
        try:
            items.append(ImportItem.model_validate(raw))
        except ValidationError as e:
            raise MalformedImportSource(f"Item {index} is invalid: {e}") from e

    return items


class HttpImportSource:
    """
    Fetches import payloads over HTTP.

    Transport failures (DNS, connect, read timeouts) are retried;
    HTTP error statuses and non-JSON bodies are not.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._url = url
        self._timeout = timeout_seconds
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(self._url, timeout=self._timeout)

    async def fetch(self) -> Any:
        """
        Fetch and decode the remote payload.

        Returns:
            The decoded JSON document (dict or list)

        Raises:
            ImportFetchError: On network failure, HTTP error status
                or a body that is not JSON
        """
        try:
            if self._client is not None:
                response = await self._get(self._client)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._get(client)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("import_fetch_failed", url=self._url, error=str(e))
            raise ImportFetchError(f"Failed to fetch {self._url}: {e}") from e
        except ValueError as e:
            logger.warning("import_fetch_not_json", url=self._url, error=str(e))
            raise ImportFetchError(f"Response from {self._url} is not JSON: {e}") from e

        logger.info("import_fetched", url=self._url)
        return payload
