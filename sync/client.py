"""
Client for the Shopify Admin REST API.

Reads a single fixed-size page of a collection and creates entities one at
a time. Every request goes through the retry policy.
"""

import enum
import httpx
from typing import List, Dict, Any, Optional
from core.config import StoreConfig
from core.exceptions import RemoteAPIError
from sync.retry import RetryPolicy
import logging

logger = logging.getLogger(__name__)


class EntityType(str, enum.Enum):
    """Remote collections, valued by their plural resource name"""
    PRODUCTS = "products"
    CUSTOMERS = "customers"
    ORDERS = "orders"

    @property
    def singular(self) -> str:
        return self.value[:-1]


class ShopifyClient:
    """
    Paged reads and single-entity writes against one store.

    Holds one reusable httpx.AsyncClient for its lifetime. Use as an async
    context manager, or call aclose() when done.
    """

    def __init__(
        self,
        config: StoreConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay
        )
        self._http = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            headers=self.default_headers(config),
            timeout=config.timeout
        )

    @staticmethod
    def default_headers(config: StoreConfig) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": config.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def __aenter__(self) -> "ShopifyClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def fetch_page(self, entity_type: EntityType, page_size: int) -> List[Dict[str, Any]]:
        """
        Fetch the first page of a remote collection.

        Args:
            entity_type: Collection to read
            page_size: Value of the limit parameter

        Returns:
            Raw records in the order the API returned them
        """
        params: Dict[str, Any] = {"limit": page_size}
        if entity_type == EntityType.ORDERS:
            params["status"] = "any"

        response = await self.retry_policy.execute(
            lambda: self._http.get(f"/{entity_type.value}.json", params=params)
        )
        data = self._json(response)
        records = data.get(entity_type.value) or []

        logger.info(f"Fetched {len(records)} {entity_type.value} (limit={page_size})")
        return records

    async def create_entity(self, entity_type: EntityType, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create one entity.

        Args:
            entity_type: Collection to create in
            payload: Entity fields, without the singular wrapper key

        Returns:
            The created record, including its assigned id
        """
        body = {entity_type.singular: payload}
        response = await self.retry_policy.execute(
            lambda: self._http.post(f"/{entity_type.value}.json", json=body)
        )
        data = self._json(response)
        created = data.get(entity_type.singular)
        if created is None:
            raise RemoteAPIError(
                f"Create response has no '{entity_type.singular}' key",
                status_code=response.status_code,
                response_body=response.text,
                context={"entity_type": entity_type.value}
            )
        return created

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteAPIError(
                "Failed to parse JSON response",
                status_code=response.status_code,
                response_body=response.text,
                original_exception=e
            )
        if not isinstance(data, dict):
            raise RemoteAPIError(
                "Unexpected response shape",
                status_code=response.status_code,
                response_body=response.text
            )
        return data
