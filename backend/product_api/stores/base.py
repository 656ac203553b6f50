"""
Product API - Abstract Product Store Interface
================================================

What:  Abstract base class defining the narrow contract between the product
       service and whatever persists products.
How:   Concrete stores inherit from ProductStore and implement each method.
       The service only ever talks to this interface, so unit tests can hand
       it an AsyncMock and the SQL implementation can be swapped out.
Who:   Called by ProductService.

Contract:
    - parse_id() turns path text into the store's identifier type or raises
      InvalidIdError; every other method takes an already-parsed id
    - Lookups return None / False for missing records, never raise NotFoundError
    - Implementation errors (driver, constraint) propagate unchanged; the
      service translates them into application exceptions
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from product_api.models.product import Product
from product_api.schemas.product import PageWindow, ProductFilter


class ProductStore(ABC):
    """Persistence operations for Product records."""

    @abstractmethod
    def parse_id(self, raw_id: str) -> uuid.UUID:
        """
        Validate and convert a client-supplied identifier.

        Raises:
            InvalidIdError: raw_id is not in the store's identifier format.
        """
        ...

    @abstractmethod
    async def insert(self, values: Dict[str, Any]) -> Product:
        """Persist a new product; the store assigns id and timestamps."""
        ...

    @abstractmethod
    async def find(self, filters: ProductFilter, window: PageWindow) -> List[Product]:
        """Return one page of matching products, newest first."""
        ...

    @abstractmethod
    async def count(self, filters: ProductFilter) -> int:
        """Count all products matching the filters (pagination ignored)."""
        ...

    @abstractmethod
    async def find_page(
        self, filters: ProductFilter, window: PageWindow
    ) -> Tuple[List[Product], int]:
        """
        Return (page, total) for a list request.

        Implementations that support snapshot reads run both queries against
        the same snapshot; others may observe writes landing in between.
        """
        ...

    @abstractmethod
    async def find_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        ...

    @abstractmethod
    async def exists(self, product_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def update_by_id(
        self, product_id: uuid.UUID, values: Dict[str, Any]
    ) -> Optional[Product]:
        """
        Apply `values` to the product and refresh updated_at.

        Returns the updated product, or None if the id does not exist.
        """
        ...

    @abstractmethod
    async def delete_by_id(self, product_id: uuid.UUID) -> bool:
        """Hard-delete the product; returns False if it did not exist."""
        ...
