"""
Product API - Product Service (Resource Handler Logic)
========================================================

What:  Business logic for every products operation, independent of HTTP.
How:   Validates input, parses ids through the store, calls the store, and
       translates absence into NotFoundError and store failures into
       ValidationError / DatabaseError.
Who:   Called by the route handlers in routes/products.py.

Request lifecycle (all operations):
    receive → validate → execute (store) → respond

Error translation:
    InvalidIdError / ValidationError / NotFoundError → propagate as-is
    sqlalchemy IntegrityError                        → ValidationError (400)
    anything else raised by the store                → DatabaseError (500)

The service is stateless: the store (and its session) is passed into every
call, so concurrent requests share nothing.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError

from product_api.exceptions import (
    DatabaseError,
    NotFoundError,
    ProductApiError,
    ValidationError,
)
from product_api.schemas.product import (
    MessageResponse,
    PageWindow,
    ProductCreate,
    ProductFilter,
    ProductListResponse,
    ProductReplace,
    ProductResponse,
    ProductUpdate,
)
from product_api.stores.base import ProductStore

logger = logging.getLogger(__name__)

FULL_OBJECT_MESSAGE = "PUT requires full object: name, buyer, price, location"


class ProductService:
    """
    Responsibilities:
        - create_product():  insert a validated product
        - list_products():   filtered, paginated listing with total count
        - count_products():  filtered count for HEAD /products
        - get_product():     single lookup with not-found handling
        - ensure_exists():   existence check for HEAD /products/{id}
        - replace_product(): full replace (all four fields required)
        - update_product():  partial update (only supplied fields)
        - delete_product():  hard delete
    """

    @contextmanager
    def _store_errors(self, operation: str, **context) -> Iterator[None]:
        try:
            yield
        except ProductApiError:
            raise
        except IntegrityError as e:
            logger.warning("Store rejected %s: %s | Context: %s", operation, str(e.orig), context)
            raise ValidationError(
                message="Product violates a store constraint",
                context={"operation": operation},
            ) from e
        except Exception as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not {operation}. Please try again.",
                context={"error_type": type(e).__name__, **context},
            ) from e

    async def create_product(self, store: ProductStore, payload: ProductCreate) -> ProductResponse:
        with self._store_errors("create the product"):
            product = await store.insert(payload.model_dump())
        logger.info("Product %s created", product.id)
        return ProductResponse.model_validate(product)

    async def list_products(
        self,
        store: ProductStore,
        filters: ProductFilter,
        window: PageWindow,
    ) -> ProductListResponse:
        """
        List products matching every supplied filter, newest first.

        total counts all matches regardless of page/limit; a page past the
        end returns an empty results list with the real total.
        """
        with self._store_errors("retrieve products"):
            products, total = await store.find_page(filters, window)
        return ProductListResponse(
            page=window.page,
            limit=window.limit,
            total=total,
            results=[ProductResponse.model_validate(p) for p in products],
        )

    async def count_products(self, store: ProductStore, filters: ProductFilter) -> int:
        with self._store_errors("count products"):
            return await store.count(filters)

    async def get_product(self, store: ProductStore, raw_id: str) -> ProductResponse:
        product_id = store.parse_id(raw_id)
        with self._store_errors("retrieve the product", product_id=str(product_id)):
            product = await store.find_by_id(product_id)
        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        return ProductResponse.model_validate(product)

    async def ensure_exists(self, store: ProductStore, raw_id: str) -> None:
        product_id = store.parse_id(raw_id)
        with self._store_errors("check the product", product_id=str(product_id)):
            found = await store.exists(product_id)
        if not found:
            raise NotFoundError(resource="product", resource_id=str(product_id))

    async def replace_product(
        self, store: ProductStore, raw_id: str, payload: ProductReplace
    ) -> ProductResponse:
        """
        Overwrite the product with exactly name, buyer, price and location.

        Missing fields are rejected before the store is touched.
        """
        product_id = store.parse_id(raw_id)
        missing = payload.missing_fields()
        if missing:
            raise ValidationError(message=FULL_OBJECT_MESSAGE, context={"missing": missing})

        replacement = ProductCreate(**payload.model_dump())
        with self._store_errors("replace the product", product_id=str(product_id)):
            product = await store.update_by_id(product_id, replacement.model_dump())
        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        logger.info("Product %s replaced", product_id)
        return ProductResponse.model_validate(product)

    async def update_product(
        self, store: ProductStore, raw_id: str, payload: ProductUpdate
    ) -> ProductResponse:
        product_id = store.parse_id(raw_id)
        changes = payload.changes()
        with self._store_errors("update the product", product_id=str(product_id)):
            product = await store.update_by_id(product_id, changes)
        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        logger.info("Product %s updated (%s)", product_id, ", ".join(sorted(changes)) or "no fields")
        return ProductResponse.model_validate(product)

    async def delete_product(self, store: ProductStore, raw_id: str) -> MessageResponse:
        product_id = store.parse_id(raw_id)
        with self._store_errors("delete the product", product_id=str(product_id)):
            deleted = await store.delete_by_id(product_id)
        if not deleted:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        logger.info("Product %s deleted", product_id)
        return MessageResponse(message="Deleted successfully")


# Stateless; shared by all requests
product_service = ProductService()
