"""
Product API - SQLAlchemy Product Store
========================================

What:  ProductStore implementation on an async SQLAlchemy session.
How:   Builds SELECT/INSERT/UPDATE/DELETE statements against the products
       table. Every write commits before returning, so a product handed back
       to the client is already visible to the next request.
Who:   Constructed per request by get_product_store(); used by ProductService.

Query plans:
    List:   SELECT ... WHERE <filters> ORDER BY created_at DESC, id DESC
            OFFSET :skip LIMIT :limit
            → idx_products_created_at serves the ordering
    Count:  SELECT count(*) FROM products WHERE <filters>
    By id:  primary key lookup
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from product_api.database import Database, get_database, get_db_session
from product_api.exceptions import InvalidIdError
from product_api.models.product import Product, utcnow
from product_api.schemas.product import PageWindow, ProductFilter
from product_api.stores.base import ProductStore

logger = logging.getLogger(__name__)


def build_filter_clauses(filters: ProductFilter) -> List[ColumnElement[bool]]:
    """
    Translate a ProductFilter into WHERE clauses (combined with AND by the caller).

    Empty strings are skipped; price bounds are inclusive.
    """
    clauses: List[ColumnElement[bool]] = []
    if filters.buyer:
        clauses.append(Product.buyer == filters.buyer)
    if filters.location:
        clauses.append(Product.location == filters.location)
    if filters.min_price is not None:
        clauses.append(Product.price >= filters.min_price)
    if filters.max_price is not None:
        clauses.append(Product.price <= filters.max_price)
    return clauses


class SqlProductStore(ProductStore):
    """
    Product persistence over one AsyncSession.

    Args:
        session:         Request-scoped session (closed by the dependency)
        snapshot_reads:  Run find_page under REPEATABLE READ so the page and
                         the total come from one snapshot (PostgreSQL only)
    """

    def __init__(self, session: AsyncSession, snapshot_reads: bool = False):
        self._session = session
        self._snapshot_reads = snapshot_reads

    def parse_id(self, raw_id: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(raw_id))
        except ValueError:
            raise InvalidIdError(raw_id=raw_id)

    async def insert(self, values: Dict[str, Any]) -> Product:
        now = utcnow()
        product = Product(id=uuid.uuid4(), created_at=now, updated_at=now, **values)
        self._session.add(product)
        await self._session.commit()
        logger.debug("Inserted product %s", product.id)
        return product

    def _select_page(self, filters: ProductFilter, window: PageWindow):
        return (
            select(Product)
            .where(*build_filter_clauses(filters))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(window.offset)
            .limit(window.limit)
        )

    async def find(self, filters: ProductFilter, window: PageWindow) -> List[Product]:
        result = await self._session.execute(self._select_page(filters, window))
        return list(result.scalars().all())

    async def count(self, filters: ProductFilter) -> int:
        query = select(func.count()).select_from(Product).where(*build_filter_clauses(filters))
        result = await self._session.execute(query)
        return result.scalar_one()

    async def find_page(
        self, filters: ProductFilter, window: PageWindow
    ) -> Tuple[List[Product], int]:
        if self._snapshot_reads:
            # Must run before any other statement in this transaction
            await self._session.connection(
                execution_options={"isolation_level": "REPEATABLE READ"}
            )
        products = await self.find(filters, window)
        total = await self.count(filters)
        return products, total

    async def find_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        return await self._session.get(Product, product_id)

    async def exists(self, product_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(Product.id).where(Product.id == product_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_by_id(
        self, product_id: uuid.UUID, values: Dict[str, Any]
    ) -> Optional[Product]:
        product = await self._session.get(Product, product_id)
        if product is None:
            return None
        for field, value in values.items():
            setattr(product, field, value)
        product.updated_at = utcnow()
        await self._session.commit()
        return product

    async def delete_by_id(self, product_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(Product).where(Product.id == product_id)
        )
        await self._session.commit()
        return result.rowcount > 0


def get_product_store(
    session: AsyncSession = Depends(get_db_session),
    database: Database = Depends(get_database),
) -> SqlProductStore:
    """FastAPI dependency: a store bound to this request's session."""
    return SqlProductStore(session, snapshot_reads=database.supports_snapshot_reads)
