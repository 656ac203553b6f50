"""
Product API - Products Route Handlers
=======================================

What:  HTTP surface of the products resource.
How:   Extracts path/query/body, delegates to ProductService, sets status
       codes and headers. Errors are raised as exceptions and rendered by the
       global handlers in main.py.
Who:   Mounted by create_app().

Routes:
    POST   /products          create            201
    GET    /products          list              200 {page, limit, total, results}
    HEAD   /products          count             200 X-Total-Count
    GET    /products/{id}     fetch one         200
    HEAD   /products/{id}     existence         200 / 404
    PUT    /products/{id}     full replace      200
    PATCH  /products/{id}     partial update    200
    DELETE /products/{id}     remove            200 {message}

Any other method on these paths gets 405 from the router.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from product_api.config import Settings
from product_api.exceptions import ValidationError
from product_api.schemas.product import (
    ErrorResponse,
    MessageResponse,
    PageWindow,
    ProductCreate,
    ProductFilter,
    ProductListResponse,
    ProductReplace,
    ProductResponse,
    ProductUpdate,
)
from product_api.services.product_service import product_service
from product_api.stores.base import ProductStore
from product_api.stores.sql_store import get_product_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

ID_ERRORS = {
    400: {"description": "Malformed product ID", "model": ErrorResponse},
    404: {"description": "Product not found", "model": ErrorResponse},
}


# ── Query Parameter Dependencies ──────────────────────────────────────────

def parse_price_bound(param: str, raw: Optional[str]) -> Optional[float]:
    """Empty means "not supplied"; anything else must be a finite number."""
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(message=f"{param} must be a number", field=param)
    if not math.isfinite(value):
        raise ValidationError(message=f"{param} must be a finite number", field=param)
    return value


def product_filter_params(
    buyer: Optional[str] = Query(default=None, description="Exact buyer match"),
    location: Optional[str] = Query(default=None, description="Exact location match"),
    min_price: Optional[str] = Query(
        default=None, alias="minPrice", description="Inclusive lower bound on price",
    ),
    max_price: Optional[str] = Query(
        default=None, alias="maxPrice", description="Inclusive upper bound on price",
    ),
) -> ProductFilter:
    return ProductFilter(
        buyer=buyer,
        location=location,
        min_price=parse_price_bound("minPrice", min_price),
        max_price=parse_price_bound("maxPrice", max_price),
    )


def page_window_params(
    request: Request,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(
        default=None,
        description="Page size (defaults to DEFAULT_PAGE_SIZE, at most MAX_PAGE_SIZE)",
    ),
) -> PageWindow:
    # Bounds come from the app's own Settings, not the import-time defaults
    config: Settings = request.app.state.settings
    if limit is None:
        limit = config.default_page_size
    if not 1 <= limit <= config.max_page_size:
        raise ValidationError(
            message=f"limit must be between 1 and {config.max_page_size}",
            field="limit",
        )
    return PageWindow(page=page, limit=limit)


# ── Collection ────────────────────────────────────────────────────────────

@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={400: {"description": "Invalid product", "model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    payload: ProductCreate,
    store: ProductStore = Depends(get_product_store),
) -> ProductResponse:
    return await product_service.create_product(store, payload)


@router.get(
    "",
    response_model=ProductListResponse,
    responses={
        400: {"description": "Invalid query parameters", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List products with filters and pagination",
    description=(
        "Filters (buyer, location, minPrice, maxPrice) are combined with AND. "
        "Results are ordered newest first; total counts every match."
    ),
)
async def list_products(
    response: Response,
    filters: ProductFilter = Depends(product_filter_params),
    window: PageWindow = Depends(page_window_params),
    store: ProductStore = Depends(get_product_store),
) -> ProductListResponse:
    """
    Example requests:
        GET /products?buyer=Vedant
        GET /products?location=Delhi
        GET /products?minPrice=1000&maxPrice=50000
        GET /products?page=2&limit=5
    """
    result = await product_service.list_products(store, filters, window)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.head(
    "",
    summary="Count products matching the filters",
    description="Returns the matching count in the X-Total-Count header; no body.",
)
async def count_products(
    filters: ProductFilter = Depends(product_filter_params),
    store: ProductStore = Depends(get_product_store),
) -> Response:
    total = await product_service.count_products(store, filters)
    return Response(status_code=200, headers={"X-Total-Count": str(total)})


# ── Single Product ────────────────────────────────────────────────────────

@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses=ID_ERRORS,
    summary="Get a product by ID",
)
async def get_product(
    product_id: str,
    store: ProductStore = Depends(get_product_store),
) -> ProductResponse:
    # product_id stays a plain string: the store decides what a valid id is
    return await product_service.get_product(store, product_id)


@router.head(
    "/{product_id}",
    responses=ID_ERRORS,
    summary="Check whether a product exists",
)
async def product_exists(
    product_id: str,
    store: ProductStore = Depends(get_product_store),
) -> Response:
    await product_service.ensure_exists(store, product_id)
    return Response(status_code=200)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses=ID_ERRORS,
    summary="Replace a product",
    description="All of name, buyer, price and location are required.",
)
async def replace_product(
    product_id: str,
    payload: ProductReplace,
    store: ProductStore = Depends(get_product_store),
) -> ProductResponse:
    return await product_service.replace_product(store, product_id, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses=ID_ERRORS,
    summary="Partially update a product",
    description="Only supplied fields change. Unknown fields are rejected.",
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    store: ProductStore = Depends(get_product_store),
) -> ProductResponse:
    return await product_service.update_product(store, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses=ID_ERRORS,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    store: ProductStore = Depends(get_product_store),
) -> MessageResponse:
    return await product_service.delete_product(store, product_id)
