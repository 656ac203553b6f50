"""
Product API - Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the API contract for the products resource.
How:   FastAPI validates request bodies against the input models, serializes
       responses through the output models (camelCase timestamps via
       serialization aliases) and builds OpenAPI docs from both.

Input models:
    ProductCreate   POST body, all four fields required, unknown fields ignored
    ProductReplace  PUT body, fields checked for presence by the service
    ProductUpdate   PATCH body, every field optional, unknown fields rejected
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from product_api.models.product import Product


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProductCreate(BaseModel):
    """Body of POST /products. Also the validated shape of a full replace."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, max_length=255, description="Product name")
    buyer: str = Field(min_length=1, max_length=255, description="Buyer name")
    price: float = Field(ge=0, description="Price (non-negative)")
    location: str = Field(min_length=1, max_length=255, description="Location")


class ProductReplace(BaseModel):
    """
    Body of PUT /products/{id}.

    Fields are declared optional so that a missing field reaches the service,
    which rejects it with the full-object message instead of a per-field error.
    Present fields are still type and range checked here.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    buyer: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)

    def missing_fields(self) -> List[str]:
        return [
            field for field in Product.WRITABLE_FIELDS
            if getattr(self, field) is None
        ]


class ProductUpdate(BaseModel):
    """
    Body of PATCH /products/{id}.

    Only fields present in the request are applied. Unknown fields and
    explicit nulls are rejected (the columns are NOT NULL).
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    buyer: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "ProductUpdate":
        nulls = sorted(f for f in self.model_fields_set if getattr(self, f) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        """The subset of fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


@dataclass(frozen=True)
class ProductFilter:
    """
    Predicates for listing and counting products, ANDed together.

    Empty strings count as "not supplied"; price bounds are inclusive.
    """

    buyer: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


@dataclass(frozen=True)
class PageWindow:
    """1-based page number and page size; offset is derived."""

    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """Full representation of a stored product."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID = Field(description="Store-assigned identifier")
    name: str
    buyer: str
    price: float
    location: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """SQLite hands timestamps back naive; they were written as UTC."""
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class ProductListResponse(BaseModel):
    """Envelope returned by GET /products."""

    page: int = Field(description="Echo of the requested page (1-based)")
    limit: int = Field(description="Echo of the requested page size")
    total: int = Field(description="Number of products matching the filters, ignoring pagination")
    results: List[ProductResponse] = Field(description="The requested page, newest first")


class MessageResponse(BaseModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "Invalid ID",
            "code": "invalid_id",
            "details": {"id": "not-a-uuid"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and store status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
