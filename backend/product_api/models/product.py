"""
Product API - Product SQLAlchemy Model
========================================

What:  ORM model representing the `products` table.
How:   Inherits from the shared DeclarativeBase; tables are created at startup
       by Database.create_all().
Who:   Used by SqlProductStore for every read and write.

Table Design:
    - UUID primary key generated in Python, so it works on every dialect
    - name / buyer / location: non-empty text (enforced by the API schemas,
      NOT NULL enforced by the table)
    - price: floating point, non-negative (CHECK constraint)
    - created_at / updated_at: UTC timestamps managed by the model defaults
    - Index on created_at DESC serves the default list ordering
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Float, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from product_api.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    A product record.

    Lifecycle:
        1. Inserted by create (id, created_at, updated_at assigned)
        2. Overwritten by full replace or partially updated (updated_at refreshed)
        3. Hard-deleted by delete
    """

    __tablename__ = "products"

    # Store-assigned identifier, immutable after creation
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    buyer: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        Index("idx_products_created_at", created_at.desc()),
    )

    # Fields a client may write; everything else is store-managed
    WRITABLE_FIELDS = ("name", "buyer", "price", "location")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
