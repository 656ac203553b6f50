"""
Product API - Application Package
===================================

Layered FastAPI backend for the products resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Resource Handler)     │  ← validation, error translation
    ├─────────────────────────────────────┤
    │        Stores (Persistence API)     │  ← ProductStore / SqlProductStore
    ├─────────────────────────────────────┤
    │    Models & Schemas / Database      │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
