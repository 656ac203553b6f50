# Stores package init
"""
Product API - Stores Package
==============================

    - base.py:       ProductStore, the abstract persistence contract
    - sql_store.py:  SqlProductStore on async SQLAlchemy, plus the
                     get_product_store FastAPI dependency
"""
