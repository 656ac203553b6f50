# Routes package init
"""
Product API - Routes Package
==============================

Route Inventory:
    - products.py:  /products and /products/{id} (CRUD, list, HEAD checks)
    - health.py:    GET / (liveness text), GET /health (store probe)

Routes stay thin: extract request data, call ProductService, set status
codes and headers.
"""
