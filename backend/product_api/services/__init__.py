# Services package init
"""
Product API - Services Layer
==============================

Service Inventory:
    - ProductService: validation, id parsing, store calls and error
      translation for every products operation
"""
