"""
NextShop Catalog — API Routes Package
=======================================

Route Inventory:
    - health.py:    GET  /                  (banner)
                    GET  /ping              (database round-trip)
    - products.py:  GET  /products          (list all products)
                    POST /products          (create a product)
    - uploads.py:   GET  /uploads/{file}    (serve uploaded images)

Routes stay thin: read the request, call a service, return the result.
"""
