"""
NextShop Catalog — Services Layer
===================================

Service Inventory:
    - ProductService: name/price validation, insert and list against MongoDB
    - FileService: image upload validation, storage, and cleanup
"""
