"""
NextShop Catalog — Application Package
========================================

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Validation/Logic)    │  ← ProductService, FileService
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Product document + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← shared MongoDB connection
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
