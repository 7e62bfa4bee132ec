"""
NextShop Catalog — Pydantic Response Schemas
==============================================

What:  Pydantic models defining the JSON contract of the catalog endpoints.
How:   Route handlers return these; FastAPI serializes them by alias, so the
       wire keys stay `_id`, `createdAt` and `productId` while Python code
       uses snake_case attributes.

Schemas are separate from the document model: the wire format renders
ObjectIds as strings, and stored documents may carry keys this service
never writes (those are passed through untouched).
"""

import math
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


def plain_document(value: Any) -> Any:
    """
    Make a stored BSON value JSON-encodable without reshaping it.

    ObjectIds (at any depth) become strings and NaN/Infinity become null,
    which JSON cannot represent. Everything else is returned as stored;
    datetimes are left for FastAPI's encoder.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: plain_document(v) for k, v in value.items()}
    if isinstance(value, list):
        return [plain_document(v) for v in value]
    return value


class ProductResponse(BaseModel):
    """
    What:  The product this service just created, as returned by POST /products.
    Keys:  _id, name, price, description, image, createdAt (+ any extra
           keys already present in the stored document)
    """
    id: str = Field(alias="_id", description="Store-assigned identifier")
    name: str = Field(description="Product name")
    price: float = Field(description="Product price")
    description: str = Field(default="", description="Free-text description")
    image: Optional[str] = Field(
        default=None,
        description="Stored upload filename or image URL; null when absent",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
        description="Insert time (UTC)",
    )

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, ObjectId) else v

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ProductResponse":
        """Build a response from a raw MongoDB document."""
        return cls.model_validate(plain_document(document))


class ProductCreatedResponse(BaseModel):
    """
    What:  Body of a successful POST /products (HTTP 201).

    Example:
        {
            "message": "Product added successfully",
            "productId": "665f1c2e9b1e8a3d4c5b6a79",
            "product": {"_id": "665f...", "name": "Mug", "price": 9.5, ...}
        }
    """
    message: str = Field(default="Product added successfully")
    product_id: str = Field(alias="productId", description="Identifier of the new product")
    product: ProductResponse

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    What:  Error body for every JSON failure response (400, 404, 500).

    Example:
        {"message": "Name and price are required"}
    """
    message: str = Field(description="Human-readable error description")
