"""
NextShop Catalog — Product Document Model
===========================================

What:  The shape of a document in the `products` collection.
How:   A dataclass built by ProductService and converted to a BSON-ready dict
       for insert_one(). MongoDB assigns `_id`; the dataclass carries it
       afterwards so the response can echo it.

Document layout:
    {
        "_id":         ObjectId,        assigned by the store
        "name":        str,
        "price":       float,
        "description": str,             "" when omitted
        "image":       str | None,      upload filename or URL
        "createdAt":   datetime (UTC),  set at insert time
    }

Products are append-only: created once, never updated or deleted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId


@dataclass
class Product:
    name: str
    price: float
    description: str = ""
    image: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[ObjectId] = None

    def to_document(self) -> Dict[str, Any]:
        """BSON-ready dict for insertion. `_id` is only included once assigned."""
        document: Dict[str, Any] = {
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image": self.image,
            "createdAt": self.created_at,
        }
        if self.id is not None:
            document["_id"] = self.id
        return document

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
