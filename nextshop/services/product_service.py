"""
NextShop Catalog — Product Service
====================================

What:  Validation and persistence for the create/list product operations.
How:   Receives the products collection from the route (injected by
       FastAPI), validates input, optionally stores the uploaded image,
       and talks to MongoDB.
Who:   Called by the /products route handlers.

Create flow (POST /products):
    1. name/price presence        → ValidationError (400), nothing written
    2. price parsing              → ValidationError (400), nothing written
    3. image (upload mode only)   → FileService validate + store
    4. insert_one                 → DatabaseError (500), stored image removed
    5. ProductCreatedResponse (201)

Price policy:
    Accepts numbers or numeric text ("19.99" → 19.99). Rejects text that does
    not parse, NaN, infinities and negative values. A numeric 0 is a valid
    price; only a missing or blank value counts as "missing".
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from nextshop.exceptions import DatabaseError, NextShopError, ValidationError
from nextshop.models.product import Product
from nextshop.schemas.product import ProductCreatedResponse, ProductResponse, plain_document
from nextshop.services.file_service import file_service

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Name and price are required"


@dataclass
class ImageUpload:
    """An image file part pulled out of a multipart request."""
    filename: str
    content: bytes
    content_length: Optional[int] = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_price(value: Any) -> float:
    """
    Convert a client-supplied price to a float.

    Raises:
        ValidationError: unparseable, non-finite or negative price.
    """
    # bool is an int subclass; True must not become a price of 1.0
    if isinstance(value, bool):
        raise ValidationError(message="Price must be a valid number", field="price")

    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(
            message="Price must be a valid number",
            field="price",
            context={"value": repr(value)},
        )

    if not math.isfinite(price) or price < 0:
        raise ValidationError(
            message="Price must be a finite, non-negative number",
            field="price",
            context={"value": repr(value)},
        )
    return price


class ProductService:
    """
    Stateless; every call gets the collection it should use.

    Driver errors are wrapped in DatabaseError with the generic message the
    API returns; the original exception is logged and chained.
    """

    async def list_products(self, collection: AsyncCollection) -> List[Dict[str, Any]]:
        """
        Return every document in the collection in natural order.

        No filter, sort, or pagination is applied. Documents come back as
        stored (extra keys, legacy shapes and all); only BSON values JSON
        cannot carry are converted, see `plain_document`.
        """
        try:
            documents = await collection.find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error("Error fetching products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch products",
                context={"error_type": type(e).__name__},
            ) from e
        return [plain_document(doc) for doc in documents]

    async def create_product(
        self,
        collection: AsyncCollection,
        name: Any,
        price: Any,
        description: Any = None,
        image_url: Optional[str] = None,
        upload: Optional[ImageUpload] = None,
    ) -> ProductCreatedResponse:
        """
        Validate input, store the image if any, and insert one product.

        Args:
            collection: The products collection (injected by FastAPI)
            name, price, description: Raw values from the form or JSON body
            image_url: URL to record verbatim (url image mode)
            upload: Image file to store (upload image mode)

        Raises:
            ValidationError: Missing name/price, bad price, non-text name
                or description, bad image (→ 400)
            FileStorageError: The image could not be written (→ 500)
            DatabaseError: The insert failed (→ 500)
        """
        if _is_blank(name) or _is_blank(price):
            raise ValidationError(
                message=REQUIRED_FIELDS_MESSAGE,
                context={"name_present": not _is_blank(name), "price_present": not _is_blank(price)},
            )
        if not isinstance(name, str):
            raise ValidationError(message="Name must be a string", field="name")
        if description is not None and not isinstance(description, str):
            raise ValidationError(message="Description must be a string", field="description")

        product = Product(
            name=name.strip(),
            price=parse_price(price),
            description=description or "",
            image=None if _is_blank(image_url) else str(image_url).strip(),
        )

        absolute_path: Optional[str] = None
        try:
            if upload is not None:
                absolute_path, product.image = await file_service.validate_and_store(
                    filename=upload.filename,
                    content=upload.content,
                    content_length=upload.content_length,
                )

            result = await collection.insert_one(product.to_document())
            product.id = result.inserted_id
            logger.info("Product created: %s (%s)", product.id, product.name)

        except NextShopError:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            raise
        except Exception as e:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            logger.error("Error adding product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to add product",
                context={"error_type": type(e).__name__},
            ) from e

        return ProductCreatedResponse(
            message="Product added successfully",
            product_id=str(product.id),
            product=ProductResponse.from_document(product.to_document()),
        )


product_service = ProductService()
