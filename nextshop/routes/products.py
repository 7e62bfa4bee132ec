"""
NextShop Catalog — Product Route Handlers
===========================================

What:  GET /products (list) and POST /products (create).
How:   Extracts fields from the request, delegates to ProductService,
       returns JSON. Errors are raised as NextShopError subclasses and
       rendered by the global handlers in main.py.

POST /products accepts either encoding:
    - multipart/form-data or urlencoded form: name, price, description, image
    - application/json object: {"name", "price", "description", "image"}

What `image` means depends on settings.image_mode:
    upload → a file part, stored under the uploads directory
    url    → a string, recorded verbatim
The value that does not fit the active mode is ignored.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from pymongo.asynchronous.collection import AsyncCollection
from starlette.datastructures import UploadFile

from nextshop.config import settings
from nextshop.database import get_products_collection
from nextshop.exceptions import ValidationError
from nextshop.schemas.product import ErrorResponse, ProductCreatedResponse
from nextshop.services.product_service import ImageUpload, product_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])


@router.get(
    "/products",
    response_model=List[Dict[str, Any]],
    responses={
        200: {"description": "Every stored product document, unchanged apart from `_id` as text"},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="List all products",
)
async def list_products(
    collection: AsyncCollection = Depends(get_products_collection),
) -> List[Dict[str, Any]]:
    return await product_service.list_products(collection)


@router.post(
    "/products",
    status_code=201,
    response_model=ProductCreatedResponse,
    responses={
        201: {"description": "Product created", "model": ProductCreatedResponse},
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Store or file system failure", "model": ErrorResponse},
    },
    summary="Create a product",
    description=(
        "Accepts form fields (multipart or urlencoded) or a JSON object with "
        "`name`, `price`, optional `description`, and an optional `image` "
        "(file or URL, depending on the deployment's image mode)."
    ),
)
async def create_product(
    request: Request,
    collection: AsyncCollection = Depends(get_products_collection),
) -> ProductCreatedResponse:
    fields, image_file = await _read_payload(request)

    try:
        upload: Optional[ImageUpload] = None
        image_url: Optional[str] = None

        if settings.image_mode == "upload":
            if image_file is not None and image_file.filename:
                content = await image_file.read()
                logger.info(
                    "Received image upload: filename=%s, size=%d bytes",
                    image_file.filename,
                    len(content),
                )
                upload = ImageUpload(
                    filename=image_file.filename,
                    content=content,
                    content_length=image_file.size,
                )
        elif isinstance(fields.get("image"), str):
            image_url = fields["image"]

        created = await product_service.create_product(
            collection,
            name=fields.get("name"),
            price=fields.get("price"),
            description=fields.get("description"),
            image_url=image_url,
            upload=upload,
        )
        request.state.product_id = created.product_id
        return created
    finally:
        if image_file is not None:
            await image_file.close()


async def _read_payload(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """
    Split the request body into plain fields and the `image` file part.

    Returns: (fields, image_file). image_file is None for JSON bodies and
             for forms without a file part named `image`.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError(message="Request body must be valid JSON")
        if not isinstance(body, dict):
            raise ValidationError(message="Request body must be a JSON object")
        return body, None

    form = await request.form()
    fields: Dict[str, Any] = {}
    image_file: Optional[UploadFile] = None
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == "image" and image_file is None:
                image_file = value
            continue
        fields.setdefault(key, value)
    return fields, image_file
