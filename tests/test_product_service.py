"""
NextShop Catalog — Product Service Unit Tests
===============================================

What:  Tests for ProductService (create, list) and price parsing.
How:   Uses the in-memory FakeCollection and a patched file_service;
       no database or HTTP involved.
"""

import math
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, PyMongoError

from nextshop.exceptions import DatabaseError, ValidationError
from nextshop.services.product_service import ImageUpload, ProductService, parse_price


class TestParsePrice:
    """Tests for the price parsing policy."""

    def test_decimal_text(self):
        assert parse_price("19.99") == 19.99

    def test_text_with_whitespace(self):
        assert parse_price(" 9.5 ") == 9.5

    def test_number_passthrough(self):
        assert parse_price(12) == 12.0
        assert isinstance(parse_price(12), float)

    def test_zero_is_valid(self):
        assert parse_price("0") == 0.0

    @pytest.mark.parametrize("value", ["abc", "12abc", "", [], {}])
    def test_unparseable_rejected(self, value):
        with pytest.raises(ValidationError, match="valid number"):
            parse_price(value)

    @pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity", "-1", -0.01, math.inf])
    def test_non_finite_or_negative_rejected(self, value):
        with pytest.raises(ValidationError, match="finite, non-negative"):
            parse_price(value)

    def test_boolean_rejected(self):
        with pytest.raises(ValidationError):
            parse_price(True)


class TestProductServiceCreate:
    """Tests for the create_product workflow."""

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_create_without_image(self, products_collection):
        result = await self.service.create_product(
            products_collection, name="Mug", price="9.5", description="Ceramic"
        )

        assert result.message == "Product added successfully"
        assert result.product.name == "Mug"
        assert result.product.price == 9.5
        assert result.product.description == "Ceramic"
        assert result.product.image is None
        assert isinstance(result.product.created_at, datetime)
        assert result.product_id == result.product.id
        assert ObjectId.is_valid(result.product_id)

        assert len(products_collection.documents) == 1
        stored = products_collection.documents[0]
        assert stored["price"] == 9.5
        assert stored["createdAt"].tzinfo is not None

    @pytest.mark.asyncio
    async def test_description_defaults_to_empty(self, products_collection):
        result = await self.service.create_product(products_collection, name="Mug", price=3)
        assert result.product.description == ""
        assert products_collection.documents[0]["description"] == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("description", [["Ceramic"], {"text": "Ceramic"}, 12])
    async def test_non_text_description_rejected(self, products_collection, description):
        with pytest.raises(ValidationError, match="Description must be a string"):
            await self.service.create_product(
                products_collection, name="Mug", price="9.5", description=description
            )
        products_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,price",
        [(None, "9.5"), ("", "9.5"), ("   ", "9.5"), ("Mug", None), ("Mug", ""), (None, None)],
    )
    async def test_missing_name_or_price_rejected(self, products_collection, name, price):
        with pytest.raises(ValidationError, match="Name and price are required"):
            await self.service.create_product(products_collection, name=name, price=price)
        products_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_price_does_not_insert(self, products_collection):
        with pytest.raises(ValidationError):
            await self.service.create_product(products_collection, name="Mug", price="abc")
        products_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_image_url_stored_verbatim(self, products_collection):
        url = "https://cdn.example.com/img/mug.png?v=2"
        result = await self.service.create_product(
            products_collection, name="Mug", price="9.5", image_url=url
        )
        assert result.product.image == url
        assert products_collection.documents[0]["image"] == url

    @pytest.mark.asyncio
    async def test_upload_records_stored_filename(self, products_collection):
        with patch("nextshop.services.product_service.file_service") as mock_file:
            mock_file.validate_and_store = AsyncMock(
                return_value=("/abs/uploads/1718035200123-9f1c2b7a.png", "1718035200123-9f1c2b7a.png")
            )

            result = await self.service.create_product(
                products_collection,
                name="Mug",
                price="9.5",
                upload=ImageUpload(filename="mug.png", content=b"png", content_length=3),
            )

            assert result.product.image == "1718035200123-9f1c2b7a.png"
            mock_file.validate_and_store.assert_awaited_once_with(
                filename="mug.png", content=b"png", content_length=3
            )

    @pytest.mark.asyncio
    async def test_upload_not_stored_when_fields_invalid(self, products_collection):
        with patch("nextshop.services.product_service.file_service") as mock_file:
            mock_file.validate_and_store = AsyncMock()

            with pytest.raises(ValidationError):
                await self.service.create_product(
                    products_collection,
                    name="Mug",
                    price=None,
                    upload=ImageUpload(filename="mug.png", content=b"png"),
                )

            mock_file.validate_and_store.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_failure_raises_database_error_and_cleans_up(self, products_collection):
        products_collection.insert_one = AsyncMock(side_effect=AutoReconnect("connection reset"))

        with patch("nextshop.services.product_service.file_service") as mock_file:
            mock_file.validate_and_store = AsyncMock(return_value=("/abs/uploads/x.png", "x.png"))
            mock_file.cleanup_file = AsyncMock()

            with pytest.raises(DatabaseError) as exc_info:
                await self.service.create_product(
                    products_collection,
                    name="Mug",
                    price="9.5",
                    upload=ImageUpload(filename="mug.png", content=b"png"),
                )

            assert exc_info.value.message == "Failed to add product"
            mock_file.cleanup_file.assert_awaited_once_with("/abs/uploads/x.png")


class TestProductServiceList:
    """Tests for list_products."""

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_list_empty(self, products_collection):
        assert await self.service.list_products(products_collection) == []

    @pytest.mark.asyncio
    async def test_list_returns_documents_as_stored(self, products_collection):
        oid = ObjectId()
        products_collection.documents.append(
            {"_id": oid, "name": "Lamp", "price": 25.0, "description": "", "image": None, "sku": "L-1"}
        )

        result = await self.service.list_products(products_collection)

        assert result == [
            {"_id": str(oid), "name": "Lamp", "price": 25.0, "description": "", "image": None, "sku": "L-1"}
        ]

    @pytest.mark.asyncio
    async def test_list_keeps_legacy_shapes(self, products_collection):
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        ref = ObjectId()
        products_collection.documents.extend([
            {"_id": 7, "name": "Old mug", "price": "9.5"},
            {"_id": "legacy-2", "price": 3, "createdAt": created, "tags": [{"ref": ref}]},
            {"_id": ObjectId(), "name": "Broken", "price": math.nan},
        ])

        result = await self.service.list_products(products_collection)

        assert result[0] == {"_id": 7, "name": "Old mug", "price": "9.5"}
        assert result[1] == {"_id": "legacy-2", "price": 3, "createdAt": created, "tags": [{"ref": str(ref)}]}
        assert result[2]["price"] is None

    @pytest.mark.asyncio
    async def test_list_failure_raises_database_error(self):
        collection = MagicMock()
        collection.find.side_effect = PyMongoError("server selection timeout")

        with pytest.raises(DatabaseError, match="Failed to fetch products"):
            await self.service.list_products(collection)

    @pytest.mark.asyncio
    async def test_list_does_not_report_non_driver_errors_as_store_failures(self):
        collection = MagicMock()
        collection.find.return_value.to_list = AsyncMock(side_effect=TypeError("bad cursor"))

        with pytest.raises(TypeError):
            await self.service.list_products(collection)
