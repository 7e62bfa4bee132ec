"""
NextShop Catalog — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── products_collection: In-memory stand-in for the `products` collection
    ├── temp_storage: Temporary directory for file operations
    ├── sample_image_bytes: Fake PNG content for upload tests
    └── test_client: HTTPX AsyncClient wired to the app with the fake collection

No test needs a running MongoDB: the lifespan (which connects) is not run
by ASGITransport, and routes receive the fake through dependency_overrides.
"""

import os
import tempfile
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

# Override settings for testing BEFORE any nextshop imports
os.environ["MONGO_URI"] = "mongodb://localhost:27017"
os.environ["DB_NAME"] = "nextshop_test"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="nextshop_test_uploads_")
os.environ["IMAGE_MODE"] = "upload"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient


class FakeCursor:
    """Mimics the AsyncCursor returned by AsyncCollection.find()."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        docs = [dict(d) for d in self._documents]
        return docs if length is None else docs[:length]


class FakeCollection:
    """
    In-memory products collection.

    insert_one behaves like the driver: it assigns `_id` on the passed dict.
    It is an AsyncMock so tests can assert on awaits or swap in a side_effect
    to simulate store failures.
    """

    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.insert_one = AsyncMock(side_effect=self._insert_one)

    def find(self, filter: Optional[Dict[str, Any]] = None) -> FakeCursor:
        return FakeCursor(self.documents)

    async def _insert_one(self, document: Dict[str, Any]) -> SimpleNamespace:
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)


@pytest.fixture
def products_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh uploads directory for each test (cleaned up by pytest)."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """PNG signature plus a few bytes; only the extension is validated."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 16


@pytest_asyncio.fixture
async def test_client(products_collection):
    """
    HTTPX AsyncClient routed directly to the FastAPI app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/products")
            assert response.status_code == 200
    """
    from nextshop.database import get_products_collection
    from nextshop.main import app

    app.dependency_overrides[get_products_collection] = lambda: products_collection
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
