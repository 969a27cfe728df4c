# tests/conftest.py
import base64
import itertools
import random
from io import BytesIO
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from storybook_api.deps import get_pipeline
from storybook_api.errors import ProviderError
from storybook_api.features.images.schemas import Page
from storybook_api.features.images.service import PageImagePipeline
from storybook_api.lib.page_store import WRITABLE_FIELDS
from storybook_api.main import app

STORYBOOK_ID = "sb-1"
REFERENCE_URL = "https://example.com/ref.png"


# -------- Utilities --------
def fake_png_bytes(w=16, h=16, color=(123, 45, 67)) -> bytes:
    im = Image.new("RGB", (w, h), color)
    buf = BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def fake_png_b64() -> str:
    return base64.b64encode(fake_png_bytes()).decode("ascii")


def make_rows(storybook_id: str, numbers, **extra) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"{storybook_id}-p{n}",
            "storybook_id": storybook_id,
            "page_number": n,
            "text": f"Page {n}: the little fox walks through the quiet green forest at dawn.",
            "image_status": "pending",
            **extra,
        }
        for n in numbers
    ]


# -------- Fakes --------
class FakePageStore:
    """In-memory `storybook_pages` table that records every write."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: Dict[str, Dict[str, Any]] = {}
        for r in rows or []:
            self.rows[r["id"]] = dict(r)
        self.writes: List[tuple] = []
        self.list_calls: List[str] = []
        self.fail_updates_for: set = set()
        self.list_error: Optional[Exception] = None

    def list_pages(self, storybook_id: str) -> List[Page]:
        self.list_calls.append(storybook_id)
        if self.list_error:
            raise self.list_error
        return [Page.model_validate(r) for r in self.rows.values() if r["storybook_id"] == storybook_id]

    def update_page(self, page_id: str, fields: Dict[str, Any]) -> None:
        assert set(fields) <= WRITABLE_FIELDS, fields
        if page_id in self.fail_updates_for:
            raise RuntimeError(f"update failed for {page_id}")
        self.writes.append((page_id, dict(fields)))
        self.rows[page_id].update(fields)

    def writes_for(self, page_id: str) -> List[Dict[str, Any]]:
        return [f for pid, f in self.writes if pid == page_id]


class FakeObjectStore:
    def __init__(self, base_url: str = "https://cdn.test/storybook-assets"):
        self.base_url = base_url
        self.blobs: Dict[str, tuple] = {}
        self.uploads: List[tuple] = []
        self.fail_upload_for: set = set()
        self.no_url_for: set = set()

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        if path in self.fail_upload_for:
            raise RuntimeError("bucket not found")
        self.uploads.append((path, content_type))
        self.blobs[path] = (data, content_type)

    def public_url(self, path: str) -> Optional[str]:
        if path in self.no_url_for:
            return None
        return f"{self.base_url}/{path}"


class FakeProvider:
    """Returns a tiny PNG; `fail_calls` holds 1-based call numbers that error out."""

    def __init__(self, result: Optional[Dict[str, Any]] = None):
        self.result = result or {"images": [{"content": fake_png_b64(), "content_type": "image/png"}]}
        self.calls: List[Dict[str, Any]] = []
        self.fail_calls: set = set()

    def generate(self, **kwargs) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if len(self.calls) in self.fail_calls:
            raise ProviderError(503, '{"detail": "model overloaded"}')
        return self.result


# -------- Fixtures --------
@pytest.fixture
def page_store():
    return FakePageStore(make_rows(STORYBOOK_ID, [1, 2, 3]))


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def pipeline(page_store, object_store, provider):
    ticks = itertools.count(1)
    return PageImagePipeline(
        page_store=page_store,
        object_store=object_store,
        provider=provider,
        rng=random.Random(1234),
        clock=lambda: f"2026-01-01T00:00:{next(ticks):02d}+00:00",
    )


@pytest.fixture
def client(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
