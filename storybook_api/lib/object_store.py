# storybook_api/lib/object_store.py
from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from google.cloud import storage


def page_image_path(storybook_id: str, page_number: int) -> str:
    """Same object for every attempt at a page, so regeneration overwrites."""
    return f"images/{storybook_id}/page_{page_number}.png"


class SupabaseObjectStore:
    """Public Supabase Storage bucket."""

    def __init__(self, client, bucket: str = "storybook-assets"):
        self.client = client
        self.bucket = bucket

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        # storage3 wants header-style string values in file_options
        self.client.storage.from_(self.bucket).upload(
            path=path,
            file=data,
            file_options={"content-type": content_type, "upsert": "true"},
        )

    def public_url(self, path: str) -> Optional[str]:
        url = self.client.storage.from_(self.bucket).get_public_url(path)
        return url or None


class GcsObjectStore:
    """
    Google Cloud Storage bucket whose objects are publicly readable
    (uniform bucket-level access with allUsers:objectViewer).
    """

    def __init__(self, bucket: str, *, client=None, public_base_url: str = "https://storage.googleapis.com"):
        self.bucket_name = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._storage = client

    def _client(self):
        if self._storage is None:
            self._storage = storage.Client()
        return self._storage

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        bucket = self._client().bucket(self.bucket_name)
        blob = bucket.blob(path)
        # regenerated pages reuse the same object name
        blob.cache_control = "no-cache"
        blob.upload_from_string(data, content_type=content_type)

    def public_url(self, path: str) -> Optional[str]:
        if not path:
            return None
        return f"{self.public_base_url}/{self.bucket_name}/{quote(path)}"
