# storybook_api/lib/page_store.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from storybook_api.features.images.schemas import Page

PAGE_COLUMNS = "id, storybook_id, page_number, text, image_prompt, image_status, image_url, updated_at"

# Only these fields are ever written by the image pipeline
WRITABLE_FIELDS = frozenset({"image_status", "image_prompt", "image_url", "updated_at"})


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabasePageStore:
    """`storybook_pages` rows read and updated through a Supabase client."""

    def __init__(self, client, table: str = "storybook_pages"):
        self.client = client
        self.table = table

    def list_pages(self, storybook_id: str) -> List[Page]:
        resp = (
            self.client.table(self.table)
            .select(PAGE_COLUMNS)
            .eq("storybook_id", storybook_id)
            .order("page_number", desc=False)
            .execute()
        )
        return [Page.model_validate(row) for row in (resp.data or [])]

    def update_page(self, page_id: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"refusing to write non-pipeline fields: {sorted(unknown)}")
        self.client.table(self.table).update(fields).eq("id", page_id).execute()
