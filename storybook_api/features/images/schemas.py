from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ImageStatus(str, Enum):
    pending = "pending"
    generating = "generating"
    completed = "completed"
    failed = "failed"


class Page(BaseModel):
    id: str
    storybook_id: Optional[str] = None
    page_number: int
    text: str = ""
    image_prompt: Optional[str] = None
    image_status: Optional[str] = None
    image_url: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", "storybook_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v):
        # bigint / uuid primary keys both come back as str here
        return None if v is None else str(v)

    @field_validator("text", mode="before")
    @classmethod
    def _null_text_is_empty(cls, v):
        return v or ""


# -------------------------------------------------------------------
# HTTP
# -------------------------------------------------------------------

class GenerateImagesRequest(BaseModel):
    # Optional here so a missing field is reported as our own 400, not a 422
    storybook_id: Optional[str] = None
    reference_image_url: Optional[str] = None


class GenerateImagesResponse(BaseModel):
    success: bool = True
    message: str


class PageStatus(BaseModel):
    page_number: int
    image_status: Optional[str] = None
    image_url: Optional[str] = None
    image_prompt: Optional[str] = None
    updated_at: Optional[str] = None


class StorybookPagesResponse(BaseModel):
    storybook_id: str
    pages: List[PageStatus] = Field(default_factory=list)


# -------------------------------------------------------------------
# Run report
# -------------------------------------------------------------------

class PageResult(BaseModel):
    page_id: str
    page_number: int
    status: ImageStatus
    prompt: Optional[str] = None
    image_url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ImageStatus.completed


class GenerationReport(BaseModel):
    storybook_id: str
    pages: List[PageResult] = Field(default_factory=list)

    @property
    def pages_processed(self) -> int:
        return len(self.pages)

    @property
    def succeeded(self) -> List[PageResult]:
        return [p for p in self.pages if p.ok]

    @property
    def failed(self) -> List[PageResult]:
        return [p for p in self.pages if not p.ok]
