# storybook_api/features/images/service.py
from __future__ import annotations

import random
from typing import Callable, List, Optional

from storybook_api.errors import (
    InvalidRequestError,
    PageGenerationError,
    StorageError,
    StorybookFetchError,
    StorybookNotFoundError,
)
from storybook_api.features.images.prompt import build_prompt, summarize
from storybook_api.features.images.schemas import (
    GenerationReport,
    ImageStatus,
    Page,
    PageResult,
)
from storybook_api.lib.imaging import decode_base64_payload, extract_image_payload
from storybook_api.lib.object_store import page_image_path
from storybook_api.lib.page_store import utc_now_iso
from storybook_api.logger import get_logger

log = get_logger(__name__)

DEFAULT_STRENGTH = 0.6
DEFAULT_SEED_MAX = 100_000


class PageImagePipeline:
    """
    Generates one illustration per storybook page, strictly in page order.

    Collaborators are injected:
      - page_store:  list_pages(storybook_id) / update_page(page_id, fields)
      - object_store: upload(path, data, content_type) / public_url(path)
      - provider:    generate(image_url=, prompt=, seed=, strength=) -> dict

    Every page is an independent attempt with its own commits to the page
    store: generating -> (prompt) -> completed | failed. A failing page is
    recorded and skipped; it never stops the pages after it.
    """

    def __init__(
        self,
        *,
        page_store,
        object_store,
        provider,
        strength: float = DEFAULT_STRENGTH,
        seed_max: int = DEFAULT_SEED_MAX,
        rng: Optional[random.Random] = None,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.page_store = page_store
        self.object_store = object_store
        self.provider = provider
        self.strength = strength
        self.seed_max = seed_max
        self.rng = rng or random.Random()
        self.clock = clock

    # ------------------------------------------------------------------
    # public
    # ------------------------------------------------------------------

    def generate_images(self, storybook_id: Optional[str], reference_image_url: Optional[str]) -> GenerationReport:
        storybook_id = (storybook_id or "").strip()
        reference_image_url = (reference_image_url or "").strip()
        if not storybook_id or not reference_image_url:
            raise InvalidRequestError("Missing required parameters: storybook_id and reference_image_url")

        log.info(f"Starting image generation for storybook_id: {storybook_id}")
        pages = self.list_pages(storybook_id)
        log.info(f"Found {len(pages)} pages to process.")

        report = GenerationReport(storybook_id=storybook_id)
        for page in sorted(pages, key=lambda p: p.page_number):
            report.pages.append(self._process_page(storybook_id, reference_image_url, page))

        log.info(
            f"Finished image generation for storybook_id: {storybook_id} "
            f"({len(report.succeeded)} completed, {len(report.failed)} failed)"
        )
        return report

    def list_pages(self, storybook_id: str) -> List[Page]:
        try:
            pages = self.page_store.list_pages(storybook_id)
        except Exception as e:
            log.exception(f"Failed to fetch pages for storybook_id: {storybook_id}")
            raise StorybookFetchError(str(e) or "Failed to fetch storybook pages.") from e
        if not pages:
            raise StorybookNotFoundError("No pages found for this storybook.")
        return pages

    # ------------------------------------------------------------------
    # per page
    # ------------------------------------------------------------------

    def _process_page(self, storybook_id: str, reference_image_url: str, page: Page) -> PageResult:
        page_no = page.page_number
        prompt: Optional[str] = None
        try:
            self._update(page, image_status=ImageStatus.generating.value)
            log.info(f"Generating image for page {page_no}...")

            prompt = build_prompt(summarize(page.text))
            # stored before the provider call so a failed attempt keeps its prompt
            self.page_store.update_page(page.id, {"image_prompt": prompt})

            image_url = self._render_and_store(storybook_id, reference_image_url, page_no, prompt)

            self._update(page, image_url=image_url, image_status=ImageStatus.completed.value)
            log.info(f"Successfully processed page {page_no}. Image URL: {image_url}")
            return PageResult(
                page_id=page.id,
                page_number=page_no,
                status=ImageStatus.completed,
                prompt=prompt,
                image_url=image_url,
            )
        except Exception as e:
            kind = e.kind if isinstance(e, PageGenerationError) else "unexpected_error"
            if isinstance(e, PageGenerationError):
                log.error(f"Error processing page {page_no} (ID: {page.id}) [{kind}]: {e}")
            else:
                log.exception(f"Error processing page {page_no} (ID: {page.id}) [{kind}]: {e}")
            self._mark_failed(page)
            return PageResult(
                page_id=page.id,
                page_number=page_no,
                status=ImageStatus.failed,
                prompt=prompt,
                error=str(e),
                error_kind=kind,
            )

    def _render_and_store(self, storybook_id: str, reference_image_url: str, page_no: int, prompt: str) -> str:
        seed = self.rng.randrange(self.seed_max)
        log.info(f"Calling image provider for page {page_no} (seed={seed}) with prompt: \"{prompt}\"")
        result = self.provider.generate(
            image_url=reference_image_url,
            prompt=prompt,
            seed=seed,
            strength=self.strength,
        )

        payload, content_type = extract_image_payload(result)
        data = decode_base64_payload(payload)

        path = page_image_path(storybook_id, page_no)
        log.info(f"Uploading image for page {page_no} ({len(data)} bytes, {content_type}) to {path}")
        try:
            self.object_store.upload(path, data, content_type)
        except Exception as e:
            raise StorageError(f"Upload failed for {path}: {e}") from e

        try:
            public_url = self.object_store.public_url(path)
        except Exception as e:
            raise StorageError(f"Failed to get public URL for {path}: {e}") from e
        if not public_url:
            raise StorageError("Failed to get public URL for uploaded image.")
        return public_url

    def _update(self, page: Page, **fields) -> None:
        fields["updated_at"] = self.clock()
        self.page_store.update_page(page.id, fields)

    def _mark_failed(self, page: Page) -> None:
        try:
            self._update(page, image_status=ImageStatus.failed.value)
        except Exception as e:
            # the page keeps whatever status it last committed
            log.exception(f"Could not mark page {page.page_number} (ID: {page.id}) as failed: {e}")
