# storybook_api/errors.py
from __future__ import annotations

from typing import List, Optional


class StorybookAPIError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(StorybookAPIError):
    status_code = 400


class ConfigurationError(StorybookAPIError):
    status_code = 500

    def __init__(self, missing: List[str]):
        super().__init__(
            "Image generation service is not configured; missing: " + ", ".join(missing)
        )
        self.missing = list(missing)


class StorybookNotFoundError(StorybookAPIError):
    status_code = 404


class StorybookFetchError(StorybookAPIError):
    """Reading the storybook's pages failed; nothing was written."""

    status_code = 500


# -------------------------------------------------------------------
# Per-page errors: contained by the pipeline, never surfaced over HTTP
# -------------------------------------------------------------------

class PageGenerationError(Exception):
    kind = "page_error"


class ProviderError(PageGenerationError):
    """The provider answered with a non-success status (or not at all)."""

    kind = "provider_error"

    def __init__(self, status_code: Optional[int], body: str):
        if status_code is None:
            message = f"Image provider request failed: {body}"
        else:
            message = f"Image provider error ({status_code}): {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderResponseError(PageGenerationError):
    """The provider answered 2xx but the body does not carry an image payload."""

    kind = "provider_contract_mismatch"


class PayloadDecodeError(PageGenerationError):
    kind = "payload_decode_error"


class StorageError(PageGenerationError):
    kind = "storage_error"
