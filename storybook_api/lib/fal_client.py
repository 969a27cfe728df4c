# storybook_api/lib/fal_client.py
from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from storybook_api.config import Config
from storybook_api.errors import ProviderError, ProviderResponseError
from storybook_api.logger import get_logger

log = get_logger(__name__)


class FalImageClient:
    """
    Thin client for fal.ai's synchronous image-to-image endpoint.

    ``sync_mode`` asks fal to embed the generated image in the response
    instead of handing back a CDN link, which is the shape the pipeline
    decodes and re-hosts.
    """

    def __init__(
        self,
        api_key: str,
        url: str,
        *,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: Config) -> "FalImageClient":
        return cls(cfg.fal_api_key, cfg.fal_url, timeout=cfg.fal_timeout)

    def generate(self, *, image_url: str, prompt: str, seed: int, strength: float) -> Dict[str, Any]:
        payload = {
            "image_url": image_url,
            "prompt": prompt,
            "seed": seed,
            "strength": strength,
            "sync_mode": True,
        }
        headers = {
            "Authorization": f"Key {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            resp = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderError(None, str(e)) from e

        if not resp.ok:
            raise ProviderError(resp.status_code, resp.text)

        try:
            return resp.json()
        except ValueError as e:
            log.error(f"image provider returned non-JSON body ({len(resp.content)} bytes)")
            raise ProviderResponseError("Invalid response format from image provider: body is not JSON") from e
