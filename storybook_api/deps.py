# storybook_api/deps.py
from __future__ import annotations

from typing import Optional

from supabase import Client, create_client

from storybook_api.config import Config, config
from storybook_api.errors import ConfigurationError
from storybook_api.features.images.service import PageImagePipeline
from storybook_api.lib.fal_client import FalImageClient
from storybook_api.lib.object_store import GcsObjectStore, SupabaseObjectStore
from storybook_api.lib.page_store import SupabasePageStore

_supabase: Optional[Client] = None
_pipeline: Optional[PageImagePipeline] = None


def _supabase_client(cfg: Config) -> Client:
    global _supabase
    if _supabase is None:
        _supabase = create_client(cfg.supabase_url, cfg.supabase_service_role_key)
    return _supabase


def build_object_store(cfg: Config, supabase: Client):
    if cfg.storage_backend == "gcs":
        return GcsObjectStore(cfg.gcs_bucket, public_base_url=cfg.gcs_public_base_url)
    return SupabaseObjectStore(supabase, cfg.storage_bucket)


def build_pipeline(cfg: Config) -> PageImagePipeline:
    missing = cfg.missing_settings()
    if missing:
        raise ConfigurationError(missing)

    supabase = _supabase_client(cfg)
    return PageImagePipeline(
        page_store=SupabasePageStore(supabase, cfg.pages_table),
        object_store=build_object_store(cfg, supabase),
        provider=FalImageClient.from_config(cfg),
        strength=cfg.image_strength,
        seed_max=cfg.image_seed_max,
    )


def get_pipeline() -> PageImagePipeline:
    """FastAPI dependency. Clients are built on first use and reused."""
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline(config)
    return _pipeline
