import os
from dataclasses import dataclass
from typing import List

STORAGE_BACKENDS = ("supabase", "gcs")

def _env_csv(name: str, default: str = "*") -> List[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]

@dataclass(frozen=True)
class Config:
    # fal.ai
    fal_api_key: str
    fal_api_host: str
    fal_model_endpoint: str
    fal_timeout: float
    image_strength: float
    image_seed_max: int
    # Supabase
    supabase_url: str
    supabase_service_role_key: str
    pages_table: str
    # Storage
    storage_backend: str  # valid: supabase, gcs
    storage_bucket: str
    gcs_bucket: str
    gcs_public_base_url: str
    # API / CORS
    allowed_origins: List[str]
    # Logging
    log_level: str

    @property
    def fal_url(self) -> str:
        return self.fal_api_host.rstrip("/") + "/" + self.fal_model_endpoint.lstrip("/")

    def missing_settings(self) -> List[str]:
        """Names of required environment variables that are not set."""
        missing = []
        if not self.fal_api_key:
            missing.append("FAL_API_KEY")
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        if self.storage_backend not in STORAGE_BACKENDS:
            missing.append("STORAGE_BACKEND")
        elif self.storage_backend == "gcs" and not self.gcs_bucket:
            missing.append("GCS_BUCKET")
        return missing

def load_config() -> Config:
    return Config(
        fal_api_key = os.getenv("FAL_API_KEY", ""),
        fal_api_host = os.getenv("FAL_API_HOST", "https://fal.run"),
        fal_model_endpoint = os.getenv("FAL_MODEL_ENDPOINT", "/fal-ai/flux-image-to-image"),
        fal_timeout = float(os.getenv("FAL_TIMEOUT", "120")),
        image_strength = float(os.getenv("IMAGE_STRENGTH", "0.6")),
        image_seed_max = int(os.getenv("IMAGE_SEED_MAX", "100000")),
        supabase_url = os.getenv("SUPABASE_URL", ""),
        supabase_service_role_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        pages_table = os.getenv("PAGES_TABLE", "storybook_pages"),
        storage_backend = os.getenv("STORAGE_BACKEND", "supabase").strip().lower(),
        storage_bucket = os.getenv("STORAGE_BUCKET", "storybook-assets"),
        gcs_bucket = os.getenv("GCS_BUCKET", ""),
        gcs_public_base_url = os.getenv("GCS_PUBLIC_BASE_URL", "https://storage.googleapis.com"),
        allowed_origins = _env_csv("ALLOWED_ORIGINS", "*"),
        log_level = os.getenv("LOG_LEVEL", "INFO"),
    )

# Load once
config = load_config()
