# storybook_api/__init__.py
from .config import config, load_config
from .logger import get_logger
from .features.images.prompt import build_prompt, summarize
from .features.images.service import PageImagePipeline
from .features.images.schemas import GenerationReport, ImageStatus, Page, PageResult
from .main import app


__all__ = ["app",
           "config",
           "load_config",
           "get_logger",
           "summarize",
           "build_prompt",
           "PageImagePipeline",
           "GenerationReport",
           "ImageStatus",
           "Page",
           "PageResult",
           ]
