# storybook_api/features/images/router.py
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from storybook_api.deps import get_pipeline
from storybook_api.features.images.schemas import (
    GenerateImagesRequest,
    GenerateImagesResponse,
    PageStatus,
    StorybookPagesResponse,
)
from storybook_api.features.images.service import PageImagePipeline

router = APIRouter(prefix="/api/v1", tags=["images"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@router.options("/storybook-generate-images")
async def generate_images_preflight():
    return PlainTextResponse("ok", headers=CORS_HEADERS)


# sync on purpose: the run blocks on HTTP calls, FastAPI moves it to a worker thread
@router.post("/storybook-generate-images", response_model=GenerateImagesResponse)
def generate_images_endpoint(
    req: GenerateImagesRequest,
    pipeline: PageImagePipeline = Depends(get_pipeline),
):
    """
    Generate an illustration for every page of a storybook.

    Returns once every page has been attempted. Success here means the run
    finished; per-page outcomes are on the page rows (see the pages endpoint).
    """
    report = pipeline.generate_images(req.storybook_id, req.reference_image_url)
    return GenerateImagesResponse(
        success=True,
        message=f"Image generation process completed for {report.pages_processed} pages.",
    )


@router.get("/storybooks/{storybook_id}/pages", response_model=StorybookPagesResponse)
def storybook_pages_endpoint(storybook_id: str, pipeline: PageImagePipeline = Depends(get_pipeline)):
    pages = pipeline.list_pages(storybook_id)
    return StorybookPagesResponse(
        storybook_id=storybook_id,
        pages=[
            PageStatus(
                page_number=p.page_number,
                image_status=p.image_status,
                image_url=p.image_url,
                image_prompt=p.image_prompt,
                updated_at=p.updated_at,
            )
            for p in pages
        ],
    )
