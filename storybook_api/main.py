from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storybook_api.config import config
from storybook_api.errors import ConfigurationError, StorybookAPIError
from storybook_api.features.images.router import router as images_router
from storybook_api.logger import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = config.missing_settings()
    if missing:
        # every generation request will fail until the environment is fixed
        log.error(f"Missing required environment variables ({', '.join(missing)})")
    yield


class StorybookCORSMiddleware(CORSMiddleware):
    """Browser preflights get the same bare "ok" body as a plain OPTIONS."""

    def preflight_response(self, request_headers):
        resp = super().preflight_response(request_headers)
        if resp.status_code != 200:
            return resp
        headers = {k: v for k, v in resp.headers.items() if k not in ("content-length", "content-type")}
        return PlainTextResponse("ok", headers=headers)


def _cors_headers(request: Request) -> dict:
    # for responses built outside the CORS middleware
    if "*" in config.allowed_origins:
        return {"Access-Control-Allow-Origin": "*"}
    origin = request.headers.get("origin")
    if origin and origin in config.allowed_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


app = FastAPI(title="Storybook Images API", lifespan=lifespan)

app.add_middleware(
    StorybookCORSMiddleware,
    allow_origins=config.allowed_origins,
    allow_credentials=False,  # allow_origins may be ["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(images_router)


# -------------------------------------------------------------------
# Errors are always rendered as {"error": "..."}
# -------------------------------------------------------------------

@app.exception_handler(StorybookAPIError)
async def storybook_error_handler(request: Request, exc: StorybookAPIError):
    if isinstance(exc, ConfigurationError):
        log.error(exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0].get("msg", "invalid value") if errors else "invalid value"
    return JSONResponse({"error": f"Invalid request body: {first}"}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        {"error": str(exc) or "Failed to generate images."},
        status_code=500,
        headers=_cors_headers(request),
    )


@app.get("/healthz")
async def healthz():
    missing = config.missing_settings()
    return {"ok": True, "configured": not missing, "missing": missing}
