import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from .browser import BrowserManager
from .config import settings
from .errors import PayloadTooLarge, ValidationError
from .logging_config import setup_logging
from .models import HealthStatus, HtmlScreenshotRequest, ScreenshotOptions, UrlScreenshotRequest
from .screenshot_service import ScreenshotService
from .utils import image_dimensions, is_valid_url, parse_form_body

logger = logging.getLogger(__name__)

# Process-wide browser owner and service
browser_manager = BrowserManager(launch_args=settings.BROWSER_ARGS, allow_debug=settings.DEBUG)
screenshot_service = ScreenshotService(browser_manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings.validate()
    setup_logging(settings.LOG_LEVEL)
    logger.info(f"Screenshot API starting on http://{settings.HOST}:{settings.PORT}")
    yield
    # Shutdown (uvicorn maps SIGINT/SIGTERM here)
    await browser_manager.close()


app = FastAPI(
    title="Screenshot API",
    description="Render a URL or an HTML snippet in a headless browser and return the image",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_SIZE:
        return JSONResponse(status_code=413, content=PayloadTooLarge(settings.MAX_BODY_SIZE).to_dict())
    return await call_next(request)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(PayloadTooLarge)
async def payload_too_large_handler(request: Request, exc: PayloadTooLarge):
    return JSONResponse(status_code=413, content=exc.to_dict())


async def read_body(request: Request, limit: int) -> bytes:
    """Read the body, giving up as soon as more than limit bytes arrived"""
    received = bytearray()
    async for chunk in request.stream():
        received.extend(chunk)
        if len(received) > limit:
            raise PayloadTooLarge(limit)
    return bytes(received)


def get_screenshot_service() -> ScreenshotService:
    return screenshot_service


def parse_options(raw: Any) -> ScreenshotOptions:
    try:
        return ScreenshotOptions.model_validate(raw or {})
    except PydanticValidationError as e:
        raise ValidationError("Invalid options", str(e))


def parse_screenshot_body(body: Dict[str, Any]):
    """Turn a JSON body into an HTML or URL request, HTML taking precedence"""
    html = body.get("html")
    url = body.get("url")

    if html is not None and html != "":
        if not isinstance(html, str):
            raise ValidationError("Invalid HTML format", "HTML must be a string")
        options = parse_options(body.get("options"))
        try:
            return HtmlScreenshotRequest(
                html=html,
                css=body.get("css") or "",
                state=body.get("state") or {},
                options=options,
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid request", str(e))

    if not url:
        raise ValidationError(
            "URL or HTML is required",
            "Please provide either a valid URL or HTML string in the request body",
        )

    if not is_valid_url(url):
        raise ValidationError(
            "Invalid URL format",
            "Please provide a valid URL (e.g., https://example.com)",
        )

    return UrlScreenshotRequest(url=url.strip(), options=parse_options(body.get("options")))


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return HealthStatus().model_dump()


@app.post("/screenshot")
async def take_screenshot(request: Request, service: ScreenshotService = Depends(get_screenshot_service)):
    """Screenshot a URL or an HTML snippet"""
    raw_body = await read_body(request, settings.MAX_BODY_SIZE)
    if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
        body = parse_form_body(raw_body)
    else:
        try:
            body = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Invalid JSON body", "Request body must be a JSON object")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body", "Request body must be a JSON object")

    screenshot_request = parse_screenshot_body(body)
    options = screenshot_request.options

    try:
        if isinstance(screenshot_request, HtmlScreenshotRequest):
            image_bytes = await service.capture_html(screenshot_request)
        else:
            image_bytes = await service.capture_url(screenshot_request.url, options)
    except Exception as e:
        logger.exception("Screenshot error")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Screenshot failed",
                "message": str(e) or "An unknown error occurred",
            },
        )

    headers = {"Cache-Control": "no-cache"}
    dimensions = image_dimensions(image_bytes)
    if dimensions:
        headers["X-Image-Width"] = str(dimensions[0])
        headers["X-Image-Height"] = str(dimensions[1])

    return Response(content=image_bytes, media_type=options.content_type, headers=headers)
