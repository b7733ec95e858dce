"""FastAPI application for the Dress Try-On service."""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import Settings
from app.schemas import (
    DressItem,
    DressListResponse,
    ErrorResponse,
    HealthResponse,
    TryOnResponse,
)
from tryon.ai_tryon import AITryOn
from tryon.errors import MESSAGES, ErrorCode, TryOnError
from tryon.garment.catalog import list_garments
from tryon.pipeline import TryOnPipeline
from tryon.types import TryOnRequest
from tryon.validation import validate_upload
from utils.timing import Timer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

router = APIRouter()


def parse_flag(value: Optional[str], default: bool) -> bool:
    """Interpret a multipart form flag; only "true"/"false" are meaningful."""
    if value is None:
        return default
    value = value.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return default


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Dress Try-On API",
        "version": "0.1.0",
        "endpoints": {
            "/api/tryon": "POST - Dress try-on",
            "/api/dresses": "GET - Available dresses",
            "/health": "GET - Health check",
        }
    }


@router.get("/api/dresses", response_model=DressListResponse)
async def dresses(request: Request):
    """List the dresses available in the garment directory."""
    settings: Settings = request.app.state.settings
    entries = list_garments(settings.DRESSES_DIR, settings.DRESSES_URL_PREFIX)
    return DressListResponse(dresses=[DressItem(**e.to_dict()) for e in entries])


@router.post(
    "/api/tryon",
    response_model=TryOnResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def try_on(
    request: Request,
    userImage: Optional[UploadFile] = File(None, description="User photo (JPEG/PNG/WebP, max 5MB)"),
    dressId: Optional[str] = Form(None, description="Dress identifier"),
    dressSrc: Optional[str] = Form(None, description="Relative dress path hint"),
    demoMode: Optional[str] = Form(None, description='"true" forces the demo renderer'),
    demoOverlay: Optional[str] = Form(None, description='"false" returns the original photo in demo mode'),
):
    """
    Dress try-on endpoint.

    - **userImage**: Photo of the person
    - **dressId**: Dress identifier (letters, digits, "-" and "_")
    - **dressSrc**: Dress path hint, used when dressId does not match a file
    - **demoMode**: "true" to skip AI generation
    - **demoOverlay**: "false" to disable the demo overlay

    Returns: JSON with the result image as a data URI
    """
    settings: Settings = request.app.state.settings
    pipeline: TryOnPipeline = request.app.state.pipeline

    # Generate request ID
    request_id = str(uuid.uuid4())[:8]

    timer = Timer(request_id=request_id)
    request.state.timer = timer

    try:
        # Validate inputs before any other work
        with timer.measure("validate"):
            data = None
            if userImage is not None:
                # One byte past the limit is enough to detect oversize uploads
                data = await userImage.read(settings.max_upload_bytes + 1)
            upload = validate_upload(
                filename=userImage.filename if userImage else None,
                content_type=userImage.content_type if userImage else None,
                data=data,
                max_bytes=settings.max_upload_bytes,
            )

        logger.info(
            f"[{request_id}] New try-on request: dressId={dressId!r}, "
            f"type={upload.content_type}, size={upload.size}"
        )

        tryon_request = TryOnRequest(
            upload=upload,
            dress_id=dressId,
            dress_src=dressSrc,
            demo_mode=parse_flag(demoMode, default=False),
            demo_overlay=parse_flag(demoOverlay, default=True),
        )

        # The generation call blocks, keep it off the event loop
        result = await run_in_threadpool(pipeline.run, tryon_request, timer)

    except TryOnError as e:
        logger.info(f"[{request_id}] Try-on failed: code={e.code.value}")
        raise
    except Exception as e:
        logger.error(f"[{request_id}] Error: {str(e)}", exc_info=True)
        raise TryOnError(ErrorCode.INTERNAL_ERROR)
    finally:
        timer.log_summary()

    logger.info(f"[{request_id}] Try-on completed: status={result.status.value}")

    response = TryOnResponse(
        status=result.status.value,
        image=result.image,
        dressId=result.dress_id,
        dressSrc=result.dress_src,
        error=result.warning,
    )
    return JSONResponse(
        content=response.model_dump(exclude_none=True),
        headers=timer.response_headers(),
    )


async def tryon_error_handler(request: Request, exc: TryOnError):
    """Render every pipeline failure as ``{ok: false, code, error}``."""
    body = ErrorResponse(code=exc.code.value, error=exc.message)
    timer = getattr(request.state, "timer", None)
    headers = timer.response_headers() if timer else {}
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Keep malformed multipart bodies inside the error taxonomy instead of FastAPI's 422."""
    fields = {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    logger.info(f"Rejected malformed try-on form: fields={sorted(fields)}")

    code = ErrorCode.MISSING_USER_IMAGE if "userImage" in fields else ErrorCode.INVALID_REQUEST
    body = ErrorResponse(code=code.value, error=MESSAGES[code])
    return JSONResponse(status_code=400, content=body.model_dump())


def build_pipeline(settings: Settings, generator: Optional[AITryOn] = None) -> TryOnPipeline:
    """Create the try-on pipeline from explicit settings."""
    if generator is None and settings.OPENAI_API_KEY:
        generator = AITryOn(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_IMAGE_MODEL,
            timeout_s=settings.OPENAI_TIMEOUT_S,
            size=settings.OPENAI_IMAGE_SIZE,
        )
    return TryOnPipeline(
        dresses_dir=settings.DRESSES_DIR,
        generator=generator,
        url_prefix=settings.DRESSES_URL_PREFIX,
        fallback_to_demo=settings.FALLBACK_TO_DEMO_WHEN_UNCONFIGURED,
    )


def create_app(settings: Optional[Settings] = None, generator: Optional[AITryOn] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Configuration; read from the environment when omitted
        generator: Generation client; built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings()

    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    app = FastAPI(
        title="Dress Try-On API",
        description="API for dress try-on with a local demo fallback",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Processing-Time", "Server-Timing"],
    )

    app.state.settings = settings
    app.state.pipeline = build_pipeline(settings, generator)

    app.add_exception_handler(TryOnError, tryon_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)

    # Dress images are served read-only so catalog "src" values resolve
    if settings.DRESSES_DIR.is_dir():
        app.mount(
            settings.DRESSES_URL_PREFIX.rstrip("/"),
            StaticFiles(directory=str(settings.DRESSES_DIR)),
            name="dresses",
        )
    else:
        logger.warning(f"Dress directory not found: {settings.DRESSES_DIR}")

    logger.info(f"OpenAI configured: {app.state.pipeline.generation_available}")
    return app


app = create_app()
