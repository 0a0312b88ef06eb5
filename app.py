# app.py
# FastAPI entrypoint: serves the capture/upload page, accepts one plant image,
# asks Gemini to identify it and returns the parsed PlantInfo as JSON.

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

import planty
from planty import pipeline
from planty.errors import InputError
from planty.schemas import ErrorResponse, HealthResponse, PlantInfo
from planty.settings import get_settings

load_dotenv(override=False)

NO_IMAGE = "No image provided"
IDENTIFY_FAILED = "Failed to identify plant"
DEFAULT_MIME = "application/octet-stream"
IDENTIFY_PATH = "/api/identify-plant"

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("planty.app")

# -----------------------------------------------------------------------------
# App setup
# -----------------------------------------------------------------------------
app = FastAPI(title="Planty")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATIC = Path(planty.__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(STATIC)), name="static")


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.to_json())


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    # e.g. a text value sent in the `image` field
    if request.url.path != IDENTIFY_PATH:
        return await request_validation_exception_handler(request, exc)
    logger.error("Invalid identify request: %s", exc.errors())
    details = "; ".join(str(err.get("msg", "")) for err in exc.errors())
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return _error(500, ErrorResponse(error=IDENTIFY_FAILED, details=details, stack=stack))


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    # body parsing failures (malformed multipart) are raised before the route runs
    if request.url.path != IDENTIFY_PATH or exc.status_code != 400:
        return await http_exception_handler(request, exc)
    logger.error("%s (%s)", NO_IMAGE, exc.detail)
    return _error(400, ErrorResponse(error=NO_IMAGE, details=str(exc.detail)))


async def _read_image(image: Optional[UploadFile]) -> bytes:
    if image is None:
        raise InputError(NO_IMAGE)
    raw = await image.read()
    if not raw:
        raise InputError(f"{NO_IMAGE} (empty upload {image.filename!r})")
    return raw


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.get("/", response_class=HTMLResponse)
def index():
    return (STATIC / "index.html").read_text(encoding="utf-8")


@app.get("/api/health", response_model=HealthResponse)
def health():
    st = get_settings()
    return HealthResponse(status="ok", has_gemini_key=bool(st.GEMINI_API_KEY), model=st.GEMINI_MODEL)


@app.post(
    IDENTIFY_PATH,
    response_model=PlantInfo,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def identify_plant(image: Optional[UploadFile] = File(None)):
    try:
        raw = await _read_image(image)
    except InputError as e:
        logger.error("%s", e)
        return _error(400, ErrorResponse(error=NO_IMAGE))

    try:
        info = await pipeline.identify_plant(raw, image.content_type or DEFAULT_MIME)
    except Exception as e:
        logger.exception("Error identifying plant")
        return _error(500, ErrorResponse(error=IDENTIFY_FAILED, details=str(e), stack=traceback.format_exc()))

    return JSONResponse(content=info.to_json())


# -----------------------------------------------------------------------------
# Local dev
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=get_settings().PORT, reload=False)
