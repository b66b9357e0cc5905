"""HTTP API for course import and lesson block conversion."""

import asyncio
import logging

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from lesson_import.api.auth import Caller, IdentityProvider, StaticTokenIdentityProvider, authorize
from lesson_import.config import AppConfig, load_config
from lesson_import.content.mapper import html_to_blocks, stringify_blocks
from lesson_import.errors import LessonImportError, MalformedRequest
from lesson_import.ingestion.importer import CourseImporter
from lesson_import.models.blocks import BlockDocument
from lesson_import.models.document import RawUpload

logger = logging.getLogger(__name__)

UPLOAD_FIELDS = ("file", "files")
INTERNAL_ERROR_MESSAGE = "Internal server error"


class BlocksRequest(BaseModel):
    """Lesson HTML to convert into blocks."""

    html: str


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(
    config: AppConfig | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration; loaded from config.yaml when omitted.
        identity_provider: Token resolver; defaults to the static token table.

    Returns:
        The configured application.
    """
    config = config or load_config()
    provider = identity_provider or StaticTokenIdentityProvider.from_config(config)
    importer = CourseImporter(config)
    # One import parses at a time across the whole process
    parse_lock = asyncio.Lock()

    app = FastAPI(title=config.app.name, version=config.app.version)

    @app.exception_handler(LessonImportError)
    async def handle_import_error(request: Request, exc: LessonImportError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, "Malformed request body")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, INTERNAL_ERROR_MESSAGE)

    def require_caller(authorization: str | None = Header(default=None)) -> Caller:
        return authorize(provider, config.auth.allowed_roles, authorization)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/import-course")
    async def import_course(request: Request, caller: Caller = Depends(require_caller)) -> JSONResponse:
        if "multipart/form-data" not in request.headers.get("content-type", ""):
            raise MalformedRequest("Expected multipart/form-data")

        form = await request.form()
        uploads: list[RawUpload] = []
        for key, value in form.multi_items():
            if key in UPLOAD_FIELDS and isinstance(value, UploadFile):
                uploads.append(RawUpload(filename=value.filename or "upload", data=await value.read()))

        logger.info("Import requested by %s with %d file(s)", caller.user_id, len(uploads))

        async with parse_lock:
            try:
                result = await run_in_threadpool(importer.run, uploads)
            except LessonImportError:
                raise
            except Exception:
                logger.exception("Unexpected failure during import")
                return _error_response(500, INTERNAL_ERROR_MESSAGE)

        return JSONResponse(
            content={"success": True, **result.model_dump(by_alias=True, mode="json")}
        )

    @app.post("/api/lesson-blocks")
    async def lesson_blocks(body: BlocksRequest, caller: Caller = Depends(require_caller)) -> dict:
        blocks = html_to_blocks(body.html)
        return {
            "success": True,
            "blocks": BlockDocument.dump_python(blocks, by_alias=True, mode="json"),
            "stored": stringify_blocks(blocks),
        }

    return app
