"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from exambank.api.exams import router as exams_router
from exambank.core.config import settings
from exambank.core.database import init_db
from exambank.core.errors import ExamBankError
from exambank.services.syllabus import get_syllabus

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    """
    logger.info("Starting %s...", settings.APP_NAME)
    if settings.uses_default_secret():
        logger.warning("EXAM_HASH_SECRET is not set; using the built-in fallback secret")
    init_db()
    logger.info("Database initialized")
    syllabus = get_syllabus()
    logger.info("Syllabus loaded: %d areas, %d questions per paper", len(syllabus), syllabus.total_required)
    yield
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message, error_type: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "type": error_type, "status_code": status_code, **extra}},
    )


@app.exception_handler(ExamBankError)
async def exambank_exception_handler(request: Request, exc: ExamBankError):
    """Handle domain errors."""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.error_type, request.url.path, exc.message)
    return _error(exc.status_code, exc.message, exc.error_type)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return _error(exc.status_code, exc.detail, "http_error")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are invalid input."""
    return _error(status.HTTP_400_BAD_REQUEST, "Validation error", "invalid_input", details=jsonable_encoder(exc.errors()))


@app.exception_handler(SQLAlchemyError)
async def data_access_exception_handler(request: Request, exc: SQLAlchemyError):
    """Question bank store failures."""
    logger.error("Data access error: %s", exc, exc_info=True)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Question bank is unavailable", "data_access_error")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    message = "An internal error occurred" if settings.is_production() else str(exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, "internal_error")


app.include_router(exams_router, prefix=f"{settings.API_V1_PREFIX}/exams", tags=["exams"])


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "version": settings.APP_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "exambank.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
