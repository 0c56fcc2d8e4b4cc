from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import logging
from config import API_PREFIX, Settings
from database import mask_url
from storage.local import LocalUploadStore
from submissions.crud import build_repository

# Import routers
from submissions.router import router as submissions_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Initialize upload storage and the submissions repository before serving.
    A failed initialization leaves the service alive but not ready, unless
    strict startup is configured, in which case startup aborts.
    """
    settings = app.state.settings
    app.state.ready = False
    try:
        app.state.upload_store.initialize()
        app.state.repository.initialize()
        app.state.ready = True
        logger.info("Storage initialized, service is ready")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error initializing storage ({mask_url(settings.database_url)}): {str(e)}")
        if settings.strict_startup:
            raise

    try:
        yield
    finally:
        app.state.ready = False
        app.state.repository.dispose()
        logger.info("Storage connections released")


def create_app(settings: Settings = None, repository=None) -> FastAPI:
    """Build the application; the repository can be injected, otherwise it follows the settings."""
    settings = settings or Settings()

    app = FastAPI(
        title="Form Submission API",
        description="Collects contact form submissions with an optional image upload",
        version="1.0.0",
        openapi_url=f"{API_PREFIX}/openapi.json",
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=f"{API_PREFIX}/redoc",
        debug=settings.debug,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.ready = False
    app.state.upload_store = LocalUploadStore(settings.upload_dir, settings.upload_url_path)
    app.state.repository = repository if repository is not None else build_repository(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )

    # Add global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Global exception: {exc}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "client": request.client.host if request.client else "unknown",
            }
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error. The error has been logged."}
        )

    # Handle validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Validation error: {exc}",
            extra={"path": request.url.path}
        )
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())}
        )

    app.include_router(submissions_router, prefix=API_PREFIX)

    # Uploaded images, readable at the same path they are referenced by
    app.mount(
        f"/{app.state.upload_store.url_path}",
        StaticFiles(directory=app.state.upload_store.upload_dir, check_dir=False),
        name="uploads"
    )

    # Liveness
    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "OK"

    # Readiness
    @app.get("/ready")
    async def readiness(request: Request):
        if request.app.state.ready:
            return {"status": "ready"}
        return JSONResponse(status_code=503, content={"status": "not ready"})

    return app


app = create_app()

# Run the application
if __name__ == "__main__":
    settings = app.state.settings
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
