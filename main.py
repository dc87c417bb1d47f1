import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mediacatalog.api.dependencies import wire_services
from mediacatalog.api.routes_site import router as site_router
from mediacatalog.api.routes_videos import router as videos_router
from mediacatalog.core.config import settings
from mediacatalog.core.database import close_mongo_connection, connect_to_mongo, get_videos_collection
from mediacatalog.core.exceptions import CatalogServiceError, InvalidInput
from mediacatalog.core.logging import setup_logging
from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.database.catalog_store import CatalogStore
from mediacatalog.storage.object_storage import ObjectStorageClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    gate = ReadinessGate()
    await connect_to_mongo(gate)
    wire_services(app.state, gate, CatalogStore(get_videos_collection()), ObjectStorageClient())
    logger.info("Media catalog started (bucket=%s, db=%s)", settings.AWS_S3_BUCKET, settings.MONGO_DB)
    try:
        yield
    finally:
        await close_mongo_connection(gate)


app = FastAPI(title="media-catalog", lifespan=lifespan)

app.include_router(videos_router, prefix="/api", tags=["videos"])
app.include_router(site_router, tags=["site"])

# Allow CORS (for frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(exc: CatalogServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


@app.exception_handler(CatalogServiceError)
async def catalog_error_handler(request: Request, exc: CatalogServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return error_response(InvalidInput("; ".join(problems) or None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(CatalogServiceError("Internal server error"))


@app.get("/")
async def root():
    return {"message": "Media catalog API"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port)
