import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from tubely.config import get_settings
from tubely.routers import auth, thumbnails, videos
from tubely.services.storage import ObjectStorage
from tubely.services.thumbnails import build_thumbnail_store

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Path(settings.tmp_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.assets_root).mkdir(parents=True, exist_ok=True)
    app.state.object_storage = ObjectStorage(settings)
    app.state.thumbnail_store = build_thumbnail_store(settings)
    logger.info("Tubely started (thumbnails: %s, bucket: %s)", settings.thumbnail_storage, settings.s3_bucket)
    yield


app = FastAPI(title="Tubely API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth.router)
app.include_router(videos.router)
app.include_router(thumbnails.router)
app.mount("/assets", StaticFiles(directory=settings.assets_root, check_dir=False), name="assets")


@app.get("/")
def root():
    return {"message": "Tubely API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
