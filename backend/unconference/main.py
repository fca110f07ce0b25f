from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unconference.api import assignments
from unconference.config import settings
from unconference.database.connection import close_mongo_connection, connect_to_mongo, ensure_mongo_indexes


def _parse_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.storage_backend == "mongodb":
        await connect_to_mongo()
        await ensure_mongo_indexes()
    yield
    await close_mongo_connection()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_origins(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assignments.router, prefix="/api/events", tags=["assignments"])


@app.get("/health")
async def health():
    return {"status": "ok", "storage_backend": settings.storage_backend}
