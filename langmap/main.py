from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from langmap.config import settings
from langmap.database import close_database, init_database
from langmap.exception_handlers import register_exception_handlers
from langmap.languages.router import router as languages_router
from langmap.logging_config import setup_logging
from langmap.taxonomies.router import router as taxonomies_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    yield
    await close_database()


app = FastAPI(
    title="Language Map CMS",
    description="Bulk language import for the language map platform",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(languages_router, prefix="/api/v1/languages", tags=["languages"])
app.include_router(taxonomies_router, prefix="/api/v1/taxonomies", tags=["taxonomies"])


@app.get("/api/v1/health")
async def health():
    from langmap.database import check_health

    await check_health()
    return {"status": "healthy"}
