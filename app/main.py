from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import close_database, init_database
from app.exception_handlers import register_exception_handlers
from app.export_router import router as export_router
from app.logging_config import setup_logging
from app.nonconformities.router import router as nonconformities_router
from app.returns.router import router as returns_router
from app.tco.router import router as tco_router
from app.toners.router import router as toners_router
from app.units.router import router as units_router
from app.warranties.router import router as warranties_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    yield
    await close_database()


app = FastAPI(
    title="SGQ Records",
    description="Quality-management records with workbook import and export",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(units_router, prefix="/api/v1/units", tags=["units"])
app.include_router(toners_router, prefix="/api/v1/toners", tags=["toners"])
app.include_router(returns_router, prefix="/api/v1/returns", tags=["returns"])
app.include_router(warranties_router, prefix="/api/v1/warranties", tags=["warranties"])
app.include_router(
    nonconformities_router, prefix="/api/v1/nonconformities", tags=["nonconformities"]
)
app.include_router(tco_router, prefix="/api/v1/tco", tags=["tco"])
app.include_router(export_router, prefix="/api/v1", tags=["export"])


@app.get("/api/v1/health")
async def health():
    from app.database import check_health

    await check_health()
    return {"status": "healthy"}
