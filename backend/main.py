import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from core.config import settings
from core.errors import BackofficeError, StoreUnavailable
from core.logging_setup import setup_logging
from db.database import check_db_health, create_db_and_tables, engine
from db.migrations import add_completed_campaigns_column_if_missing, dedupe_completed_campaigns
from routers.brands import router as brands_router
from routers.cars import router as cars_router
from routers.parts import router as parts_router
from routers.service_campaigns import router as service_campaigns_router
from routers.warehouse import router as warehouse_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    await create_db_and_tables()
    await add_completed_campaigns_column_if_missing(engine)
    await dedupe_completed_campaigns(engine)
    logger.info("Back-office API ready")
    yield
    await engine.dispose()


app = FastAPI(
    title="Dealership Back-Office API",
    description="Stock ledger, service-campaign eligibility and completion tracking",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(err: BackofficeError) -> JSONResponse:
    return JSONResponse(
        status_code=err.status_code,
        content={"error": err.code, "detail": err.message},
    )


@app.exception_handler(BackofficeError)
async def backoffice_error_handler(request: Request, exc: BackofficeError):
    return _error_response(exc)


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(ConnectionError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.error("Store unreachable during %s %s: %s", request.method, request.url.path, exc)
    return _error_response(StoreUnavailable("Database unavailable"))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "validation_failed", "detail": jsonable_encoder(exc.errors())},
    )


app.include_router(brands_router, prefix="/api/brands", tags=["brands"])
app.include_router(parts_router, prefix="/api/parts", tags=["parts"])
app.include_router(cars_router, prefix="/api/cars", tags=["cars"])
app.include_router(service_campaigns_router, prefix="/api/service-campaigns", tags=["service-campaigns"])
app.include_router(warehouse_router, prefix="/api/warehouse", tags=["warehouse"])


@app.get("/health", tags=["health"])
async def health():
    try:
        return await check_db_health()
    except (OperationalError, InterfaceError, ConnectionError) as e:
        logger.error("Health check failed: %s", e)
        raise StoreUnavailable("Database unavailable") from e


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port)
