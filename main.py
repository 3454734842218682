import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from config import get_settings
from database import check_connection
from exceptions import (
    ConcurrentUpdateError,
    ConfigurationError,
    EntityNotFoundError,
    InvalidEntityStateError,
    LeaseKeeperError,
    ValidationError,
)
from routers import (
    leases_router,
    maintenance_router,
    notifications_router,
    payments_router,
    renewals_router,
)
from utils.logging import setup_logging

settings = get_settings()
setup_logging(level=settings.log_level, format_type=settings.log_format)
logger = logging.getLogger(__name__)

# App instance
app = FastAPI(title="LeaseKeeper API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leases_router)
app.include_router(payments_router)
app.include_router(maintenance_router)
app.include_router(renewals_router)
app.include_router(notifications_router)

# Domain error -> HTTP status
ERROR_STATUS = {
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidEntityStateError: status.HTTP_409_CONFLICT,
    ConcurrentUpdateError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(LeaseKeeperError)
async def lease_keeper_error_handler(request: Request, exc: LeaseKeeperError):
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning("Concurrent update on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The record was modified by another request, please retry"},
    )


@app.get("/health")
def health():
    database_ok = check_connection()
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ok" if database_ok else "degraded", "database": database_ok},
    )


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
