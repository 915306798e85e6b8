# agricloud/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import Base, engine
from .errors import (
    AdvisoryError,
    AdvisoryValidationError,
    FarmNotFound,
    FarmOwnershipError,
    InvalidTransition,
    ProviderUnavailable,
)
from .logging_config import configure_logging
from .routers import advisory, dashboard, farms, irrigation

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="AgriCloud farm monitoring")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {"status": "Backend is running!"}

app.include_router(farms.router)
app.include_router(dashboard.router)
app.include_router(irrigation.router)
app.include_router(advisory.router)


@app.exception_handler(ProviderUnavailable)
async def provider_unavailable(request: Request, exc: ProviderUnavailable):
    return JSONResponse(status_code=502, content={
        "detail": "Could not load weather data. Please try again.",
        "provider": exc.provider,
    })

@app.exception_handler(AdvisoryError)
async def advisory_failed(request: Request, exc: AdvisoryError):
    content = {"detail": "Prediction failed. Please try again.", "reason": str(exc)}
    if isinstance(exc, AdvisoryValidationError):
        content["errors"] = jsonable_encoder(exc.errors)
    return JSONResponse(status_code=502, content=content)

@app.exception_handler(InvalidTransition)
async def invalid_transition(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(FarmNotFound)
async def farm_not_found(request: Request, exc: FarmNotFound):
    return JSONResponse(status_code=404, content={"detail": "Farm not found"})

@app.exception_handler(FarmOwnershipError)
async def farm_ownership(request: Request, exc: FarmOwnershipError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})
