import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import bon_backend.models  # ensure models are registered
from bon_backend.core.config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from bon_backend.core.exceptions import ConfigError, NotFoundError, StateError, ValidationError
from bon_backend.core.logging import setup_logging
from bon_backend.initial_data import init_seed
from bon_backend.utils.database import engine, Base

from bon_backend.routers import (
    bons_router,
    employees_router,
    installments_router,
    settings_router,
)

setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = logging.getLogger("bon_backend")

app = FastAPI(title="HR Bon Backend API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(employees_router.router)
app.include_router(bons_router.router)
app.include_router(installments_router.router)
app.include_router(settings_router.router)


# -------------------------------------------------
# Business errors -> structured responses
# -------------------------------------------------
@app.exception_handler(ValidationError)
def on_validation_error(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "code": exc.code,
            "message": "Bon application is not valid",
            "errors": exc.errors,
            "warnings": exc.warnings,
        },
    )


@app.exception_handler(NotFoundError)
def on_not_found(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"success": False, "code": exc.code, "message": str(exc)},
    )


@app.exception_handler(StateError)
def on_state_error(request: Request, exc: StateError):
    return JSONResponse(
        status_code=409,
        content={"success": False, "code": exc.code, "message": str(exc), "status": exc.status},
    )


@app.exception_handler(ConfigError)
def on_config_error(request: Request, exc: ConfigError):
    logger.error("invalid bon rules configuration: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "code": exc.code, "message": str(exc)},
    )


@app.on_event("startup")
def on_startup():
    # DEV ONLY – use migrations in production
    Base.metadata.create_all(bind=engine)

    logger.info("Running initial database seeding…")
    init_seed()
    logger.info("Seeding complete.")


@app.get("/")
def root():
    return {"message": "HR Bon Backend is running!!"}
