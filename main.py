from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.config import dictConfig
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.router import api_router
from core.config import AppSettings, settings
from core.exceptions import CarCareError, StoreError
from db.database import close_database, create_motor_client, get_database
from repositories.records import AppointmentRepository, ContactRepository
from services.mail import SMTPTransport
from services.management import AppointmentManagementHandler, ManagementHandler
from services.notifications import NotificationDispatcher, RecordKind
from services.submissions import SubmissionHandler


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "level": level,
                }
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )


configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


def _add_cors(app: FastAPI, origins_env: str) -> None:
    origins_env = origins_env.strip()
    allow_all_origins = origins_env in {"*", '"*"'}
    if allow_all_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        allowed_origins = [o.strip() for o in origins_env.split(",") if o.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def create_app(
    app_settings: Optional[AppSettings] = None,
    *,
    database: Optional[AsyncIOMotorDatabase] = None,
    transport: Optional[SMTPTransport] = None,
) -> FastAPI:
    cfg = app_settings or settings

    # Store and transport are process-wide; every handler shares them
    motor_client = None
    if database is None:
        motor_client = create_motor_client(cfg)
        database = get_database(motor_client, cfg)
    if transport is None:
        transport = SMTPTransport.from_settings(cfg)

    appointments = AppointmentRepository(database)
    contacts = ContactRepository(database)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await appointments.ensure_indexes()
            await contacts.ensure_indexes()
        except StoreError:
            # Keep serving; requests will surface the store fault as 500s
            logger.error("store.indexes_failed", extra={"database": cfg.database_name})
        else:
            logger.info("store.indexes_ready", extra={"database": cfg.database_name})
        yield
        transport.close()
        if motor_client is not None:
            close_database(motor_client)

    app = FastAPI(title="Suraksha Car Care API", version="1.0.0", lifespan=lifespan)
    _add_cors(app, cfg.allowed_origins)
    dispatcher = NotificationDispatcher.from_settings(transport, cfg)

    app.state.settings = cfg
    app.state.transport = transport
    app.state.appointment_submissions = SubmissionHandler(appointments, dispatcher, RecordKind.appointment)
    app.state.appointment_management = AppointmentManagementHandler(appointments)
    app.state.contact_submissions = SubmissionHandler(contacts, dispatcher, RecordKind.contact)
    app.state.contact_management = ManagementHandler(contacts)

    app.include_router(api_router, prefix="/api")

    @app.exception_handler(CarCareError)
    async def _carcare_error(request: Request, exc: CarCareError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request.failed", extra={"path": request.url.path, "error": exc.message})
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "invalid value")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "request.unhandled_error",
            extra={"path": request.url.path, "method": request.method},
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.get("/")
    async def root_health() -> dict[str, str]:
        return {"status": "ok", "message": "SURAKSHA CAR CARE API is running!"}

    logger.info("Application initialized", extra={"environment": cfg.environment})
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=settings.environment == "development")
