from __future__ import annotations

import logging
import os
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, load_settings
from gateway import Gateway, build_gateway
from routers.auth import router as auth_router
from utils.errors import GatewayError, InternalError, ValidationError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_body(exc: GatewayError) -> dict:
    return {"success": False, "error": exc.message, "code": exc.code}


def create_app(settings: Optional[Settings] = None, gateway: Optional[Gateway] = None) -> FastAPI:
    if settings is None:
        load_dotenv()
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="OTP Registration Gateway")
    app.state.settings = settings
    app.state.gateway = gateway if gateway is not None else build_gateway(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GatewayError)
    def _gateway_error(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    def _unparseable_body(request: Request, exc: RequestValidationError):
        # Bodies pydantic rejects (wrong types, no JSON) answer like any other bad input.
        logger.info("Rejected body on %s: %s", request.url.path, exc.errors())
        error = ValidationError("Invalid request body")
        return JSONResponse(status_code=error.status_code, content=_error_body(error))

    @app.exception_handler(Exception)
    def _unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body(InternalError()))

    app.include_router(auth_router, prefix="/api")

    @app.get("/api/health")
    def health():
        state: Gateway = app.state.gateway
        return {
            "status": f"Server is running in {settings.mode.upper()} mode",
            "mode": settings.mode,
            "timestamp": state.now().isoformat(),
        }

    @app.on_event("startup")
    def _start_scheduler():
        # Expired challenges are otherwise only dropped when someone verifies.
        state: Gateway = app.state.gateway
        sched = BackgroundScheduler(timezone=os.getenv("TZ", "UTC"))
        sched.add_job(
            state.sweep,
            "interval",
            minutes=settings.otp_sweep_minutes,
            id="sweep_expired_challenges",
            replace_existing=True,
        )
        sched.start()
        app.state._scheduler = sched
        logger.info("Server running in %s mode", settings.mode.upper())

    @app.on_event("shutdown")
    def _stop_scheduler():
        sched = getattr(app.state, "_scheduler", None)
        if sched:
            sched.shutdown(wait=False)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
