# ── src/main.py ───────────────────────────────────────────────────────────────
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ingestor.config import Settings, load_settings
from ingestor.errors import IngestorError, PersistenceError
from ingestor.repository import LogRepository, UserRepository
from ingestor.services import build_services

_logger = logging.getLogger("ingestor")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ── error translation --------------------------------------------------------
async def _ingestor_error_handler(request: Request, exc: IngestorError):
    if isinstance(exc, PersistenceError):
        _logger.error("%s %s failed: %s", request.method, request.url.path, exc,
                      exc_info=exc.__cause__ or exc)
        body = {"error": PersistenceError.message}
    else:
        body = {"error": exc.message}
    return JSONResponse(status_code=exc.status_code, content=body)


def create_app(
    settings: Optional[Settings] = None,
    users: Optional[UserRepository] = None,
    logs: Optional[LogRepository] = None,
) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Log Ingestor and Query Interface")
    app.state.services = build_services(settings, users=users, logs=logs)
    app.add_exception_handler(IngestorError, _ingestor_error_handler)

    # ── CORS (robust + deploy-safe)
    # Concrete FRONTEND_ORIGIN list → credentials may be enabled safely;
    # otherwise wildcard with credentials off, which still allows bearer headers.
    if settings.frontend_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.frontend_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ── routes ------------------------------------------------------------------
    from routers.healthz.endpoints import router as health_router
    from routers.auth.endpoints    import router as auth_router
    from routers.logs              import router as logs_router

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(logs_router)

    @app.get("/", include_in_schema=False)
    def root():
        return {
            "status": "ok",
            "info": (
                "/healthz, /register, /login, /ingest, /logs, /logsByMessage, "
                "/logsByResourceId, /logsByTimestampRange, /logsByTraceId, "
                "/logsBySpanId, /logsByCommit, /logsByParentResourceId"
            ),
        }

    _logger.info("App ready (storage=%s, password_scheme=%s, omit_unset_filters=%s)",
                 settings.storage_backend, settings.password_scheme, settings.omit_unset_filters)
    return app


# ── module-level app for `uvicorn main:app` / gunicorn -----------------------
_settings = load_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    _logger.info("Log Ingestor and Query Interface listening at http://localhost:%s", _settings.port)
    uvicorn.run(app, host="0.0.0.0", port=_settings.port)
