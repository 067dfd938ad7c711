# =======================================================================================
# ctrlbx_admin/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import config
from .api.routes.auth import router as auth_router
from .api.routes.dashboard import router as dashboard_router
from .api.routes.devices import router as devices_router
from .api.routes.houses import router as houses_router
from .api.routes.logs import router as logs_router
from .api.routes.masterkeys import router as masterkeys_router
from .api.routes.roles import router as roles_router
from .api.routes.settings import router as settings_router
from .api.routes.tokens import router as tokens_router
from .api.routes.users import router as users_router
from .database import DatabaseManager
from .models.enums import USERS_HAVE_BALANCE
from .models.schemas import ErrorResponse, HealthResponse
from .services.gateway import RemoteDataGateway
from .services.session_service import SessionContext
from .services.storage_service import LocalStorage
from .services.view_lifecycle import ViewNavigator
from .utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DashboardError,
    DomainRejectionError,
    ForceDeleteRequired,
    GatewayError,
    InputValidationError,
    NotAuthorizedError,
    StaleViewError,
)

logger = logging.getLogger(__name__)

# most specific first
_STATUS_CODES = (
    (ForceDeleteRequired, 409),
    (DomainRejectionError, 400),
    (NotAuthorizedError, 403),
    (AuthenticationError, 401),
    (InputValidationError, 422),
    (ConfigurationError, 503),
    (GatewayError, 502),
    (StaleViewError, 409),
)


def configure_logging() -> None:
    level = logging.getLevelName(config.LOG_LEVEL)
    if not isinstance(level, int):
        level = logging.INFO
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("ctrlbx_admin").setLevel(level)


def status_for(exc: DashboardError) -> int:
    for cls, code in _STATUS_CODES:
        if isinstance(exc, cls):
            return code
    return 500


def create_app(
    db_manager: Optional[DatabaseManager] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="CtrlBx Admin API",
        version="2.0.0",
        description="Administration dashboard for the CtrlBx ESP32 access control system",
        debug=config.API_DEBUG,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One operator client per process: storage, gateway and session are shared
    db_manager = db_manager or DatabaseManager()
    storage = LocalStorage(db_manager)
    gateway = RemoteDataGateway(storage, transport=transport)
    session = SessionContext(storage, gateway)
    session.init()

    app.state.db_manager = db_manager
    app.state.storage = storage
    app.state.gateway = gateway
    app.state.session = session
    app.state.navigator = ViewNavigator()

    # Routers
    app.include_router(settings_router, prefix="/api", tags=["config"])
    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(dashboard_router, prefix="/api", tags=["dashboard"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(devices_router, prefix="/api", tags=["devices"])
    app.include_router(logs_router, prefix="/api", tags=["logs"])
    app.include_router(houses_router, prefix="/api", tags=["houses"])
    app.include_router(tokens_router, prefix="/api", tags=["tokens"])
    app.include_router(masterkeys_router, prefix="/api", tags=["masterkeys"])
    app.include_router(roles_router, prefix="/api", tags=["roles"])

    @app.exception_handler(DashboardError)
    async def handle_dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
        code = status_for(exc)
        if isinstance(exc, StaleViewError):
            logger.debug("%s %s discarded: %s", request.method, request.url.path, exc)
        elif code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected (%s): %s", request.method, request.url.path, code, exc)
        # the confirm-and-force flow keys on the backend sentinel
        message = USERS_HAVE_BALANCE if isinstance(exc, ForceDeleteRequired) else str(exc)
        return JSONResponse(status_code=code, content=ErrorResponse(error=message).model_dump())

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        try:
            db_manager.fetch_one("SELECT 1")
        except Exception as e:
            logger.error("Client storage unavailable: %s", e)
            return HealthResponse(status="error", backendConfigured=bool(gateway.base_url), message=str(e))
        configured = bool(gateway.base_url)
        return HealthResponse(
            status="ok",
            backendConfigured=configured,
            message=None if configured else "Backend URL not configured",
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.navigator.leave()
        db_manager.dispose()

    if config.API_DEBUG:
        logger.debug("CtrlBx Admin API created (backend configured: %s)", bool(gateway.base_url))

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host=config.API_HOST, port=config.API_PORT)
