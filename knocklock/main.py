# =======================================================================================
# knocklock/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from .config import config
from .controller import LockController
from .logging_setup import setup_logging
from .models.schemas import HealthResponse
from .utils.exceptions import StoreError
from .api.dependencies import get_controller
from .api.routes.control import router as control_router
from .api.routes.keys import router as keys_router
from .api.routes.patterns import router as patterns_router
from .api.routes.confirmations import router as confirmations_router
from .api.routes.logs import router as logs_router

logger = logging.getLogger(__name__)


def create_app(controller: Optional[LockController] = None,
               principal: Optional[str] = None) -> FastAPI:
    setup_logging(debug=config.API_DEBUG, log_path=config.LOG_PATH)

    owner = principal if principal is not None else config.PRINCIPAL_ID

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.controller.open(owner)
        logger.info("KnockLock Control API started")
        yield
        await app.state.controller.close()
        logger.info("KnockLock Control API stopped")

    app = FastAPI(
        title="KnockLock Control API",
        version="1.0.0",
        description="Remote unlock, RFID keys, knock patterns and access log for a smart lock",
        debug=config.API_DEBUG,
        lifespan=lifespan,
    )
    app.state.controller = controller or LockController.from_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(control_router, prefix="/api", tags=["control"])
    app.include_router(keys_router, prefix="/api", tags=["keys"])
    app.include_router(patterns_router, prefix="/api", tags=["patterns"])
    app.include_router(confirmations_router, prefix="/api", tags=["confirmations"])
    app.include_router(logs_router, prefix="/api", tags=["logs"])

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    async def api_health(controller: LockController = Depends(get_controller)):
        try:
            await controller.store.ping()
            return HealthResponse(status="ok", dataAvailable=True, message=None)
        except StoreError as e:
            return HealthResponse(status="error", dataAvailable=False, message=str(e))

    return app


app = create_app()
