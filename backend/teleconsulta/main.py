from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from teleconsulta.config.settings import settings
from teleconsulta.core.exception_handlers import register_exception_handlers
from teleconsulta.core.middleware import verify_token_middleware
from teleconsulta.db.base import get_engine
from teleconsulta.db.base import get_session_factory

# -------------------------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application start-up & shutdown hooks."""
    # ------------------------------------------------------------------ start-up -----
    logger.info("Application startup ...")

    engine = None
    try:
        logger.info("Initializing Database Engine...")
        engine = await get_engine(str(settings.database_url), pool_pre_ping=True)
        app.state.engine = engine
        app.state.session_factory = await get_session_factory(engine)
        logger.info("DB engine and session factory ready.")
    except Exception as e:
        logger.critical(f"CRITICAL ERROR DURING STARTUP INITIALIZATIONS: {e}", exc_info=True)
        if engine:
            await engine.dispose()
        raise

    # ------------------------------------------------ give control back
    yield

    # ------------------------------------------------ shutdown --------
    logger.info("Application shutdown ...")
    try:
        await engine.dispose()
        logger.info("DB engine disposed")
    except Exception:
        logger.exception("Error disposing DB engine")

    logger.info("Shutdown complete")


# -------------------------------------------------------------------------------------
# FastAPI application instance
# -------------------------------------------------------------------------------------
app = FastAPI(title="Teleconsulta API", lifespan=lifespan)

# CORS -------------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o) for o in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(verify_token_middleware)

register_exception_handlers(app)


# ----------------------------------------------------------------- health-check -----
@app.get("/health")
async def health_check(request: Request):
    database = "ready" if getattr(request.app.state, "session_factory", None) else "not ready"
    return {"status": "ok", "database": database}


# ------------------------------------------------------------------- routes ---------
from teleconsulta.routes.auth.router import router as auth_router  # noqa: E402  (after app creation)
from teleconsulta.routes.users.router import router as users_router  # noqa: E402
from teleconsulta.routes.doctors.router import router as doctors_router  # noqa: E402
from teleconsulta.routes.plans.router import router as plans_router  # noqa: E402
from teleconsulta.routes.appointment.router import router as appointment_router  # noqa: E402

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(doctors_router)
app.include_router(plans_router)
app.include_router(appointment_router)
