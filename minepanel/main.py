"""
MinePanel backend: application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `services/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from minepanel.api.v1.api import api_router
from minepanel.core.config import settings
from minepanel.core.exceptions import register_exception_handlers
from minepanel.core.limiter import limiter
from minepanel.core.roles import Role
from minepanel.core.security import TokenIssuer, get_password_hash
from minepanel.db.base import Base
from minepanel.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from minepanel.models.audit_log import AuditLog  # noqa: F401
from minepanel.models.user import User
from minepanel.services.plugin_proxy import PluginClient

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}
# Swagger UI and ReDoc pull scripts from a CDN, so they skip the CSP.
_DOCS_PATHS = ("/docs", "/redoc")


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.has_default_secrets():
        logger.warning(
            "Running with a default INSECURE token secret! "
            "Set JWT_SECRET and REFRESH_SECRET in your .env file immediately."
        )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed default admin user on first run
    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(User.username == settings.FIRST_ADMIN_USERNAME)
        )
        if result.scalar_one_or_none() is None:
            admin = User(
                username=settings.FIRST_ADMIN_USERNAME,
                hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                role=Role.ADMIN.value,
            )
            session.add(admin)
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>), change it immediately",
                settings.FIRST_ADMIN_USERNAME,
            )

    logger.info("MinePanel backend v%s started, plugin at %s", settings.VERSION, settings.PLUGIN_BASE_URL)
    yield
    await app.state.plugin_client.aclose()
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Administrative panel backend for a Minecraft server",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Collaborators injected into routes via api/v1/deps.py
    application.state.token_issuer = TokenIssuer.from_settings(settings)
    application.state.plugin_client = PluginClient.from_settings(settings)
    application.state.limiter = limiter

    # CORS: only the web panel origin(s)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            if name == "Content-Security-Policy" and request.url.path.startswith(_DOCS_PATHS):
                continue
            response.headers.setdefault(name, value)
        return response

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    @application.get("/health", tags=["health"])
    async def health() -> dict:
        return {"ok": True, "service": "minepanel-backend"}

    return application


app = create_app()
