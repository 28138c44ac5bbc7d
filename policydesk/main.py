from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from policydesk.api.middleware import RequestTimingMiddleware
from policydesk.api.v1.router import v1_router
from policydesk.common.logging import get_logger, setup_logging
from policydesk.config import settings
from policydesk.core.users.service import UserService
from policydesk.db.session import async_session_factory, init_db

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    async with async_session_factory() as session:
        await UserService(session).ensure_default_admin()
        await session.commit()
    logger.info("PolicyDesk started (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="PolicyDesk API",
    description="Insurance contract register with audit trail",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
# Last added runs outermost: CORS, then sessions, then request timing
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "policydesk",
        "version": "1.0.0",
        "env": settings.APP_ENV,
    }
