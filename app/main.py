import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings, warn_insecure_defaults
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.telemetry import init_telemetry, shutdown_telemetry
from app.database import create_db_and_tables
from app.middleware import register_middleware
from app.routers import auth, tasks, users

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    warn_insecure_defaults(settings)
    init_telemetry(settings)
    await create_db_and_tables()
    logger.info(f"{settings.app_name} ready")
    yield
    shutdown_telemetry()


app = FastAPI(
    title=settings.app_name,
    description="Multi-user to-do list API with JWT authentication",
    swagger_ui_parameters={"displayRequestDuration": True},
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_middleware(app)
register_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(tasks.router)


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "docs": "/docs",
        "version": settings.app_version,
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
