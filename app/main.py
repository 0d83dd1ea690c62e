import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import Database
from app.errors import register_exception_handlers
from app.logging_config import configure_logging
from app.middleware import TimingMiddleware
from app.routers import categories, comments, posts, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: open the persistence handle unless one was injected (tests).
    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
        logger.info("Database handle opened (%s)", settings.APP_ENV)
    yield
    # Shutdown
    if owns_db:
        await app.state.db.dispose()
        app.state.db = None


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Blog API",
        description="Users, posts, comments and categories with token auth",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.db = None

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(categories.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()
