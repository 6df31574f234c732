"""FastAPI application"""
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from bookkeep.auth import JWTHandler, auth_router
from bookkeep.auth.middleware import BearerGateMiddleware
from bookkeep.books import books_router
from bookkeep.config import Config, config
from bookkeep.errors import setup_exception_handlers
from bookkeep.storage import BookStore, InMemoryBookStore, InMemoryUserStore, UserStore


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def create_stores(settings: Config) -> tuple[UserStore, BookStore]:
    """Build the user and book stores for the configured backend."""
    if settings.STORAGE_BACKEND == "supabase":
        from bookkeep.storage.supabase_store import create_supabase_stores

        logger.info(f"Supabase storage enabled: {settings.SUPABASE_URL}")
        return create_supabase_stores(settings.SUPABASE_URL, settings.SUPABASE_KEY)

    logger.warning("Using in-memory storage - data is lost on restart")
    return InMemoryUserStore(), InMemoryBookStore()


def create_app(
    settings: Optional[Config] = None,
    user_store: Optional[UserStore] = None,
    book_store: Optional[BookStore] = None,
    jwt_handler: Optional[JWTHandler] = None,
) -> FastAPI:
    """
    Build the application.

    Stores and the token handler can be injected (tests do this); anything
    not injected is created from ``settings`` when the app starts.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.LOG_LEVEL)

        missing = settings.validate()
        if jwt_handler is not None and "JWT_SECRET_KEY" in missing:
            missing.remove("JWT_SECRET_KEY")
        if user_store is not None and book_store is not None:
            missing = [m for m in missing if not m.startswith("SUPABASE")]
        if missing:
            logger.error(f"Startup failed: missing configuration {', '.join(missing)}")
            raise RuntimeError(f"Missing configuration: {', '.join(missing)}")

        if user_store is None or book_store is None:
            app.state.user_store, app.state.book_store = create_stores(settings)
        app.state.jwt_handler = jwt_handler or JWTHandler(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        )
        logger.info(f"{settings.APP_NAME} started")
        yield
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Personal reading tracker API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Injected pieces are available even without running the lifespan.
    if user_store is not None and book_store is not None:
        app.state.user_store = user_store
        app.state.book_store = book_store
    if jwt_handler is not None:
        app.state.jwt_handler = jwt_handler

    # added before CORS so rejections still carry CORS headers
    app.add_middleware(BearerGateMiddleware, protected_prefixes=[f"{settings.API_PREFIX}/books"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health_check():
        return {"status": "ok"}

    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(books_router, prefix=settings.API_PREFIX)

    return app
