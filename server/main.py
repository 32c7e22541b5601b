# server/main.py

import time
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from api import auth, health, posts
from core.config import Settings, get_settings
from core.errors import register_error_handlers
from core.moderation import ContentModerator
from database import init_db, make_engine, make_session_factory


logger = logging.getLogger("blog")


def configure_logging(level: str):
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")
    logging.getLogger().setLevel(level)


def create_app(settings: Optional[Settings] = None, moderator: Optional[ContentModerator] = None) -> FastAPI:
    """
    Build the application. Settings, the database engine and the moderation
    client are created here once and exposed to handlers through `app.state`.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
        yield
        engine.dispose()

    app = FastAPI(title="Blog App API", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.moderator = moderator or ContentModerator(settings)

    if not app.state.moderator.configured:
        logger.warning("DEEPSEEK_API_KEY is not set; post creation will be refused")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %d (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(posts.router)

    return app


app = create_app()
