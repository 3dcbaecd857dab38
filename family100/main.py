# family100/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from typing import Optional
import logging

from family100.config import Settings, load_settings
from family100.coordinator import QuizCoordinator
from family100.questions import load_catalog
from family100.routers import auth, game, pages, websocket
from family100.security import IdentityStore, SessionStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with fresh game state, so every instance is isolated."""
    settings = settings or load_settings()

    # Configure logging
    logging.basicConfig(level=settings.log_level)

    identity = IdentityStore(settings.accounts)
    catalog = load_catalog(settings.questions_file)

    # Application Lifecycle
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Log where things live and which accounts exist."""
        logger.info(f"🚀 Family 100 server ready with {len(catalog)} questions")
        logger.info("📱 Family display: /family  👨‍💼 Host: /host  🎮 Player: /player  🔌 WebSocket: /ws")
        logger.info(f"🔑 Accounts: {', '.join(identity.usernames())}")
        yield
        logger.info("✅ Family 100 server stopped")

    app = FastAPI(title="Family 100 API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.identity = identity
    app.state.sessions = SessionStore(settings.session_ttl_seconds)
    app.state.coordinator = QuizCoordinator(identity, catalog)

    # Include API Routers
    app.include_router(auth.router)
    app.include_router(game.router)
    app.include_router(websocket.router)
    app.include_router(pages.router)

    # Static assets last so the routes above win
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
    else:
        logger.warning(f"Public directory {settings.public_dir} not found, static pages disabled")

    return app


app = create_app()
