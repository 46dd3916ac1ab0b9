import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flashdeck.config import settings
from flashdeck.db import init_all_databases

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    from flashdeck.services.session import SessionRegistry
    from flashdeck.services.task_registry import wait_for_pending

    app.state.sessions = SessionRegistry(max_sessions=settings.max_sessions)

    if settings.seed_demo_deck:
        from flashdeck.db.sqlite import get_db, seed_demo_deck

        async for db in get_db():
            deck = await seed_demo_deck(db)
            if deck:
                logger.info("Seeded demo deck %s (%d cards)", deck.id, deck.card_count)
    yield
    # Let in-flight schedule writes land before the process exits
    await wait_for_pending(timeout=5.0)


def create_app() -> FastAPI:
    application = FastAPI(
        title="Flashdeck Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from flashdeck.routers import cards, decks, health, sessions

    application.include_router(health.router)
    application.include_router(
        decks.router, prefix="/decks", tags=["decks"]
    )
    application.include_router(
        cards.router, prefix="/cards", tags=["cards"]
    )
    application.include_router(
        sessions.router, prefix="/sessions", tags=["sessions"]
    )

    return application


app = create_app()
