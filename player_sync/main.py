import logging
import ssl
from contextlib import asynccontextmanager

import asyncpg
import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from player_sync import config
from player_sync.errors import register_error_handlers
from player_sync.facades.game_info import make_game_info_facade
from player_sync.middlewares.logging import LoggingMiddleware
from player_sync.repositories.player import make_player_repository
from player_sync.routers.players import make_players_router
from player_sync.scheduler import make_scheduler
from player_sync.services.sync import make_sync_service

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def make_ssl_context(mode: str) -> ssl.SSLContext | None:
    if mode.lower() != "require":
        return None
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


@asynccontextmanager
async def lifespan(app: FastAPI):
    pool = await asyncpg.create_pool(
        dsn=config.DATABASE_URL,
        min_size=config.POSTGRES_POOL_MIN_SIZE,
        max_size=config.POSTGRES_POOL_MAX_SIZE,
        max_inactive_connection_lifetime=config.POSTGRES_POOL_MAX_IDLE,
        ssl=make_ssl_context(config.POSTGRES_SSL),
    )
    app.state.db_pool = pool

    player_repo = make_player_repository(pool)
    await player_repo.create_schema()

    async with httpx.AsyncClient(timeout=config.GAME_INFO_TIMEOUT) as client:
        game_info = make_game_info_facade(
            client=client,
            player_repository=player_repo,
            base_url=config.GAME_INFO_URL,
            timeout=config.GAME_INFO_TIMEOUT,
            user_agent=config.GAME_INFO_USER_AGENT,
        )
        sync_service = make_sync_service(
            player_repository=player_repo,
            game_info=game_info,
            chunk_size=config.SYNC_CHUNK_SIZE,
            min_refetch_seconds=config.SYNC_MIN_REFETCH_SECONDS,
        )
        app.state.sync_service = sync_service

        players_router = make_players_router(sync_service, config.ADMIN_PASSWORD)
        app.include_router(players_router, prefix=config.API_PREFIX)

        scheduler = None
        if config.SYNC_SCHEDULER_ENABLED:
            scheduler = make_scheduler(sync_service, config.SYNC_INTERVAL_MINUTES)
            scheduler.start()

        log.info(f"Сервер запущен на порту {config.APP_PORT}")
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            await pool.close()


app = FastAPI(title=config.TITLE, lifespan=lifespan)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)


@app.get("/health")
async def health():
    try:
        async with app.state.db_pool.acquire() as conn:
            await conn.execute("SELECT 1")
        return {"status": "ok"}
    except Exception:
        return {"status": "fail"}


if __name__ == "__main__":
    uvicorn.run(app, host=config.APP_HOST, port=config.APP_PORT, reload=False)
