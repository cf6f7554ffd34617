import os

from dotenv import load_dotenv

load_dotenv()

# App
TITLE: str = os.getenv("APP_TITLE", "Player Sync Service")
API_PREFIX: str = os.getenv("API_PREFIX", "/api")
APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT: int = int(os.getenv("PORT", 3000))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

# Admin
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

# Postgres
POSTGRES_USER: str = os.getenv("POSTGRES_USER", "player_sync")
POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "player_sync")
POSTGRES_DB: str = os.getenv("POSTGRES_DB", "player_sync")
POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", 5432))
POSTGRES_SSL: str = os.getenv("POSTGRES_SSL", "disable")
POSTGRES_POOL_MIN_SIZE: int = int(os.getenv("POSTGRES_POOL_MIN_SIZE", 1))
POSTGRES_POOL_MAX_SIZE: int = int(os.getenv("POSTGRES_POOL_MAX_SIZE", 10))
POSTGRES_POOL_MAX_IDLE: float = float(os.getenv("POSTGRES_POOL_MAX_IDLE", 60.0))

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Game info API
GAME_INFO_URL: str = os.getenv(
    "GAME_INFO_URL", "https://danger-info-alpha.vercel.app/web-info"
)
GAME_INFO_TIMEOUT: float = float(os.getenv("GAME_INFO_TIMEOUT", 10.0))
GAME_INFO_USER_AGENT: str = os.getenv(
    "GAME_INFO_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
)

# Sync
SYNC_CHUNK_SIZE: int = int(os.getenv("SYNC_CHUNK_SIZE", 5))
SYNC_INTERVAL_MINUTES: int = int(os.getenv("SYNC_INTERVAL_MINUTES", 10))
SYNC_MIN_REFETCH_SECONDS: int = int(os.getenv("SYNC_MIN_REFETCH_SECONDS", 60))
SYNC_SCHEDULER_ENABLED: bool = os.getenv(
    "SYNC_SCHEDULER_ENABLED", "true"
).lower() in ("1", "true", "yes")
