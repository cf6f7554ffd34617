import datetime
import logging
from pathlib import Path
from typing import List, Optional

import asyncpg

from player_sync.models import PlayerRecord

log: logging.Logger = logging.getLogger(__name__)

SCHEMA_PATH: Path = Path(__file__).resolve().parent.parent / "schema.sql"

_COLUMNS = "uid, name, level, exp, region, likes, last_update, last_fetched, is_admin_added"


class PlayerRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool: asyncpg.Pool = pool

    async def create_schema(self) -> None:
        ddl = SCHEMA_PATH.read_text(encoding="utf-8")
        async with self.pool.acquire() as conn:
            await conn.execute(ddl)
        log.info("Таблица players готова")

    async def list_players(self) -> List[PlayerRecord]:
        query = f"""
        SELECT {_COLUMNS}
        FROM players
        ORDER BY level DESC NULLS LAST, uid
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [PlayerRecord(**dict(row)) for row in rows]

    async def list_uids(
        self, fetched_before: Optional[datetime.datetime] = None
    ) -> List[str]:
        async with self.pool.acquire() as conn:
            if fetched_before is None:
                rows = await conn.fetch("SELECT uid FROM players ORDER BY uid")
            else:
                rows = await conn.fetch(
                    """
                    SELECT uid FROM players
                    WHERE last_fetched IS NULL OR last_fetched < $1
                    ORDER BY uid
                    """,
                    fetched_before,
                )
        return [row["uid"] for row in rows]

    async def get(self, uid: str) -> Optional[PlayerRecord]:
        query = f"SELECT {_COLUMNS} FROM players WHERE uid = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, uid)
        return PlayerRecord(**dict(row)) if row else None

    async def upsert(
        self, record: Optional[PlayerRecord], is_admin_added: Optional[bool] = None
    ) -> None:
        """Insert or overwrite the stats of one player.

        ``is_admin_added`` is left as stored unless a value is passed.
        """
        if record is None:
            return

        query = """
        INSERT INTO players (
            uid, name, level, exp, region, likes, last_update, last_fetched, is_admin_added
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, CURRENT_TIMESTAMP, COALESCE($8::boolean, FALSE))
        ON CONFLICT (uid) DO UPDATE
        SET name = EXCLUDED.name,
            level = EXCLUDED.level,
            exp = EXCLUDED.exp,
            region = EXCLUDED.region,
            likes = EXCLUDED.likes,
            last_update = EXCLUDED.last_update,
            last_fetched = CURRENT_TIMESTAMP,
            is_admin_added = COALESCE($8::boolean, players.is_admin_added)
        """
        async with self.pool.acquire() as conn:
            await conn.execute(
                query,
                record.uid,
                record.name,
                record.level,
                record.exp,
                record.region,
                record.likes,
                record.last_update,
                is_admin_added,
            )
        log.info(f"Игрок {record.uid} сохранён/обновлён")

    async def insert_if_absent(self, uid: str, is_admin_added: bool = True) -> bool:
        query = """
        INSERT INTO players (uid, is_admin_added)
        VALUES ($1, $2)
        ON CONFLICT (uid) DO NOTHING
        """
        async with self.pool.acquire() as conn:
            status = await conn.execute(query, uid, is_admin_added)
        inserted = int(status.split()[-1]) > 0
        if inserted:
            log.info(f"Игрок {uid} добавлен без данных для отслеживания")
        return inserted

    async def touch_last_fetched(self, uid: str) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE players SET last_fetched = CURRENT_TIMESTAMP WHERE uid = $1",
                uid,
            )

    async def delete(self, uid: str) -> bool:
        async with self.pool.acquire() as conn:
            status = await conn.execute("DELETE FROM players WHERE uid = $1", uid)
        deleted = int(status.split()[-1]) > 0
        if deleted:
            log.info(f"Игрок {uid} удалён")
        else:
            log.info(f"Игрок {uid} не найден, удалять нечего")
        return deleted


def make_player_repository(pool: asyncpg.Pool) -> PlayerRepository:
    return PlayerRepository(pool)
