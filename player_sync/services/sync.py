import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

from player_sync.facades.game_info import GameInfoFacade
from player_sync.models import PlayerRecord
from player_sync.repositories.player import PlayerRepository

log = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0


def chunked(items: List[str], size: int) -> Iterator[List[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


class SyncService:
    def __init__(
        self,
        player_repository: PlayerRepository,
        game_info: GameInfoFacade,
        chunk_size: int = 5,
        min_refetch_seconds: int = 0,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size должен быть >= 1")
        self.player_repository = player_repository
        self.game_info = game_info
        self.chunk_size = chunk_size
        self.min_refetch_seconds = min_refetch_seconds
        self._sweep_lock = asyncio.Lock()

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_lock.locked()

    async def list_players(self) -> List[PlayerRecord]:
        return await self.player_repository.list_players()

    async def sync_one(self, uid: str) -> PlayerRecord:
        record = await self.game_info.lookup(uid)
        await self.player_repository.upsert(record)
        return record

    async def sync_all(self, uids: Optional[List[str]] = None) -> SyncSummary:
        async with self._sweep_lock:
            if uids is None:
                uids = await self.player_repository.list_uids()
            return await self._sweep(uids)

    async def scheduled_sync(self) -> Optional[SyncSummary]:
        if self.sweep_in_progress:
            log.warning("Синхронизация уже выполняется, плановый запуск пропущен")
            return None

        log.info("Запуск фоновой синхронизации...")
        async with self._sweep_lock:
            cutoff = None
            if self.min_refetch_seconds > 0:
                cutoff = datetime.now(timezone.utc) - timedelta(
                    seconds=self.min_refetch_seconds
                )
            uids = await self.player_repository.list_uids(fetched_before=cutoff)
            summary = await self._sweep(uids)
        log.info("Фоновая синхронизация завершена")
        return summary

    async def admin_add(self, uids: List[str]) -> List[str]:
        uids = list(dict.fromkeys(uids))
        for chunk in chunked(uids, self.chunk_size):
            results = await asyncio.gather(
                *(self._admin_add_one(uid) for uid in chunk), return_exceptions=True
            )
            # пробрасываем первую ошибку только когда вся группа завершилась
            errors = [r for r in results if isinstance(r, Exception)]
            if errors:
                raise errors[0]
        return uids

    async def delete(self, uid: str) -> bool:
        return await self.player_repository.delete(uid)

    async def _sweep(self, uids: List[str]) -> SyncSummary:
        summary = SyncSummary(total=len(uids))
        for chunk in chunked(uids, self.chunk_size):
            results = await asyncio.gather(*(self._sync_member(uid) for uid in chunk))
            for result in results:
                if result is True:
                    summary.updated += 1
                elif result is False:
                    summary.skipped += 1
                else:
                    summary.failed += 1
        log.info(
            f"Синхронизация: всего {summary.total}, обновлено {summary.updated}, "
            f"пропущено {summary.skipped}, ошибок {summary.failed}"
        )
        return summary

    async def _sync_member(self, uid: str) -> Optional[bool]:
        # ошибка одного uid не должна останавливать остальных
        try:
            record = await self.game_info.fetch(uid)
            if record is None:
                return False
            await self.player_repository.upsert(record)
            return True
        except Exception as e:
            log.error(f"Ошибка синхронизации UID {uid}: {e}", exc_info=True)
            return None

    async def _admin_add_one(self, uid: str) -> None:
        record = await self.game_info.fetch(uid)
        if record is not None:
            await self.player_repository.upsert(record, is_admin_added=True)
        else:
            await self.player_repository.insert_if_absent(uid, is_admin_added=True)


def make_sync_service(
    player_repository: PlayerRepository,
    game_info: GameInfoFacade,
    chunk_size: int = 5,
    min_refetch_seconds: int = 0,
) -> SyncService:
    return SyncService(
        player_repository=player_repository,
        game_info=game_info,
        chunk_size=chunk_size,
        min_refetch_seconds=min_refetch_seconds,
    )
