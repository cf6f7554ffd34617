import secrets

from fastapi import APIRouter, HTTPException, Path, status

from player_sync.facades.game_info import (
    GameInfoUnavailableError,
    PlayerNotFoundError,
)
from player_sync.models import (
    AdminAddPlayersRequest,
    DeletePlayerRequest,
    MessageResponse,
    PlayerRecord,
    SyncPlayerResponse,
    parse_uid,
    parse_uids,
)
from player_sync.services.sync import SyncService


def make_players_router(sync_service: SyncService, admin_password: str) -> APIRouter:
    router = APIRouter(tags=["players"])

    def check_admin_password(password) -> None:
        # пустой пароль в конфиге закрывает админские ручки полностью
        if (
            not admin_password
            or not isinstance(password, str)
            or not secrets.compare_digest(
                password.encode(), admin_password.encode()
            )
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
            )

    def parse_or_422(parse, value):
        try:
            return parse(value)
        except ValueError as e:
            raise HTTPException(
                status_code=422, detail=str(e)
            )

    @router.get(
        "/players",
        response_model=list[PlayerRecord],
        summary="Все отслеживаемые игроки по убыванию уровня",
    )
    async def list_players():
        return await sync_service.list_players()

    @router.post(
        "/sync",
        response_model=MessageResponse,
        summary="Полная синхронизация всех игроков",
    )
    async def sync_all():
        await sync_service.sync_all()
        return {"message": "Sync completed"}

    @router.post(
        "/sync/{uid}",
        response_model=SyncPlayerResponse,
        summary="Синхронизация одного игрока",
    )
    async def sync_one(uid: str = Path(..., min_length=1)):
        try:
            record = await sync_service.sync_one(uid)
        except PlayerNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Player not found in external API",
            )
        except GameInfoUnavailableError:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="External API unavailable",
            )
        return {"message": f"Sync completed for {uid}", "data": record}

    @router.post(
        "/adminaddplayers",
        response_model=MessageResponse,
        summary="Добавить игроков для отслеживания",
    )
    async def admin_add_players(data: AdminAddPlayersRequest):
        check_admin_password(data.password)
        uids = parse_or_422(parse_uids, data.uids)
        await sync_service.admin_add(uids)
        return {"message": "Players added to database"}

    @router.post(
        "/deleteplayers",
        response_model=MessageResponse,
        summary="Удалить игрока",
    )
    async def delete_player(data: DeletePlayerRequest):
        check_admin_password(data.password)
        uid = parse_or_422(parse_uid, data.uid)
        await sync_service.delete(uid)
        return {"message": f"Player {uid} deleted from database"}

    return router
