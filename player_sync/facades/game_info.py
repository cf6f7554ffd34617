import logging
from datetime import datetime

import httpx
from pydantic import ValidationError

from player_sync.models import PlayerRecord
from player_sync.repositories.player import PlayerRepository

log = logging.getLogger(__name__)


class GameInfoError(Exception):
    pass


class PlayerNotFoundError(GameInfoError):
    pass


class GameInfoUnavailableError(GameInfoError):
    pass


class GameInfoFacade:
    """
    Фасад для внешнего API с публичной статистикой игроков.

    Один GET на uid, без повторных попыток: следующая плановая синхронизация
    и есть повтор.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        player_repository: PlayerRepository,
        base_url: str,
        timeout: float = 10.0,
        user_agent: str | None = None,
    ):
        self.client = client
        self.player_repository = player_repository
        self.base_url = base_url
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent} if user_agent else {}

    async def lookup(self, uid: str) -> PlayerRecord:
        """
        Загружает игрока; PlayerNotFoundError если API ответил 404,
        GameInfoUnavailableError при любой другой ошибке.
        """
        try:
            resp = await self.client.get(
                self.base_url,
                params={"uid": uid},
                headers=self.headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise GameInfoUnavailableError(f"Ошибка запроса uid={uid}: {e}") from e

        if resp.status_code == 404:
            # чтобы не перезапрашивать отсутствующий аккаунт в том же цикле
            await self.player_repository.touch_last_fetched(uid)
            raise PlayerNotFoundError(uid)

        if resp.status_code != 200:
            raise GameInfoUnavailableError(
                f"Неожиданный статус {resp.status_code} для uid={uid}"
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise GameInfoUnavailableError(f"Некорректный JSON для uid={uid}") from e

        return self._to_record(uid, payload)

    async def fetch(self, uid: str) -> PlayerRecord | None:
        try:
            return await self.lookup(uid)
        except PlayerNotFoundError:
            log.warning(f"UID {uid} не найден (404), отмечен как проверенный")
        except GameInfoUnavailableError as e:
            log.error(f"Ошибка загрузки UID {uid}: {e}")
        return None

    @staticmethod
    def _to_record(uid: str, payload) -> PlayerRecord:
        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise GameInfoUnavailableError(f"Ответ без статуса success для uid={uid}")

        data = payload.get("data")
        basic_info = data.get("basicInfo") if isinstance(data, dict) else None
        if not isinstance(basic_info, dict):
            raise GameInfoUnavailableError(f"Ответ без basicInfo для uid={uid}")

        try:
            return PlayerRecord(
                uid=uid,
                name=basic_info.get("nickname"),
                level=basic_info.get("level"),
                exp=basic_info.get("exp"),
                region=basic_info.get("region"),
                likes=basic_info.get("liked"),
                last_update=datetime.now().strftime("%H:%M:%S"),
            )
        except ValidationError as e:
            raise GameInfoUnavailableError(
                f"Некорректные поля basicInfo для uid={uid}: {e}"
            ) from e


def make_game_info_facade(
    client: httpx.AsyncClient,
    player_repository: PlayerRepository,
    base_url: str,
    timeout: float = 10.0,
    user_agent: str | None = None,
) -> GameInfoFacade:
    return GameInfoFacade(
        client=client,
        player_repository=player_repository,
        base_url=base_url,
        timeout=timeout,
        user_agent=user_agent,
    )
