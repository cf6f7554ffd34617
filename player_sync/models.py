from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PlayerRecord(BaseModel):
    uid: str = Field(..., description="Идентификатор игрока во внешнем API")
    name: str | None = Field(None, description="Никнейм")
    level: int | None = Field(None, description="Уровень")
    exp: int | None = Field(None, description="Опыт")
    region: str | None = Field(None, description="Регион")
    likes: int | None = Field(None, description="Количество лайков")
    last_update: str | None = Field(
        None, description="Локальное время последней успешной загрузки"
    )
    last_fetched: datetime | None = Field(
        None, description="Время последней попытки загрузки"
    )
    is_admin_added: bool = Field(False, description="Добавлен администратором")


def parse_uid(v) -> str:
    if isinstance(v, bool) or not isinstance(v, (str, int)):
        raise ValueError("uid должен быть строкой или числом")
    uid = str(v).strip()
    if not uid:
        raise ValueError("uid не может быть пустым")
    return uid


def parse_uids(v) -> list[str]:
    if not isinstance(v, list):
        v = [v]
    uids = [parse_uid(uid) for uid in v]
    if not uids:
        raise ValueError("Список uid пуст")
    return uids


# uid разбираются только после проверки пароля, поэтому поля здесь не типизированы
class AdminAddPlayersRequest(BaseModel):
    uids: Any = Field(
        None,
        examples=[["123456789"]],
        description="Один uid или список uid",
    )
    password: Any = Field(None, description="Пароль администратора")


class DeletePlayerRequest(BaseModel):
    uid: Any = Field(None, examples=["123456789"], description="uid игрока")
    password: Any = Field(None, description="Пароль администратора")


class MessageResponse(BaseModel):
    message: str


class SyncPlayerResponse(BaseModel):
    message: str
    data: PlayerRecord
