from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from player_sync.facades.game_info import (
    GameInfoFacade,
    GameInfoUnavailableError,
    PlayerNotFoundError,
)
from player_sync.repositories.player import PlayerRepository

GAME_INFO_URL = "https://game-info.test/web-info"

SUCCESS_PAYLOAD = {
    "status": "success",
    "data": {
        "basicInfo": {
            "nickname": "Alpha",
            "level": 67,
            "exp": 3456789,
            "region": "IND",
            "liked": 1234,
        }
    },
}


@pytest.fixture
def player_repo():
    return AsyncMock(spec=PlayerRepository)


def make_facade(client: httpx.AsyncClient, player_repo) -> GameInfoFacade:
    return GameInfoFacade(
        client=client,
        player_repository=player_repo,
        base_url=GAME_INFO_URL,
        timeout=10.0,
        user_agent="test-agent",
    )


@pytest.mark.asyncio
@respx.mock
async def test_fetch_success(player_repo):
    route = respx.get(GAME_INFO_URL, params={"uid": "123"}).mock(
        return_value=httpx.Response(200, json=SUCCESS_PAYLOAD)
    )

    async with httpx.AsyncClient() as client:
        record = await make_facade(client, player_repo).fetch("123")

    assert route.called
    assert route.calls.last.request.headers["User-Agent"] == "test-agent"
    assert record is not None
    assert record.uid == "123"
    assert record.name == "Alpha"
    assert record.level == 67
    assert record.exp == 3456789
    assert record.region == "IND"
    assert record.likes == 1234
    assert record.last_update is not None
    player_repo.touch_last_fetched.assert_not_awaited()


@pytest.mark.asyncio
@respx.mock
async def test_fetch_not_found_touches_last_fetched(player_repo):
    respx.get(GAME_INFO_URL).mock(return_value=httpx.Response(404))

    async with httpx.AsyncClient() as client:
        record = await make_facade(client, player_repo).fetch("999")

    assert record is None
    player_repo.touch_last_fetched.assert_awaited_once_with("999")


@pytest.mark.asyncio
@respx.mock
async def test_lookup_not_found_raises(player_repo):
    respx.get(GAME_INFO_URL).mock(return_value=httpx.Response(404))

    async with httpx.AsyncClient() as client:
        with pytest.raises(PlayerNotFoundError):
            await make_facade(client, player_repo).lookup("999")

    player_repo.touch_last_fetched.assert_awaited_once_with("999")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response_kwargs",
    [
        {"status_code": 500},
        {"status_code": 200, "text": "<html>not json</html>"},
        {"status_code": 200, "json": {"status": "error", "message": "rate limited"}},
        {"status_code": 200, "json": {"status": "success", "data": {}}},
        {"status_code": 200, "json": [1, 2, 3]},
        {
            "status_code": 200,
            "json": {"status": "success", "data": {"basicInfo": {"level": "high"}}},
        },
    ],
)
@respx.mock
async def test_fetch_transient_failures_have_no_side_effect(player_repo, response_kwargs):
    respx.get(GAME_INFO_URL).mock(
        side_effect=lambda request: httpx.Response(**response_kwargs)
    )

    async with httpx.AsyncClient() as client:
        facade = make_facade(client, player_repo)
        assert await facade.fetch("123") is None
        with pytest.raises(GameInfoUnavailableError):
            await facade.lookup("123")

    player_repo.touch_last_fetched.assert_not_awaited()


@pytest.mark.asyncio
@respx.mock
async def test_fetch_network_error(player_repo):
    respx.get(GAME_INFO_URL).mock(side_effect=httpx.ConnectTimeout("timeout"))

    async with httpx.AsyncClient() as client:
        facade = make_facade(client, player_repo)
        assert await facade.fetch("123") is None
        with pytest.raises(GameInfoUnavailableError):
            await facade.lookup("123")

    player_repo.touch_last_fetched.assert_not_awaited()
