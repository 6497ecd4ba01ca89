from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from utils.interaction_safety import safe_defer, safe_followup


class _StubFollowup:
    def __init__(self):
        self.last_kwargs = None

    async def send(self, **kwargs):
        self.last_kwargs = kwargs
        return "ok"


class _StubResponse:
    def __init__(self, done=False):
        self.done = done
        self.defer = AsyncMock()

    def is_done(self):
        return self.done


class _StubInteraction:
    def __init__(self, done=False):
        self.id = 123
        self.followup = _StubFollowup()
        self.response = _StubResponse(done)


def _http_error(status, code):
    response = MagicMock()
    response.status = status
    response.reason = "error"
    return discord.HTTPException(response, {"code": code, "message": "error"})


@pytest.mark.asyncio
async def test_safe_followup_sends_before_response_done():
    interaction = _StubInteraction()

    result = await safe_followup(interaction, content="hi", ephemeral=True)

    assert result == "ok"
    assert interaction.followup.last_kwargs["content"] == "hi"
    assert interaction.followup.last_kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_safe_followup_swallows_http_errors():
    interaction = _StubInteraction()
    interaction.followup.send = AsyncMock(side_effect=_http_error(400, 50035))

    assert await safe_followup(interaction, content="hi") is None


@pytest.mark.asyncio
async def test_safe_defer_defers_once():
    interaction = _StubInteraction()

    assert await safe_defer(interaction, ephemeral=True) is True
    interaction.response.defer.assert_awaited_once_with(ephemeral=True)


@pytest.mark.asyncio
async def test_safe_defer_skips_answered_interaction():
    interaction = _StubInteraction(done=True)

    assert await safe_defer(interaction) is True
    interaction.response.defer.assert_not_awaited()


@pytest.mark.asyncio
async def test_safe_defer_expired_interaction():
    interaction = _StubInteraction()
    response = MagicMock()
    response.status = 404
    response.reason = "Not Found"
    interaction.response.defer.side_effect = discord.NotFound(response, {"code": 10062, "message": "Unknown"})

    assert await safe_defer(interaction) is False


@pytest.mark.asyncio
async def test_safe_defer_already_acknowledged():
    interaction = _StubInteraction()
    interaction.response.defer.side_effect = _http_error(400, 40060)

    assert await safe_defer(interaction) is True
