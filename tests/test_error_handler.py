# -*- coding: utf-8 -*-
"""Тесты разбора ошибок платформы, отчёта оператору и safe_handler."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from morabot.core.error_handler import (
    ErrorReporter,
    build_operator_report,
    describe_platform_error,
    get_error_stats,
    reset_error_stats,
)
from morabot.core.exceptions import UpstreamError, UserInputError


class FakePlatformError(Exception):
    """Имитирует RPCError: атрибуты CODE и ID."""

    def __init__(self, code, error_id, text=""):
        super().__init__(text or error_id)
        self.CODE = code
        self.ID = error_id


@pytest.mark.parametrize("exc, expected", [
    (FakePlatformError(403, "CHAT_WRITE_FORBIDDEN"), "⛔ У бота нет прав писать в этот чат."),
    (FakePlatformError(400, "USER_IS_BLOCKED"), "🚫 Пользователь заблокировал бота."),
    (FakePlatformError(403, "", "Forbidden: bot was blocked by the user"), "🚫 Пользователь заблокировал бота."),
    (FakePlatformError(400, "PEER_ID_INVALID"), "❓ Чат не найден."),
    (FakePlatformError(400, "", "Bad Request: chat not found"), "❓ Чат не найден."),
    (FakePlatformError(400, "ENTITY_BOUNDS_INVALID"), "⚠️ Не удалось разобрать форматирование сообщения."),
    (FakePlatformError(400, "", "Bad Request: can't parse entities"), "⚠️ Не удалось разобрать форматирование сообщения."),
])
def test_platform_errors_are_tailored(exc, expected):
    assert describe_platform_error(exc) == (True, expected)


def test_stale_edit_is_suppressed():
    assert describe_platform_error(FakePlatformError(400, "MESSAGE_ID_INVALID")) == (True, None)
    assert describe_platform_error(FakePlatformError(400, "", "message to edit not found")) == (True, None)


def test_unknown_platform_error_is_generic():
    matched, text = describe_platform_error(FakePlatformError(500, "INTERNAL"))
    assert matched is True
    assert "500" in text


def test_regular_exception_is_not_platform_error():
    assert describe_platform_error(ValueError("x")) == (False, None)


def test_operator_report_contents():
    try:
        raise RuntimeError("kaboom" * 400)
    except RuntimeError as e:
        report = build_operator_report(e, {
            "chat_id": 1, "user_id": 2, "user_name": "Alice", "command": "pin", "query": "cats",
        })
    assert "RuntimeError" in report
    for line in ("Чат: 1", "Пользователь: 2", "Имя: Alice", "Команда: pin", "Запрос: cats"):
        assert line in report
    stack = report.split("```")[1]
    assert len(stack.strip()) <= 1003


def _message(text="/pin cats"):
    return SimpleNamespace(
        text=text,
        caption=None,
        chat=SimpleNamespace(id=100),
        from_user=SimpleNamespace(id=7, first_name="Alice"),
        reply_text=AsyncMock(),
    )


def _reporter():
    notifier = MagicMock()
    notifier.notify = AsyncMock(return_value=True)
    profile = MagicMock()
    profile.message.return_value = "general apology"
    return ErrorReporter(notifier, profile), notifier


@pytest.mark.asyncio
async def test_user_input_error_replies_without_operator_notice():
    reporter, notifier = _reporter()

    @reporter.safe_handler
    async def handler(client, message):
        raise UserInputError("missing", user_message="usage hint")

    message = _message()
    await handler(None, message)
    message.reply_text.assert_awaited_once_with("usage hint")
    notifier.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_upstream_error_replies_and_notifies():
    reporter, notifier = _reporter()

    @reporter.safe_handler
    async def handler(client, message):
        raise UpstreamError("HTTP 502", status=502)

    message = _message()
    await handler(None, message)
    message.reply_text.assert_awaited_once()
    notifier.notify.assert_awaited_once()
    assert "Команда: pin" in notifier.notify.await_args.args[0]


@pytest.mark.asyncio
async def test_unexpected_error_gets_apology_and_counted():
    reset_error_stats()
    reporter, notifier = _reporter()

    @reporter.safe_handler
    async def handler(client, message):
        raise KeyError("boom")

    message = _message()
    await handler(None, message)
    message.reply_text.assert_awaited_once_with("general apology")
    notifier.notify.assert_awaited_once()
    assert get_error_stats()["KeyError"] == 1


@pytest.mark.asyncio
async def test_stale_edit_error_sends_no_reply():
    reporter, notifier = _reporter()

    @reporter.safe_handler
    async def handler(client, message):
        raise FakePlatformError(400, "MESSAGE_ID_INVALID")

    message = _message()
    await handler(None, message)
    message.reply_text.assert_not_awaited()
    notifier.notify.assert_awaited_once()


@pytest.mark.asyncio
async def test_flood_wait_sleeps_without_rerun():
    from pyrogram.errors import FloodWait

    reporter, _ = _reporter()
    calls = []

    @reporter.safe_handler
    async def handler(client, message):
        calls.append(1)
        raise FloodWait(value=3)

    with patch("morabot.core.error_handler.asyncio.sleep", new=AsyncMock()) as sleep:
        await handler(None, _message())
    sleep.assert_awaited_once_with(4)
    assert calls == [1]


@pytest.mark.asyncio
async def test_failed_reply_is_not_raised():
    reporter, _ = _reporter()

    @reporter.safe_handler
    async def handler(client, message):
        raise RuntimeError("x")

    message = _message()
    message.reply_text = AsyncMock(side_effect=RuntimeError("cannot send"))
    await handler(None, message)
