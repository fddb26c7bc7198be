from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import CallbackQuery, Chat, ErrorEvent, Message, Update, User

from bookfinder.services.error_monitor import ErrorMonitor


class DummyBot:
    def __init__(self) -> None:
        self.sent_messages = []

    async def send_message(self, chat_id, text, parse_mode=None):
        self.sent_messages.append(
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
            }
        )


def _user() -> User:
    return User(id=123, is_bot=False, first_name="Test", last_name="User", username="tester")


def _message_update() -> Update:
    chat = Chat(id=999, type="private")
    message = Message(
        message_id=1,
        date=datetime.now(timezone.utc),
        chat=chat,
        from_user=_user(),
        text="Dune",
    )
    return Update(update_id=77, message=message)


def _callback_update() -> Update:
    callback = CallbackQuery(id="cb1", from_user=_user(), chat_instance="ci", data="book:3")
    return Update(update_id=78, callback_query=callback)


@pytest.mark.asyncio
async def test_error_monitor_skips_without_admin():
    settings = SimpleNamespace(admin_telegram_id=None, environment="test")
    monitor = ErrorMonitor(settings)
    bot = DummyBot()
    event = ErrorEvent(update=_message_update(), exception=RuntimeError("boom"))

    result = await monitor.handle_error(event, bot)

    assert result is UNHANDLED
    assert bot.sent_messages == []


@pytest.mark.asyncio
async def test_error_monitor_sends_notification():
    settings = SimpleNamespace(admin_telegram_id=555, environment="prod")
    monitor = ErrorMonitor(settings)
    bot = DummyBot()
    event = ErrorEvent(update=_message_update(), exception=ValueError("bad input"))

    result = await monitor.handle_error(event, bot)

    assert result is UNHANDLED
    assert len(bot.sent_messages) == 1
    payload = bot.sent_messages[0]
    assert payload["chat_id"] == 555
    assert payload["parse_mode"] is None
    assert "BOOKFINDER ERROR" in payload["text"]
    assert "ValueError: bad input" in payload["text"]
    assert "Update Type: message" in payload["text"]
    assert "Payload: Dune" in payload["text"]
    assert "123 | Test User | @tester" in payload["text"]


def test_error_monitor_describes_callback_updates():
    monitor = ErrorMonitor(SimpleNamespace(admin_telegram_id=1, environment="dev"))
    event = ErrorEvent(update=_callback_update(), exception=KeyError("missing"))

    text = monitor.build_message(event)

    assert "Update Type: callback_query" in text
    assert "Payload: book:3" in text


@pytest.mark.asyncio
async def test_error_monitor_survives_failed_notification():
    class FailingBot:
        async def send_message(self, chat_id, text, parse_mode=None):
            raise RuntimeError("telegram unavailable")

    monitor = ErrorMonitor(SimpleNamespace(admin_telegram_id=555, environment="prod"))
    event = ErrorEvent(update=_message_update(), exception=ValueError("bad input"))

    assert await monitor.handle_error(event, FailingBot()) is UNHANDLED
