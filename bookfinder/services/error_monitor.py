"""Log unhandled bot errors and report them to the administrator."""

from __future__ import annotations

import traceback
from typing import Any

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import ErrorEvent, Update, User

from bookfinder.bot.utils.telegram import bot_send_with_retry
from bookfinder.logging import logger

# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 3900
TRACEBACK_CHAR_LIMIT = 1800


class ErrorMonitor:
    """Async error observer for the aiogram dispatcher.

    Every unhandled exception is logged. When ``admin_telegram_id`` is
    configured a plain-text summary is also sent to that chat. The event is
    always returned as unhandled so aiogram keeps its own logging.
    """

    def __init__(self, settings: Any) -> None:
        self._settings = settings

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        update_id = getattr(event.update, "update_id", None)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=update_id,
        )

        admin_id = getattr(self._settings, "admin_telegram_id", None)
        if admin_id is None:
            return UNHANDLED

        try:
            await bot_send_with_retry(bot, chat_id=admin_id, text=self.build_message(event), parse_mode=None)
        except Exception:
            logger.exception("error_monitor_notification_failed", update_id=update_id)
        return UNHANDLED

    def build_message(self, event: ErrorEvent) -> str:
        exception = event.exception
        update = event.update
        update_type, user, payload = _describe_update(update)
        lines = [
            "BOOKFINDER ERROR",
            f"Environment: {getattr(self._settings, 'environment', 'unknown')}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(update, 'update_id', 'unknown')}",
            f"Update Type: {update_type}",
            f"User: {_format_user(user)}",
        ]
        if payload:
            lines.append(f"Payload: {payload}")
        trace = "".join(
            traceback.format_exception(exception.__class__, exception, exception.__traceback__)
        ).strip()
        if trace:
            lines.extend(["", "Traceback:", _truncate(trace, TRACEBACK_CHAR_LIMIT)])
        return _truncate("\n".join(lines), TELEGRAM_MESSAGE_LIMIT)


def _describe_update(update: Update | None) -> tuple[str, User | None, str]:
    if update is None:
        return "unknown", None, ""
    if update.message is not None:
        return "message", update.message.from_user, update.message.text or ""
    if update.callback_query is not None:
        return "callback_query", update.callback_query.from_user, update.callback_query.data or ""
    return "unknown", None, ""


def _format_user(user: User | None) -> str:
    if user is None:
        return "unknown"
    segments = [str(user.id)]
    full_name = " ".join(part for part in (user.first_name, user.last_name) if part)
    if full_name:
        segments.append(full_name)
    if user.username:
        segments.append(f"@{user.username}")
    return " | ".join(segments)


def _truncate(value: str, limit: int) -> str:
    value = value.strip()
    if len(value) <= limit:
        return value
    return f"{value[: limit - 15].rstrip()}\n...[truncated]"


__all__ = ["ErrorMonitor"]
