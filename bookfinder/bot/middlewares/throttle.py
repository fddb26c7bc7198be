"""Simple per-user throttle to prevent rapid-fire searches and taps."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from bookfinder.config import RequestLimitSettings
from bookfinder.i18n import I18nService


class ThrottleMiddleware(BaseMiddleware):
    def __init__(
        self,
        limits: RequestLimitSettings | None = None,
        *,
        i18n: I18nService | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        limits = limits or RequestLimitSettings()
        self.window_seconds = limits.interval_seconds
        self.max_requests = limits.max_requests
        self.i18n = i18n or I18nService()
        self._clock = clock
        self._events: Dict[int, Deque[float]] = defaultdict(deque)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user = getattr(event, "from_user", None)
        if user is None or self.max_requests <= 0:
            return await handler(event, data)

        now = self._clock()
        bucket = self._events[user.id]
        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

        if len(bucket) >= self.max_requests:
            await self._notify_limit(event, self.i18n.locale_for(user))
            return None

        bucket.append(now)
        return await handler(event, data)

    async def _notify_limit(self, event: TelegramObject, locale: str) -> None:
        text = self.i18n.gettext("throttle.limited", locale=locale)
        if isinstance(event, CallbackQuery):
            await event.answer(text, show_alert=False)
        elif isinstance(event, Message):
            await event.answer(text, parse_mode=None)


__all__ = ["ThrottleMiddleware"]
