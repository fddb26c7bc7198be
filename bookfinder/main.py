"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from bookfinder.bot.middlewares import ThrottleMiddleware
from bookfinder.bot.routers import setup_routers
from bookfinder.config import get_settings
from bookfinder.db.session import Database
from bookfinder.i18n import I18nService
from bookfinder.logging import configure_logging, logger
from bookfinder.services.error_monitor import ErrorMonitor
from bookfinder.services.key_value import KeyValueStore
from bookfinder.services.openlibrary import OpenLibraryClient
from bookfinder.services.query_store import QueryStore
from bookfinder.services.search import BookFinder


async def main() -> None:
    configure_logging()
    settings = get_settings()

    database = Database(settings.storage)
    database.create_all()

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    i18n = I18nService(default_locale=settings.default_language)

    async with httpx.AsyncClient(follow_redirects=True) as http_client:
        client = OpenLibraryClient(http_client, settings.openlibrary)
        query_store = QueryStore(KeyValueStore(database), key=settings.storage.remember_key)
        finder = BookFinder(client, query_store, result_limit=settings.openlibrary.result_limit)

        dp = Dispatcher(finder=finder, i18n=i18n)
        dp.include_router(setup_routers())
        dp.errors.register(ErrorMonitor(settings).handle_error)
        throttle = ThrottleMiddleware(settings.request_limit, i18n=i18n)
        dp.message.middleware(throttle)
        dp.callback_query.middleware(throttle)

        # Not awaited: a manual search may start before the replay resolves.
        replay = asyncio.create_task(finder.replay_remembered())
        replay.add_done_callback(_log_replay_outcome)

        logger.info("bot_starting", environment=settings.environment)
        try:
            await dp.start_polling(bot)
        finally:
            await bot.session.close()
            database.dispose()


def _log_replay_outcome(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("startup_replay_failed", error=str(exc))
    else:
        logger.info("startup_replay_finished", query=task.result())


if __name__ == "__main__":
    asyncio.run(main())
