"""Telegram handlers for title search, result cards and the detail view."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from bookfinder.bot.utils.cards import (
    BOOK_CALLBACK_PREFIX,
    CLOSE_CALLBACK,
    detail_keyboard,
    format_detail,
    format_results,
    parse_book_callback,
    results_keyboard,
)
from bookfinder.bot.utils.telegram import answer_with_retry, edit_with_retry
from bookfinder.i18n import I18nService
from bookfinder.logging import logger
from bookfinder.services.exceptions import SelectionError
from bookfinder.services.search import BookFinder

router = Router()


@router.message(CommandStart())
async def handle_start(message: Message, finder: BookFinder, i18n: I18nService) -> None:
    locale = i18n.locale_for(message.from_user)
    name = message.from_user.full_name if message.from_user else ""
    await answer_with_retry(
        message,
        i18n.gettext("start.greeting", locale=locale, name=name),
        parse_mode=None,
    )
    if finder.status.phase != "idle":
        text, markup = render_state(finder, i18n, locale=locale)
        await answer_with_retry(message, text, reply_markup=markup, parse_mode=None)


@router.message(Command("help"))
async def handle_help(message: Message, i18n: I18nService) -> None:
    locale = i18n.locale_for(message.from_user)
    await answer_with_retry(message, i18n.gettext("help.text", locale=locale), parse_mode=None)


@router.message(Command("last"))
async def handle_last(message: Message, finder: BookFinder, i18n: I18nService) -> None:
    locale = i18n.locale_for(message.from_user)
    status = finder.status
    status_text = status.phase if status.message is None else f"{status.phase} ({status.message})"
    await answer_with_retry(
        message,
        i18n.gettext(
            "last.summary",
            locale=locale,
            query=finder.query or i18n.gettext("last.empty_query", locale=locale),
            status=status_text,
        ),
        parse_mode=None,
    )


@router.message(Command("search"))
async def handle_search_command(
    message: Message,
    command: CommandObject,
    finder: BookFinder,
    i18n: I18nService,
) -> None:
    await run_search(message, finder, i18n, command.args or "")


@router.message(F.text & ~F.text.startswith("/"))
async def handle_text(message: Message, finder: BookFinder, i18n: I18nService) -> None:
    await run_search(message, finder, i18n, message.text or "")


@router.callback_query(F.data.startswith(BOOK_CALLBACK_PREFIX))
async def handle_book_selected(callback: CallbackQuery, finder: BookFinder, i18n: I18nService) -> None:
    locale = i18n.locale_for(callback.from_user)
    parsed = parse_book_callback(callback.data)
    try:
        if parsed is None:
            raise SelectionError(f"Malformed selection payload: {callback.data!r}")
        doc = finder.select_index(parsed.index, generation=parsed.generation)
    except SelectionError as exc:
        logger.info("book_selection_rejected", data=callback.data, reason=str(exc))
        await callback.answer(i18n.gettext("detail.stale", locale=locale), show_alert=True)
        return

    await callback.answer()
    if not isinstance(callback.message, Message):
        return
    cover = finder.cover_url(doc, "L")
    await answer_with_retry(
        callback.message,
        format_detail(doc, i18n, cover_url=cover, locale=locale),
        reply_markup=detail_keyboard(i18n, locale=locale),
        parse_mode=None,
    )


@router.callback_query(F.data == CLOSE_CALLBACK)
async def handle_close(callback: CallbackQuery, finder: BookFinder) -> None:
    finder.dismiss()
    await callback.answer()
    if not isinstance(callback.message, Message):
        return
    try:
        await callback.message.delete()
    except TelegramBadRequest as exc:
        logger.warning("detail_message_delete_failed", error=str(exc))


async def run_search(message: Message, finder: BookFinder, i18n: I18nService, text: str) -> None:
    locale = i18n.locale_for(message.from_user)
    placeholder = await answer_with_retry(
        message,
        i18n.gettext("search.loading", locale=locale),
        parse_mode=None,
    )
    await finder.search(text)
    rendered, markup = render_state(finder, i18n, locale=locale)
    await edit_with_retry(placeholder, rendered, reply_markup=markup, parse_mode=None)


def render_state(
    finder: BookFinder,
    i18n: I18nService,
    *,
    locale: str | None = None,
) -> tuple[str, InlineKeyboardMarkup | None]:
    status = finder.status
    if status.phase == "succeeded":
        query = finder.query_store.last_successful or finder.query
        return (
            format_results(query, finder.results, i18n, locale=locale),
            results_keyboard(finder.results, finder.generation),
        )
    if status.phase == "failed":
        return status.message or "", None
    if status.phase == "loading":
        return i18n.gettext("search.loading", locale=locale), None
    return i18n.gettext("search.idle", locale=locale), None


__all__ = ["router", "render_state", "run_search"]
