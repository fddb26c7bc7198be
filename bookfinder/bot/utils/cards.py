"""Text and keyboard rendering for result cards and the detail view."""

from __future__ import annotations

from typing import NamedTuple, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from bookfinder.domain.models import BookDoc
from bookfinder.i18n import I18nService

BOOK_CALLBACK_PREFIX = "book:"
CLOSE_CALLBACK = "close"
CARD_AUTHOR_LIMIT = 3
CARD_LINE_LIMIT = 180
DETAIL_AUTHOR_LIMIT = 10
DETAIL_PUBLISHER_LIMIT = 2
DETAIL_SUBJECT_LIMIT = 5
# Telegram rejects inline buttons whose text exceeds 64 bytes.
BUTTON_TEXT_LIMIT = 60
# Telegram counts message length in UTF-16 code units, 4096 at most.
MESSAGE_TEXT_LIMIT = 4000
ELLIPSIS = "..."


class BookCallback(NamedTuple):
    generation: int
    index: int


def join_or(values: Sequence[str] | None, placeholder: str, *, limit: int | None = None) -> str:
    if not values:
        return placeholder
    picked = values[:limit] if limit is not None else values
    return ", ".join(picked)


def join_authors(values: Sequence[str] | None, placeholder: str, *, limit: int) -> str:
    text = join_or(values, placeholder, limit=limit)
    if values and len(values) > limit:
        text = f"{text} et al."
    return text


def card_line(doc: BookDoc, i18n: I18nService, *, locale: str | None = None) -> str:
    authors = join_authors(
        doc.author_name,
        i18n.gettext("card.unknown_author", locale=locale),
        limit=CARD_AUTHOR_LIMIT,
    )
    line = f"{doc.title} by {authors}" if doc.title else authors
    return truncate_text(line, CARD_LINE_LIMIT)


def format_results(
    query: str,
    results: Sequence[BookDoc],
    i18n: I18nService,
    *,
    locale: str | None = None,
) -> str:
    lines = [i18n.gettext("search.results_header", locale=locale, query=query.strip(), count=len(results))]
    for position, doc in enumerate(results, start=1):
        lines.append(f"{position}. {card_line(doc, i18n, locale=locale)}")
    return fit_message("\n".join(lines))


def results_keyboard(results: Sequence[BookDoc], generation: int = 0) -> InlineKeyboardMarkup:
    rows = [
        [
            InlineKeyboardButton(
                text=_button_text(f"{index + 1}. {doc.title or '?'}"),
                callback_data=f"{BOOK_CALLBACK_PREFIX}{generation}:{index}",
            )
        ]
        for index, doc in enumerate(results)
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def format_detail(
    doc: BookDoc,
    i18n: I18nService,
    *,
    cover_url: str,
    locale: str | None = None,
) -> str:
    unknown = i18n.gettext("detail.unknown", locale=locale)
    not_available = i18n.gettext("detail.not_available", locale=locale)
    year = str(doc.first_publish_year) if doc.first_publish_year else not_available

    def label(key: str) -> str:
        return i18n.gettext(key, locale=locale)

    # The cover line goes last and must survive truncation.
    cover_line = f"{label('detail.cover')}: {cover_url}"
    body = "\n".join(
        [
            doc.title,
            f"{label('detail.author')}: "
            f"{join_authors(doc.author_name, unknown, limit=DETAIL_AUTHOR_LIMIT)}",
            f"{label('detail.year')}: {year}",
            f"{label('detail.publisher')}: "
            f"{join_or(doc.publisher, not_available, limit=DETAIL_PUBLISHER_LIMIT)}",
            f"{label('detail.subjects')}: "
            f"{join_or(doc.subject, not_available, limit=DETAIL_SUBJECT_LIMIT)}",
        ]
    )
    body = truncate_text(body, MESSAGE_TEXT_LIMIT - _utf16_len(cover_line) - 1)
    return f"{body}\n{cover_line}"


def detail_keyboard(i18n: I18nService, *, locale: str | None = None) -> InlineKeyboardMarkup:
    close = InlineKeyboardButton(
        text=i18n.gettext("detail.close", locale=locale),
        callback_data=CLOSE_CALLBACK,
    )
    return InlineKeyboardMarkup(inline_keyboard=[[close]])


def parse_book_callback(data: str | None) -> BookCallback | None:
    if not data or not data.startswith(BOOK_CALLBACK_PREFIX):
        return None
    generation, _, index = data[len(BOOK_CALLBACK_PREFIX):].partition(":")
    if not (generation.isdigit() and index.isdigit()):
        return None
    return BookCallback(int(generation), int(index))


def fit_message(text: str, limit: int = MESSAGE_TEXT_LIMIT) -> str:
    """Drop whole trailing lines until ``text`` fits a single Telegram message."""

    if _utf16_len(text) <= limit:
        return text
    lines = text.split("\n")
    while len(lines) > 1 and _utf16_len("\n".join(lines + [ELLIPSIS])) > limit:
        lines.pop()
    return truncate_text("\n".join(lines + [ELLIPSIS]), limit)


def truncate_text(text: str, limit: int) -> str:
    if _utf16_len(text) <= limit:
        return text
    trimmed = text[:limit]
    while trimmed and _utf16_len(trimmed) > limit - len(ELLIPSIS):
        trimmed = trimmed[:-1]
    return f"{trimmed.rstrip()}{ELLIPSIS}"


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _button_text(text: str) -> str:
    if len(text.encode("utf-8")) <= BUTTON_TEXT_LIMIT:
        return text
    trimmed = text[:BUTTON_TEXT_LIMIT]
    while len(trimmed.encode("utf-8")) > BUTTON_TEXT_LIMIT - 3:
        trimmed = trimmed[:-1]
    return f"{trimmed.rstrip()}..."


__all__ = [
    "BOOK_CALLBACK_PREFIX",
    "BookCallback",
    "CLOSE_CALLBACK",
    "MESSAGE_TEXT_LIMIT",
    "card_line",
    "detail_keyboard",
    "fit_message",
    "format_detail",
    "format_results",
    "join_authors",
    "join_or",
    "parse_book_callback",
    "results_keyboard",
    "truncate_text",
]
