"""Locale tables for bot chrome strings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class I18nService:
    def __init__(self, *, locales_path: str | Path | None = None, default_locale: str = "en") -> None:
        self.locales_path = Path(locales_path or Path(__file__).with_name("locales"))
        self.default_locale = default_locale
        self._tables: dict[str, dict[str, str]] = {}

    def gettext(self, key: str, *, locale: str | None = None, **kwargs: Any) -> str:
        loc = normalize_locale(locale) or self.default_locale
        text = self._lookup(loc, key)
        if text is None and loc != self.default_locale:
            text = self._lookup(self.default_locale, key)
        if text is None:
            text = key
        return text.format(**kwargs) if kwargs else text

    def locale_for(self, user: Any) -> str:
        """Pick the locale from a Telegram user, falling back to the default."""

        code = normalize_locale(getattr(user, "language_code", None))
        if code and (self.locales_path / f"{code}.json").exists():
            return code
        return self.default_locale

    def _load_locale(self, locale: str) -> dict[str, str]:
        if locale not in self._tables:
            file_path = self.locales_path / f"{locale}.json"
            table: dict[str, str] = {}
            if file_path.exists():
                with file_path.open("r", encoding="utf-8") as fp:
                    table = json.load(fp)
            self._tables[locale] = table
        return self._tables[locale]

    def _lookup(self, locale: str, key: str) -> str | None:
        return self._load_locale(locale).get(key)


def normalize_locale(locale: str | None) -> str | None:
    if not locale:
        return None
    return locale.replace("_", "-").split("-", 1)[0].lower() or None


__all__ = ["I18nService", "normalize_locale"]
