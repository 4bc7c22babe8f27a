# budgly/core/settings.py
"""Display preferences (currency and language) kept in a local JSON file.

The file maps storage keys to settings blobs, so several chats can share one
file. A blob is read once when the store is created and rewritten whole on
every change.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from budgly.core.exceptions import SettingsStorageError, ValidationError

logger = logging.getLogger(__name__)

SETTINGS_STORAGE_KEY = "@budgly_settings"


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "symbol": self.symbol, "name": self.name}


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "name": self.name, "nativeName": self.native_name}


CURRENCIES: Dict[str, Currency] = {c.code: c for c in [
    Currency("USD", "$", "US Dollar"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("JPY", "¥", "Japanese Yen"),
    Currency("BRL", "R$", "Brazilian Real"),
    Currency("INR", "₹", "Indian Rupee"),
    Currency("CAD", "C$", "Canadian Dollar"),
    Currency("AUD", "A$", "Australian Dollar"),
    Currency("CHF", "CHF", "Swiss Franc"),
    Currency("SEK", "kr", "Swedish Krona"),
    Currency("PLN", "zł", "Polish Zloty"),
]}

LANGUAGES: Dict[str, Language] = {lang.code: lang for lang in [
    Language("en", "English", "English"),
    Language("es", "Spanish", "Español"),
    Language("pt", "Portuguese", "Português"),
    Language("fr", "French", "Français"),
    Language("de", "German", "Deutsch"),
]}

# Currencies written as "12.50 €" rather than "€12.50"
SYMBOL_AFTER = {"EUR", "CHF", "SEK", "NOK", "DKK", "PLN"}


@dataclass(frozen=True)
class UserSettings:
    currency: Currency
    language: Language

    def to_dict(self) -> Dict[str, Any]:
        return {"currency": self.currency.to_dict(), "language": self.language.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserSettings:
        # Only the codes matter; names are taken from the catalog.
        currency = CURRENCIES.get((data.get("currency") or {}).get("code"), DEFAULT_SETTINGS.currency)
        language = LANGUAGES.get((data.get("language") or {}).get("code"), DEFAULT_SETTINGS.language)
        return cls(currency=currency, language=language)


DEFAULT_SETTINGS = UserSettings(currency=CURRENCIES["USD"], language=LANGUAGES["en"])


def format_currency(amount: float, currency: Currency, decimals: int = 2) -> str:
    sign = "-" if amount < 0 else ""
    number = f"{abs(amount):,.{decimals}f}"
    if currency.code in SYMBOL_AFTER:
        return f"{sign}{number} {currency.symbol}"
    return f"{sign}{currency.symbol}{number}"


def _read_blobs(path: Path, strict: bool = False) -> Dict[str, Any]:
    """All blobs in the file. Unreadable content counts as empty unless ``strict``."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as e:
        if strict:
            raise SettingsStorageError(f"Settings file {path} is unreadable: {e}") from e
        logger.warning("Could not read settings from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        if strict:
            raise SettingsStorageError(f"Settings file {path} does not hold an object")
        return {}
    return data


def _write_blobs(path: Path, blobs: Dict[str, Any]) -> None:
    # the target is only ever replaced by a complete file
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(blobs, handle, indent=2, sort_keys=True, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise


class SettingsStore:
    def __init__(self, path: Union[str, Path], key: str = SETTINGS_STORAGE_KEY):
        self.path = Path(path)
        self.key = key
        self._settings = self._load()

    @property
    def settings(self) -> UserSettings:
        return self._settings

    @property
    def currency(self) -> Currency:
        return self._settings.currency

    @property
    def language(self) -> Language:
        return self._settings.language

    def set_currency(self, currency: Union[Currency, str]) -> Currency:
        if isinstance(currency, str):
            code = currency.strip().upper()
            if code not in CURRENCIES:
                raise ValidationError(f"Unknown currency '{currency}'")
            currency = CURRENCIES[code]
        self._save(UserSettings(currency=currency, language=self._settings.language))
        return currency

    def set_language(self, language: Union[Language, str]) -> Language:
        if isinstance(language, str):
            code = language.strip().lower()
            if code not in LANGUAGES:
                raise ValidationError(f"Unknown language '{language}'")
            language = LANGUAGES[code]
        self._save(UserSettings(currency=self._settings.currency, language=language))
        return language

    def _load(self) -> UserSettings:
        blob = _read_blobs(self.path).get(self.key)
        if not isinstance(blob, dict):
            return DEFAULT_SETTINGS
        return UserSettings.from_dict(blob)

    def _save(self, settings: UserSettings) -> None:
        blobs = _read_blobs(self.path, strict=True)
        blobs[self.key] = settings.to_dict()
        _write_blobs(self.path, blobs)
        self._settings = settings
