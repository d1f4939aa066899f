"""
Locale catalogs (en, hi) for reason and error messages.
"""

from .translator import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    get_translator,
    resolve_locale,
    translate,
)

__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "get_translator",
    "resolve_locale",
    "translate",
]
