"""
Message catalogs and lookup for locale-rendered messages.

Catalogs are JSON files under ``locales/`` named ``<locale>.json``. Keys use
dotted notation (``errors.unsupportedCondition``) and values interpolate
``{name}`` placeholders from the supplied variables.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

LOCALES_DIR = Path(__file__).parent / "locales"
DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: Tuple[str, ...] = ("en", "hi")


class _KeepMissing(dict):
    """Leave unknown placeholders untouched instead of raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


@lru_cache(maxsize=None)
def load_catalog(locale: str) -> Dict[str, Any]:
    """Load the catalog for a locale; unknown locales yield an empty catalog."""
    path = LOCALES_DIR / f"{locale}.json"
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _lookup(catalog: Mapping[str, Any], key: str) -> Optional[str]:
    node: Any = catalog
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def resolve_locale(locale: Optional[str]) -> str:
    """Return a supported locale, falling back to the default."""
    if locale and locale in SUPPORTED_LOCALES:
        return locale
    return DEFAULT_LOCALE


def translate(locale: Optional[str], key: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Render the message for ``key`` in ``locale``.

    Falls back to the default locale when the key is missing, and to the
    key itself when no catalog defines it.
    """
    message = _lookup(load_catalog(resolve_locale(locale)), key)
    if message is None:
        message = _lookup(load_catalog(DEFAULT_LOCALE), key)
    if message is None:
        return key
    if not variables:
        return message
    return message.format_map(_KeepMissing({k: str(v) for k, v in variables.items()}))


def get_translator(locale: Optional[str]) -> Callable[..., str]:
    """Bind a translator to a locale."""
    def _translate(key: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        return translate(locale, key, variables)
    return _translate
