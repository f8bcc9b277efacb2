"""Translation catalog for tour chrome (button labels, progress, welcome text).

 - A default locale (``en``) always exists and is the fallback.
 - A key missing after fallback returns the key itself so gaps are visible.
 - Placeholders use ``str.format`` named fields; a missing variable raises
   ``KeyError`` naming the translation key.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "register_catalog",
    "set_locale",
    "get_locale",
    "t",
    "translate",
    "action_label",
]

_DEFAULT_LOCALE = "en"
_current_locale = _DEFAULT_LOCALE

_catalogs: Dict[str, Dict[str, str]] = {}


def register_catalog(locale: str, catalog: Dict[str, str]) -> None:
    """Register or extend a locale catalog (last registration wins per key)."""
    _catalogs.setdefault(locale, {}).update(catalog)


def set_locale(locale: str) -> None:
    global _current_locale
    _current_locale = locale


def get_locale() -> str:
    return _current_locale


def _lookup(locale: str, key: str) -> Optional[str]:
    return _catalogs.get(locale, {}).get(key)


def translate(key: str, **variables: Any) -> str:
    text = _lookup(_current_locale, key)
    if text is None and _current_locale != _DEFAULT_LOCALE:
        text = _lookup(_DEFAULT_LOCALE, key)
    if text is None:
        text = key
    if "{" in text and "}" in text:
        try:
            return text.format(**variables)
        except KeyError as e:
            raise KeyError(f"Missing interpolation variable {e.args[0]!r} for key '{key}'") from e
    return text


t = translate


def action_label(direction: str, override: Optional[str] = None) -> str:
    """Button label for ``direction``; a step's explicit override wins."""
    if override:
        return override
    return translate(f"tour.button.{direction}")


register_catalog(
    _DEFAULT_LOCALE,
    {
        "tour.button.next": "Next",
        "tour.button.prev": "Back",
        "tour.button.skip": "Skip tour",
        "tour.button.finish": "Finish",
        "tour.progress": "Step {current} of {total}",
        "tour.welcome.title": "Welcome!",
        "tour.welcome.body": "Would you like a quick tour of {name}?",
        "tour.content.loading": "Loading personalized content...",
        "tour.target.missing": "This part of the screen is not available right now.",
    },
)
