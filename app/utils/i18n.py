"""
Localized text helpers.
Listing titles and descriptions are maps keyed by language code.
"""

from typing import Mapping, Optional

SUPPORTED_LOCALES = ("en", "ru", "uz")
DEFAULT_LOCALE = "en"


def localize(
    text: Optional[Mapping[str, Optional[str]]],
    locale: str = DEFAULT_LOCALE,
    fallback: str = DEFAULT_LOCALE,
) -> str:
    """
    Pick the best available translation from a localized text map.

    Tries the requested locale, then the fallback, then the remaining
    supported locales in order. Returns an empty string when nothing is set.
    """
    if not text:
        return ""

    candidates = [locale, fallback] + [code for code in SUPPORTED_LOCALES if code not in (locale, fallback)]
    for code in candidates:
        value = text.get(code)
        if value:
            return value
    return ""
