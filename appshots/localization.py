from typing import Optional

from .models import LocalizedText, Slide


COMMON_LOCALES = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "es-ES": "Spanish (Spain)",
    "es-MX": "Spanish (Mexico)",
    "fr-FR": "French",
    "de-DE": "German",
    "it-IT": "Italian",
    "pt-BR": "Portuguese (Brazil)",
    "ja": "Japanese",
    "ko": "Korean",
    "zh-Hans": "Chinese (Simplified)",
    "zh-Hant": "Chinese (Traditional)",
    "ar-SA": "Arabic",
    "nl-NL": "Dutch",
    "ru": "Russian",
    "tr": "Turkish",
    "hi": "Hindi",
    "th": "Thai",
}


def locale_display_name(code: str) -> str:
    return COMMON_LOCALES.get(code, code)


def resolve_localized_text(
    slide: Slide,
    locale: Optional[str],
    default_locale: Optional[str],
) -> LocalizedText:
    """
    Resolve the headline and sub-caption shown for `slide` in `locale`.

    Fallback chain: exact locale entry, then the project default locale, then
    the slide's base text. An existing entry is returned as-is even when its
    strings are empty (not yet translated).
    """
    base = LocalizedText(content=slide.text.content, sub_caption=slide.text.sub_caption)

    if not locale or slide.localized_text is None:
        return base

    entry = slide.localized_text.get(locale)
    if entry is not None:
        return LocalizedText(content=entry.content, sub_caption=entry.sub_caption)

    if default_locale and default_locale in slide.localized_text:
        fallback = slide.localized_text[default_locale]
        return LocalizedText(content=fallback.content, sub_caption=fallback.sub_caption)

    return base
