import json
import logging
from typing import Any, Optional

from .errors import TranslationError
from .localization import locale_display_name
from .models import LocalizedText, Project

logger = logging.getLogger(__name__)


class LocaleTranslator:
    """
    Adapter for LLM-powered translation of slide captions.

    `llm` is any LangChain chat model (e.g. `ChatOpenAI`); it only needs an
    `invoke(prompt)` method returning a message with `.content`.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    def translate(
        self,
        *,
        content: str,
        sub_caption: str,
        target_locale: str,
        source_locale: Optional[str] = None,
    ) -> Optional[LocalizedText]:
        """
        Translate a headline and sub-caption into `target_locale`.

        Returns None when the model's reply cannot be parsed.
        """
        if self.llm is None:
            raise TranslationError(
                "LocaleTranslator.llm is None. Configure a real LLM instance "
                "before calling translate()."
            )

        prompt = self._build_prompt(
            content=content,
            sub_caption=sub_caption,
            target_locale=target_locale,
            source_locale=source_locale,
        )

        raw = self.llm.invoke(prompt)
        text = getattr(raw, "content", None) or str(raw)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Unparseable translation for %s: %r", target_locale, text[:200])
            return None

        if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
            logger.warning("Translation for %s is missing a content string", target_locale)
            return None

        translated_sub = payload.get("subCaption") or payload.get("sub_caption") or ""
        return LocalizedText(
            content=payload["content"].strip(),
            sub_caption=str(translated_sub).strip() if sub_caption else "",
        )

    @staticmethod
    def _build_prompt(
        *,
        content: str,
        sub_caption: str,
        target_locale: str,
        source_locale: Optional[str],
    ) -> str:
        source = locale_display_name(source_locale) if source_locale else "the source language"
        return (
            "You are an expert App Store copywriter localizing marketing screenshot captions.\n"
            f"- Translate from {source} into {locale_display_name(target_locale)} (locale {target_locale}).\n"
            "- Keep the headline as short and punchy as the original; do not add words.\n"
            "- Keep product names and trademarks untranslated.\n"
            "- If the sub-caption is empty, return an empty string for it.\n\n"
            f'Headline: "{content}"\n'
            f'Sub-caption: "{sub_caption}"\n\n'
            "Return ONLY a valid JSON object with this exact shape and no surrounding commentary:\n"
            "{\n"
            '  "content": "string",\n'
            '  "subCaption": "string"\n'
            "}\n"
        )


def fill_missing_translations(project: Project, translator: LocaleTranslator) -> int:
    """
    Add translated captions for every (slide, locale) pair without an entry.

    Existing entries, including empty ones, are left untouched. Returns the
    number of entries added.
    """
    added = 0
    for slide in project.slides:
        for locale in project.locales or []:
            if slide.localized_text is not None and locale in slide.localized_text:
                continue

            translated = translator.translate(
                content=slide.text.content,
                sub_caption=slide.text.sub_caption,
                target_locale=locale,
            )
            if translated is None:
                continue

            if slide.localized_text is None:
                slide.localized_text = {}
            slide.localized_text[locale] = translated
            added += 1
            logger.info("Translated slide %s into %s", slide.id, locale)
    return added
