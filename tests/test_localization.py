from appshots.localization import locale_display_name, resolve_localized_text
from appshots.models import LocalizedText


def _slide(make_slide, localized=None):
    data = {"text": {"content": "Base headline", "subCaption": "Base sub"}}
    if localized is not None:
        data["localizedText"] = localized
    return make_slide(**data)


class TestResolveLocalizedText:
    def test_no_locale_returns_base_text(self, make_slide):
        slide = _slide(make_slide, {"fr-FR": {"content": "Bonjour", "subCaption": "Salut"}})
        assert resolve_localized_text(slide, None, "fr-FR") == LocalizedText("Base headline", "Base sub")

    def test_no_localized_map_returns_base_text(self, make_slide):
        slide = _slide(make_slide)
        assert resolve_localized_text(slide, "fr-FR", "en-US") == LocalizedText("Base headline", "Base sub")

    def test_exact_locale_wins(self, make_slide):
        slide = _slide(
            make_slide,
            {
                "fr-FR": {"content": "Bonjour", "subCaption": "Salut"},
                "en-US": {"content": "Hello", "subCaption": "Hi"},
            },
        )
        assert resolve_localized_text(slide, "fr-FR", "en-US") == LocalizedText("Bonjour", "Salut")

    def test_empty_override_is_returned_verbatim(self, make_slide):
        slide = _slide(
            make_slide,
            {
                "de-DE": {"content": "", "subCaption": ""},
                "en-US": {"content": "Hello", "subCaption": "Hi"},
            },
        )
        assert resolve_localized_text(slide, "de-DE", "en-US") == LocalizedText("", "")

    def test_falls_back_to_default_locale(self, make_slide):
        slide = _slide(make_slide, {"en-US": {"content": "Hello", "subCaption": "Hi"}})
        assert resolve_localized_text(slide, "ja", "en-US") == LocalizedText("Hello", "Hi")

    def test_falls_back_to_base_text_without_default_entry(self, make_slide):
        slide = _slide(make_slide, {"en-US": {"content": "Hello", "subCaption": "Hi"}})
        assert resolve_localized_text(slide, "ja", "ko") == LocalizedText("Base headline", "Base sub")
        assert resolve_localized_text(slide, "ja", None) == LocalizedText("Base headline", "Base sub")

    def test_result_is_a_copy(self, make_slide):
        slide = _slide(make_slide, {"fr-FR": {"content": "Bonjour", "subCaption": "Salut"}})
        resolved = resolve_localized_text(slide, "fr-FR", None)
        resolved.content = "changed"
        assert slide.localized_text["fr-FR"].content == "Bonjour"


def test_locale_display_name():
    assert locale_display_name("fr-FR") == "French"
    assert locale_display_name("xx-YY") == "xx-YY"
