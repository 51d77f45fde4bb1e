import json

import pytest

from appshots.layout import compute_layout
from appshots.models import (
    AnglePreset,
    GradientBackground,
    ImageBackground,
    LocalizedText,
    ScreenshotTarget,
    SolidBackground,
)
from appshots.project import (
    create_project,
    create_slide,
    load_project,
    normalize_project,
    normalize_slide,
    project_to_dict,
    save_project,
)
from appshots.specs import get_active_device_spec, get_target_spec


class TestSlideDefaults:
    def test_empty_slide_gets_every_default(self):
        slide = normalize_slide({})
        assert slide.id
        assert slide.text.vertical_position == 12
        assert slide.text.sub_caption_size == 42
        assert slide.text.sub_caption_spacing == 12
        assert slide.text.horizontal_offset == 0
        assert slide.device.vertical_position == 35
        assert slide.device.frame_scale == 55
        assert slide.device.horizontal_position == 50
        assert slide.device.allow_off_canvas_position is False
        assert slide.allow_mismatched_screenshot is False
        assert slide.screenshot_ref is None
        assert slide.localized_text is None
        assert isinstance(slide.background, SolidBackground)

    @pytest.mark.parametrize("bad", ["abc", None, True, float("nan"), [1]])
    def test_non_numeric_values_fall_back_to_defaults(self, bad):
        slide = normalize_slide({"text": {"verticalPosition": bad, "size": bad}, "device": {"frameScale": bad}})
        assert slide.text.vertical_position == 12
        assert slide.text.size == 96
        assert slide.device.frame_scale == 55

    def test_numbers_beyond_float_range_fall_back_to_defaults(self):
        slide = normalize_slide({"device": {"frameScale": 10**400}, "text": {"size": 10**400}})
        assert slide.device.frame_scale == 55
        assert slide.text.size == 96

    def test_out_of_range_numbers_are_kept_for_layout_to_clamp(self):
        slide = normalize_slide({"device": {"horizontalPosition": 200}})
        assert slide.device.horizontal_position == 200

    def test_persisted_color_names(self):
        assert normalize_slide({"text": {"color": "white"}}).text.color == "light"
        assert normalize_slide({"text": {"color": "black"}}).text.color == "dark"
        assert normalize_slide({"text": {"color": "auto"}}).text.color == "dark"

    def test_sub_caption_font_defaults_to_headline_font(self):
        slide = normalize_slide({"text": {"font": "playfair"}})
        assert slide.text.sub_caption_font == "playfair"

    def test_unknown_enums_fall_back(self):
        slide = normalize_slide({"text": {"font": "comic-sans", "align": "justify"}, "device": {"angle": "upside-down"}})
        assert slide.text.font == "inter"
        assert slide.text.align == "center"
        assert slide.device.angle is AnglePreset.STRAIGHT


class TestDeviceModelNormalization:
    def test_legacy_model_is_remapped(self):
        assert normalize_slide({"device": {"model": "iphone-16-pro-max"}}).device.model == "iphone-16-pro"
        assert normalize_slide({"device": {"model": "iphone-15-pro-max"}}).device.model == "iphone-16-pro"

    def test_legacy_model_is_remapped_before_layout(self):
        slide = normalize_slide({"device": {"model": "iphone-16-pro-max"}})
        target = get_target_spec(ScreenshotTarget.IPHONE_6_9)
        layout = compute_layout(slide, target, get_active_device_spec(target.target, slide.device.model))
        assert layout.device.frame_src == "iphone-16-pro.png"
        assert layout.device.frame.height / layout.device.frame.width == pytest.approx(2760 / 1350)

    def test_unknown_model_uses_default(self):
        assert normalize_slide({"device": {"model": "nokia-3310"}}).device.model == "iphone-17-pro-max"

    def test_current_model_is_kept(self):
        assert normalize_slide({"device": {"model": "iphone-17-pro"}}).device.model == "iphone-17-pro"


class TestBackgroundNormalization:
    def test_gradient(self):
        bg = normalize_slide({"background": {"type": "gradient", "gradient": {"colors": ["#111111", "#222222"], "direction": 135}}}).background
        assert bg == GradientBackground(colors=("#111111", "#222222"), direction=135)

    def test_gradient_without_colors_uses_default_preset(self):
        bg = normalize_slide({"background": {"type": "gradient"}}).background
        assert bg == GradientBackground()

    def test_image(self):
        bg = normalize_slide({"background": {"type": "image", "imageRef": "bg-image-1", "blur": 12}}).background
        assert bg == ImageBackground(image_ref="bg-image-1", blur=12)

    def test_negative_blur_is_zeroed(self):
        bg = normalize_slide({"background": {"type": "image", "imageRef": "x", "blur": -5}}).background
        assert bg.blur == 0

    def test_solid(self):
        assert normalize_slide({"background": {"type": "solid", "color": "#1E3A5F"}}).background == SolidBackground("#1E3A5F")


class TestProjectNormalization:
    def test_missing_target_uses_phone_default(self):
        assert normalize_project({}).screenshot_target is ScreenshotTarget.IPHONE_6_9

    def test_legacy_target_uses_phone_default(self):
        assert normalize_project({"screenshotTarget": "iphone-6_5"}).screenshot_target is ScreenshotTarget.IPHONE_6_9

    def test_tablet_target_is_kept(self):
        assert normalize_project({"screenshotTarget": "ipad-13"}).screenshot_target is ScreenshotTarget.IPAD_13

    def test_locales_are_deduplicated_in_order(self):
        project = normalize_project({"locales": ["en-US", "fr-FR", "en-US", 7, ""], "defaultLocale": "fr-FR"})
        assert project.locales == ["en-US", "fr-FR"]
        assert project.default_locale == "fr-FR"

    def test_default_locale_outside_locales_is_dropped(self):
        project = normalize_project({"locales": ["en-US"], "defaultLocale": "de-DE"})
        assert project.default_locale is None

    def test_localized_text_keeps_empty_entries(self):
        project = normalize_project(
            {"slides": [{"localizedText": {"de-DE": {"content": "", "subCaption": ""}, "fr-FR": {"content": "Salut"}}}]}
        )
        entries = project.slides[0].localized_text
        assert entries["de-DE"] == LocalizedText("", "")
        assert entries["fr-FR"] == LocalizedText("Salut", "")


class TestPersistence:
    def test_save_and_load_preserve_project(self, tmp_path):
        project = normalize_project(
            {
                "id": "p1",
                "name": "Habits",
                "createdAt": 1,
                "updatedAt": 2,
                "screenshotTarget": "ipad-13",
                "locales": ["en-US", "fr-FR"],
                "defaultLocale": "en-US",
                "slides": [
                    {
                        "id": "s1",
                        "background": {"type": "gradient", "gradient": {"colors": ["#667EEA", "#764BA2"], "direction": 135}},
                        "text": {"content": "Build habits", "color": "white", "showSubCaption": True, "subCaption": "Daily"},
                        "device": {"model": "iphone-17-pro", "angle": "slight-left", "allowOffCanvasPosition": True},
                        "screenshotRef": "screenshot-s1",
                        "allowMismatchedScreenshot": True,
                        "localizedText": {"fr-FR": {"content": "Créez des habitudes", "subCaption": "Chaque jour"}},
                    }
                ],
            }
        )
        path = tmp_path / "project.json"
        save_project(project, path)

        loaded = load_project(path)
        assert loaded.slides == project.slides
        assert loaded.screenshot_target is ScreenshotTarget.IPAD_13
        assert loaded.locales == ["en-US", "fr-FR"]
        assert loaded.default_locale == "en-US"
        assert loaded.updated_at >= 2

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["slides"][0]["text"]["color"] == "white"
        assert raw["slides"][0]["device"]["angle"] == "slight-left"

    def test_to_dict_omits_unset_locales(self):
        data = project_to_dict(create_project("Demo"))
        assert "locales" not in data
        assert "defaultLocale" not in data

    @pytest.mark.parametrize("data", [[{"id": "s1"}], "demo", 3, None])
    def test_project_file_must_hold_an_object(self, write_project, data):
        with pytest.raises(ValueError, match="JSON object"):
            load_project(write_project(data))


class TestCreate:
    def test_create_project_has_one_default_slide(self):
        project = create_project("Demo")
        assert project.name == "Demo"
        assert project.screenshot_target is ScreenshotTarget.IPHONE_6_9
        assert len(project.slides) == 1

        slide = project.slides[0]
        assert slide.text.content == "Your headline here"
        assert slide.text.font == "inter"
        assert slide.text.size == 96
        assert slide.text.color == "dark"
        assert slide.background == SolidBackground("#F0F4F8")

    def test_created_slides_have_unique_ids(self):
        assert create_slide().id != create_slide().id
