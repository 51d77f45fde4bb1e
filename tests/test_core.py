import io
import json
import zipfile
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from PIL import Image

from appshots.core import ScreenshotPipeline
from appshots.errors import ExportError
from appshots.project import load_project
from appshots.translator import LocaleTranslator


@pytest.fixture
def assets_dir(tmp_path, png_bytes):
    root = tmp_path / "assets"
    root.mkdir()
    (root / "screenshot-good").write_bytes(png_bytes(1320, 2868))
    (root / "screenshot-wide").write_bytes(png_bytes(1000, 1000))
    (root / "screenshot-broken").write_bytes(b"garbage")
    return root


@pytest.fixture
def pipeline(assets_dir, tmp_path):
    return ScreenshotPipeline(assets_dir=assets_dir, output_root=tmp_path / "outputs")


def _project(**overrides):
    data = {
        "id": "demo",
        "name": "Demo",
        "slides": [{"id": "s1", "screenshotRef": "screenshot-good", "text": {"content": "Build habits"}}],
    }
    data.update(overrides)
    return data


class TestValidate:
    def test_reports_each_slide(self, pipeline, write_project):
        path = write_project(
            _project(
                slides=[
                    {"id": "a", "screenshotRef": "screenshot-good"},
                    {"id": "b", "screenshotRef": "screenshot-wide"},
                    {"id": "c", "screenshotRef": "screenshot-broken"},
                    {"id": "d", "screenshotRef": "screenshot-missing"},
                    {"id": "e"},
                ]
            )
        )
        checks = pipeline.validate(load_project(path))

        assert [c.slide_id for c in checks] == ["a", "b", "c", "d", "e"]
        assert checks[0].result.is_compatible
        assert not checks[0].needs_attention

        assert not checks[1].result.is_compatible
        assert checks[1].result.message.startswith("This screenshot is 1000 x 1000.")
        assert checks[1].needs_attention

        assert checks[2].error == "Unable to read screenshot dimensions. Please upload another screenshot."
        assert checks[3].error is not None
        assert checks[4].result is None
        assert not checks[4].needs_attention


class TestRun:
    def test_preview(self, pipeline, write_project, tmp_path):
        out = pipeline.run(write_project(_project()), mode="preview", preview_scale=0.25)
        assert out == tmp_path / "outputs" / "demo" / "preview-1.png"
        with Image.open(out) as img:
            assert img.size == (330, 717)

    def test_single(self, pipeline, write_project):
        out = pipeline.run(write_project(_project()), mode="single")
        assert out.name == "screenshot-1.png"
        with Image.open(out) as img:
            assert img.size == (1320, 2868)
            assert img.mode == "RGB"

    def test_all(self, pipeline, write_project):
        out = pipeline.run(write_project(_project()), mode="all")
        assert out.name == "screenshots.zip"
        with zipfile.ZipFile(out) as zf:
            assert zf.namelist() == ["screenshot-1.png"]

    def test_locales(self, pipeline, write_project):
        path = write_project(
            _project(
                screenshotTarget="ipad-13",
                locales=["en-US", "fr-FR"],
                defaultLocale="en-US",
                slides=[{"id": "s1", "localizedText": {"fr-FR": {"content": "Bonjour"}}}],
            )
        )
        out = pipeline.run(path, mode="locales")
        assert out.name == "screenshots-localized.zip"
        with zipfile.ZipFile(out) as zf:
            assert zf.namelist() == ["en-US/screenshot-1.png", "fr-FR/screenshot-1.png"]
            with Image.open(io.BytesIO(zf.read("fr-FR/screenshot-1.png"))) as img:
                assert img.size == (2064, 2752)

    def test_locales_mode_needs_locales(self, pipeline, write_project):
        with pytest.raises(ValueError):
            pipeline.run(write_project(_project()), mode="locales")

    def test_unknown_mode(self, pipeline, write_project):
        with pytest.raises(ValueError):
            pipeline.run(write_project(_project()), mode="gif")

    def test_slide_out_of_range(self, pipeline, write_project):
        with pytest.raises(ValueError):
            pipeline.run(write_project(_project()), mode="single", slide_index=3)

    def test_unreadable_screenshot_fails_the_export(self, pipeline, write_project):
        path = write_project(_project(slides=[{"id": "s1", "screenshotRef": "screenshot-broken"}]))
        with pytest.raises(ExportError):
            pipeline.run(path, mode="all")

    def test_translations_are_saved_back(self, assets_dir, tmp_path, write_project):
        llm = MagicMock()
        llm.invoke.return_value = SimpleNamespace(content=json.dumps({"content": "Créez des habitudes", "subCaption": ""}))
        pipeline = ScreenshotPipeline(
            assets_dir=assets_dir,
            output_root=tmp_path / "outputs",
            translator=LocaleTranslator(llm),
        )
        path = write_project(_project(locales=["fr-FR"]))

        pipeline.run(path, mode="preview", locale="fr-FR")

        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["slides"][0]["localizedText"]["fr-FR"]["content"] == "Créez des habitudes"
        llm.invoke.assert_called_once()
