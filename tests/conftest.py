import io
import json

import pytest
from PIL import Image

from appshots.assets import AssetStore
from appshots.models import ScreenshotTarget
from appshots.project import normalize_slide
from appshots.specs import get_target_spec


def make_png(width: int, height: int, color=(220, 20, 20)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png


@pytest.fixture
def store(tmp_path):
    return AssetStore(tmp_path / "assets")


@pytest.fixture
def phone_spec():
    return get_target_spec(ScreenshotTarget.IPHONE_6_9)


@pytest.fixture
def tablet_spec():
    return get_target_spec(ScreenshotTarget.IPAD_13)


@pytest.fixture
def make_slide():
    def _make(**overrides):
        return normalize_slide(overrides)

    return _make


@pytest.fixture
def write_project(tmp_path):
    def _write(data, name="project.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
