"""
Project loading, saving and normalization.

This is the only place where missing or legacy persisted values are turned
into defaults. Everything downstream works on fully populated dataclasses.
"""

import json
import logging
import math
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import (
    AnglePreset,
    BackgroundConfig,
    DeviceConfig,
    GradientBackground,
    ImageBackground,
    LocalizedText,
    Project,
    Slide,
    SolidBackground,
    TextConfig,
)
from .presets import FONT_OPTIONS
from .specs import (
    DEFAULT_DEVICE_MODEL,
    LEGACY_DEVICE_MODELS,
    coerce_target,
    is_supported_device_model,
)

logger = logging.getLogger(__name__)

FONT_IDS = tuple(FONT_OPTIONS)
TEXT_ALIGNS = ("left", "center", "right")

# Persisted colour values are the editor's CSS names.
_COLOR_FROM_PERSISTED = {"white": "light", "light": "light", "black": "dark", "dark": "dark", "auto": "dark"}
_COLOR_TO_PERSISTED = {"light": "white", "dark": "black"}

DEFAULT_TEXT = TextConfig()
DEFAULT_DEVICE = DeviceConfig()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # JSON integers beyond float range
        return default
    return value if finite else default


def _flag(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def _string(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _choice(value: Any, choices, default: str) -> str:
    return value if value in choices else default


def normalize_device_model(model: Any) -> str:
    if isinstance(model, str) and model in LEGACY_DEVICE_MODELS:
        current = LEGACY_DEVICE_MODELS[model]
        logger.info("Remapping retired device model %s -> %s", model, current)
        return current
    if is_supported_device_model(model):
        return model
    if model is not None:
        logger.warning("Unknown device model %r, using %s", model, DEFAULT_DEVICE_MODEL)
    return DEFAULT_DEVICE_MODEL


def normalize_background(data: Any) -> BackgroundConfig:
    data = data if isinstance(data, dict) else {}
    kind = data.get("type")

    if kind == "gradient":
        gradient = data.get("gradient") if isinstance(data.get("gradient"), dict) else {}
        colors = gradient.get("colors")
        default = GradientBackground()
        if not (isinstance(colors, list) and len(colors) >= 2 and all(isinstance(c, str) for c in colors[:2])):
            colors = list(default.colors)
        return GradientBackground(
            colors=(colors[0], colors[1]),
            direction=_number(gradient.get("direction"), default.direction),
        )

    if kind == "image":
        image_ref = data.get("imageRef")
        return ImageBackground(
            image_ref=image_ref if isinstance(image_ref, str) and image_ref else None,
            blur=max(0, _number(data.get("blur"), 0)),
        )

    return SolidBackground(color=_string(data.get("color"), SolidBackground().color))


def normalize_text(data: Any) -> TextConfig:
    data = data if isinstance(data, dict) else {}
    d = DEFAULT_TEXT
    font = _choice(data.get("font"), FONT_IDS, d.font)
    return TextConfig(
        content=_string(data.get("content"), d.content),
        font=font,
        size=_number(data.get("size"), d.size),
        color=_COLOR_FROM_PERSISTED.get(data.get("color"), d.color),
        align=_choice(data.get("align"), TEXT_ALIGNS, d.align),
        vertical_position=_number(data.get("verticalPosition"), d.vertical_position),
        horizontal_offset=_number(data.get("horizontalOffset"), d.horizontal_offset),
        show_sub_caption=_flag(data.get("showSubCaption"), d.show_sub_caption),
        sub_caption=_string(data.get("subCaption"), d.sub_caption),
        # Older projects had no separate sub-caption font and used the headline font.
        sub_caption_font=_choice(data.get("subCaptionFont"), FONT_IDS, font),
        sub_caption_size=_number(data.get("subCaptionSize"), d.sub_caption_size),
        sub_caption_spacing=_number(data.get("subCaptionSpacing"), d.sub_caption_spacing),
    )


def normalize_device(data: Any) -> DeviceConfig:
    data = data if isinstance(data, dict) else {}
    d = DEFAULT_DEVICE
    angle = data.get("angle")
    return DeviceConfig(
        model=normalize_device_model(data.get("model")),
        angle=AnglePreset(angle) if angle in {a.value for a in AnglePreset} else d.angle,
        vertical_position=_number(data.get("verticalPosition"), d.vertical_position),
        frame_scale=_number(data.get("frameScale"), d.frame_scale),
        horizontal_position=_number(data.get("horizontalPosition"), d.horizontal_position),
        allow_off_canvas_position=_flag(data.get("allowOffCanvasPosition"), d.allow_off_canvas_position),
    )


def normalize_localized_text(data: Any) -> Optional[Dict[str, LocalizedText]]:
    if not isinstance(data, dict):
        return None

    entries: Dict[str, LocalizedText] = {}
    for locale, entry in data.items():
        if not isinstance(entry, dict):
            continue
        entries[locale] = LocalizedText(
            content=_string(entry.get("content"), ""),
            sub_caption=_string(entry.get("subCaption"), ""),
        )
    return entries


def normalize_slide(data: Any) -> Slide:
    data = data if isinstance(data, dict) else {}
    screenshot_ref = data.get("screenshotRef")
    return Slide(
        id=_string(data.get("id"), "") or str(uuid.uuid4()),
        background=normalize_background(data.get("background")),
        text=normalize_text(data.get("text")),
        device=normalize_device(data.get("device")),
        screenshot_ref=screenshot_ref if isinstance(screenshot_ref, str) and screenshot_ref else None,
        allow_mismatched_screenshot=_flag(data.get("allowMismatchedScreenshot")),
        localized_text=normalize_localized_text(data.get("localizedText")),
    )


def _normalize_locales(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None

    locales: List[str] = []
    for code in value:
        if isinstance(code, str) and code and code not in locales:
            locales.append(code)
    return locales


def normalize_project(data: Any) -> Project:
    """Build a fully normalized project from its persisted JSON form."""
    if not isinstance(data, dict):
        raise ValueError(f"Project data must be a JSON object, got {type(data).__name__}")

    now = _now_ms()
    locales = _normalize_locales(data.get("locales"))
    default_locale = data.get("defaultLocale")
    if default_locale is not None and (not locales or default_locale not in locales):
        logger.warning("Default locale %r is not one of the project locales, ignoring it", default_locale)
        default_locale = None

    slides = data.get("slides") if isinstance(data.get("slides"), list) else []
    return Project(
        id=_string(data.get("id"), "") or str(uuid.uuid4()),
        name=_string(data.get("name"), "Untitled Project"),
        created_at=int(_number(data.get("createdAt"), now)),
        updated_at=int(_number(data.get("updatedAt"), now)),
        screenshot_target=coerce_target(data.get("screenshotTarget")),
        slides=[normalize_slide(s) for s in slides],
        locales=locales,
        default_locale=default_locale,
    )


def _background_to_dict(background: BackgroundConfig) -> Dict[str, Any]:
    if isinstance(background, GradientBackground):
        return {
            "type": "gradient",
            "gradient": {"colors": list(background.colors), "direction": background.direction},
        }
    if isinstance(background, ImageBackground):
        return {"type": "image", "imageRef": background.image_ref, "blur": background.blur}
    return {"type": "solid", "color": background.color}


def slide_to_dict(slide: Slide) -> Dict[str, Any]:
    text = slide.text
    device = slide.device
    data: Dict[str, Any] = {
        "id": slide.id,
        "background": _background_to_dict(slide.background),
        "text": {
            "content": text.content,
            "font": text.font,
            "size": text.size,
            "color": _COLOR_TO_PERSISTED[text.color],
            "align": text.align,
            "verticalPosition": text.vertical_position,
            "horizontalOffset": text.horizontal_offset,
            "showSubCaption": text.show_sub_caption,
            "subCaption": text.sub_caption,
            "subCaptionFont": text.sub_caption_font,
            "subCaptionSize": text.sub_caption_size,
            "subCaptionSpacing": text.sub_caption_spacing,
        },
        "device": {
            "model": device.model,
            "angle": device.angle.value,
            "verticalPosition": device.vertical_position,
            "frameScale": device.frame_scale,
            "horizontalPosition": device.horizontal_position,
            "allowOffCanvasPosition": device.allow_off_canvas_position,
        },
        "screenshotRef": slide.screenshot_ref,
        "allowMismatchedScreenshot": slide.allow_mismatched_screenshot,
    }
    if slide.localized_text is not None:
        data["localizedText"] = {
            locale: {"content": entry.content, "subCaption": entry.sub_caption}
            for locale, entry in slide.localized_text.items()
        }
    return data


def project_to_dict(project: Project) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": project.id,
        "name": project.name,
        "createdAt": project.created_at,
        "updatedAt": project.updated_at,
        "screenshotTarget": project.screenshot_target.value,
        "slides": [slide_to_dict(s) for s in project.slides],
    }
    if project.locales is not None:
        data["locales"] = list(project.locales)
    if project.default_locale is not None:
        data["defaultLocale"] = project.default_locale
    return data


def load_project(path: Path) -> Project:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return normalize_project(data)


def save_project(project: Project, path: Path) -> None:
    project.updated_at = _now_ms()
    with path.open("w", encoding="utf-8") as f:
        json.dump(project_to_dict(project), f, indent=2, ensure_ascii=False)


def create_slide() -> Slide:
    return normalize_slide({})


def create_project(name: str = "Untitled Project") -> Project:
    return normalize_project({"id": str(uuid.uuid4()), "name": name, "slides": [{}]})
