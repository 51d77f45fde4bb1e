"""
Slide layout: turns a normalized slide config into concrete pixel geometry.

All positions are in output pixels. Native export uses `render_scale=1.0`;
previews pass the ratio between the preview canvas and the native size.
Nothing here touches pixels or assets, so the same layout drives the preview
and the export.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .models import (
    AnglePreset,
    BackgroundConfig,
    DeviceSpec,
    ImageBackground,
    LocalizedText,
    Rect,
    ScreenshotTargetSpec,
    Slide,
    TextAlign,
    ValidationResult,
)

HEADLINE_VERTICAL_RANGE = (5.0, 90.0)
HEADLINE_OFFSET_RANGE = (-30.0, 30.0)
SUB_CAPTION_SIZE_RANGE = (25.0, 65.0)
SUB_CAPTION_SPACING_RANGE = (6.0, 24.0)
SUB_CAPTION_FONT_PX_RANGE = (24.0, 72.0)
SUB_CAPTION_MARGIN_PX_RANGE = (8.0, 36.0)
FRAME_SCALE_RANGE = (40.0, 80.0)
DEVICE_HORIZONTAL_UNLOCKED_RANGE = (-30.0, 130.0)
DEVICE_VERTICAL_UNLOCKED_RANGE = (-30.0, 120.0)
DEVICE_VERTICAL_LOCKED_RANGE = (0.0, 80.0)
DEVICE_HORIZONTAL_LOCKED = 50.0

# Side padding of the text block, native px.
TEXT_PADDING = 65.0
HEADLINE_LINE_HEIGHT = 1.2
SUB_CAPTION_LINE_HEIGHT = 1.3
SUB_CAPTION_OPACITY = 0.9

TEXT_COLORS = {"dark": "#000000", "light": "#FFFFFF"}


class ScreenshotContent(str, Enum):
    IMAGE = "image"
    PLACEHOLDER = "placeholder"
    WRONG_SIZE = "wrong-size"


@dataclass(frozen=True)
class AngleStyle:
    """3-D rotation and drop shadow of the device for one camera preset."""

    rotate_x: float  # degrees, positive tips the top away
    rotate_y: float  # degrees, positive turns the right edge away
    perspective: float  # eye distance as a multiple of the frame width
    shadow_offset: Tuple[float, float]  # native px
    shadow_blur: float  # native px
    shadow_opacity: float


ANGLE_PRESETS: Dict[AnglePreset, AngleStyle] = {
    AnglePreset.STRAIGHT: AngleStyle(0, 0, 0, (0, 120), 240, 0.3),
    AnglePreset.SLIGHT_LEFT: AngleStyle(2, 8, 9.0, (75, 105), 180, 0.35),
    AnglePreset.SLIGHT_RIGHT: AngleStyle(2, -8, 9.0, (-75, 105), 180, 0.35),
    AnglePreset.DRAMATIC_LEFT: AngleStyle(5, 18, 7.5, (120, 150), 240, 0.4),
    AnglePreset.DRAMATIC_RIGHT: AngleStyle(5, -18, 7.5, (-120, 150), 240, 0.4),
}


@dataclass(frozen=True)
class TextShadow:
    offset: Tuple[float, float]
    blur: float
    opacity: float


@dataclass(frozen=True)
class TextRun:
    text: str
    font: str
    font_size: float
    line_height: float
    opacity: float = 1.0


@dataclass(frozen=True)
class TextLayout:
    headline: TextRun
    sub_caption: Optional[TextRun]
    sub_caption_margin: float
    align: TextAlign
    # x of the alignment anchor (left edge, centre or right edge of the lines)
    anchor_x: float
    # vertical centre of the whole headline + sub-caption block
    center_y: float
    max_width: float
    color: str
    shadow: Optional[TextShadow]


@dataclass(frozen=True)
class BackgroundLayout:
    fill: BackgroundConfig
    blur_radius: float = 0.0


@dataclass(frozen=True)
class DeviceLayout:
    frame: Rect
    frame_src: str
    body_radius: float
    screen: Rect
    screen_radius: float
    content: ScreenshotContent
    angle: AngleStyle


@dataclass(frozen=True)
class SlideLayout:
    width: float
    height: float
    render_scale: float
    background: BackgroundLayout
    text: TextLayout
    device: DeviceLayout


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def compute_layout(
    slide: Slide,
    target_spec: ScreenshotTargetSpec,
    device_spec: DeviceSpec,
    render_scale: float = 1.0,
    text: Optional[LocalizedText] = None,
    validation: Optional[ValidationResult] = None,
) -> SlideLayout:
    """
    Compute the geometry of every layer of `slide`.

    `text` is the already-resolved headline/sub-caption for the locale being
    rendered (defaults to the slide's base text). `validation` is the result
    of checking the attached screenshot, if one was checked.
    """
    if not math.isfinite(render_scale) or render_scale <= 0:
        raise ValueError(f"render_scale must be positive, got {render_scale!r}")

    if text is None:
        text = LocalizedText(content=slide.text.content, sub_caption=slide.text.sub_caption)

    width = target_spec.default_size.width * render_scale
    height = target_spec.default_size.height * render_scale

    return SlideLayout(
        width=width,
        height=height,
        render_scale=render_scale,
        background=_layout_background(slide.background, render_scale),
        text=_layout_text(slide, text, width, height, render_scale),
        device=_layout_device(slide, device_spec, width, height, render_scale, validation),
    )


def _layout_background(background: BackgroundConfig, scale: float) -> BackgroundLayout:
    if isinstance(background, ImageBackground):
        return BackgroundLayout(fill=background, blur_radius=max(0.0, background.blur) * scale)
    return BackgroundLayout(fill=background)


def _layout_text(
    slide: Slide,
    text: LocalizedText,
    width: float,
    height: float,
    scale: float,
) -> TextLayout:
    config = slide.text
    padding = TEXT_PADDING * scale

    center_y = height * clamp(config.vertical_position, *HEADLINE_VERTICAL_RANGE) / 100
    shift = 0.0
    if slide.device.allow_off_canvas_position:
        shift = width * clamp(config.horizontal_offset, *HEADLINE_OFFSET_RANGE) / 100

    if config.align == "left":
        anchor_x = padding
    elif config.align == "right":
        anchor_x = width - padding
    else:
        anchor_x = width / 2

    headline = TextRun(
        text=text.content,
        font=config.font,
        font_size=config.size * scale,
        line_height=HEADLINE_LINE_HEIGHT,
    )

    sub_caption = None
    margin = 0.0
    if config.show_sub_caption and text.sub_caption.strip():
        size_ratio = clamp(config.sub_caption_size, *SUB_CAPTION_SIZE_RANGE) / 100
        spacing_ratio = clamp(config.sub_caption_spacing, *SUB_CAPTION_SPACING_RANGE) / 100
        sub_caption = TextRun(
            text=text.sub_caption,
            font=config.sub_caption_font,
            font_size=clamp(config.size * size_ratio, *SUB_CAPTION_FONT_PX_RANGE) * scale,
            line_height=SUB_CAPTION_LINE_HEIGHT,
            opacity=SUB_CAPTION_OPACITY,
        )
        margin = clamp(config.size * spacing_ratio, *SUB_CAPTION_MARGIN_PX_RANGE) * scale

    shadow = None
    if config.color == "light":
        shadow = TextShadow(offset=(0.0, 11 * scale), blur=22 * scale, opacity=0.4)

    return TextLayout(
        headline=headline,
        sub_caption=sub_caption,
        sub_caption_margin=margin,
        align=config.align,
        anchor_x=anchor_x + shift,
        center_y=center_y,
        max_width=max(0.0, width - 2 * padding),
        color=TEXT_COLORS[config.color],
        shadow=shadow,
    )


def _layout_device(
    slide: Slide,
    spec: DeviceSpec,
    width: float,
    height: float,
    scale: float,
    validation: Optional[ValidationResult],
) -> DeviceLayout:
    device = slide.device

    frame_width = width * clamp(device.frame_scale, *FRAME_SCALE_RANGE) / 100
    frame_height = frame_width * (spec.frame_height / spec.frame_width)

    if device.allow_off_canvas_position:
        center_pct = clamp(device.horizontal_position, *DEVICE_HORIZONTAL_UNLOCKED_RANGE)
        top_pct = clamp(device.vertical_position, *DEVICE_VERTICAL_UNLOCKED_RANGE)
    else:
        center_pct = DEVICE_HORIZONTAL_LOCKED
        top_pct = clamp(device.vertical_position, *DEVICE_VERTICAL_LOCKED_RANGE)

    left = width * center_pct / 100 - frame_width / 2
    top = height * top_pct / 100
    frame = Rect(left, top, frame_width, frame_height)

    ratio = frame_width / spec.frame_width
    screen = Rect(
        left + spec.screen.x * ratio,
        top + spec.screen.y * ratio,
        spec.screen.width * ratio,
        spec.screen.height * ratio,
    )

    preset = ANGLE_PRESETS[device.angle]
    angle = AngleStyle(
        rotate_x=preset.rotate_x,
        rotate_y=preset.rotate_y,
        perspective=preset.perspective,
        shadow_offset=(preset.shadow_offset[0] * scale, preset.shadow_offset[1] * scale),
        shadow_blur=preset.shadow_blur * scale,
        shadow_opacity=preset.shadow_opacity,
    )

    return DeviceLayout(
        frame=frame,
        frame_src=spec.frame_src,
        body_radius=frame_width * spec.body_corner_radius_ratio,
        screen=screen,
        screen_radius=screen.width * spec.screen_corner_radius_ratio,
        content=_screenshot_content(slide, validation),
        angle=angle,
    )


def _screenshot_content(slide: Slide, validation: Optional[ValidationResult]) -> ScreenshotContent:
    if not slide.screenshot_ref:
        return ScreenshotContent.PLACEHOLDER
    if validation is not None and not validation.is_compatible and not slide.allow_mismatched_screenshot:
        return ScreenshotContent.WRONG_SIZE
    return ScreenshotContent.IMAGE
