"""
Static catalogues: screenshot targets accepted by App Store Connect and the
device frames that can be placed on a slide.
"""

import logging
from typing import Any, Dict, List

from .errors import UnknownDeviceModelError, UnknownTargetError
from .models import (
    DeviceClass,
    DeviceSpec,
    ExportSize,
    ImageDimensions,
    Rect,
    ScreenshotTarget,
    ScreenshotTargetSpec,
)

logger = logging.getLogger(__name__)


# Apple accepts exactly these portrait sizes for App Store Connect uploads.
APP_STORE_IPHONE_ACCEPTED_SIZES = (
    ExportSize(1320, 2868, '6.9" (1320 × 2868)'),
    ExportSize(1290, 2796, '6.9" (1290 × 2796)'),
    ExportSize(1260, 2736, '6.9" (1260 × 2736)'),
)

APP_STORE_IPAD_ACCEPTED_SIZES = (
    ExportSize(2064, 2752, '13" (2064 × 2752)'),
    ExportSize(2048, 2732, '13" (2048 × 2732)'),
)

SCREENSHOT_TARGETS: Dict[ScreenshotTarget, ScreenshotTargetSpec] = {
    ScreenshotTarget.IPHONE_6_9: ScreenshotTargetSpec(
        target=ScreenshotTarget.IPHONE_6_9,
        name='iPhone 6.9"',
        device_class=DeviceClass.PHONE,
        default_size=APP_STORE_IPHONE_ACCEPTED_SIZES[0].dimensions,
        accepted_sizes=APP_STORE_IPHONE_ACCEPTED_SIZES,
    ),
    ScreenshotTarget.IPAD_13: ScreenshotTargetSpec(
        target=ScreenshotTarget.IPAD_13,
        name='iPad 13"',
        device_class=DeviceClass.TABLET,
        default_size=APP_STORE_IPAD_ACCEPTED_SIZES[0].dimensions,
        accepted_sizes=APP_STORE_IPAD_ACCEPTED_SIZES,
    ),
}

DEFAULT_TARGET = ScreenshotTarget.IPHONE_6_9


DEVICE_SPECS: Dict[str, DeviceSpec] = {
    "iphone-17-pro-max": DeviceSpec(
        model="iphone-17-pro-max",
        name="iPhone 17 Pro Max",
        frame_src="iphone-17-pro-max.png",
        frame_width=1470,
        frame_height=3000,
        screen=Rect(75, 66, 1320, 2868),
        screen_corner_radius_ratio=0.125,
        body_corner_radius_ratio=0.155,
    ),
    "iphone-17-pro": DeviceSpec(
        model="iphone-17-pro",
        name="iPhone 17 Pro",
        frame_src="iphone-17-pro.png",
        frame_width=1350,
        frame_height=2760,
        screen=Rect(72, 69, 1206, 2622),
        screen_corner_radius_ratio=0.13,
        body_corner_radius_ratio=0.16,
    ),
    "iphone-16-pro": DeviceSpec(
        model="iphone-16-pro",
        name="iPhone 16 Pro",
        frame_src="iphone-16-pro.png",
        frame_width=1350,
        frame_height=2760,
        screen=Rect(72, 69, 1206, 2622),
        screen_corner_radius_ratio=0.13,
        body_corner_radius_ratio=0.16,
    ),
}

# Tablet targets only ever show this one mockup.
TABLET_DEVICE_SPEC = DeviceSpec(
    model="ipad-pro-13",
    name='iPad Pro 13"',
    frame_src="ipad-pro-13.png",
    frame_width=2264,
    frame_height=2952,
    screen=Rect(100, 100, 2064, 2752),
    screen_corner_radius_ratio=0.04,
    body_corner_radius_ratio=0.07,
)

DEFAULT_DEVICE_MODEL = "iphone-17-pro-max"

# Retired model ids and the current model they are rendered as.
LEGACY_DEVICE_MODELS: Dict[str, str] = {
    "iphone-16-pro-max": "iphone-16-pro",
    "iphone-15-pro-max": "iphone-16-pro",
}


def get_target_spec(target: ScreenshotTarget) -> ScreenshotTargetSpec:
    try:
        return SCREENSHOT_TARGETS[ScreenshotTarget(target)]
    except (KeyError, ValueError):
        raise UnknownTargetError(f"Unknown screenshot target: {target!r}") from None


def get_accepted_screenshot_sizes(target: ScreenshotTarget) -> List[ImageDimensions]:
    return [size.dimensions for size in get_target_spec(target).accepted_sizes]


def get_active_device_spec(target: ScreenshotTarget, model: str) -> DeviceSpec:
    """
    Return the frame geometry used for `model` under `target`.

    Tablet targets have a single mockup, so the requested model is ignored.
    """
    if get_target_spec(target).device_class is DeviceClass.TABLET:
        return TABLET_DEVICE_SPEC

    try:
        return DEVICE_SPECS[model]
    except KeyError:
        raise UnknownDeviceModelError(f"Unknown device model: {model!r}") from None


def is_supported_target(value: Any) -> bool:
    return isinstance(value, str) and value in {t.value for t in ScreenshotTarget}


def coerce_target(value: Any) -> ScreenshotTarget:
    """Map a persisted target value to a supported target, falling back to the default."""
    if is_supported_target(value):
        return ScreenshotTarget(value)
    if value is not None:
        logger.warning("Unsupported screenshot target %r, using %s", value, DEFAULT_TARGET.value)
    return DEFAULT_TARGET


def is_supported_device_model(value: Any) -> bool:
    return isinstance(value, str) and value in DEVICE_SPECS
