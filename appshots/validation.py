import io
from typing import List

from PIL import Image, UnidentifiedImageError

from .errors import UnreadableImageError
from .models import DeviceClass, ImageDimensions, ScreenshotTarget, ValidationResult
from .specs import get_accepted_screenshot_sizes, get_active_device_spec, get_target_spec

# Maximum |uploaded - expected| aspect-ratio difference still accepted (inclusive).
ASPECT_RATIO_TOLERANCE = 0.02


def get_expected_screenshot_sizes(target: ScreenshotTarget, device_model: str) -> List[ImageDimensions]:
    """
    Store-accepted sizes for `target`, plus the active phone's own screen size
    when it is not already one of them.
    """
    app_store_sizes = get_accepted_screenshot_sizes(target)

    if get_target_spec(target).device_class is not DeviceClass.PHONE:
        return app_store_sizes

    device_screen_size = get_active_device_spec(target, device_model).screen_size
    if device_screen_size in app_store_sizes:
        return app_store_sizes

    return app_store_sizes + [device_screen_size]


def validate_screenshot_dimensions(
    dimensions: ImageDimensions,
    target: ScreenshotTarget,
    device_model: str,
) -> ValidationResult:
    expected_sizes = get_expected_screenshot_sizes(target, device_model)
    is_exact_match = dimensions in expected_sizes

    uploaded_ratio = dimensions.aspect_ratio
    aspect_ratio_delta = min(abs(uploaded_ratio - size.aspect_ratio) for size in expected_sizes)
    is_aspect_match = aspect_ratio_delta <= ASPECT_RATIO_TOLERANCE

    if is_exact_match or is_aspect_match:
        return ValidationResult(
            dimensions=dimensions,
            expected_sizes=expected_sizes,
            is_compatible=True,
        )

    family = get_target_spec(target).family_label
    expected_text = ", ".join(str(size) for size in expected_sizes)
    return ValidationResult(
        dimensions=dimensions,
        expected_sizes=expected_sizes,
        is_compatible=False,
        message=f"This screenshot is {dimensions}. Upload a {family} screenshot ({expected_text}).",
    )


def read_image_dimensions(data: bytes) -> ImageDimensions:
    """Read the pixel size of an encoded image without decoding its pixels."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise UnreadableImageError() from exc

    if width <= 0 or height <= 0:
        raise UnreadableImageError()
    return ImageDimensions(width, height)


def validate_screenshot_bytes(
    data: bytes,
    target: ScreenshotTarget,
    device_model: str,
) -> ValidationResult:
    return validate_screenshot_dimensions(read_image_dimensions(data), target, device_model)
