import io
import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont, ImageOps

from .assets import AssetStore
from .layout import (
    AngleStyle,
    DeviceLayout,
    ScreenshotContent,
    SlideLayout,
    TextLayout,
    compute_layout,
)
from .localization import resolve_localized_text
from .models import (
    GradientBackground,
    ImageBackground,
    ScreenshotTargetSpec,
    Slide,
    SolidBackground,
)
from .specs import get_active_device_spec
from .validation import validate_screenshot_bytes

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

FONT_FILES: Dict[str, List[str]] = {
    "sf-pro": ["SF-Pro-Display-Bold.otf", "SFProDisplay-Bold.otf"],
    "inter": ["Inter-Bold.ttf", "Inter-VariableFont_opsz,wght.ttf", "Inter.ttf"],
    "poppins": ["Poppins-Bold.ttf", "Poppins-SemiBold.ttf"],
    "dm-sans": ["DMSans-Bold.ttf", "DMSans-VariableFont_opsz,wght.ttf"],
    "playfair": ["PlayfairDisplay-Bold.ttf", "PlayfairDisplay-VariableFont_wght.ttf"],
    "space-grotesk": ["SpaceGrotesk-Bold.ttf", "SpaceGrotesk-VariableFont_wght.ttf"],
}

SYSTEM_FONTS = [
    # macOS
    "/System/Library/Fonts/HelveticaNeue.ttc",
    "/System/Library/Fonts/Helvetica.ttc",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    # Linux
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    # Windows
    "C:/Windows/Fonts/arialbd.ttf",
]

DEVICE_BODY_COLOR = (44, 44, 46)
PLACEHOLDER_COLORS = ((26, 26, 46), (15, 15, 35))
PLACEHOLDER_TEXT = "Drop screenshot"
WRONG_SIZE_TEXT = "Wrong screenshot size"

# Extra room around the device layer so the perspective warp never clips.
WARP_PADDING = 0.15


class Compositor(Protocol):
    def capture(
        self,
        slide: Slide,
        target_spec: ScreenshotTargetSpec,
        locale: Optional[str] = None,
    ) -> Image.Image:
        ...


class PillowCompositor:
    """
    Paints slides with Pillow.

    Each capture renders into its own image, so capturing one locale can never
    leak text from another.
    """

    def __init__(
        self,
        asset_store: AssetStore,
        default_locale: Optional[str] = None,
        fonts_dir: Optional[Path] = None,
        frames_dir: Optional[Path] = None,
        render_scale: float = 1.0,
    ) -> None:
        self.assets = asset_store
        self.default_locale = default_locale
        self.fonts_dir = fonts_dir
        self.frames_dir = frames_dir
        self.render_scale = render_scale

    def capture(
        self,
        slide: Slide,
        target_spec: ScreenshotTargetSpec,
        locale: Optional[str] = None,
    ) -> Image.Image:
        device_spec = get_active_device_spec(target_spec.target, slide.device.model)

        screenshot = None
        validation = None
        if slide.screenshot_ref:
            data = self.assets.get_screenshot(slide.screenshot_ref)
            validation = validate_screenshot_bytes(data, target_spec.target, slide.device.model)
            if not validation.is_compatible:
                logger.warning("Slide %s: %s", slide.id, validation.message)
            screenshot = _open_image(data)

        background_image = None
        if isinstance(slide.background, ImageBackground) and slide.background.image_ref:
            background_image = _open_image(self.assets.get_background_image(slide.background.image_ref))

        text = resolve_localized_text(slide, locale, self.default_locale)
        layout = compute_layout(
            slide,
            target_spec,
            device_spec,
            render_scale=self.render_scale,
            text=text,
            validation=validation,
        )
        logger.debug("Capturing slide %s (locale=%s) at %.0fx%.0f", slide.id, locale, layout.width, layout.height)
        return self.render(layout, screenshot=screenshot, background_image=background_image)

    def render(
        self,
        layout: SlideLayout,
        screenshot: Optional[Image.Image] = None,
        background_image: Optional[Image.Image] = None,
    ) -> Image.Image:
        size = (max(1, round(layout.width)), max(1, round(layout.height)))
        canvas = _render_background(layout, size, background_image)
        self._draw_device(canvas, layout.device, screenshot, layout.render_scale)
        self._draw_text(canvas, layout.text)
        return canvas

    # -- device -----------------------------------------------------------

    def _draw_device(
        self,
        canvas: Image.Image,
        device: DeviceLayout,
        screenshot: Optional[Image.Image],
        scale: float,
    ) -> None:
        frame = device.frame
        fw, fh = max(1, round(frame.width)), max(1, round(frame.height))
        pad_x, pad_y = round(fw * WARP_PADDING), round(fh * WARP_PADDING)

        layer = Image.new("RGBA", (fw + 2 * pad_x, fh + 2 * pad_y), (0, 0, 0, 0))
        body = Image.new("RGBA", (fw, fh), (0, 0, 0, 0))

        frame_art = self._load_frame(device.frame_src, (fw, fh))
        if frame_art is None:
            ImageDraw.Draw(body).rounded_rectangle(
                [0, 0, fw - 1, fh - 1],
                radius=round(device.body_radius),
                fill=DEVICE_BODY_COLOR + (255,),
            )

        screen_box = (
            round(device.screen.x - frame.x),
            round(device.screen.y - frame.y),
            max(1, round(device.screen.width)),
            max(1, round(device.screen.height)),
        )
        screen = _render_screen(device, screenshot, screen_box[2:], scale, self.fonts_dir)
        body.alpha_composite(screen, dest=screen_box[:2])

        if frame_art is not None:
            body.alpha_composite(frame_art)

        body.putalpha(ImageChops.multiply(body.getchannel("A"), _rounded_mask((fw, fh), device.body_radius)))
        layer.alpha_composite(body, dest=(pad_x, pad_y))
        layer = _apply_angle(layer, device.angle, fw)

        shadow = _shadow_from_alpha(layer, device.angle.shadow_opacity, device.angle.shadow_blur)
        dx, dy = device.angle.shadow_offset
        origin = (round(frame.x) - pad_x, round(frame.y) - pad_y)
        _paste(canvas, shadow, (origin[0] + round(dx), origin[1] + round(dy)))
        _paste(canvas, layer, origin)

    def _load_frame(self, frame_src: str, size: Tuple[int, int]) -> Optional[Image.Image]:
        if self.frames_dir is None:
            return None
        path = self.frames_dir / frame_src
        if not path.is_file():
            return None
        with Image.open(path) as img:
            return img.convert("RGBA").resize(size, Image.LANCZOS)

    # -- text -------------------------------------------------------------

    def _draw_text(self, canvas: Image.Image, text: TextLayout) -> None:
        color = _parse_color(text.color)
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)

        runs = [(text.headline, 0.0)]
        if text.sub_caption is not None:
            runs.append((text.sub_caption, text.sub_caption_margin))

        blocks = []
        for run, margin in runs:
            font = _load_font(self.fonts_dir, run.font, max(1, round(run.font_size)))
            lines = _wrap_text(draw, run.text, font, text.max_width)
            blocks.append((run, margin, font, lines))

        total_height = sum(margin + len(lines) * run.font_size * run.line_height for run, margin, _, lines in blocks)
        y = text.center_y - total_height / 2
        anchor = {"left": "lm", "center": "mm", "right": "rm"}[text.align]

        for run, margin, font, lines in blocks:
            y += margin
            line_px = run.font_size * run.line_height
            fill = color + (round(255 * run.opacity),)
            for line in lines:
                draw.text((text.anchor_x, y + line_px / 2), line, font=font, fill=fill, anchor=anchor)
                y += line_px

        if text.shadow is not None:
            shadow = _shadow_from_alpha(layer, text.shadow.opacity, text.shadow.blur)
            _paste(canvas, shadow, (round(text.shadow.offset[0]), round(text.shadow.offset[1])))
        canvas.alpha_composite(layer)


def _open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert("RGBA")


def _paste(canvas: Image.Image, layer: Image.Image, origin: Tuple[int, int]) -> None:
    """Alpha-composite `layer` at `origin`, clipping whatever falls off the canvas."""
    x, y = origin
    left, top = max(0, -x), max(0, -y)
    right = min(layer.width, canvas.width - x)
    bottom = min(layer.height, canvas.height - y)
    if right <= left or bottom <= top:
        return
    canvas.alpha_composite(layer, dest=(x + left, y + top), source=(left, top, right, bottom))


def _rounded_mask(size: Tuple[int, int], radius: float) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle([0, 0, size[0] - 1, size[1] - 1], radius=round(radius), fill=255)
    return mask


def _shadow_from_alpha(layer: Image.Image, opacity: float, blur: float) -> Image.Image:
    alpha = layer.getchannel("A").point(lambda a: round(a * opacity))
    if blur > 0:
        alpha = alpha.filter(ImageFilter.GaussianBlur(blur / 2))
    shadow = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    shadow.putalpha(alpha)
    return shadow


# ---------------------------------------------------------------------------
# Background
# ---------------------------------------------------------------------------


def _render_background(
    layout: SlideLayout,
    size: Tuple[int, int],
    background_image: Optional[Image.Image],
) -> Image.Image:
    fill = layout.background.fill

    if isinstance(fill, SolidBackground):
        return Image.new("RGBA", size, _parse_color(fill.color) + (255,))

    if isinstance(fill, GradientBackground):
        return _linear_gradient(size, _parse_color(fill.colors[0]), _parse_color(fill.colors[1]), fill.direction)

    if isinstance(fill, ImageBackground) and background_image is not None:
        img = ImageOps.fit(background_image.convert("RGB"), size, Image.LANCZOS)
        if layout.background.blur_radius > 0:
            img = img.filter(ImageFilter.GaussianBlur(layout.background.blur_radius))
        return img.convert("RGBA")

    return Image.new("RGBA", size, (255, 255, 255, 255))


def _linear_gradient(size: Tuple[int, int], start: RGB, end: RGB, direction: float) -> Image.Image:
    """
    Two-stop linear gradient following CSS angle semantics
    (0deg = towards the top, 90deg = towards the right, 180deg = towards the bottom).
    """
    w, h = size
    theta = math.radians(direction)
    length = max(1, round(abs(w * math.sin(theta)) + abs(h * math.cos(theta))))
    side = math.ceil(math.hypot(w, h)) + 2

    # Vertical ramp in a square big enough to survive rotation; clamped outside the gradient line.
    mask = Image.new("L", (side, side), 0)
    top = (side - length) // 2
    mask.paste(255, (0, top + length, side, side))
    mask.paste(Image.linear_gradient("L").resize((side, length), Image.BILINEAR), (0, top))
    mask = mask.rotate(180 - direction, resample=Image.BICUBIC, fillcolor=0)

    left, upper = (side - w) // 2, (side - h) // 2
    mask = mask.crop((left, upper, left + w, upper + h))
    return Image.composite(
        Image.new("RGBA", size, end + (255,)),
        Image.new("RGBA", size, start + (255,)),
        mask,
    )


# ---------------------------------------------------------------------------
# Screen contents
# ---------------------------------------------------------------------------


def _render_screen(
    device: DeviceLayout,
    screenshot: Optional[Image.Image],
    size: Tuple[int, int],
    scale: float,
    fonts_dir: Optional[Path],
) -> Image.Image:
    if device.content is ScreenshotContent.IMAGE and screenshot is not None:
        screen = ImageOps.fit(screenshot, size, Image.LANCZOS)
    elif device.content is ScreenshotContent.WRONG_SIZE:
        screen = _notice(size, PLACEHOLDER_COLORS, WRONG_SIZE_TEXT, (251, 191, 36), scale, fonts_dir)
    else:
        screen = _notice(size, PLACEHOLDER_COLORS, PLACEHOLDER_TEXT, (107, 114, 128), scale, fonts_dir)

    screen.putalpha(ImageChops.multiply(screen.getchannel("A"), _rounded_mask(size, device.screen_radius)))
    return screen


def _notice(
    size: Tuple[int, int],
    colors: Tuple[RGB, RGB],
    message: str,
    text_color: RGB,
    scale: float,
    fonts_dir: Optional[Path],
) -> Image.Image:
    img = _linear_gradient(size, colors[0], colors[1], 180)
    font = _load_font(fonts_dir, "inter", max(1, round(48 * scale)))
    ImageDraw.Draw(img).text((size[0] / 2, size[1] / 2), message, font=font, fill=text_color, anchor="mm")
    return img


# ---------------------------------------------------------------------------
# Camera angle
# ---------------------------------------------------------------------------


def _apply_angle(layer: Image.Image, angle: AngleStyle, frame_width: int) -> Image.Image:
    if not angle.perspective or (angle.rotate_x == 0 and angle.rotate_y == 0):
        return layer

    w, h = layer.size
    cx, cy = w / 2, h / 2
    eye = angle.perspective * frame_width
    ax, ay = math.radians(angle.rotate_x), math.radians(angle.rotate_y)

    def project(x: float, y: float) -> Tuple[float, float]:
        # rotateX then rotateY (CSS applies the rightmost transform first), z towards the viewer
        x, y, z = x - cx, y - cy, 0.0
        y, z = y * math.cos(ax) - z * math.sin(ax), y * math.sin(ax) + z * math.cos(ax)
        x, z = x * math.cos(ay) + z * math.sin(ay), -x * math.sin(ay) + z * math.cos(ay)
        k = eye / (eye - z)
        return cx + x * k, cy + y * k

    source = [(0, 0), (w, 0), (w, h), (0, h)]
    dest = [project(x, y) for x, y in source]
    coeffs = _perspective_coefficients(dest, source)
    return layer.transform(layer.size, Image.Transform.PERSPECTIVE, coeffs, Image.BICUBIC)


def _perspective_coefficients(
    output_corners: Sequence[Tuple[float, float]],
    input_corners: Sequence[Tuple[float, float]],
) -> List[float]:
    """Coefficients mapping output pixels back to input pixels, as Image.transform expects."""
    rows = []
    rhs = []
    for (x, y), (u, v) in zip(output_corners, input_corners):
        rows.append([x, y, 1, 0, 0, 0, -u * x, -u * y])
        rows.append([0, 0, 0, x, y, 1, -v * x, -v * y])
        rhs.extend([u, v])
    try:
        return np.linalg.solve(np.array(rows, dtype=float), np.array(rhs, dtype=float)).tolist()
    except np.linalg.LinAlgError as exc:
        raise ValueError(f"Degenerate perspective quad: {exc}") from exc


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _wrap_text(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_width: float) -> List[str]:
    lines: List[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            test = f"{current} {word}".strip()
            if draw.textlength(test, font=font) <= max_width or not current:
                current = test
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines


def _parse_color(color_str: str) -> RGB:
    """Parse `#RRGGBB`, `RRGGBB` or `#RGB`. Anything else becomes white."""
    s = color_str.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) == 6:
        try:
            return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        except ValueError:
            pass
    return (255, 255, 255)


def _load_font(fonts_dir: Optional[Path], font_id: str, size: int) -> ImageFont.ImageFont:
    return _load_font_cached(str(fonts_dir) if fonts_dir else None, font_id, size)


@lru_cache(maxsize=64)
def _load_font_cached(fonts_dir: Optional[str], font_id: str, size: int) -> ImageFont.ImageFont:
    """
    Load a TrueType font for a font id. Prefers files from the fonts folder,
    then common system fonts, then Pillow's bundled default font.
    """
    candidates: List[str] = []
    if fonts_dir:
        candidates.extend(str(Path(fonts_dir) / name) for name in FONT_FILES.get(font_id, []))
    candidates.extend(SYSTEM_FONTS)

    for font_file in candidates:
        if Path(font_file).is_file():
            try:
                return ImageFont.truetype(font_file, size=size)
            except OSError:
                logger.debug("Could not load font %s", font_file)
                continue

    return ImageFont.load_default(size=size)
