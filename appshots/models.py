"""
Shared data model for projects, slides and the static registries.

Every config dataclass here is expected to be fully populated: defaults are
filled in once by `appshots.project` when a project is created or loaded, so
layout and validation code never has to guess at missing fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union


TextAlign = Literal["left", "center", "right"]
# Colour polarity of the headline: dark text on light backgrounds or the reverse.
TextColor = Literal["dark", "light"]
FontId = Literal["sf-pro", "inter", "poppins", "dm-sans", "playfair", "space-grotesk"]


class ScreenshotTarget(str, Enum):
    IPHONE_6_9 = "iphone-6_9"
    IPAD_13 = "ipad-13"


class DeviceClass(str, Enum):
    PHONE = "phone"
    TABLET = "tablet"


class AnglePreset(str, Enum):
    STRAIGHT = "straight"
    SLIGHT_LEFT = "slight-left"
    SLIGHT_RIGHT = "slight-right"
    DRAMATIC_LEFT = "dramatic-left"
    DRAMATIC_RIGHT = "dramatic-right"


@dataclass(frozen=True)
class ImageDimensions:
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def __str__(self) -> str:
        return f"{self.width} x {self.height}"


@dataclass(frozen=True)
class ExportSize:
    width: int
    height: int
    label: str

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(self.width, self.height)


@dataclass(frozen=True)
class ScreenshotTargetSpec:
    target: ScreenshotTarget
    name: str
    device_class: DeviceClass
    default_size: ImageDimensions
    accepted_sizes: Tuple[ExportSize, ...]

    @property
    def family_label(self) -> str:
        return "iPad" if self.device_class is DeviceClass.TABLET else "iPhone"

    def accepts(self, size: ImageDimensions) -> bool:
        return any(s.width == size.width and s.height == size.height for s in self.accepted_sizes)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class DeviceSpec:
    model: str
    name: str
    # Path of the transparent frame PNG, relative to the frames directory.
    frame_src: str
    frame_width: int
    frame_height: int
    # Screen region inside the frame image where the screenshot sits.
    screen: Rect
    screen_corner_radius_ratio: float
    body_corner_radius_ratio: float

    def __post_init__(self) -> None:
        s = self.screen
        if s.x < 0 or s.y < 0 or s.right > self.frame_width or s.bottom > self.frame_height:
            raise ValueError(
                f"Screen rect {s} of {self.model!r} lies outside its "
                f"{self.frame_width}x{self.frame_height} frame"
            )

    @property
    def screen_size(self) -> ImageDimensions:
        return ImageDimensions(int(self.screen.width), int(self.screen.height))


# ---------------------------------------------------------------------------
# Slide configuration
# ---------------------------------------------------------------------------


@dataclass
class SolidBackground:
    color: str = "#F0F4F8"


@dataclass
class GradientBackground:
    colors: Tuple[str, str] = ("#FFECD2", "#FCB69F")
    direction: float = 180  # CSS degrees, 180 = top to bottom


@dataclass
class ImageBackground:
    image_ref: Optional[str] = None
    blur: float = 0


BackgroundConfig = Union[SolidBackground, GradientBackground, ImageBackground]


@dataclass
class TextConfig:
    content: str = "Your headline here"
    font: FontId = "inter"
    size: float = 96
    color: TextColor = "dark"
    align: TextAlign = "center"
    vertical_position: float = 12
    horizontal_offset: float = 0
    show_sub_caption: bool = False
    sub_caption: str = ""
    sub_caption_font: FontId = "inter"
    sub_caption_size: float = 42
    sub_caption_spacing: float = 12


@dataclass
class DeviceConfig:
    model: str = "iphone-17-pro-max"
    angle: AnglePreset = AnglePreset.STRAIGHT
    vertical_position: float = 35
    frame_scale: float = 55
    horizontal_position: float = 50
    allow_off_canvas_position: bool = False


@dataclass
class LocalizedText:
    content: str = ""
    sub_caption: str = ""


@dataclass
class Slide:
    id: str
    background: BackgroundConfig = field(default_factory=SolidBackground)
    text: TextConfig = field(default_factory=TextConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    screenshot_ref: Optional[str] = None
    allow_mismatched_screenshot: bool = False
    localized_text: Optional[Dict[str, LocalizedText]] = None


@dataclass
class Project:
    id: str
    name: str
    created_at: int
    updated_at: int
    screenshot_target: ScreenshotTarget = ScreenshotTarget.IPHONE_6_9
    slides: List[Slide] = field(default_factory=list)
    locales: Optional[List[str]] = None
    default_locale: Optional[str] = None


@dataclass
class ValidationResult:
    dimensions: ImageDimensions
    expected_sizes: List[ImageDimensions]
    is_compatible: bool
    message: Optional[str] = None
