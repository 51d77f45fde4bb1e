"""
Background and font catalogues offered when composing slides.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .models import GradientBackground


@dataclass(frozen=True)
class GradientPreset:
    name: str
    colors: Tuple[str, str]
    direction: float = 180

    def to_background(self) -> GradientBackground:
        return GradientBackground(colors=self.colors, direction=self.direction)


# Soft pastels first, then dark tones for light text.
SOLID_COLORS: List[str] = [
    "#FFFFFF",
    "#F8F8F8",
    "#F5F5F0",
    "#F0F4F8",
    "#E8F4F8",
    "#FFF9E6",
    "#E8F5E9",
    "#FCE4EC",
    "#1E3A5F",
    "#1A1A1A",
]

GRADIENT_PRESETS: List[GradientPreset] = [
    GradientPreset("Soft Peach", ("#FFECD2", "#FCB69F")),
    GradientPreset("Mint Cream", ("#E0F2E9", "#A8E6CF")),
    GradientPreset("Lavender", ("#E8E0F0", "#D4C4E3")),
    GradientPreset("Sky", ("#E0F7FA", "#B2EBF2")),
    GradientPreset("Blush", ("#FDE2E4", "#FAD2CF")),
    GradientPreset("Sage", ("#E8F0E8", "#C8DCC8")),
    GradientPreset("Ocean", ("#667EEA", "#764BA2"), 135),
    GradientPreset("Sunset", ("#FA709A", "#FEE140"), 135),
    GradientPreset("Deep Blue", ("#1E3A5F", "#2E5A7F")),
    GradientPreset("Charcoal", ("#2C3E50", "#1A1A2E")),
]

# Font id -> display name. Ids are what projects persist.
FONT_OPTIONS: Dict[str, str] = {
    "sf-pro": "SF Pro Display",
    "inter": "Inter",
    "poppins": "Poppins",
    "dm-sans": "DM Sans",
    "playfair": "Playfair Display",
    "space-grotesk": "Space Grotesk",
}


def gradient_background(name: str) -> GradientBackground:
    """Look up a gradient preset by name (case-insensitive)."""
    for preset in GRADIENT_PRESETS:
        if preset.name.lower() == name.lower():
            return preset.to_background()
    raise KeyError(f"Unknown gradient preset: {name}")
