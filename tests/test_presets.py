import pytest

from appshots.models import GradientBackground
from appshots.presets import FONT_OPTIONS, GRADIENT_PRESETS, SOLID_COLORS, gradient_background
from appshots.project import FONT_IDS, normalize_slide
from appshots.render import FONT_FILES


def test_gradient_lookup_is_case_insensitive():
    assert gradient_background("ocean") == GradientBackground(colors=("#667EEA", "#764BA2"), direction=135)


def test_unknown_gradient():
    with pytest.raises(KeyError):
        gradient_background("Neon")


def test_first_gradient_is_the_default():
    assert GRADIENT_PRESETS[0].to_background() == GradientBackground()


def test_default_solid_is_a_preset():
    assert normalize_slide({}).background.color in SOLID_COLORS


def test_every_font_option_is_accepted_and_renderable():
    assert FONT_IDS == tuple(FONT_OPTIONS)
    assert set(FONT_FILES) == set(FONT_OPTIONS)
