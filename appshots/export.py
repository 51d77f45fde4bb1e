"""
PNG and ZIP export of rendered slides.

Every exported PNG is exactly the target's default size. Batches are built in
memory and only returned once every capture succeeded, so a failed export
never leaves a partial archive behind.
"""

import io
import logging
import zipfile
from typing import Optional, Sequence

from PIL import Image

from .errors import ExportError
from .models import ScreenshotTargetSpec, Slide
from .render import Compositor

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "screenshots.zip"
LOCALIZED_ARCHIVE_NAME = "screenshots-localized.zip"


def slide_filename(slide_index: int) -> str:
    return f"screenshot-{slide_index + 1}.png"


def localized_slide_filename(locale: str, slide_index: int) -> str:
    return f"{locale}/{slide_filename(slide_index)}"


def ensure_exportable(target_spec: ScreenshotTargetSpec) -> None:
    """Refuse to export at a size the store would reject."""
    if not target_spec.accepts(target_spec.default_size):
        raise ExportError(
            f"Export size {target_spec.default_size} is not an accepted size for {target_spec.name}"
        )


class BatchExporter:
    def __init__(self, compositor: Compositor) -> None:
        self.compositor = compositor

    def export_slide(
        self,
        slide: Slide,
        target_spec: ScreenshotTargetSpec,
        locale: Optional[str] = None,
    ) -> bytes:
        ensure_exportable(target_spec)
        try:
            return self._capture_png(slide, target_spec, locale)
        except Exception as exc:
            logger.exception("Export of slide %s failed", slide.id)
            raise ExportError("Export failed. Please try again.") from exc

    def export_all(
        self,
        slides: Sequence[Slide],
        target_spec: ScreenshotTargetSpec,
        locale: Optional[str] = None,
    ) -> bytes:
        ensure_exportable(target_spec)
        entries = []
        try:
            for index, slide in enumerate(slides):
                entries.append((slide_filename(index), self._capture_png(slide, target_spec, locale)))
        except Exception as exc:
            logger.exception("Batch export failed at slide %d", len(entries) + 1)
            raise ExportError("Export failed. Please try again.") from exc

        logger.info("Exported %d slides for %s", len(entries), target_spec.name)
        return _zip(entries)

    def export_all_locales(
        self,
        slides: Sequence[Slide],
        target_spec: ScreenshotTargetSpec,
        locales: Sequence[str],
    ) -> bytes:
        """
        Capture every slide once per locale, in `locales` order, one folder per
        locale. Captures run one after another; each gets its locale passed in
        explicitly rather than through shared state.
        """
        ensure_exportable(target_spec)
        locales = list(dict.fromkeys(locales))
        entries = []
        try:
            for locale in locales:
                for index, slide in enumerate(slides):
                    png = self._capture_png(slide, target_spec, locale)
                    entries.append((localized_slide_filename(locale, index), png))
        except Exception as exc:
            logger.exception("Localized export failed after %d captures", len(entries))
            raise ExportError("Export failed. Please try again.") from exc

        logger.info("Exported %d slides in %d locales for %s", len(slides), len(locales), target_spec.name)
        return _zip(entries)

    def _capture_png(self, slide: Slide, target_spec: ScreenshotTargetSpec, locale: Optional[str]) -> bytes:
        image = self.compositor.capture(slide, target_spec, locale)
        size = (target_spec.default_size.width, target_spec.default_size.height)
        if image.size != size:
            image = image.resize(size, Image.LANCZOS)

        # The store rejects screenshots with an alpha channel.
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format="PNG")
        return buffer.getvalue()


def _zip(entries) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buffer.getvalue()
