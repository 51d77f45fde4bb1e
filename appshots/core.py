import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Optional

from .assets import AssetStore
from .errors import MissingAssetError, UnreadableImageError
from .export import (
    ARCHIVE_NAME,
    LOCALIZED_ARCHIVE_NAME,
    BatchExporter,
    slide_filename,
)
from .models import Project, ValidationResult
from .project import load_project, save_project
from .render import PillowCompositor
from .specs import get_target_spec
from .translator import LocaleTranslator, fill_missing_translations
from .validation import validate_screenshot_bytes

logger = logging.getLogger(__name__)

ExportMode = Literal["single", "all", "locales", "preview"]


@dataclass
class SlideCheck:
    slide_index: int
    slide_id: str
    result: Optional[ValidationResult] = None
    # Set instead of `result` when the screenshot could not be checked at all.
    error: Optional[str] = None

    @property
    def needs_attention(self) -> bool:
        if self.error is not None:
            return True
        return self.result is not None and not self.result.is_compatible


class ScreenshotPipeline:
    """
    Orchestrates an export run:
    - load and normalize the project
    - optionally fill in missing translations and persist them
    - check every attached screenshot against the target
    - render and write the PNG / ZIP under outputs/{project_id}/
    """

    def __init__(
        self,
        assets_dir: Path,
        output_root: Path,
        fonts_dir: Optional[Path] = None,
        frames_dir: Optional[Path] = None,
        translator: Optional[LocaleTranslator] = None,
    ) -> None:
        self.assets = AssetStore(assets_dir)
        self.output_root = output_root
        self.fonts_dir = fonts_dir
        self.frames_dir = frames_dir
        self.translator = translator

    def validate(self, project: Project) -> List[SlideCheck]:
        checks = []
        for index, slide in enumerate(project.slides):
            check = SlideCheck(slide_index=index, slide_id=slide.id)
            if slide.screenshot_ref:
                try:
                    data = self.assets.get_screenshot(slide.screenshot_ref)
                    check.result = validate_screenshot_bytes(data, project.screenshot_target, slide.device.model)
                except UnreadableImageError as exc:
                    check.error = str(exc)
                except MissingAssetError as exc:
                    check.error = str(exc)
            checks.append(check)
        return checks

    def run(
        self,
        project_path: Path,
        mode: ExportMode = "all",
        slide_index: int = 0,
        locale: Optional[str] = None,
        preview_scale: float = 0.25,
    ) -> Path:
        project = load_project(project_path)

        if self.translator is not None and project.locales:
            added = fill_missing_translations(project, self.translator)
            if added:
                save_project(project, project_path)

        for check in self.validate(project):
            if check.error:
                logger.warning("Slide %d: %s", check.slide_index + 1, check.error)
            elif check.needs_attention:
                slide = project.slides[check.slide_index]
                level = logging.INFO if slide.allow_mismatched_screenshot else logging.WARNING
                logger.log(level, "Slide %d: %s", check.slide_index + 1, check.result.message)

        target_spec = get_target_spec(project.screenshot_target)
        out_dir = self.output_root / project.id
        out_dir.mkdir(parents=True, exist_ok=True)

        if mode == "preview":
            compositor = self._compositor(project, render_scale=preview_scale)
            slide = _slide_at(project, slide_index)
            output_path = out_dir / f"preview-{slide_index + 1}.png"
            compositor.capture(slide, target_spec, locale).save(output_path, format="PNG")
            return output_path

        exporter = BatchExporter(self._compositor(project))

        if mode == "single":
            data = exporter.export_slide(_slide_at(project, slide_index), target_spec, locale)
            output_path = out_dir / slide_filename(slide_index)
        elif mode == "all":
            data = exporter.export_all(project.slides, target_spec, locale)
            output_path = out_dir / ARCHIVE_NAME
        elif mode == "locales":
            if not project.locales:
                raise ValueError(f"Project {project.name!r} has no locales to export")
            data = exporter.export_all_locales(project.slides, target_spec, project.locales)
            output_path = out_dir / LOCALIZED_ARCHIVE_NAME
        else:
            raise ValueError(f"Unknown export mode: {mode!r}")

        output_path.write_bytes(data)
        logger.info("Wrote %s", output_path)
        return output_path

    def _compositor(self, project: Project, render_scale: float = 1.0) -> PillowCompositor:
        return PillowCompositor(
            self.assets,
            default_locale=project.default_locale,
            fonts_dir=self.fonts_dir,
            frames_dir=self.frames_dir,
            render_scale=render_scale,
        )


def _slide_at(project: Project, slide_index: int):
    if not 0 <= slide_index < len(project.slides):
        raise ValueError(f"Slide {slide_index + 1} does not exist; project has {len(project.slides)} slides")
    return project.slides[slide_index]
