import argparse
import logging
import sys
from pathlib import Path

from langchain_openai import ChatOpenAI

from appshots.config import load_settings
from appshots.core import ScreenshotPipeline
from appshots.errors import AppshotsError
from appshots.localization import COMMON_LOCALES
from appshots.presets import FONT_OPTIONS, GRADIENT_PRESETS, gradient_background
from appshots.project import create_project, load_project, save_project
from appshots.translator import LocaleTranslator


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render and export App Store screenshots for a project."
    )
    parser.add_argument(
        "--project",
        type=Path,
        default=None,
        help="Path to the project JSON file.",
    )
    parser.add_argument(
        "--assets",
        type=Path,
        default=None,
        help="Folder holding screenshot-* and bg-image-* assets (default: $APPSHOTS_ASSETS_DIR).",
    )
    parser.add_argument(
        "--output-root",
        type=Path,
        default=None,
        help="Root folder where exports are written (default: $APPSHOTS_OUTPUT_DIR).",
    )
    parser.add_argument(
        "--mode",
        choices=["single", "all", "locales", "preview"],
        default="all",
        help="single PNG, ZIP of all slides, ZIP per locale, or a scaled-down preview.",
    )
    parser.add_argument(
        "--slide",
        type=int,
        default=1,
        help="1-based slide number for --mode single/preview.",
    )
    parser.add_argument(
        "--locale",
        default=None,
        help="Locale to render for --mode single/all/preview.",
    )
    parser.add_argument(
        "--preview-scale",
        type=float,
        default=0.25,
        help="Render scale for --mode preview.",
    )
    parser.add_argument(
        "--translate",
        action="store_true",
        help="Fill in missing translations with an LLM before exporting (needs OPENAI_API_KEY).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only check attached screenshots against the target size.",
    )
    parser.add_argument(
        "--init",
        metavar="NAME",
        default=None,
        help="Create a new project called NAME at --project and exit.",
    )
    parser.add_argument(
        "--gradient",
        default=None,
        help="Gradient preset for the first slide of a new project (see --list-presets).",
    )
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="Print the available locales, fonts and gradient presets and exit.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: $APPSHOTS_LOG_LEVEL).")
    args = parser.parse_args(argv)
    if args.project is None and not args.list_presets:
        parser.error("--project is required")
    return args


def print_presets() -> None:
    print("Locales:")
    for code, name in COMMON_LOCALES.items():
        print(f"  {code:<8} {name}")
    print("Fonts:")
    for font_id, name in FONT_OPTIONS.items():
        print(f"  {font_id:<14} {name}")
    print("Gradients:")
    for preset in GRADIENT_PRESETS:
        print(f"  {preset.name:<12} {preset.colors[0]} -> {preset.colors[1]} ({preset.direction:g}deg)")


def main(argv=None) -> int:
    settings = load_settings()
    args = parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        print_presets()
        return 0

    if args.init:
        project = create_project(args.init)
        if args.gradient:
            try:
                project.slides[0].background = gradient_background(args.gradient)
            except KeyError as exc:
                print(f"❌ {exc.args[0]}", file=sys.stderr)
                return 2
        args.project.parent.mkdir(parents=True, exist_ok=True)
        save_project(project, args.project)
        print(f"🆕 Created project {project.name!r} at {args.project}")
        return 0

    translator = None
    if args.translate:
        if not settings.openai_api_key:
            print("❌ --translate needs OPENAI_API_KEY (environment or .env).", file=sys.stderr)
            return 2
        llm = ChatOpenAI(
            model=settings.translation_model,
            temperature=0.2,
            api_key=settings.openai_api_key,
        )
        translator = LocaleTranslator(llm=llm)

    pipeline = ScreenshotPipeline(
        assets_dir=args.assets or settings.assets_dir,
        output_root=args.output_root or settings.output_dir,
        fonts_dir=settings.fonts_dir,
        frames_dir=settings.frames_dir,
        translator=translator,
    )

    try:
        if args.validate_only:
            project = load_project(args.project)
            checks = pipeline.validate(project)
            for check in checks:
                if check.error:
                    print(f"⚠️  Slide {check.slide_index + 1}: {check.error}")
                elif check.result is None:
                    print(f"📭 Slide {check.slide_index + 1}: no screenshot")
                elif check.result.is_compatible:
                    print(f"✅ Slide {check.slide_index + 1}: {check.result.dimensions}")
                else:
                    print(f"⚠️  Slide {check.slide_index + 1}: {check.result.message}")
            return 1 if any(c.needs_attention for c in checks) else 0

        output_path = pipeline.run(
            args.project,
            mode=args.mode,
            slide_index=args.slide - 1,
            locale=args.locale,
            preview_scale=args.preview_scale,
        )
    except (AppshotsError, ValueError, OSError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        if isinstance(exc.__cause__, AppshotsError):
            print(f"   {exc.__cause__}", file=sys.stderr)
        return 1

    print(f"📦 Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
