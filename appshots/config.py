import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    assets_dir: Path = Path("assets")
    frames_dir: Path = Path("frames")
    fonts_dir: Path = Path("fonts")
    output_dir: Path = Path("outputs")
    log_level: str = "INFO"
    openai_api_key: Optional[str] = None
    translation_model: str = "gpt-4o-mini"


def load_settings() -> Settings:
    """
    Build settings from the environment, reading a local .env file first
    (e.g. OPENAI_API_KEY=sk-...).
    """
    load_dotenv()

    defaults = Settings()
    return Settings(
        assets_dir=Path(os.environ.get("APPSHOTS_ASSETS_DIR", defaults.assets_dir)),
        frames_dir=Path(os.environ.get("APPSHOTS_FRAMES_DIR", defaults.frames_dir)),
        fonts_dir=Path(os.environ.get("APPSHOTS_FONTS_DIR", defaults.fonts_dir)),
        output_dir=Path(os.environ.get("APPSHOTS_OUTPUT_DIR", defaults.output_dir)),
        log_level=os.environ.get("APPSHOTS_LOG_LEVEL", defaults.log_level).upper(),
        openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
        translation_model=os.environ.get("APPSHOTS_TRANSLATION_MODEL", defaults.translation_model),
    )
