import logging
from pathlib import Path
from typing import Optional

from .errors import MissingAssetError

logger = logging.getLogger(__name__)

SCREENSHOT_PREFIX = "screenshot-"
BACKGROUND_PREFIX = "bg-image-"

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}


def canonical_key(ref: str, prefix: str) -> str:
    """
    Return the single-prefixed store key for an asset reference.

    Older projects stored refs that already carried the prefix, so their blobs
    ended up under doubled keys (`screenshot-screenshot-<id>`).
    """
    ident = ref
    while ident.startswith(prefix):
        ident = ident[len(prefix):]
    return f"{prefix}{ident}"


def legacy_key(ref: str, prefix: str) -> str:
    return f"{prefix}{canonical_key(ref, prefix)}"


def screenshot_key(ref: str) -> str:
    return canonical_key(ref, SCREENSHOT_PREFIX)


def background_key(ref: str) -> str:
    return canonical_key(ref, BACKGROUND_PREFIX)


class AssetStore:
    """
    Blob store for screenshots and background images, one file per key under
    `root`.

    Files may carry an image extension (`screenshot-<id>.png`) so users can
    drop assets into the folder by hand.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def put(self, key: str, data: bytes) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._find_blob(key) or self.root / key
        path.write_bytes(data)
        return path

    def exists(self, key: str) -> bool:
        return self._find_blob(key) is not None

    def delete(self, key: str) -> None:
        path = self._find_blob(key)
        if path is not None:
            path.unlink()

    def get(self, key: str) -> bytes:
        path = self._find_blob(key)
        if path is None:
            raise MissingAssetError(f"No asset stored under {key!r} in {self.root}")
        return path.read_bytes()

    def get_screenshot(self, ref: str) -> bytes:
        return self._get_migrating(ref, SCREENSHOT_PREFIX)

    def get_background_image(self, ref: str) -> bytes:
        return self._get_migrating(ref, BACKGROUND_PREFIX)

    def _get_migrating(self, ref: str, prefix: str) -> bytes:
        key = canonical_key(ref, prefix)
        if self._find_blob(key) is None:
            old_key = legacy_key(ref, prefix)
            old_path = self._find_blob(old_key)
            if old_path is not None:
                new_path = old_path.with_name(key + old_path.name[len(old_key):])
                old_path.rename(new_path)
                logger.info("Migrated legacy asset key %s -> %s", old_path.name, new_path.name)
        return self.get(key)

    def _find_blob(self, key: str) -> Optional[Path]:
        if not self.root.exists():
            return None

        exact = self.root / key
        if exact.is_file():
            return exact

        for ext in sorted(IMAGE_EXTENSIONS):
            candidate = self.root / f"{key}{ext}"
            if candidate.is_file():
                return candidate
        return None
