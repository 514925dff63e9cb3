"""Loader for reusable AppleScript fragments shipped under `ofocus/scripts`."""

from __future__ import annotations

import logging
from pathlib import Path

from ofocus.config import Settings

logger = logging.getLogger(__name__)

SCRIPTS_ROOT = Path(__file__).resolve().parent.parent / "scripts"

JSON_HELPERS = "helpers/json.applescript"


class AssetPathError(ValueError):
    """Raised when a fragment path is empty or escapes the scripts root."""


class FragmentCache:
    """Fragment text keyed by relative path; lives as long as its owner."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, relative_path: str) -> str | None:
        return self._entries.get(relative_path)

    def put(self, relative_path: str, content: str) -> None:
        self._entries[relative_path] = content

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ScriptAssets:
    """Resolve, read and cache script fragments below one root directory."""

    def __init__(self, root: Path | None = None, *, cache: FragmentCache | None = None) -> None:
        self._root = (root or SCRIPTS_ROOT).resolve()
        self._cache = cache if cache is not None else FragmentCache()

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, relative_path: str) -> Path:
        """Absolute path of a fragment; refuses anything outside the root."""

        if not relative_path or not relative_path.strip():
            raise AssetPathError("Script path cannot be empty")
        candidate = (self._root / relative_path).resolve()
        if not candidate.is_relative_to(self._root):
            raise AssetPathError(f"Invalid script path: {relative_path}")
        return candidate

    def load(self, relative_path: str) -> str:
        path = self.path_for(relative_path)
        logger.debug("Loading script fragment %s", path)
        return path.read_text(encoding="utf-8")

    def load_cached(self, relative_path: str) -> str:
        cached = self._cache.get(relative_path)
        if cached is not None:
            return cached
        content = self.load(relative_path)
        self._cache.put(relative_path, content)
        return content

    def clear_cache(self) -> None:
        self._cache.clear()


_default_assets: ScriptAssets | None = None


def default_assets() -> ScriptAssets:
    """Process-wide loader rooted at `OFOCUS_SCRIPTS_DIR` or the packaged scripts."""

    global _default_assets  # noqa: PLW0603
    if _default_assets is None:
        _default_assets = ScriptAssets(Settings.from_env().bridge.scripts_dir)
    return _default_assets


def load_script(relative_path: str) -> str:
    return default_assets().load(relative_path)


def load_script_cached(relative_path: str) -> str:
    return default_assets().load_cached(relative_path)


def clear_script_cache() -> None:
    default_assets().clear_cache()
