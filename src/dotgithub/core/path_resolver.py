"""Location of the registry document and mapping of generated-file paths.

Discovers the registry document without requiring a full DotGithubContext,
so the CLI can honor --config before the context is built.
"""

import logging
import os
from pathlib import Path

from dotgithub.core.errors import RegistryCorrupt
from dotgithub.core.registry import DEFAULT_OUTPUT_DIR
from dotgithub.core.registry_io import read_document, registry_file_names

logger = logging.getLogger(__name__)

REGISTRY_DIR_NAME = ".github"
DEFAULT_REGISTRY_FILE_NAME = "dotgithub.json"


def find_registry_path(cwd: Path) -> Path:
    """Walk up from `cwd` to find the registry document.

    At each directory the first existing `.github/dotgithub.<ext>` wins, in
    preference order. A directory containing `.git` ends the search with its
    default document path even if that file does not exist yet. With neither
    found, the default document path under `cwd` is returned.
    """
    start = cwd.resolve()
    names = registry_file_names()

    for parent in [start, *start.parents]:
        registry_dir = parent / REGISTRY_DIR_NAME
        for name in names:
            candidate = registry_dir / name
            if candidate.is_file():
                return candidate
        if (parent / ".git").exists():
            return registry_dir / DEFAULT_REGISTRY_FILE_NAME

    return start / REGISTRY_DIR_NAME / DEFAULT_REGISTRY_FILE_NAME


class PathResolver:
    """Resolves and caches registry and output-tree locations.

    The cache is dropped whenever the document path is overridden or the
    document is rewritten (see invalidate_cache).
    """

    def __init__(self, cwd: Path, registry_path: Path | None = None) -> None:
        self._cwd = cwd
        self._custom_registry_path = registry_path
        self._cache: dict[str, Path] = {}

    def set_registry_path(self, registry_path: Path | None) -> None:
        self._custom_registry_path = registry_path
        self.invalidate_cache()

    def invalidate_cache(self) -> None:
        self._cache.clear()

    def registry_path(self) -> Path:
        if "registry_path" not in self._cache:
            if self._custom_registry_path is not None:
                path = (self._cwd / self._custom_registry_path).resolve()
            else:
                path = find_registry_path(self._cwd)
            self._cache["registry_path"] = path
        return self._cache["registry_path"]

    def registry_dir(self) -> Path:
        return self.registry_path().parent

    def project_root(self) -> Path:
        return self.registry_dir().parent

    def output_root(self, output_dir: str | None = None) -> Path:
        """Absolute output root.

        Args:
            output_dir: Output directory relative to the registry directory.
                Read from the document (default "src") when None.
        """
        if output_dir is None:
            output_dir = self._document_output_dir()
        cache_key = f"output_root:{output_dir}"
        if cache_key not in self._cache:
            self._cache[cache_key] = (self.registry_dir() / output_dir).resolve()
        return self._cache[cache_key]

    def _document_output_dir(self) -> str:
        path = self.registry_path()
        if not path.exists():
            return DEFAULT_OUTPUT_DIR
        try:
            data = read_document(path)
        except RegistryCorrupt as e:
            logger.debug("Using default output dir: %s", e)
            return DEFAULT_OUTPUT_DIR
        output_dir = data.get("outputDir")
        return output_dir if isinstance(output_dir, str) and output_dir else DEFAULT_OUTPUT_DIR

    def to_relative(self, path: Path, *, output_dir: str | None = None) -> str:
        """POSIX path of `path` relative to the output root."""
        root = self.output_root(output_dir)
        return Path(os.path.relpath(path.resolve(), root)).as_posix()

    def to_absolute(self, relative: str, *, output_dir: str | None = None) -> Path:
        return (self.output_root(output_dir) / relative).resolve()

    def relative_to_registry(self, path: Path) -> str:
        """POSIX path of `path` relative to the registry document's directory."""
        return Path(os.path.relpath(path.resolve(), self.registry_dir())).as_posix()

    def from_registry_relative(self, relative: str) -> Path:
        return (self.registry_dir() / relative).resolve()
