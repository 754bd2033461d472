"""Loading and saving the registry document."""

from abc import ABC, abstractmethod
from pathlib import Path

from dotgithub.core.path_resolver import PathResolver
from dotgithub.core.registry import Registry, validate_and_migrate
from dotgithub.core.registry_io import read_document, write_document


class RegistryStore(ABC):
    """Abstract interface for registry persistence.

    Provides dependency injection for registry access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if the registry document exists."""
        ...

    @abstractmethod
    def load(self) -> Registry:
        """Load the registry, or the default registry if no document exists.

        Raises:
            RegistryCorrupt: If the document exists but cannot be parsed
        """
        ...

    @abstractmethod
    def save(self, registry: Registry) -> None:
        """Persist the registry in the document's current form.

        Raises:
            FilesystemError: If the document cannot be written
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Location of the registry document."""
        ...


class FilesystemRegistryStore(RegistryStore):
    """Registry document located through a PathResolver."""

    def __init__(self, path_resolver: PathResolver) -> None:
        self._path_resolver = path_resolver

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> Registry:
        path = self.path()
        if not path.exists():
            return Registry.default()
        return validate_and_migrate(read_document(path), source=str(path))

    def save(self, registry: Registry) -> None:
        write_document(self.path(), registry.to_document())
        self._path_resolver.invalidate_cache()

    def path(self) -> Path:
        return self._path_resolver.registry_path()


class InMemoryRegistryStore(RegistryStore):
    """In-memory registry for tests."""

    def __init__(self, *, registry: Registry | None = None, path: Path | None = None) -> None:
        self._registry = registry
        self._path = path if path is not None else Path("/test/.github/dotgithub.json")
        self._saved: list[Registry] = []

    def exists(self) -> bool:
        return self._registry is not None

    def load(self) -> Registry:
        if self._registry is None:
            return Registry.default()
        return self._registry

    def save(self, registry: Registry) -> None:
        self._registry = registry
        self._saved.append(registry)

    def path(self) -> Path:
        return self._path

    @property
    def saved(self) -> list[Registry]:
        """Every registry passed to save, in order.

        This property is for test assertions only.
        """
        return list(self._saved)
