"""Layout of the generated tree and rebuilding of its aggregation files.

Aggregation (`__init__.py`) files are always regenerated from a fresh scan of
the directory they live in, never patched, so a tree left behind by a crashed
run converges on the next synthesis pass. Only files that start with the
generated-file header take part in scans, which keeps hand-written modules
under the output root out of the aggregations.
"""

import ast
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotgithub.core.codegen import GENERATED_HEADER, to_module_name
from dotgithub.core.errors import FilesystemError

logger = logging.getLogger(__name__)

AGGREGATION_FILE_NAME = "__init__.py"


@dataclass
class CleanupLog:
    """Paths removed and warnings raised during best-effort cleanup."""

    removed: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def namespace_dir(output_root: Path, org_repo: str) -> Path:
    owner = org_repo.split("/", 1)[0]
    return output_root / to_module_name(owner)


def repo_dir(output_root: Path, org_repo: str) -> Path:
    repo = org_repo.split("/", 1)[1]
    return namespace_dir(output_root, org_repo) / to_module_name(repo)


def single_module_path(output_root: Path, org_repo: str) -> Path:
    """File for a repository whose only action lives at its root."""
    return repo_dir(output_root, org_repo).with_suffix(".py")


def nested_module_path(
    output_root: Path, org_repo: str, action_path: str, module_name: str
) -> Path:
    """File for an action in a repository directory, nested by subpath."""
    directory = repo_dir(output_root, org_repo)
    for segment in action_path.split("/") if action_path else []:
        directory = directory / to_module_name(segment)
    return directory / f"{module_name}.py"


def is_generated(path: Path) -> bool:
    if not path.is_file():
        return False
    try:
        with path.open(encoding="utf-8") as handle:
            return handle.readline().rstrip("\n") == GENERATED_HEADER
    except (OSError, UnicodeDecodeError):
        return False


def write_generated(path: Path, source: str) -> None:
    """Write a tracked generated file.

    Raises:
        FilesystemError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(str(path), "write", str(e)) from e


def delete_file(path: Path, log: CleanupLog, *, root: Path | None = None) -> None:
    """Delete a file, recording the outcome in log.

    With root set, a path that resolves outside root is left alone and
    reported as a warning.
    """
    if root is not None and not path.resolve().is_relative_to(root.resolve()):
        log.warn(f"Not deleting {path}: outside {root}")
        return
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError as e:
        log.warn(f"Could not delete {path}: {e}")
        return
    log.removed.append(path)


def remove_empty_dirs(top: Path, log: CleanupLog, *, include_top: bool) -> None:
    """Remove empty directories below top (and top itself if include_top)."""
    if not top.is_dir():
        return
    for dirpath, _dirnames, _filenames in os.walk(top, topdown=False):
        directory = Path(dirpath)
        if directory == top and not include_top:
            continue
        # __pycache__ left by imports of generated modules does not count as content
        pycache = directory / "__pycache__"
        if pycache.is_dir() and not any(p.suffix != ".pyc" for p in pycache.iterdir()):
            _remove_pycache(pycache, log)
        if any(directory.iterdir()):
            continue
        try:
            directory.rmdir()
        except OSError as e:
            log.warn(f"Could not remove directory {directory}: {e}")


def _remove_pycache(pycache: Path, log: CleanupLog) -> None:
    try:
        for compiled in pycache.iterdir():
            compiled.unlink()
        pycache.rmdir()
    except OSError as e:
        log.warn(f"Could not remove {pycache}: {e}")


def _write_aggregation(path: Path, source: str) -> None:
    if path.exists() and not is_generated(path):
        logger.warning("Not overwriting hand-written %s", path)
        return
    write_generated(path, source)


def _delete_aggregation(path: Path, log: CleanupLog) -> None:
    if is_generated(path):
        delete_file(path, log)


def _generated_modules(directory: Path) -> list[Path]:
    """Generated module files directly inside directory, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.iterdir()
        if path.suffix == ".py" and path.name != AGGREGATION_FILE_NAME and is_generated(path)
    )


def _generated_packages(directory: Path) -> list[Path]:
    """Subdirectories whose __init__.py is a generated aggregation, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_dir() and is_generated(path / AGGREGATION_FILE_NAME)
    )


def _star_imports(module_paths: list[str]) -> str:
    return "".join(f"from .{module_path} import *\n" for module_path in module_paths)


def rebuild_repo_aggregation(directory: Path, log: CleanupLog) -> bool:
    """Re-export every generated module below a repository directory.

    Removes the aggregation and the directory when no module remains.

    Returns:
        True if the repository directory still holds generated modules
    """
    remove_empty_dirs(directory, log, include_top=False)
    modules: list[str] = []
    if directory.is_dir():
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames[:] = sorted(name for name in dirnames if name != "__pycache__")
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix != ".py" or filename == AGGREGATION_FILE_NAME:
                    continue
                if is_generated(path):
                    relative = path.relative_to(directory).with_suffix("")
                    modules.append(".".join(relative.parts))

    aggregation = directory / AGGREGATION_FILE_NAME
    if not modules:
        _delete_aggregation(aggregation, log)
        remove_empty_dirs(directory, log, include_top=True)
        return False

    source = (
        f'{GENERATED_HEADER}\n"""Actions published by this repository."""\n\n'
        + _star_imports(sorted(modules))
    )
    _write_aggregation(aggregation, source)
    return True


def _exported_names(module: Path) -> list[str]:
    """Names listed in a generated module's __all__."""
    try:
        tree = ast.parse(module.read_text(encoding="utf-8"))
        for node in tree.body:
            if isinstance(node, ast.Assign) and any(
                isinstance(target, ast.Name) and target.id == "__all__" for target in node.targets
            ):
                return [name for name in ast.literal_eval(node.value) if isinstance(name, str)]
    except (OSError, SyntaxError, ValueError) as e:
        logger.debug("Could not read __all__ from %s: %s", module, e)
    return []


def _warn_shadowed_names(directory: Path, members: list[str], log: CleanupLog) -> None:
    # Star imports run in member order, so a later member's name wins
    owners: dict[str, str] = {}
    for member in members:
        package = directory / member
        if package.is_dir():
            modules = find_generated_modules(package)
        else:
            modules = [directory / f"{member}.py"]
        for module in modules:
            for name in _exported_names(module):
                previous = owners.get(name)
                if previous is not None and previous != member:
                    log.warn(
                        f"{name} is exported by both {previous} and {member}; "
                        f"{directory.name}.{name} refers to {member}"
                    )
                owners[name] = member


def rebuild_namespace_aggregation(directory: Path, log: CleanupLog) -> bool:
    """Re-export every generated module and repository package of a namespace.

    Warns about step factories that two repositories export under the same
    name, since only the last one stays reachable from the namespace package.

    Returns:
        True if the namespace still has members
    """
    members = [path.stem for path in _generated_modules(directory)]
    members.extend(path.name for path in _generated_packages(directory))
    members.sort()

    aggregation = directory / AGGREGATION_FILE_NAME
    if not members:
        _delete_aggregation(aggregation, log)
        remove_empty_dirs(directory, log, include_top=True)
        return False

    _warn_shadowed_names(directory, members, log)
    source = (
        f'{GENERATED_HEADER}\n"""Actions published by {directory.name}."""\n\n'
        + _star_imports(sorted(members))
    )
    _write_aggregation(aggregation, source)
    return True


def rebuild_root_aggregation(output_root: Path, log: CleanupLog) -> list[str]:
    """Import every namespace package under the output root.

    Returns:
        Namespace package names now listed
    """
    namespaces = [path.name for path in _generated_packages(output_root)]
    aggregation = output_root / AGGREGATION_FILE_NAME
    if not namespaces:
        _delete_aggregation(aggregation, log)
        return []

    lines = [GENERATED_HEADER, '"""Generated GitHub Action step factories."""', ""]
    lines.extend(f"from . import {name}" for name in namespaces)
    lines.append("")
    lines.append("__all__ = [")
    lines.extend(f'    "{name}",' for name in namespaces)
    lines.append("]")
    _write_aggregation(aggregation, "\n".join(lines) + "\n")
    return namespaces


def rebuild_for_repository(output_root: Path, org_repo: str, log: CleanupLog) -> None:
    """Rebuild the aggregations on the path from one repository up to the root."""
    repository = repo_dir(output_root, org_repo)
    if repository.exists():
        rebuild_repo_aggregation(repository, log)
    rebuild_namespace_aggregation(namespace_dir(output_root, org_repo), log)
    rebuild_root_aggregation(output_root, log)


def rebuild_all(output_root: Path, log: CleanupLog) -> None:
    """Rebuild every aggregation under the output root."""
    if not output_root.is_dir():
        return
    for namespace in sorted(path for path in output_root.iterdir() if path.is_dir()):
        for repository in sorted(path for path in namespace.iterdir() if path.is_dir()):
            if repository.name == "__pycache__":
                continue
            if is_generated(repository / AGGREGATION_FILE_NAME) or find_generated_modules(
                repository
            ):
                rebuild_repo_aggregation(repository, log)
        if is_generated(namespace / AGGREGATION_FILE_NAME) or _generated_modules(namespace):
            rebuild_namespace_aggregation(namespace, log)
    rebuild_root_aggregation(output_root, log)


def find_generated_modules(output_root: Path) -> list[Path]:
    """Every generated non-aggregation module under the output root."""
    found: list[Path] = []
    if not output_root.is_dir():
        return found
    for dirpath, dirnames, filenames in os.walk(output_root):
        dirnames[:] = sorted(name for name in dirnames if name != "__pycache__")
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix == ".py" and filename != AGGREGATION_FILE_NAME and is_generated(path):
                found.append(path)
    return found
