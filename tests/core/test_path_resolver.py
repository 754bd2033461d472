"""Tests for registry discovery and output path mapping."""

from pathlib import Path

from dotgithub.core.path_resolver import PathResolver, find_registry_path
from dotgithub.core.registry import Registry
from dotgithub.core.registry_io import write_document
from tests.test_utils.builders import create_project


def test_discovery_stops_at_git_root(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    nested = project.root / "packages" / "app"
    nested.mkdir(parents=True)

    assert find_registry_path(nested) == project.registry_path


def test_discovery_finds_existing_document_above(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    document = project.root / ".github" / "dotgithub.yaml"
    document.write_text("outputDir: gen\n")
    nested = project.root / "sub"
    nested.mkdir()

    assert find_registry_path(nested) == document


def test_discovery_prefers_json_when_several_forms_exist(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    (project.root / ".github" / "dotgithub.toml").write_text("")
    (project.root / ".github" / "dotgithub.json").write_text("{}")

    assert find_registry_path(project.root).name == "dotgithub.json"


def test_discovery_without_git_falls_back_to_cwd(tmp_path: Path) -> None:
    lonely = (tmp_path / "lonely").resolve()
    lonely.mkdir()

    # Nothing above tmp_path is expected to contain .github/dotgithub.*
    found = find_registry_path(lonely)

    assert found.name == "dotgithub.json"


def test_explicit_registry_path_relative_to_cwd(tmp_path: Path) -> None:
    project = create_project(tmp_path)

    resolver = PathResolver(project.root, Path("config/dotgithub.toml"))

    assert resolver.registry_path() == project.root / "config" / "dotgithub.toml"
    assert resolver.registry_dir() == project.root / "config"
    assert resolver.project_root() == project.root


def test_output_root_read_from_document(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    write_document(project.registry_path, Registry.default("../generated").to_document())

    resolver = PathResolver(project.root)

    assert resolver.output_root() == project.root / "generated"
    assert resolver.output_root("src") == project.output_root


def test_output_root_defaults_when_document_missing(tmp_path: Path) -> None:
    project = create_project(tmp_path)

    assert PathResolver(project.root).output_root() == project.output_root


def test_relative_round_trip(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    resolver = PathResolver(project.root)
    original = project.output_root / "actions" / "cache" / ".." / "cache" / "save" / "save.py"

    relative = resolver.to_relative(original)

    assert relative == "actions/cache/save/save.py"
    assert resolver.to_absolute(relative) == original.resolve()


def test_registry_relative_round_trip(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    resolver = PathResolver(project.root)
    workflow = project.root / ".github" / "workflows" / "ci.py"

    assert resolver.relative_to_registry(workflow) == "workflows/ci.py"
    assert resolver.from_registry_relative("workflows/ci.py") == workflow


def test_override_invalidates_cache(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    resolver = PathResolver(project.root)
    assert resolver.registry_path() == project.registry_path

    resolver.set_registry_path(Path("elsewhere/dotgithub.yml"))

    assert resolver.registry_path() == project.root / "elsewhere" / "dotgithub.yml"
    assert resolver.output_root() == project.root / "elsewhere" / "src"


def test_rewritten_document_seen_after_invalidation(tmp_path: Path) -> None:
    project = create_project(tmp_path)
    resolver = PathResolver(project.root)
    assert resolver.output_root() == project.output_root

    write_document(project.registry_path, Registry.default("gen").to_document())
    resolver.invalidate_cache()

    assert resolver.output_root() == project.root / ".github" / "gen"
