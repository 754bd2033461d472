"""Tests for generated tree layout and aggregation rebuilding."""

from pathlib import Path

from dotgithub.core.codegen import GENERATED_HEADER
from dotgithub.core.tree import (
    CleanupLog,
    find_generated_modules,
    nested_module_path,
    rebuild_all,
    rebuild_for_repository,
    rebuild_namespace_aggregation,
    rebuild_repo_aggregation,
    remove_empty_dirs,
    single_module_path,
)


def _generated(path: Path, body: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{GENERATED_HEADER}\n{body}", encoding="utf-8")
    return path


def _body(path: Path) -> str:
    return path.read_text(encoding="utf-8").split("\n", 3)[3]


def test_layout_paths(tmp_path: Path) -> None:
    assert single_module_path(tmp_path, "actions/setup-node") == (
        tmp_path / "actions" / "setup_node.py"
    )
    assert nested_module_path(tmp_path, "actions/cache", "restore", "restore_cache") == (
        tmp_path / "actions" / "cache" / "restore" / "restore_cache.py"
    )
    assert nested_module_path(tmp_path, "github/codeql-action", "", "codeql") == (
        tmp_path / "github" / "codeql_action" / "codeql.py"
    )


def test_repo_aggregation_lists_nested_generated_modules(tmp_path: Path) -> None:
    repo = tmp_path / "actions" / "cache"
    _generated(repo / "save" / "save_cache.py")
    _generated(repo / "restore" / "restore_cache.py")
    (repo / "notes.py").write_text("# hand-written\n")

    assert rebuild_repo_aggregation(repo, CleanupLog())

    assert _body(repo / "__init__.py") == (
        "from .restore.restore_cache import *\nfrom .save.save_cache import *\n"
    )


def test_repo_aggregation_removed_with_last_module(tmp_path: Path) -> None:
    repo = tmp_path / "actions" / "cache"
    _generated(repo / "__init__.py")
    (repo / "save").mkdir(parents=True)
    log = CleanupLog()

    assert not rebuild_repo_aggregation(repo, log)

    assert not repo.exists()
    assert repo / "__init__.py" in log.removed


def test_hand_written_aggregation_never_overwritten(tmp_path: Path) -> None:
    repo = tmp_path / "actions" / "cache"
    _generated(repo / "save.py")
    (repo / "__init__.py").write_text("# mine\n")

    rebuild_repo_aggregation(repo, CleanupLog())

    assert (repo / "__init__.py").read_text() == "# mine\n"


def test_namespace_aggregation_lists_modules_and_packages(tmp_path: Path) -> None:
    namespace = tmp_path / "actions"
    _generated(namespace / "checkout.py")
    _generated(namespace / "setup_node.py")
    _generated(namespace / "cache" / "__init__.py")
    (namespace / "scratch").mkdir()

    assert rebuild_namespace_aggregation(namespace, CleanupLog())

    assert _body(namespace / "__init__.py") == (
        "from .cache import *\nfrom .checkout import *\nfrom .setup_node import *\n"
    )


def test_namespace_aggregation_warns_about_shadowed_factories(tmp_path: Path) -> None:
    namespace = tmp_path / "octo"
    _generated(namespace / "alpha.py", '__all__ = ["BuildInputs", "build"]\n')
    _generated(namespace / "beta" / "build" / "build.py", '__all__ = ["BuildInputs", "build"]\n')
    _generated(namespace / "beta" / "deploy" / "deploy.py", '__all__ = ["deploy"]\n')
    _generated(namespace / "beta" / "__init__.py")
    log = CleanupLog()

    assert rebuild_namespace_aggregation(namespace, log)

    assert log.warnings == [
        "BuildInputs is exported by both alpha and beta; octo.BuildInputs refers to beta",
        "build is exported by both alpha and beta; octo.build refers to beta",
    ]


def test_namespace_aggregation_quiet_without_collisions(tmp_path: Path) -> None:
    namespace = tmp_path / "octo"
    _generated(namespace / "alpha.py", '__all__ = ["alpha"]\n')
    _generated(namespace / "beta.py", '__all__ = ["beta"]\n')
    log = CleanupLog()

    rebuild_namespace_aggregation(namespace, log)

    assert log.warnings == []


def test_rebuild_for_repository_updates_every_level(tmp_path: Path) -> None:
    _generated(tmp_path / "actions" / "checkout.py")
    _generated(tmp_path / "docker" / "login_action.py")

    rebuild_for_repository(tmp_path, "actions/checkout", CleanupLog())
    rebuild_for_repository(tmp_path, "docker/login-action", CleanupLog())

    root_text = (tmp_path / "__init__.py").read_text()
    assert "from . import actions\nfrom . import docker\n" in root_text
    assert '__all__ = [\n    "actions",\n    "docker",\n]\n' in root_text


def test_removing_last_namespace_member_cleans_up(tmp_path: Path) -> None:
    _generated(tmp_path / "actions" / "checkout.py")
    _generated(tmp_path / "docker" / "login_action.py")
    rebuild_all(tmp_path, CleanupLog())

    (tmp_path / "docker" / "login_action.py").unlink()
    rebuild_for_repository(tmp_path, "docker/login-action", CleanupLog())

    assert not (tmp_path / "docker").exists()
    assert "docker" not in (tmp_path / "__init__.py").read_text()


def test_pycache_does_not_keep_directories_alive(tmp_path: Path) -> None:
    pycache = tmp_path / "actions" / "cache" / "__pycache__"
    pycache.mkdir(parents=True)
    (pycache / "save.cpython-312.pyc").write_bytes(b"\x00")

    remove_empty_dirs(tmp_path / "actions", CleanupLog(), include_top=True)

    assert not (tmp_path / "actions").exists()


def test_find_generated_modules_skips_aggregations(tmp_path: Path) -> None:
    checkout = _generated(tmp_path / "actions" / "checkout.py")
    _generated(tmp_path / "actions" / "__init__.py")
    (tmp_path / "actions" / "manual.py").write_text("x = 1\n")

    assert find_generated_modules(tmp_path) == [checkout]
