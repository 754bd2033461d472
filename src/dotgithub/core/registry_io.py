"""Serialized forms of the registry document.

The form is chosen by file extension and the same form is written back:
JSON, an embedded Python script assigning `config`, YAML, or TOML.
"""

import json
import os
import pprint
import runpy
import tempfile
import tomllib
from pathlib import Path
from typing import Any

import tomlkit
import yaml

from dotgithub.core.errors import FilesystemError, RegistryCorrupt

REGISTRY_BASE_NAME = "dotgithub"

# Preference order when several forms exist side by side
REGISTRY_SUFFIXES = (".json", ".py", ".yaml", ".yml", ".toml")

_PYTHON_CONFIG_NAME = "config"


def registry_file_names() -> list[str]:
    return [f"{REGISTRY_BASE_NAME}{suffix}" for suffix in REGISTRY_SUFFIXES]


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in REGISTRY_SUFFIXES:
        msg = f"Unsupported registry format '{suffix}' for {path}"
        raise ValueError(msg)
    return suffix


def read_document(path: Path) -> dict[str, Any]:
    """Parse a registry document.

    Raises:
        RegistryCorrupt: If the file cannot be parsed or is not a mapping
        ValueError: If the extension is not a supported form
    """
    suffix = _suffix(path)
    try:
        if suffix == ".py":
            data = _read_python(path)
        else:
            text = path.read_text(encoding="utf-8")
            if suffix == ".json":
                data = json.loads(text)
            elif suffix == ".toml":
                data = tomllib.loads(text)
            else:
                data = yaml.safe_load(text)
    except OSError as e:
        raise RegistryCorrupt(str(path), f"cannot be read ({e})") from e
    except UnicodeDecodeError as e:
        reason = f"is not valid UTF-8 ({e.reason} at byte {e.start})"
        raise RegistryCorrupt(str(path), reason) from e
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise RegistryCorrupt(str(path), str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RegistryCorrupt(str(path), "top level is not a mapping")
    return data


def _read_python(path: Path) -> Any:
    """Execute an embedded-script registry and return its `config` value.

    Note: Uses try/except as an acceptable error boundary. The script is user
    code and may raise anything while it runs.
    """
    try:
        namespace = runpy.run_path(str(path))
    except Exception as e:
        raise RegistryCorrupt(str(path), f"script failed: {type(e).__name__}: {e}") from e

    if _PYTHON_CONFIG_NAME not in namespace:
        raise RegistryCorrupt(str(path), f"script does not define '{_PYTHON_CONFIG_NAME}'")
    return namespace[_PYTHON_CONFIG_NAME]


def render_document(path: Path, data: dict[str, Any]) -> str:
    """Serialize data in the form selected by path's extension."""
    suffix = _suffix(path)
    if suffix == ".json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if suffix == ".py":
        body = pprint.pformat(data, indent=1, width=88, sort_dicts=False)
        return f'"""dotgithub registry."""\n\n{_PYTHON_CONFIG_NAME} = {body}\n'
    if suffix == ".toml":
        return tomlkit.dumps(_without_none(data))
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def _without_none(value: Any) -> Any:
    # TOML has no null
    if isinstance(value, dict):
        return {key: _without_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_without_none(item) for item in value if item is not None]
    return value


def write_document(path: Path, data: dict[str, Any]) -> None:
    """Write the document atomically by renaming a temporary sibling into place.

    Raises:
        FilesystemError: If the directory or file cannot be written
    """
    text = render_document(path, data)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(temp_name, path)
    except OSError as e:
        raise FilesystemError(str(path), "write registry document", str(e)) from e
