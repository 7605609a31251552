#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/config.py
"""Configuration file discovery and loading for the sitemark CLI.

A build reads its configuration from the first of these found in the current
directory or any parent:

1. ``.sitemark.toml``
2. ``.sitemark.yaml`` / ``.sitemark.yml``
3. ``.sitemark.json``
4. ``pyproject.toml`` with a ``[tool.sitemark]`` table

Recognised keys::

    extensions = ["gfm-tables", "emphasis", "highlight"]
    log_level = "INFO"
    format = "html"
    extract_metadata = true
    title_from_heading = true

    [components]
    Card = "mysite.components:card"

    [extension_options.heading-ids]
    id_prefix = "h-"

"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from sitemark.constants import CONFIG_FILENAMES, PYPROJECT_TOOL_SECTION
from sitemark.exceptions import ConfigurationError
from sitemark.options import CompilerOptions

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SITEMARK_CONFIG"

KNOWN_KEYS = frozenset(
    {
        "components",
        "extension_options",
        "extensions",
        "extract_metadata",
        "format",
        "log_level",
        "title_from_heading",
    }
)


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.sitemark]`` table from a pyproject.toml file.

    Returns an empty dict when the table is absent.

    Raises
    ------
    ConfigurationError
        If the file is not valid TOML or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {pyproject_path}: {e}", original_error=e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading {pyproject_path}: {e}", original_error=e) from e

    config = data.get("tool", {}).get(PYPROJECT_TOOL_SECTION, {})
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"[tool.{PYPROJECT_TOOL_SECTION}] in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file in ``start_dir`` or its parents.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First configuration file found, or None

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigurationError as e:
                logger.debug(f"Skipping unreadable {pyproject_path}: {e}")

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _read_mapping(config_path: Path, loader: Callable[[Any], Any], binary: bool, kind: str) -> Dict[str, Any]:
    try:
        with open(config_path, "rb" if binary else "r", **({} if binary else {"encoding": "utf-8"})) as f:
            config = loader(f)
    except OSError as e:
        raise ConfigurationError(f"Error reading {config_path}: {e}", original_error=e) from e
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid {kind} in config file {config_path}: {e}", original_error=e) from e

    if config is None and kind == "YAML":
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"{kind} config file must contain a mapping, got {type(config).__name__}")
    return config


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Configuration file; the format follows the file name

    Returns
    -------
    dict
        Configuration values

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, malformed or of unknown format

    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file does not exist: {config_path}")

    ext = config_path.suffix.lower()
    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)
    if ext == ".toml":
        return _read_mapping(config_path, tomllib.load, binary=True, kind="TOML")
    if ext in (".yaml", ".yml"):
        return _read_mapping(config_path, yaml.safe_load, binary=False, kind="YAML")
    if ext == ".json":
        return _read_mapping(config_path, json.load, binary=False, kind="JSON")
    raise ConfigurationError(f"Unsupported config file format: {ext}. Use .toml, .yaml or .json")


def load_config_with_priority(
    explicit_path: Optional[str] = None,
    env_var_path: Optional[str] = None,
    start_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration with proper priority handling.

    Priority order (highest to lowest):
    1. Explicit config file path (``--config``)
    2. ``SITEMARK_CONFIG`` environment variable
    3. Auto-discovered config file

    Returns
    -------
    dict
        Configuration values (empty if nothing was found)

    """
    if explicit_path:
        return load_config_file(explicit_path)

    if env_var_path:
        return load_config_file(env_var_path)

    discovered = find_config_in_parents(start_dir)
    if discovered:
        logger.debug(f"Using configuration from {discovered}")
        return load_config_file(discovered)

    return {}


def import_object(path: str) -> Any:
    """Import an object from a ``"module:attribute"`` path.

    Raises
    ------
    ConfigurationError
        If the path is malformed or the object cannot be imported

    """
    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import path '{path}', expected 'module:attribute'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}", original_error=e) from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise ConfigurationError(f"Module '{module_name}' has no attribute '{attr_path}'", original_error=e) from e
    return obj


def load_components(spec: Dict[str, Any]) -> Dict[str, Callable]:
    """Import component renderers from a tag -> ``"module:attr"`` table.

    Raises
    ------
    ConfigurationError
        If an entry cannot be imported or is not callable

    """
    components: Dict[str, Callable] = {}
    for tag, path in spec.items():
        renderer = import_object(str(path))
        if not callable(renderer):
            raise ConfigurationError(f"Component '{tag}' resolves to a non-callable object: {path}")
        components[tag] = renderer
    return components


def options_from_config(config: Dict[str, Any], base: Optional[CompilerOptions] = None) -> CompilerOptions:
    """Build compiler options from configuration values.

    Parameters
    ----------
    config : dict
        Values from a config file, with command-line overrides merged in
    base : CompilerOptions, optional
        Options to start from

    Returns
    -------
    CompilerOptions
        Options with every recognised key applied

    Raises
    ------
    ConfigurationError
        If a value has the wrong shape or a component cannot be imported

    """
    for key in sorted(set(config) - KNOWN_KEYS):
        logger.warning(f"Ignoring unknown configuration key: {key}")

    updates: Dict[str, Any] = {}
    if "extensions" in config:
        extensions = config["extensions"]
        if isinstance(extensions, str) or not isinstance(extensions, (list, tuple)):
            raise ConfigurationError("'extensions' must be a list of extension ids")
        updates["extensions"] = tuple(str(e) for e in extensions)

    if "extension_options" in config:
        extension_options = config["extension_options"]
        if not isinstance(extension_options, dict) or not all(isinstance(v, dict) for v in extension_options.values()):
            raise ConfigurationError("'extension_options' must map extension ids to tables of parameters")
        updates["extension_options"] = extension_options

    if "components" in config:
        components = config["components"]
        if not isinstance(components, dict):
            raise ConfigurationError("'components' must map tag names to 'module:attr' paths")
        updates["components"] = load_components(components)

    for flag in ("extract_metadata", "title_from_heading"):
        if flag in config:
            if not isinstance(config[flag], bool):
                raise ConfigurationError(f"'{flag}' must be true or false")
            updates[flag] = config[flag]

    options = base or CompilerOptions()
    return options.create_updated(**updates) if updates else options


__all__ = [
    "CONFIG_ENV_VAR",
    "find_config_in_parents",
    "import_object",
    "load_components",
    "load_config_file",
    "load_config_with_priority",
    "options_from_config",
]
