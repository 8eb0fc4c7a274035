"""Main-config and preset loading.

A *preset* is any module (or registered object) whose attributes name
configuration sections. :meth:`Presets.apply` folds one section across
every loaded preset in order:

* a callable contribution receives ``(accumulated, options)`` and returns
  the new value (sync or async);
* a list extends a list, a dict merges into a dict;
* any other value replaces the accumulated one.
"""
from __future__ import annotations

import hashlib
import importlib
import importlib.util
import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog

from showcase.core.constants import MAIN_CONFIG_NAMES
from showcase.core.exceptions import ConfigurationError, PresetError
from showcase.utils.async_helpers import maybe_await

logger = structlog.get_logger(__name__)

_MISSING = object()

# In-process presets, keyed by identifier. Checked before any import.
_REGISTRY: dict[str, Any] = {}


def register_preset(name: str, preset: Any) -> None:
    """Make *preset* loadable under *name* without an import."""
    _REGISTRY[name] = preset


def unregister_preset(name: str) -> None:
    _REGISTRY.pop(name, None)


def _public_attributes(obj: Any) -> dict[str, Any]:
    if isinstance(obj, Mapping):
        return dict(obj)
    return {
        key: value
        for key, value in vars(obj).items()
        if not key.startswith("_") and not isinstance(value, ModuleType)
    }


def _import_file(path: Path) -> ModuleType:
    digest = hashlib.sha1(str(path).encode()).hexdigest()[:12]
    module_name = f"_showcase_preset_{path.stem}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PresetError(f"Cannot load preset file {str(path)!r}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ------------------------------------------------------------------ #
# Main configuration
# ------------------------------------------------------------------ #


@dataclass
class MainConfig:
    """The project's ``main`` configuration file, parsed."""

    path: Path
    values: dict[str, Any]

    @property
    def framework(self) -> str | dict[str, Any] | None:
        return self.values.get("framework")

    @property
    def framework_name(self) -> str | None:
        framework = self.framework
        if isinstance(framework, str):
            return framework or None
        if isinstance(framework, Mapping):
            return framework.get("name") or None
        return None

    @property
    def framework_options(self) -> dict[str, Any]:
        framework = self.framework
        if isinstance(framework, Mapping):
            return dict(framework.get("options") or {})
        return {}

    @property
    def addons(self) -> list[str | dict[str, Any]]:
        return list(self.values.get("addons") or [])


def load_main_config(config_dir: str | Path) -> MainConfig:
    """Load ``main.py``, ``main.toml`` or ``main.json`` from *config_dir*.

    Raises:
        ConfigurationError: If no main configuration exists or it cannot
            be parsed.
    """
    config_dir = Path(config_dir)
    for name in MAIN_CONFIG_NAMES:
        path = config_dir / name
        if not path.is_file():
            continue
        try:
            if path.suffix == ".py":
                values = _public_attributes(_import_file(path))
            elif path.suffix == ".toml":
                with path.open("rb") as fh:
                    values = tomllib.load(fh)
            else:
                values = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, SyntaxError) as exc:
            raise ConfigurationError(
                f"Failed to read main configuration {str(path)!r}: {exc}",
                details={"path": str(path)},
            ) from exc
        if not isinstance(values, dict):
            raise ConfigurationError(
                f"Main configuration {str(path)!r} must define a mapping"
            )
        return MainConfig(path=path, values=values)

    raise ConfigurationError(
        f"No main configuration found in {str(config_dir)!r} "
        f"(looked for {', '.join(MAIN_CONFIG_NAMES)})",
        details={"config_dir": str(config_dir)},
    )


def resolve_addon_name(config_dir: str | Path, name: str) -> str:
    """Turn an addon or renderer reference into a loadable preset identifier.

    * a relative ``.py`` path is made absolute against *config_dir*;
    * a module that ships a ``preset`` submodule resolves to ``<name>.preset``;
    * anything else is returned unchanged.
    """
    if name in _REGISTRY:
        return name
    if name.endswith(".py"):
        path = Path(name)
        if not path.is_absolute():
            path = Path(config_dir) / path
        return str(path.resolve())
    try:
        if importlib.util.find_spec(f"{name}.preset") is not None:
            return f"{name}.preset"
    except (ImportError, ValueError):
        pass
    return name


def framework_preset(config_dir: str | Path, framework_name: str) -> str:
    """Identifier of the preset a framework contributes."""
    if framework_name.endswith(".py") or "/" in framework_name:
        return str((Path(config_dir) / framework_name / "preset.py").resolve())
    return f"{framework_name}.preset"


# ------------------------------------------------------------------ #
# Presets
# ------------------------------------------------------------------ #


@dataclass
class LoadedPreset:
    name: str
    contributions: dict[str, Any]
    options: dict[str, Any] = field(default_factory=dict)

    def get(self, section: str) -> Any:
        return self.contributions.get(section, _MISSING)


class Presets:
    """An ordered, loaded preset list that can fold configuration sections."""

    def __init__(self, presets: list[LoadedPreset], options: dict[str, Any]) -> None:
        self._presets = presets
        self._options = dict(options)

    def __repr__(self) -> str:
        return f"Presets(names={self.names!r})"

    @property
    def names(self) -> list[str]:
        return [preset.name for preset in self._presets]

    async def apply(self, section: str, default: Any = None) -> Any:
        """Fold *section* across all presets, starting from *default*."""
        value = default
        for preset in self._presets:
            change = preset.get(section)
            if change is _MISSING or change is None:
                continue
            if callable(change):
                options = {**self._options, **preset.options, "presets": self}
                value = await maybe_await(change(value, options))
            elif isinstance(value, list) and isinstance(change, list):
                value = [*value, *change]
            elif isinstance(value, Mapping) and isinstance(change, Mapping):
                value = {**value, **change}
            else:
                value = change
        return value


def _split_entry(entry: str | Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
    if isinstance(entry, str):
        return entry, {}
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise PresetError(f"Preset entry {entry!r} has no name")
    return name, dict(entry.get("options") or {})


def _load_one(identifier: str, config_dir: Path) -> Any:
    if identifier in _REGISTRY:
        return _REGISTRY[identifier]
    if identifier.endswith(".py"):
        path = Path(identifier)
        if not path.is_absolute():
            path = config_dir / path
        if not path.is_file():
            raise PresetError(f"Preset file {str(path)!r} does not exist")
        return _import_file(path)
    try:
        return importlib.import_module(identifier)
    except ImportError as exc:
        raise PresetError(f"Could not resolve preset {identifier!r}: {exc}") from exc


def _expand(
    entry: str | Mapping[str, Any],
    config_dir: Path,
    is_critical: bool,
    seen: set[str],
) -> list[LoadedPreset]:
    name, options = _split_entry(entry)
    if name in seen:
        return []
    seen.add(name)
    try:
        obj = _load_one(name, config_dir)
    except PresetError:
        if is_critical:
            raise
        logger.warning("failed to load preset", preset=name, exc_info=True)
        return []

    contributions = _public_attributes(obj)
    loaded: list[LoadedPreset] = []
    # Nested presets load before the preset that declares them.
    for nested in contributions.pop("presets", None) or []:
        loaded.extend(_expand(nested, config_dir, is_critical, seen))
    for addon in contributions.pop("addons", None) or []:
        addon_name, addon_options = _split_entry(addon)
        resolved = resolve_addon_name(config_dir, addon_name)
        loaded.extend(
            _expand({"name": resolved, "options": addon_options}, config_dir, is_critical, seen)
        )
    loaded.append(LoadedPreset(name=name, contributions=contributions, options=options))
    return loaded


async def load_all_presets(
    core_presets: list[str | dict[str, Any]],
    override_presets: list[str | dict[str, Any]],
    *,
    config_dir: str | Path,
    options: dict[str, Any] | None = None,
    main_config: MainConfig | None = None,
    is_critical: bool = False,
) -> Presets:
    """Load presets in merge order.

    Order: *core_presets*, the main configuration's addons, the main
    configuration itself, then *override_presets*.

    Raises:
        PresetError: If a preset cannot be resolved and *is_critical* is set.
        ConfigurationError: If the main configuration cannot be loaded.
    """
    config_dir = Path(config_dir)
    if main_config is None:
        main_config = load_main_config(config_dir)

    seen: set[str] = set()
    loaded: list[LoadedPreset] = []
    for entry in core_presets:
        loaded.extend(_expand(entry, config_dir, is_critical, seen))

    main_values = dict(main_config.values)
    for addon in main_values.pop("addons", None) or []:
        addon_name, addon_options = _split_entry(addon)
        resolved = resolve_addon_name(config_dir, addon_name)
        loaded.extend(
            _expand({"name": resolved, "options": addon_options}, config_dir, is_critical, seen)
        )
    loaded.append(LoadedPreset(name=str(main_config.path), contributions=main_values))

    for entry in override_presets:
        loaded.extend(_expand(entry, config_dir, is_critical, seen))

    logger.debug("presets loaded", presets=[preset.name for preset in loaded])
    return Presets(loaded, options or {})
