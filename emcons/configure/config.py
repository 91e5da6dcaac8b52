# SPDX-License-Identifier: MIT
"""Layered configuration store.

Toolchain options come from a hierarchy of configuration layers (engine
defaults, platform overrides, project settings). Each layer maps section
names to key/value tables; later layers override earlier ones. A layer
may be restricted to one target platform.

Example:
    config = LayeredConfig()
    config.add_layer({"/Script/Settings": {"EnableTracing": True}})
    config.add_layer(
        {"/Script/Settings": {"EnableTracing": False}}, platform="HTML5"
    )
    config.get_bool("/Script/Settings", "EnableTracing", platform="HTML5")
    # -> False
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from emcons.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


@runtime_checkable
class ConfigStore(Protocol):
    """Protocol for configuration stores read by the toolchain.

    Lookups return None when a key is absent or its value cannot be
    interpreted as the requested type.
    """

    def get_bool(
        self, section: str, key: str, *, platform: str | None = None
    ) -> bool | None: ...

    def get_string(
        self, section: str, key: str, *, platform: str | None = None
    ) -> str | None: ...


def parse_bool(value: Any) -> bool | None:
    """Interpret a configuration value as a boolean.

    Accepts real booleans and the usual ini spellings
    (True/False, 1/0, yes/no, on/off) in any case.

    Returns:
        The boolean, or None if the value is not a recognizable boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


@dataclass
class ConfigLayer:
    """One layer of the configuration hierarchy.

    Attributes:
        values: Section name -> key -> value.
        platform: If set, the layer only applies to this platform.
        source: Where the layer came from (for diagnostics).
    """

    values: dict[str, dict[str, Any]] = field(default_factory=dict)
    platform: str | None = None
    source: str = "<memory>"

    def applies_to(self, platform: str | None) -> bool:
        if self.platform is None:
            return True
        return platform is not None and self.platform.lower() == platform.lower()


class LayeredConfig:
    """Configuration store made of ordered layers.

    Implements the ConfigStore protocol. The last applicable layer that
    defines a key wins.
    """

    def __init__(self, layers: list[ConfigLayer] | None = None) -> None:
        self._layers: list[ConfigLayer] = list(layers or [])

    @property
    def layers(self) -> list[ConfigLayer]:
        return list(self._layers)

    def add_layer(
        self,
        values: Mapping[str, Mapping[str, Any]],
        *,
        platform: str | None = None,
        source: str = "<memory>",
    ) -> ConfigLayer:
        """Append a layer on top of the existing ones.

        Args:
            values: Section name -> key -> value.
            platform: Restrict the layer to this platform.
            source: Description of where the values came from.

        Returns:
            The new layer.
        """
        layer = ConfigLayer(
            values={section: dict(keys) for section, keys in values.items()},
            platform=platform,
            source=source,
        )
        self._layers.append(layer)
        return layer

    @classmethod
    def from_files(
        cls,
        paths: list[Path | str],
        *,
        platform: str | None = None,
    ) -> LayeredConfig:
        """Build a store from JSON files, lowest priority first.

        Missing files are skipped: absence of configuration is normal.
        A file may restrict itself to a platform with a top-level
        ``"platform"`` key; its sections live under ``"sections"``.
        Files without ``"sections"`` are treated as a plain
        section mapping and apply to ``platform`` (or every platform).

        Raises:
            ConfigurationError: If a file exists but is not valid JSON, or
                its sections are not JSON objects.
        """
        config = cls()
        for path in paths:
            path = Path(path)
            if not path.exists():
                logger.debug("Config layer not found, skipping: %s", path)
                continue
            try:
                data = load_config(path)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"invalid JSON: {e}", context=str(path)) from e

            if not isinstance(data, dict):
                raise ConfigurationError("config must be a JSON object", str(path))
            layer_platform = platform
            if "sections" in data:
                layer_platform = data.get("platform", platform)
                data = data["sections"]
            config.add_layer(
                _check_sections(data, str(path)),
                platform=layer_platform,
                source=str(path),
            )
            logger.debug("Loaded config layer: %s", path)
        return config

    def get(
        self, section: str, key: str, *, platform: str | None = None
    ) -> Any | None:
        """Return the raw value for a key, or None if no layer defines it."""
        for layer in reversed(self._layers):
            if not layer.applies_to(platform):
                continue
            keys = layer.values.get(section)
            if keys is not None and key in keys:
                return keys[key]
        return None

    def get_bool(
        self, section: str, key: str, *, platform: str | None = None
    ) -> bool | None:
        value = self.get(section, key, platform=platform)
        if value is None:
            return None
        result = parse_bool(value)
        if result is None:
            logger.debug("Ignoring non-boolean value for %s.%s: %r", section, key, value)
        return result

    def get_string(
        self, section: str, key: str, *, platform: str | None = None
    ) -> str | None:
        value = self.get(section, key, platform=platform)
        if value is None:
            return None
        if isinstance(value, (dict, list)):
            logger.debug("Ignoring non-string value for %s.%s: %r", section, key, value)
            return None
        return str(value)

    def __repr__(self) -> str:
        sources = ", ".join(layer.source for layer in self._layers)
        return f"LayeredConfig([{sources}])"


def load_config(path: Path | str) -> dict[str, Any]:
    """Load a configuration file.

    Args:
        path: Path to the JSON config file.

    Returns:
        Configuration dict.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data: dict[str, Any] = json.load(f)
        return data


def _check_sections(data: Any, source: str) -> dict[str, dict[str, Any]]:
    if not isinstance(data, dict):
        raise ConfigurationError("'sections' must be a JSON object", source)
    for section, keys in data.items():
        if not isinstance(keys, dict):
            raise ConfigurationError(
                f"section {section!r} must be a JSON object", context=source
            )
    return data
