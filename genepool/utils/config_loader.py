"""
Unified configuration loader for GenePool.

This module normalises configuration handling across the CLI and SDK layers.
Configurations can be provided as dictionaries, JSON/YAML files, or YAML
strings and are merged on top of the schema defaults and optional global
defaults. Every merged key is checked against the schema so typos surface as
errors instead of being silently ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Union

import yaml
from omegaconf import DictConfig, OmegaConf

from .config_reference import CONFIG_SCHEMA, ConfigField, defaults

ConfigLike = Union[str, Path, Mapping[str, Any], DictConfig]


@dataclass
class LoadedConfig:
    """Container that exposes both OmegaConf and plain-dict views."""

    data: DictConfig

    def to_dict(self) -> Dict[str, Any]:
        return OmegaConf.to_container(self.data, resolve=True)  # type: ignore[return-value]

    def __getitem__(self, item: str) -> Any:
        return self.data[item]


def _check_choices(field: ConfigField, value: Any) -> None:
    allowed = {str(choice).lower() for choice in field.choices}
    values = value if isinstance(value, (list, tuple)) else [value]
    for item in values:
        if item is not None and str(item).lower().replace("-", "_") not in allowed:
            raise ValueError(
                f"Invalid value {item!r} for '{field.qualified_name}'. Choices: {list(field.choices)}"
            )


class ConfigLoader:
    """
    Load and merge GenePool configuration sources.

    Parameters
    ----------
    global_config : Optional[ConfigLike]
        Optional path or mapping merged over the schema defaults.
    """

    def __init__(self, global_config: Optional[ConfigLike] = None) -> None:
        self._global_conf = OmegaConf.create(defaults())
        if global_config is not None:
            self._global_conf = OmegaConf.merge(self._global_conf, self._coerce(global_config))

    def _coerce(self, source: ConfigLike) -> DictConfig:
        """Convert arbitrary config-like inputs into an OmegaConf instance."""
        if isinstance(source, DictConfig):
            return source
        if isinstance(source, Mapping):
            return OmegaConf.create(dict(source))
        if isinstance(source, Path):
            return self._load_path(source)
        if isinstance(source, str):
            potential_path = Path(source)
            if potential_path.suffix.lower() in {".yaml", ".yml", ".json"} or potential_path.exists():
                return self._load_path(potential_path)
            try:
                parsed = yaml.safe_load(source)
            except yaml.YAMLError as exc:
                raise ValueError(f"Failed to parse configuration string: {exc}") from exc
            if not isinstance(parsed, MutableMapping):
                raise ValueError("Configuration string must evaluate to a mapping.")
            return OmegaConf.create(dict(parsed))
        raise TypeError(f"Unsupported configuration source: {type(source)!r}")

    def _load_path(self, path: Path) -> DictConfig:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            loaded = OmegaConf.load(path)
        elif suffix == ".json":
            loaded = OmegaConf.create(yaml.safe_load(path.read_text(encoding="utf-8")))
        else:
            raise ValueError(f"Unsupported configuration file format: '{suffix}'. Expected YAML or JSON.")
        if not isinstance(loaded, DictConfig):
            raise ValueError(f"Configuration file must contain a mapping: {path}")
        return loaded

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        """Raise ``ValueError`` naming the first unknown section, unknown key or invalid choice."""

        for section, values in config.items():
            if section not in CONFIG_SCHEMA:
                raise ValueError(f"Unknown configuration section '{section}'. Options: {sorted(CONFIG_SCHEMA)}")
            if not isinstance(values, Mapping):
                raise ValueError(f"Configuration section '{section}' must be a mapping.")
            for key, value in values.items():
                field = CONFIG_SCHEMA[section].get(key)
                if field is None:
                    raise ValueError(
                        f"Unknown configuration key '{section}.{key}'. "
                        f"Options: {sorted(CONFIG_SCHEMA[section])}"
                    )
                if field.choices:
                    _check_choices(field, value)

    def load(
        self,
        config: Optional[ConfigLike] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        profile: Optional[Mapping[str, Any]] = None,
    ) -> LoadedConfig:
        """Merge global defaults, a profile, additional configuration and overrides, in that order."""

        merged = self._global_conf.copy()

        if profile:
            merged = OmegaConf.merge(merged, OmegaConf.create(dict(profile)))

        if config is not None:
            merged = OmegaConf.merge(merged, self._coerce(config))

        if overrides:
            merged = OmegaConf.merge(merged, OmegaConf.create(dict(overrides)))

        self.validate(OmegaConf.to_container(merged, resolve=True))  # type: ignore[arg-type]
        return LoadedConfig(merged)
