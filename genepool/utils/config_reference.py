"""
Configuration schema for GenePool and the reference documents built from it.

``configs/config_default.yaml`` is the single source of truth: every key the
loader accepts, its default, its type and, for enumerated settings, the
allowed choices. The CLI (``describe-config``), the SDK (``GenePool.explain``)
and ``docs/generate_docs.py`` all render from the objects defined here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "configs" / "config_default.yaml"


@dataclass(frozen=True)
class ConfigField:
    """One documented configuration key."""

    section: str
    name: str
    type: str
    default: Any
    description: str
    choices: Tuple[Any, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.section}.{self.name}"

    def default_repr(self) -> str:
        return "None" if self.default is None else repr(self.default)

    def describe(self) -> str:
        """One-line explanation used by ``GenePool.explain`` and the console table."""
        text = self.description or "No description available."
        if self.choices:
            text += f" Choices: {', '.join(map(str, self.choices))}."
        return f"{self.name} (section={self.section}, type={self.type}, default={self.default_repr()}) -> {text}"

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "section": self.section,
            "key": self.name,
            "type": self.type,
            "default": self.default,
            "description": self.description,
        }
        if self.choices:
            payload["choices"] = list(self.choices)
        return payload


def load_schema(path: Path = SCHEMA_PATH) -> Dict[str, Dict[str, ConfigField]]:
    """Parse a schema YAML file into ``{section: {key: ConfigField}}``."""

    if not path.exists():
        raise FileNotFoundError(f"Configuration schema file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {
        section: {
            key: ConfigField(
                section=section,
                name=key,
                type=str(meta.get("type", "Any")),
                default=meta.get("default"),
                description=" ".join(str(meta.get("description", "")).split()),
                choices=tuple(meta.get("choices") or ()),
            )
            for key, meta in entries.items()
        }
        for section, entries in raw.items()
    }


CONFIG_SCHEMA: Dict[str, Dict[str, ConfigField]] = load_schema()


def _sections(section: Optional[str]) -> Mapping[str, Dict[str, ConfigField]]:
    if section is None:
        return CONFIG_SCHEMA
    try:
        return {section: CONFIG_SCHEMA[section]}
    except KeyError:
        raise KeyError(f"Unknown config section '{section}'. Options: {list(CONFIG_SCHEMA)}") from None


def iter_fields(section: Optional[str] = None) -> Iterable[ConfigField]:
    for fields in _sections(section).values():
        yield from fields.values()


def lookup(key: str) -> Optional[ConfigField]:
    """Find a field by ``name`` or ``section.name``; dashes count as underscores."""

    normalized = key.strip().lower().replace("-", "_")
    section, _, name = normalized.rpartition(".")
    for field in iter_fields():
        if field.name == name and section in ("", field.section):
            return field
    return None


def defaults() -> Dict[str, Dict[str, Any]]:
    """Default value of every key, nested by section."""

    return {
        section: {name: field.default for name, field in fields.items()}
        for section, fields in CONFIG_SCHEMA.items()
    }


def as_dict(section: Optional[str] = None) -> Dict[str, Dict[str, Dict[str, object]]]:
    return {
        name: {key: field.as_dict() for key, field in fields.items()}
        for name, fields in _sections(section).items()
    }


def to_markdown(section: Optional[str] = None) -> str:
    """Render the reference as one markdown table per section."""

    heading = "# GenePool Configuration Reference"
    if section:
        heading += f" - {section.title()}"
    lines = [heading, ""]
    for name, fields in _sections(section).items():
        lines += [f"## {name.title()}", "", "| Key | Type | Default | Choices | Description |", "| --- | --- | --- | --- | --- |"]
        for field in fields.values():
            default = f"`{field.default}`" if field.default is not None else "`None`"
            choices = ", ".join(f"`{choice}`" for choice in field.choices) or "-"
            description = field.description.replace("|", "\\|")
            lines.append(f"| `{field.name}` | `{field.type}` | {default} | {choices} | {description} |")
        lines.append("")
    return "\n".join(lines)


def write_markdown(path: Path, section: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_markdown(section=section), encoding="utf-8")
    return path


def to_console(section: Optional[str] = None) -> str:
    """Plain-text listing grouped under ``[SECTION]`` headings."""

    blocks = []
    for name, fields in _sections(section).items():
        rows = [f"[{name.upper()}]"]
        rows += [f"  - {field.describe()}" for field in fields.values()]
        blocks.append("\n".join(rows))
    return "\n\n".join(blocks)


__all__ = [
    "ConfigField",
    "CONFIG_SCHEMA",
    "SCHEMA_PATH",
    "load_schema",
    "iter_fields",
    "lookup",
    "defaults",
    "as_dict",
    "to_markdown",
    "write_markdown",
    "to_console",
]
