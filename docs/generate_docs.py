"""
Regenerate the GenePool reference pages.

Usage:
    python docs/generate_docs.py [--skip-api]

Writes ``docs/config_reference.md`` (and the root ``CONFIG.md``),
``docs/profiles.md`` listing every profile as overrides of the schema
defaults, and ``docs/operators.md`` describing the registered offspring
operators in their default dispatch order. API pages are rendered with pdoc
into ``docs/site`` when it is installed (``pip install -e .[docs]``).
"""

from __future__ import annotations

import argparse
import inspect
import subprocess
import sys
from pathlib import Path
from typing import Iterator, List, Mapping, Tuple

from genepool.evolution.operators import OPERATORS
from genepool.utils.config_reference import defaults, write_markdown
from genepool.utils.profiles import list_profiles

DOCS_DIR = Path(__file__).resolve().parent


def _flatten(tree: Mapping[str, object], prefix: str = "") -> Iterator[Tuple[str, object]]:
    for key, value in tree.items():
        if isinstance(value, Mapping):
            yield from _flatten(value, f"{prefix}{key}.")
        else:
            yield f"{prefix}{key}", value


def profiles_markdown() -> str:
    base = dict(_flatten(defaults()))
    lines: List[str] = ["# GenePool Profiles", "", "Each profile is merged over the schema defaults before any config file.", ""]
    for name, profile in sorted(list_profiles().items()):
        lines += [f"## {name}", "", "| Key | Default | Profile |", "| --- | --- | --- |"]
        for key, value in _flatten(profile):
            lines.append(f"| `{key}` | `{base.get(key)}` | `{value}` |")
        lines.append("")
    return "\n".join(lines)


def operators_markdown() -> str:
    order = defaults()["operators"]["order"]
    lines: List[str] = [
        "# GenePool Operators",
        "",
        "Operators are tried in `operators.order`; each accepts the slot when a fresh",
        "uniform draw falls below its weight, and the last one always accepts.",
        "",
        "| Position | Name | Class | Default weight | Summary |",
        "| --- | --- | --- | --- | --- |",
    ]
    for name, operator_cls in OPERATORS.items():
        position = order.index(name) + 1 if name in order else "-"
        weight = inspect.signature(operator_cls.__init__).parameters["weight"].default
        summary = (inspect.getdoc(operator_cls) or "").splitlines()[0]
        lines.append(f"| {position} | `{name}` | `{operator_cls.__name__}` | `{weight}` | {summary} |")
    return "\n".join(lines) + "\n"


def build_reference_pages(docs_dir: Path = DOCS_DIR) -> List[Path]:
    docs_dir.mkdir(parents=True, exist_ok=True)
    written = [write_markdown(docs_dir / "config_reference.md"), write_markdown(docs_dir.parent / "CONFIG.md")]
    for filename, content in (("profiles.md", profiles_markdown()), ("operators.md", operators_markdown())):
        path = docs_dir / filename
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def build_api_docs(docs_dir: Path = DOCS_DIR) -> Path:
    output_dir = docs_dir / "site"
    output_dir.mkdir(parents=True, exist_ok=True)
    subprocess.run([sys.executable, "-m", "pdoc", "genepool", "--output-dir", str(output_dir)], check=True)
    return output_dir


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--skip-api", action="store_true", help="Only write the markdown reference pages.")
    args = parser.parse_args(argv)

    for path in build_reference_pages():
        print(f"Wrote {path}")
    if args.skip_api:
        return
    try:
        print(f"API docs in {build_api_docs()}")
    except subprocess.CalledProcessError:
        print("pdoc not installed or failed to run; skipping API docs build.")


if __name__ == "__main__":
    main()
