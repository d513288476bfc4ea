import importlib.util
from pathlib import Path

import pytest

DOCS_SCRIPT = Path(__file__).resolve().parents[1] / "docs" / "generate_docs.py"


@pytest.fixture(scope="module")
def docs():
    module_spec = importlib.util.spec_from_file_location("genepool_docs", DOCS_SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_profiles_page_shows_overrides_against_defaults(docs) -> None:
    content = docs.profiles_markdown()
    assert "## smoke" in content
    assert "| `engine.population` | `256` | `32` |" in content


def test_operators_page_follows_dispatch_order(docs) -> None:
    content = docs.operators_markdown()
    assert "| 1 | `point_mutation` | `PointMutationOperator` | `0.3` |" in content
    assert "| 2 | `crossover` | `CrossoverOperator` | `0.8` |" in content


def test_reference_pages_are_written(docs, tmp_path: Path) -> None:
    written = docs.build_reference_pages(tmp_path / "docs")
    names = sorted(path.name for path in written)
    assert names == ["CONFIG.md", "config_reference.md", "operators.md", "profiles.md"]
    assert all(path.exists() for path in written)
