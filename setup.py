from pathlib import Path

from setuptools import find_packages, setup

try:
    from genepool.utils.config_reference import write_markdown as write_config_markdown
except Exception as exc:  # pragma: no cover - setup-time safety
    print(f"Warning: unable to import config reference generator: {exc}")
    write_config_markdown = None

if write_config_markdown:
    try:
        write_config_markdown(Path("docs") / "config_reference.md")
    except Exception as exc:  # pragma: no cover - setup-time safety
        print(f"Warning: unable to generate config reference: {exc}")


setup(
    name="GenePool",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"genepool": ["configs/*.yaml"]},
    python_requires=">=3.9",
    install_requires=Path("requirements.txt").read_text(encoding="utf-8").splitlines(),
    extras_require={
        "tracking": ["mlflow>=2.0"],
        "test": ["pytest>=7.0"],
        "docs": ["pdoc>=14.0"],
    },
)
