"""
Environment diagnostics behind ``python cli.py doctor``.

Every check returns a :class:`CheckResult` with status ``pass``, ``warn`` or
``fail``. Beyond the interpreter and dependency probes, the doctor verifies
that the bundled schema parses, that every profile validates against it and
that the threaded backend can actually run tasks.
"""

from __future__ import annotations

import importlib
import os
import platform
import sys
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

MIN_PYTHON = (3, 9)
# Import names, not distribution names.
REQUIRED_MODULES = ("numpy", "loguru", "omegaconf", "yaml")
OPTIONAL_MODULES = ("mlflow",)


@dataclass
class CheckResult:
    check: str
    status: str
    details: Optional[str] = None

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _python() -> CheckResult:
    version = ".".join(str(part) for part in sys.version_info[:3])
    if sys.version_info >= MIN_PYTHON:
        return CheckResult("Python runtime", "pass", f"Detected Python {version}")
    required = ".".join(map(str, MIN_PYTHON))
    return CheckResult("Python runtime", "fail", f"Detected Python {version} (requires >= {required})")


def _platform() -> CheckResult:
    return CheckResult("Platform", "pass", f"{platform.system()} {platform.release()} ({platform.machine()})")


def _module(name: str, optional: bool = False) -> CheckResult:
    check = f"Python package '{name}' import"
    try:
        module = importlib.import_module(name)
    except ImportError as exc:
        hint = " Install the 'tracking' extra to enable it." if optional else ""
        return CheckResult(check, "warn" if optional else "fail", f"{exc}.{hint}")
    return CheckResult(check, "pass", str(getattr(module, "__version__", "unknown")))


def _schema() -> CheckResult:
    from genepool.utils.config_reference import SCHEMA_PATH, load_schema

    try:
        schema = load_schema(SCHEMA_PATH)
    except (OSError, ValueError) as exc:
        return CheckResult("Default config schema", "fail", str(exc))
    keys = sum(len(fields) for fields in schema.values())
    return CheckResult("Default config schema", "pass", f"{SCHEMA_PATH} ({len(schema)} sections, {keys} keys)")


def _profiles() -> CheckResult:
    from genepool.utils import ConfigLoader
    from genepool.utils.profiles import list_profiles

    loader = ConfigLoader()
    for name, profile in list_profiles().items():
        try:
            loader.load(profile=profile)
        except ValueError as exc:
            return CheckResult("Configuration profiles", "fail", f"{name}: {exc}")
    return CheckResult("Configuration profiles", "pass", ", ".join(sorted(list_profiles())))


def _threads() -> CheckResult:
    from genepool.evolution.engine import ParallelExecutor

    with ParallelExecutor("threads", max_workers=2) as executor:
        squares = executor.map(lambda index: index * index, range(4))
    if squares != [0, 1, 4, 9]:
        return CheckResult("Threaded backend", "fail", f"Unexpected results {squares}")
    count = os.cpu_count()
    if not count:
        return CheckResult("Threaded backend", "warn", "CPU count unknown; thread pool uses its default size.")
    return CheckResult("Threaded backend", "pass", f"{count} logical CPUs")


def run_doctor() -> List[Dict[str, Optional[str]]]:
    """
    Execute environment diagnostics and return structured results.

    Returns
    -------
    list of dict
        One mapping per check with ``check``, ``status`` and optional
        ``details``. The project-level checks are skipped while a required
        module is missing because they import it.
    """

    results = [_platform(), _python()]
    results += [_module(name) for name in REQUIRED_MODULES]
    results += [_module(name, optional=True) for name in OPTIONAL_MODULES]

    if all(result.status != "fail" for result in results):
        project_checks: List[Callable[[], CheckResult]] = [_schema, _profiles, _threads]
        results += [check() for check in project_checks]

    return [result.as_dict() for result in results]
