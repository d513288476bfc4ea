"""
Command line interface for the GenePool SDK.

Examples
--------
Evolve the default goal string::

    python cli.py run --profile smoke

Evolve a custom goal with a fixed seed::

    python cli.py run --goal HelloWorld --seed 7 --population 128

Show the configuration reference::

    python cli.py describe-config --section engine
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from genepool import GenePool
from genepool.diagnostics.doctor import run_doctor
from genepool.exceptions import GenePoolError
from genepool.utils import configure_console
from genepool.utils.config_reference import lookup
from genepool.utils.profiles import list_profiles

LOG_LEVELS = list(lookup("logging.level").choices)


def _default_config_path(path: str) -> Path:
    candidate = Path(path)
    if candidate.exists():
        return candidate
    raise FileNotFoundError(f"Configuration file not found: {candidate}")


def _engine_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    engine: Dict[str, Any] = {}
    for key in ("population", "generations", "min_error", "elite_fraction", "seed", "backend"):
        value = getattr(args, key, None)
        if value is not None:
            engine[key] = value
    overrides: Dict[str, Any] = {"engine": engine} if engine else {}
    if args.show_elite:
        overrides["logging"] = {"show_elite": True}
    return overrides


def _run_command(args: argparse.Namespace) -> None:
    config_source = _default_config_path(args.config) if args.config else None
    runner = GenePool(
        goal=args.goal,
        profile=args.profile,
        config=config_source,
        overrides=_engine_overrides(args),
        run_name=args.run_name,
    )
    configure_console(args.log_level or runner.config["logging"]["level"])
    result = runner.run()
    payload = {
        "run_id": result.run_id,
        "generations": result.generations,
        "best_score": result.best_score,
        "converged": result.converged,
        "solutions": result.solutions,
    }
    print(json.dumps(payload, indent=2))
    if args.output:
        path = result.save(args.output)
        print(f"Run summary written to: {path}")


def _list_profiles(_: argparse.Namespace) -> None:
    for name, profile in sorted(list_profiles().items()):
        print(f"{name}: {json.dumps(profile)}")


def _doctor_command(_: argparse.Namespace) -> None:
    results = run_doctor()
    for item in results:
        status = item.get("status", "unknown").upper()
        check = item.get("check", "")
        details = item.get("details")
        print(f"[{status}] {check}")
        if details:
            print(f"  {details}")


def _describe_config_command(args: argparse.Namespace) -> None:
    if args.key:
        print(GenePool.explain(args.key))
        return
    GenePool.describe_config(section=args.section, as_markdown=args.markdown, to_console=True)


def _generate_config_docs_command(args: argparse.Namespace) -> None:
    output = Path(args.output)
    path = GenePool.generate_config_docs(output)
    print(f"Configuration reference generated at {path.resolve()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="genepool", description="GenePool genetic algorithm CLI")
    subparsers = parser.add_subparsers(dest="command")

    profile_choices = sorted(list_profiles().keys())

    run_parser = subparsers.add_parser("run", help="Evolve strings toward a goal.")
    run_parser.add_argument("--goal", help="Target string (ASCII letters only).")
    run_parser.add_argument("--config", help="Optional configuration file (YAML/JSON).")
    run_parser.add_argument("--profile", choices=profile_choices, help="Apply a configuration profile before the config file.")
    run_parser.add_argument("--population", type=int, help="Pool size.")
    run_parser.add_argument("--generations", type=int, help="Maximum number of generations.")
    run_parser.add_argument("--min-error", dest="min_error", type=float, help="Stop once the best score reaches this error.")
    run_parser.add_argument("--elite-fraction", dest="elite_fraction", type=float, help="Share of the pool kept as elite.")
    run_parser.add_argument("--seed", type=int, help="Seed for reproducible runs.")
    run_parser.add_argument("--backend", choices=["auto", "threads", "serial"], help="Parallel backend.")
    run_parser.add_argument("--show-elite", action="store_true", help="Print the elite while training.")
    run_parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Console log level (default: logging.level).",
    )
    run_parser.add_argument("--run-name", help="Optional custom name used for the run identifier.")
    run_parser.add_argument("--output", help="Write the JSON run summary to this path.")
    run_parser.set_defaults(func=_run_command)

    profiles_parser = subparsers.add_parser("list-profiles", help="List configuration profiles.")
    profiles_parser.set_defaults(func=_list_profiles)

    doctor_parser = subparsers.add_parser("doctor", help="Run environment diagnostics.")
    doctor_parser.set_defaults(func=_doctor_command)

    describe_parser = subparsers.add_parser("describe-config", help="Display GenePool configuration schema.")
    describe_parser.add_argument("--section", help="Optional configuration section to filter.")
    describe_parser.add_argument("--markdown", action="store_true", help="Render the output as markdown.")
    describe_parser.add_argument("--key", help="Explain a single configuration key instead of listing the table.")
    describe_parser.set_defaults(func=_describe_config_command)

    config_doc_parser = subparsers.add_parser("generate-config-docs", help="Write CONFIG.md from the schema.")
    config_doc_parser.add_argument("--output", default="CONFIG.md", help="Destination markdown file (default: CONFIG.md).")
    config_doc_parser.set_defaults(func=_generate_config_docs_command)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0].startswith("--"):
        argv = ["run", *argv]
    if not argv:
        parser.print_help()
        return
    parsed = parser.parse_args(argv)
    if not hasattr(parsed, "func"):
        parser.print_help()
        return
    try:
        parsed.func(parsed)
    except (GenePoolError, FileNotFoundError) as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
