"""
SDK entry point exposing the `GenePool` orchestration class.

The runner turns a merged configuration into an environment, an ordered
operator list, optional visitors and a :class:`GeneticEngine`, runs training
and packages the outcome. It serves as the backbone of the CLI.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from genepool.evolution import (
    EvolutionConfig,
    GeneticEngine,
    HistoryVisitor,
    LoggingVisitor,
    StringMatchEnvironment,
    TrainResult,
    build_operator,
)
from genepool.evolution.operators import Operator
from genepool.evolution.visitors import CompositeVisitor, Visitor
from genepool.exceptions import GenePoolConfigError
from genepool.utils import ConfigLoader, ExperimentLogger
from genepool.utils.config_reference import (
    as_dict as _config_schema_dict,
    lookup,
    to_console as _config_schema_console,
    to_markdown as _config_schema_markdown,
    write_markdown as _config_write_markdown,
)
from genepool.utils.profiles import get_profile, list_profiles

ConfigSource = Union[str, Path, Dict[str, Any]]


def _slugify_name(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "run"


@dataclass
class GenePoolResult:
    """Return payload exposed by the SDK."""

    run_id: str
    generations: int
    best_score: float
    solutions: List[str]
    history: List[Dict[str, Any]]
    duration: float
    config: Dict[str, Any]
    executor: Dict[str, object] = field(default_factory=dict)
    profile: Optional[str] = None

    @property
    def converged(self) -> bool:
        """True when training stopped on the error target rather than the budget."""
        return self.best_score <= float(self.config["engine"]["min_error"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "generations": self.generations,
            "best_score": self.best_score,
            "converged": self.converged,
            "solutions": list(self.solutions),
            "duration": round(self.duration, 3),
            "profile": self.profile,
            "executor": dict(self.executor),
            "history": list(self.history),
            "config": self.config,
        }

    def save(self, path: Union[str, Path]) -> Path:
        """Write the run summary as JSON and return the path."""

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        return target


class GenePool:
    """Primary interface wiring configuration into a genetic search.

    The bundled problem evolves mixed-case strings toward ``problem.goal``.
    Use :meth:`describe_config` for interactive documentation of all tunable
    parameters.
    """

    @classmethod
    def describe_config(
        cls,
        section: Optional[str] = None,
        *,
        as_markdown: bool = False,
        to_console: bool = False,
    ) -> Union[str, Dict[str, Dict[str, Dict[str, object]]]]:
        """Return metadata describing GenePool configuration keys.

        Parameters
        ----------
        section : str, optional
            When provided, only return information for a single section
            (for example ``"engine"``). If omitted, all sections are returned.
        as_markdown : bool, default False
            When True, the result is formatted as Markdown text suitable for
            documentation. Otherwise a nested dictionary is returned.
        to_console : bool, default False
            When True, pretty-print the configuration table to stdout. The
            return value is still provided for programmatic use.
        """

        if section is not None and section not in _config_schema_dict():
            raise GenePoolConfigError(f"Unknown configuration section '{section}'.", context={"section": section})

        if as_markdown:
            markdown = _config_schema_markdown(section=section)
            if to_console:
                print(markdown)
            return markdown

        if to_console:
            print(_config_schema_console(section=section))
        return _config_schema_dict(section)

    @classmethod
    def explain(cls, key: str) -> str:
        """Return a human readable description for a configuration key."""

        config_field = lookup(key)
        if config_field is None:
            raise GenePoolConfigError(
                f"Unknown configuration key '{key}'.",
                context={"key": key},
            )
        return config_field.describe()

    @classmethod
    def generate_config_docs(cls, path: Union[str, Path] = Path("CONFIG.md")) -> Path:
        """Render the configuration reference to a markdown file."""

        return _config_write_markdown(Path(path))

    @classmethod
    def available_profiles(cls) -> Dict[str, Dict[str, object]]:
        """Return a mapping of available configuration profiles."""

        return list_profiles()

    def __init__(
        self,
        goal: Optional[str] = None,
        profile: Optional[str] = None,
        config: Optional[ConfigSource] = None,
        global_config: Optional[ConfigSource] = None,
        run_name: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Create a new GenePool orchestrator.

        Parameters
        ----------
        goal : str, optional
            Target string; overrides ``problem.goal``.
        profile : str, optional
            Configuration profile (``"smoke"``, ``"balanced"``, ``"thorough"``)
            merged before ``config``.
        config : str | Path | dict, optional
            Run configuration supplied as a YAML/JSON file or a mapping.
        global_config : str | Path | dict, optional
            Base configuration merged over the schema defaults.
        run_name : str, optional
            Slug used for the run identifier and summary file name.
        overrides : dict, optional
            Highest priority settings, merged after ``config``.
        """

        self.profile = profile
        loader = ConfigLoader(global_config)

        profile_overrides: Dict[str, Any] = {}
        if profile:
            try:
                profile_overrides = get_profile(profile)
            except KeyError as exc:
                raise GenePoolConfigError(str(exc), context={"profile": profile}) from exc

        overrides = dict(overrides or {})
        if goal is not None:
            overrides["problem"] = {**overrides.get("problem", {}), "goal": goal}
        try:
            loaded = loader.load(config=config, overrides=overrides, profile=profile_overrides)
        except (ValueError, TypeError, FileNotFoundError) as exc:
            raise GenePoolConfigError(str(exc), context={"profile": profile}) from exc
        self.config = loaded.to_dict()

        experiment_cfg = self.config["experiment"]
        logging_cfg = self.config["logging"]
        self.logger = ExperimentLogger(
            experiment_name=experiment_cfg["name"],
            tracking_uri=logging_cfg.get("mlflow_uri"),
            enabled=bool(logging_cfg.get("enable_mlflow", False)),
        )
        slug = _slugify_name(run_name or experiment_cfg["name"])
        self.run_id = f"{slug}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.output_dir = Path(experiment_cfg["output_dir"])

    def build_environment(self) -> StringMatchEnvironment:
        problem_cfg = self.config["problem"]
        try:
            return StringMatchEnvironment(
                str(problem_cfg["goal"]),
                seed=self.config["engine"]["seed"],
                scale=float(problem_cfg["scale"]),
            )
        except ValueError as exc:
            raise GenePoolConfigError(str(exc), context={"goal": problem_cfg["goal"]}) from exc

    def build_operators(self, environment: StringMatchEnvironment) -> List[Operator[List[Any]]]:
        operators_cfg = self.config["operators"]
        operators: List[Operator[List[Any]]] = []
        for name in operators_cfg["order"]:
            key = str(name).strip().lower().replace("-", "_")
            weight = operators_cfg.get(f"{key}_weight")
            try:
                operators.append(build_operator(key, environment.space, weight))
            except KeyError as exc:
                raise GenePoolConfigError(str(exc), context={"operator": name}) from exc
        return operators

    def build_engine(self) -> GeneticEngine[List[Any]]:
        engine_cfg = self.config["engine"]
        evolution_config = EvolutionConfig(
            parallel_backend=str(engine_cfg["backend"]),
            max_workers=engine_cfg["max_workers"],
            seed=engine_cfg["seed"],
            log_every=int(engine_cfg["log_every"]),
        )
        return GeneticEngine(int(engine_cfg["population"]), config=evolution_config, logger=self.logger)

    def build_visitor(self, environment: StringMatchEnvironment) -> Tuple[Visitor, HistoryVisitor]:
        logging_cfg = self.config["logging"]
        history = HistoryVisitor(render=environment.render)
        visitors: List[Visitor] = [history]
        if logging_cfg["show_elite"]:
            visitors.append(
                LoggingVisitor(
                    render=environment.render,
                    limit=int(logging_cfg["elite_limit"]),
                    every=int(logging_cfg["visit_every"]),
                )
            )
        return CompositeVisitor(visitors), history

    def run(self) -> GenePoolResult:
        """Execute training with the merged configuration."""

        engine_cfg = self.config["engine"]
        environment = self.build_environment()
        operators = self.build_operators(environment)
        engine = self.build_engine()
        visitor, history = self.build_visitor(environment)
        store: List[List[Any]] = []

        params = {
            "population": engine_cfg["population"],
            "generations": engine_cfg["generations"],
            "elite_fraction": engine_cfg["elite_fraction"],
            "min_error": engine_cfg["min_error"],
            "operators": ",".join(type(op).__name__ for op in operators),
            "goal": environment.goal,
        }
        start_time = time.perf_counter()
        with self.logger.start_run(self.run_id, params=params):
            result: TrainResult = engine.train(
                environment,
                visitor,
                int(engine_cfg["generations"]),
                float(engine_cfg["min_error"]),
                float(engine_cfg["elite_fraction"]),
                store,
                int(engine_cfg["store_size"]),
                operators,
            )
            self.logger.log_metrics(
                {"final_best_score": result.best_score, "generations": float(result.generations)}
            )

            # The generation that meets the error target is ranked but never visited.
            visited = history.best
            generation_rows = [
                {**row, "best": visited[index] if index < len(visited) else None}
                for index, row in enumerate(engine.history)
            ]

            outcome = GenePoolResult(
                run_id=self.run_id,
                generations=result.generations,
                best_score=result.best_score,
                solutions=[environment.render(candidate) for candidate in store[: result.result_count]],
                history=generation_rows,
                duration=time.perf_counter() - start_time,
                config=self.config,
                executor=engine.executor.last_stats(),
                profile=self.profile,
            )
            if self.config["experiment"]["save_results"]:
                path = outcome.save(self.output_dir / f"{self.run_id}.json")
                self.logger.log_artifact(path)
                self.logger.log_message(f"Run summary written to {path}")
        return outcome
