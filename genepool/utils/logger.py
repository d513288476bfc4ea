"""
Unified logging utilities that wrap Loguru and MLflow.

The `ExperimentLogger` offers a small convenience layer that the engine and
the SDK use without worrying about tracking URIs or missing optional
dependencies. Console output goes through Loguru; metrics and parameters are
forwarded to MLflow only while a run opened with :meth:`start_run` is active
and tracking is enabled.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional

from loguru import logger

try:
    import mlflow
except ImportError:  # pragma: no cover - fallback path is best effort only.
    mlflow = None  # type: ignore[assignment]


def configure_console(level: str = "INFO") -> None:
    """Replace Loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


class ExperimentLogger:
    """Thin convenience wrapper around Loguru and MLflow."""

    def __init__(
        self,
        experiment_name: str = "GenePool",
        tracking_uri: Optional[str] = None,
        enabled: bool = False,
    ) -> None:
        self.experiment_name = experiment_name
        self.tracking_uri = tracking_uri
        self.enabled = enabled
        self._active = False

    @property
    def tracking(self) -> bool:
        """True while metrics are being forwarded to MLflow."""
        return self._active

    def _ensure_mlflow(self) -> None:
        """Configure the MLflow tracking URI and experiment if MLflow is available."""
        if mlflow is None:
            return
        if self.tracking_uri:
            mlflow.set_tracking_uri(self.tracking_uri)
        mlflow.set_experiment(self.experiment_name)

    @contextmanager
    def start_run(self, run_name: str, params: Optional[Mapping[str, object]] = None) -> Iterator[None]:
        """
        Context manager that opens and closes an MLflow run while emitting log messages.

        When MLflow is missing or tracking is disabled the context still works, so
        upstream code can rely on the same interface without extra guards.
        """

        logger.info("Starting GenePool run: {}", run_name)
        if mlflow is not None and self.enabled:
            self._ensure_mlflow()
            with mlflow.start_run(run_name=run_name):
                self._active = True
                try:
                    if params:
                        self.log_params(params)
                    yield
                finally:
                    self._active = False
        else:
            if self.enabled:
                logger.warning("MLflow is not installed. Tracking will be disabled.")
            yield
        logger.info("Completed GenePool run: {}", run_name)

    def log_params(self, params: Mapping[str, object]) -> None:
        """Record run parameters with MLflow when a tracked run is active."""
        logger.debug("Params: {}", dict(params))
        if self._active:
            mlflow.log_params({key: str(value) for key, value in params.items()})

    def log_metrics(self, metrics: Dict[str, float], step: Optional[int] = None) -> None:
        """Emit metrics to the console and to MLflow when a tracked run is active."""
        logger.debug("Metrics@{}: {}", step if step is not None else "-", metrics)
        if self._active:
            mlflow.log_metrics(metrics, step=step)

    def log_artifact(self, path: Path) -> None:
        """Record an artifact with MLflow when a tracked run is active."""
        if self._active and path.exists():
            mlflow.log_artifact(str(path))

    def log_message(self, message: str) -> None:
        """Log a simple info message."""
        logger.info(message)
