"""Shared fixtures for the GenePool test-suite."""

from contextlib import contextmanager

import pytest

import genepool.utils.logger as logger_module


class FakeMlflow:
    """Records the MLflow calls made by ``ExperimentLogger``."""

    def __init__(self):
        self.calls = []

    def set_tracking_uri(self, uri):
        self.calls.append(("uri", uri))

    def set_experiment(self, name):
        self.calls.append(("experiment", name))

    @contextmanager
    def start_run(self, run_name=None):
        self.calls.append(("start", run_name))
        yield
        self.calls.append(("end", run_name))

    def log_params(self, params):
        self.calls.append(("params", params))

    def log_metrics(self, metrics, step=None):
        self.calls.append(("metrics", metrics, step))

    def log_artifact(self, path):
        self.calls.append(("artifact", path))


@pytest.fixture
def fake_mlflow(monkeypatch):
    fake = FakeMlflow()
    monkeypatch.setattr(logger_module, "mlflow", fake)
    return fake
