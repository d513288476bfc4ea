"""Tests for the Loguru/MLflow logging wrapper."""

from pathlib import Path

from loguru import logger

import genepool.utils.logger as logger_module
from genepool.utils import ExperimentLogger


def test_tracking_forwards_to_mlflow(fake_mlflow, tmp_path: Path) -> None:
    artifact = tmp_path / "summary.json"
    artifact.write_text("{}", encoding="utf-8")

    tracker = ExperimentLogger("Demo", tracking_uri="file:./mlruns", enabled=True)
    with tracker.start_run("run-1", params={"population": 8}):
        assert tracker.tracking
        tracker.log_metrics({"best_score": 1.5}, step=3)
        tracker.log_artifact(artifact)
    assert not tracker.tracking

    calls = fake_mlflow.calls
    assert calls[0] == ("uri", "file:./mlruns")
    assert ("experiment", "Demo") in calls
    assert ("params", {"population": "8"}) in calls
    assert ("metrics", {"best_score": 1.5}, 3) in calls
    assert ("artifact", str(artifact)) in calls
    assert calls[-1] == ("end", "run-1")


def test_artifacts_outside_a_run_are_not_forwarded(fake_mlflow, tmp_path: Path) -> None:
    artifact = tmp_path / "late.json"
    artifact.write_text("{}", encoding="utf-8")
    tracker = ExperimentLogger(enabled=True)
    with tracker.start_run("closed"):
        pass
    tracker.log_artifact(artifact)
    assert not any(call[0] == "artifact" for call in fake_mlflow.calls)


def test_disabled_tracking_never_touches_mlflow(fake_mlflow) -> None:
    tracker = ExperimentLogger(enabled=False)
    with tracker.start_run("quiet"):
        tracker.log_metrics({"best_score": 0.0})
    assert fake_mlflow.calls == []


def test_missing_mlflow_warns(monkeypatch) -> None:
    monkeypatch.setattr(logger_module, "mlflow", None)
    messages = []
    sink = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    try:
        with ExperimentLogger(enabled=True).start_run("offline"):
            pass
    finally:
        logger.remove(sink)
    assert any("MLflow is not installed" in message for message in messages)
