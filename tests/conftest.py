from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402

# Disable OTEL export during tests to avoid noisy connection errors when a collector
# is not running. Individual tests can override as needed.
os.environ.setdefault("OTEL_METRICS_EXPORTER", "none")
os.environ.setdefault("OTEL_TRACES_EXPORTER", "none")
os.environ.setdefault("OTEL_SDK_DISABLED", "true")

LR_ENV_VARS = (
    "LR_CONFIG",
    "LR_ENVIRONMENT",
    "LR_PROBE_TIMEOUT",
    "LR_PARALLEL",
    "LR_NOT_READY_BELOW",
    "LR_READY_AT_LEAST",
    "LR_ENABLE_OTEL",
)


@pytest.fixture(autouse=True)
def clean_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in LR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    cli_logger = logging.getLogger("LaunchReadiness.cli")
    for handler in list(cli_logger.handlers):
        cli_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def recorded_results(tmp_path: Path) -> Path:
    """Directory with one passing JSON probe and one failing YAML probe."""

    results_dir = tmp_path / "results"
    results_dir.mkdir()
    (results_dir / "checklist.json").write_text(
        json.dumps(
            {
                "name": "Launch Checklist",
                "category": "launch_checklist",
                "results": [
                    {"name": "Terms of service published", "status": "PASS"},
                    {"name": "Status page live", "status": "PASS"},
                ],
            }
        ),
        encoding="utf-8",
    )
    (results_dir / "security.yaml").write_text(
        "name: Security Scan\n"
        "category: security\n"
        "results:\n"
        "  - name: Session fixation\n"
        "    status: FAIL\n"
        "    message: Session id not rotated on login\n"
        "    details:\n"
        "      severity: critical\n"
        "      vulnerability_type: session_management\n"
        "  - name: TLS configuration\n"
        "    status: PASS\n",
        encoding="utf-8",
    )
    return results_dir


@pytest.fixture
def passing_results(tmp_path: Path) -> Path:
    path = tmp_path / "smoke.json"
    path.write_text(
        json.dumps(
            {
                "name": "Smoke",
                "category": "workflow",
                "results": [{"name": f"check {index}", "status": "PASS"} for index in range(4)],
            }
        ),
        encoding="utf-8",
    )
    return path
