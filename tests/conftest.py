"""Pytest configuration and fixtures."""

import logging
import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer shell settings out of logging and tracing tests."""
    for name in (
        "INGEST_LOG_LEVEL",
        "INGEST_LOG_FORMAT",
        "INGEST_LOG_FILE",
        "INGEST_TRACING",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def reset_logging():
    """Restore the root logger after tests that call setup_logging."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A 10 000 byte file with a repeating, position-dependent pattern."""
    path = tmp_path / "input.bin"
    path.write_bytes(bytes(i % 251 for i in range(10_000)))
    return path


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so boto3 never reaches real accounts."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
