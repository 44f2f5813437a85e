"""
Shared pytest fixtures for jobgate tests.

This module provides common fixtures including:
- FakeSecuritySubsystem: scripted stand-in for the Kerberos subsystem
- RecordingRouter / RecordingSink: capture outcomes and process output
- Job file helpers for YAML job definitions
"""

import os
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import yaml

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jobgate.config.provider import get_defaults
from jobgate.logging_config import clear_secrets
from jobgate.modules.security import ClusterConfig


# =============================================================================
# Security subsystem fake
# =============================================================================

@dataclass
class FakeSecuritySubsystem:
    """Scripted security subsystem recording every call."""
    security_enabled: bool = True
    auth_result: bool = True
    load_error: Optional[Exception] = None
    auth_error: Optional[Exception] = None
    loaded: List[Sequence[str]] = field(default_factory=list)
    authenticated: List[Tuple[str, str]] = field(default_factory=list)

    def load_config(self, resource_paths: Sequence[str]) -> ClusterConfig:
        self.loaded.append(list(resource_paths))
        if self.load_error:
            raise self.load_error
        value = "kerberos" if self.security_enabled else "simple"
        return ClusterConfig(
            properties={"hadoop.security.authentication": value},
            resources=tuple(resource_paths),
        )

    def is_security_enabled(self, config: ClusterConfig) -> bool:
        return config.get("hadoop.security.authentication") == "kerberos"

    def authenticate(self, principal: str, keytab: str) -> bool:
        self.authenticated.append((principal, keytab))
        if self.auth_error:
            raise self.auth_error
        return self.auth_result


# =============================================================================
# Outcome and output capture
# =============================================================================

class RecordingRouter:
    """Router that remembers every routed unit of work."""

    def __init__(self):
        self.routed: List[Tuple[Any, Any]] = []

    def route(self, unit_of_work, outcome) -> None:
        self.routed.append((unit_of_work, outcome))

    @property
    def relationships(self) -> List[str]:
        return [outcome.status.value for _, outcome in self.routed]


class RecordingSink:
    """Thread-safe line sink for the process orchestrator."""

    def __init__(self):
        self._lock = threading.Lock()
        self.lines: List[Tuple[str, str]] = []

    def __call__(self, stream: str, line: str) -> None:
        with self._lock:
            self.lines.append((stream, line))

    def stream(self, name: str) -> List[str]:
        return [line for stream, line in self.lines if stream == name]


class FakeOrchestrator:
    """Orchestrator stand-in that records argv instead of spawning."""

    def __init__(self, outcome=None):
        from jobgate.modules.executor import Outcome, ProcessOutcome

        self.defaults = get_defaults()
        self.outcome = outcome or ProcessOutcome(status=Outcome.SUCCESS, exit_code=0)
        self.calls: List[Tuple[List[str], Optional[List[str]]]] = []

    def run(self, argv, masked_argv=None):
        self.calls.append((list(argv), list(masked_argv) if masked_argv else None))
        return self.outcome


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_process_state():
    """Isolate the secret registry and the cached defaults table."""
    clear_secrets()
    get_defaults.cache_clear()
    yield
    clear_secrets()
    get_defaults.cache_clear()


@pytest.fixture
def security_subsystem():
    return FakeSecuritySubsystem()


@pytest.fixture
def router():
    return RecordingRouter()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fake_orchestrator():
    return FakeOrchestrator()


@pytest.fixture
def write_job(tmp_path):
    """Write a YAML job definition and return its path."""
    def _write(data: Dict[str, Any], name: str = "job.yaml") -> str:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return str(path)
    return _write


@pytest.fixture
def sqoop_job_data() -> Dict[str, Any]:
    return {
        "source_driver": "com.mysql.jdbc.Driver",
        "source_connection_string": "jdbc:mysql://db:3306/sales",
        "source_user_name": "etl",
        "password_mode": "CLEAR_TEXT_ENTRY",
        "source_entered_password": "s3cr3t",
        "source_table_name": "orders",
        "source_table_fields": "*",
        "target_hdfs_directory": "/landing/orders",
    }


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "subprocess: Tests that spawn real child processes"
    )
