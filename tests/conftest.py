"""
Pytest configuration: make sure `import tenure` works regardless of
where pytest is invoked, and provide the shared fixtures.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tenure.actions import Orchestrator  # noqa: E402
from tenure.events import RecordingEventSink  # noqa: E402
from tenure.roster import Roster  # noqa: E402

NOW = datetime(2024, 6, 1)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def roster() -> Roster:
    return Roster()


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def engine(roster, sink) -> Orchestrator:
    """Orchestrator over an in‑memory roster with the clock pinned to NOW."""
    return Orchestrator(roster, sink, clock=fixed_clock)
