import pytest

from flowlines.models import FlowLinesConfig


def all_points(lines):
    for line in lines:
        yield from line.points


@pytest.fixture(autouse=True)
def _no_env_seed(monkeypatch):
    monkeypatch.delenv("GEN_SEED", raising=False)


@pytest.fixture
def small_config():
    return FlowLinesConfig(width=400, height=400, line_count=10, seed=42)
