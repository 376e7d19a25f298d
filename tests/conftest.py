import json
from pathlib import Path

import pytest

from canretire.provider import ReferenceTaxDataProvider, load_snapshot


@pytest.fixture
def sample_scenario_dict() -> dict:
    return json.loads(Path("sample_scenario.json").read_text(encoding="utf-8"))


@pytest.fixture
def ontario_tables():
    return load_snapshot(ReferenceTaxDataProvider(), "ON", 2025)


@pytest.fixture
def rrif_schedule():
    return ReferenceTaxDataProvider().minimum_withdrawal_schedule()
