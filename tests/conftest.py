import json

import pytest

from hfp.schema import PlanSettings
from tests.helpers import SAMPLE_PLAN


@pytest.fixture
def sample_plan_dict() -> dict:
    return json.loads(SAMPLE_PLAN.read_text(encoding="utf-8"))


@pytest.fixture
def flat_settings() -> PlanSettings:
    """Single filer in a state without income tax."""
    return PlanSettings(filing_status="single", state="FL")
