import copy
import json
from pathlib import Path

from hfp.schema import Person
from hfp.summary import IndividualYearlySummary, YearlySummary

SAMPLE_PLAN = Path(__file__).resolve().parent.parent / "sample_plan.json"


def write_plan(tmp_path: Path, data: dict, filename: str = "plan.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_plan(data: dict) -> dict:
    return copy.deepcopy(data)


def make_summary(year: int, people: dict[str, dict], persons: dict[str, Person] | None = None) -> YearlySummary:
    """Summary whose aggregate fields are the sums of the given per-person fields."""
    persons = persons or {}
    individuals = {
        name: IndividualYearlySummary(year=year, name=name, person=persons.get(name), **fields)
        for name, fields in people.items()
    }
    summary = YearlySummary(year=year, individuals=individuals)
    summary.resync(*sorted({key for fields in people.values() for key in fields}))
    return summary
