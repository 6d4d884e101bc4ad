"""Year-by-year projection engine."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Callable, Final, Mapping, Sequence

from .ledger import build_year, owner_names
from .rmd import apply_rmds
from .roth import convert_to_roth
from .schema import Entry, ItemType, Person, Plan, PlanSettings
from .summary import YearlySummary
from .tax import apply_taxes
from .withdrawals import manage_expenses

logger = logging.getLogger(__name__)

Rule = Callable[[YearlySummary | None, YearlySummary, PlanSettings], YearlySummary]

# Order matters: RMD proceeds are inflow for expense management, and Roth
# conversions size themselves against the income left after it.
PIPELINE: Final[tuple[Rule, ...]] = (
    apply_rmds,
    manage_expenses,
    convert_to_roth,
    apply_taxes,
)


def run_pipeline(
    previous: YearlySummary | None,
    current: YearlySummary,
    settings: PlanSettings,
    rules: Sequence[Rule] = PIPELINE,
) -> YearlySummary:
    for rule in rules:
        current = rule(previous, current, settings)
    return current


def projection_years(entries: Sequence[Entry]) -> range:
    if not entries:
        return range(0)
    return range(min(entry.start_year for entry in entries), max(entry.end_year for entry in entries) + 1)


def run_projection(
    entries: Sequence[Entry],
    rates: Mapping[ItemType | str, float] | None = None,
    persons: Mapping[str, Person] | None = None,
    settings: PlanSettings | None = None,
) -> list[YearlySummary]:
    """Project every year from the earliest entry start to the latest entry end.

    Each year is built from the prior year's ending balances and then run
    through the rule pipeline. No entries means no years.
    """
    settings = settings or PlanSettings()
    growth: dict[ItemType, float] = {ItemType.parse(key): float(value) for key, value in (rates or {}).items()}
    people: Mapping[str, Person] = persons or {}
    entry_list = list(entries)
    owners = owner_names(entry_list)

    summaries: list[YearlySummary] = []
    previous: YearlySummary | None = None
    for year in projection_years(entry_list):
        raw = build_year(year, entry_list, growth, people, previous, owners)
        current = run_pipeline(previous, raw, settings)
        if current.deficit > 0:
            logger.info("%d: unfunded deficit of %.2f", year, current.deficit)
        summaries.append(current)
        previous = current

    logger.debug("Projected %d years for %d people", len(summaries), len(owners))
    return summaries


def run_plan(plan: Plan, **overrides: Any) -> list[YearlySummary]:
    """Run a loaded plan; keyword overrides replace fields of its settings."""
    settings = replace(plan.settings, **overrides) if overrides else plan.settings
    return run_projection(plan.entries, plan.rates, plan.persons_by_name(), settings)
