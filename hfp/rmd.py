"""Required Minimum Distribution helpers and the RMD rule."""

from __future__ import annotations

import logging

from .schema import PlanSettings
from .summary import YearlySummary
from .tax_data import UNIFORM_LIFETIME_DIVISORS

logger = logging.getLogger(__name__)


def rmd_start_age(birth_year: int) -> int:
    """First age at which distributions are required (SECURE 2.0 schedule)."""
    if birth_year <= 1950:
        return 72
    if birth_year <= 1959:
        return 73
    return 75


def is_rmd_required(age: int, birth_year: int) -> bool:
    return age >= rmd_start_age(birth_year)


def divisor_for_age(age: int) -> float | None:
    if age < min(UNIFORM_LIFETIME_DIVISORS):
        return None
    if age > max(UNIFORM_LIFETIME_DIVISORS):
        return UNIFORM_LIFETIME_DIVISORS[max(UNIFORM_LIFETIME_DIVISORS)]
    return UNIFORM_LIFETIME_DIVISORS[age]


def compute_rmd_amount(age: int, prior_year_end_balance: float) -> float:
    divisor = divisor_for_age(age)
    if divisor is None or prior_year_end_balance <= 0:
        return 0.0
    return prior_year_end_balance / divisor


def apply_rmds(
    previous: YearlySummary | None,
    current: YearlySummary,
    settings: PlanSettings,
) -> YearlySummary:
    """Withdraw each required person's distribution from their qualified balance.

    The amount is based on last year's ending balance and clamped to what is
    left this year. People without a birth record never take an RMD.
    """
    summary = current.copy()
    for name, individual in summary.individuals.items():
        individual.rmd_withdrawals = 0.0
        person = individual.person
        if person is None:
            continue
        age = person.age_in_year(summary.year)
        if not is_rmd_required(age, person.birth_year):
            continue

        prior = previous.individuals.get(name) if previous is not None else None
        prior_balance = prior.qualified_assets if prior is not None else 0.0
        amount = min(compute_rmd_amount(age, prior_balance), max(0.0, individual.qualified_assets))
        if amount <= 0:
            continue

        individual.qualified_assets -= amount
        individual.rmd_withdrawals = amount
        logger.debug("%d: RMD of %.2f for %s at age %d", summary.year, amount, name, age)

    summary.resync("qualified_assets", "rmd_withdrawals")
    return summary
