"""Roth conversion rule: fill the current federal bracket with conversions."""

from __future__ import annotations

import logging

from .schema import PlanSettings
from .summary import YearlySummary
from .tax import bracket_room, compute_income_tax, ordinary_taxable_income
from .withdrawals import can_withdraw_qualified

logger = logging.getLogger(__name__)


def convert_to_roth(
    previous: YearlySummary | None,
    current: YearlySummary,
    settings: PlanSettings,
) -> YearlySummary:
    """Convert qualified money up to the top of the current marginal bracket.

    The conversion is ordinary income. Its added federal and state tax is paid
    from the person's non-qualified contribution for the year, and the rest is
    withheld from the amount landing in Roth, so the year stays balanced.
    """
    summary = current.copy()
    if not settings.roth_conversions or summary.deficit > 0:
        return summary

    ordinary = ordinary_taxable_income(summary)
    room = bracket_room(ordinary, settings.filing_status)
    for name in sorted(summary.individuals):
        if room <= 0:
            break
        individual = summary.individuals[name]
        if not can_withdraw_qualified(individual, settings):
            continue
        amount = min(room, max(0.0, individual.qualified_assets))
        if amount <= 0:
            continue

        tax_cost = compute_income_tax(ordinary + amount, settings) - compute_income_tax(ordinary, settings)
        funded = min(tax_cost, individual.non_qualified_contributions)
        withheld = tax_cost - funded

        individual.qualified_assets -= amount
        individual.qualified_withdrawals += amount
        individual.roth_conversions += amount
        individual.non_qualified_contributions -= funded
        individual.non_qualified_assets -= funded
        individual.roth_assets += amount - withheld
        individual.roth_contributions += amount - withheld
        ordinary += amount
        room -= amount
        logger.debug(
            "%d: converted %.2f to Roth for %s (tax %.2f, withheld %.2f)",
            summary.year,
            amount,
            name,
            tax_cost,
            withheld,
        )

    summary.resync(
        "qualified_assets",
        "qualified_withdrawals",
        "roth_conversions",
        "non_qualified_contributions",
        "non_qualified_assets",
        "roth_assets",
        "roth_contributions",
    )
    return summary
