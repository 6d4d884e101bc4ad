"""Mortgage amortization helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_MORTGAGE_RATE: Final[float] = 6.5


@dataclass(slots=True)
class MortgageYear:
    opening_balance: float
    interest: float
    payment: float
    extra_principal: float
    closing_balance: float


def annual_payment(principal: float, rate_percent: float, years: int) -> float:
    """Level annual payment that retires `principal` over `years` payments."""
    if principal <= 0 or years <= 0:
        return 0.0
    rate = rate_percent / 100.0
    if rate == 0:
        return principal / years
    growth = (1.0 + rate) ** years
    return principal * rate * growth / (growth - 1.0)


def amortize_year(
    *,
    balance: float,
    rate_percent: float,
    scheduled_payment: float,
    extra_principal: float = 0.0,
) -> MortgageYear:
    """Accrue one year of interest, then apply the payment and any extra principal.

    Neither the payment nor the extra principal may exceed what is owed.
    """
    opening = max(0.0, balance)
    interest = opening * rate_percent / 100.0
    owed = opening + interest
    payment = min(max(0.0, scheduled_payment), owed)
    extra = min(max(0.0, extra_principal), owed - payment)
    closing = max(0.0, owed - payment - extra)
    return MortgageYear(
        opening_balance=opening,
        interest=interest,
        payment=payment,
        extra_principal=extra,
        closing_balance=closing,
    )
