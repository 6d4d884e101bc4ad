"""Tax bracket, payroll, and distribution reference data for HFP."""

from __future__ import annotations

from typing import Final

FILING_STATUSES: Final[tuple[str, ...]] = (
    "single",
    "married_filing_jointly",
    "married_filing_separately",
    "head_of_household",
)

# Brackets are (upper_bound, marginal_rate). Upper bound None means infinity.
FEDERAL_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [
        (11_925.0, 0.10),
        (48_475.0, 0.12),
        (103_350.0, 0.22),
        (197_300.0, 0.24),
        (250_525.0, 0.32),
        (626_350.0, 0.35),
        (None, 0.37),
    ],
    "married_filing_jointly": [
        (23_850.0, 0.10),
        (96_950.0, 0.12),
        (206_700.0, 0.22),
        (394_600.0, 0.24),
        (501_050.0, 0.32),
        (751_600.0, 0.35),
        (None, 0.37),
    ],
    "married_filing_separately": [
        (11_925.0, 0.10),
        (48_475.0, 0.12),
        (103_350.0, 0.22),
        (197_300.0, 0.24),
        (250_525.0, 0.32),
        (375_800.0, 0.35),
        (None, 0.37),
    ],
    "head_of_household": [
        (17_000.0, 0.10),
        (64_850.0, 0.12),
        (103_350.0, 0.22),
        (197_300.0, 0.24),
        (250_500.0, 0.32),
        (626_350.0, 0.35),
        (None, 0.37),
    ],
}

_NJ_SINGLE: Final[list[tuple[float | None, float]]] = [
    (20_000.0, 0.014),
    (35_000.0, 0.0175),
    (40_000.0, 0.035),
    (75_000.0, 0.05525),
    (500_000.0, 0.0637),
    (1_000_000.0, 0.0897),
    (None, 0.1075),
]

_NJ_JOINT: Final[list[tuple[float | None, float]]] = [
    (20_000.0, 0.014),
    (50_000.0, 0.0175),
    (70_000.0, 0.0245),
    (80_000.0, 0.035),
    (150_000.0, 0.05525),
    (500_000.0, 0.0637),
    (1_000_000.0, 0.0897),
    (None, 0.1075),
]

_NY_RATES: Final[tuple[float, ...]] = (0.04, 0.045, 0.0525, 0.055, 0.06, 0.0685, 0.0965, 0.103, 0.109)


def _with_rates(uppers: tuple[float, ...], rates: tuple[float, ...]) -> list[tuple[float | None, float]]:
    return [*zip(uppers, rates[:-1]), (None, rates[-1])]


STATE_BRACKETS: Final[dict[str, dict[str, list[tuple[float | None, float]]]]] = {
    "NJ": {
        "single": _NJ_SINGLE,
        "married_filing_separately": _NJ_SINGLE,
        "married_filing_jointly": _NJ_JOINT,
        "head_of_household": _NJ_JOINT,
    },
    "NY": {
        "single": _with_rates(
            (8_500.0, 11_700.0, 13_900.0, 80_650.0, 215_400.0, 1_077_550.0, 5_000_000.0, 25_000_000.0),
            _NY_RATES,
        ),
        "married_filing_jointly": _with_rates(
            (17_150.0, 23_600.0, 27_900.0, 161_550.0, 323_200.0, 2_155_350.0, 5_000_000.0, 25_000_000.0),
            _NY_RATES,
        ),
        "married_filing_separately": _with_rates(
            (8_500.0, 11_700.0, 13_900.0, 80_650.0, 161_550.0, 1_077_550.0, 2_500_000.0, 12_500_000.0),
            _NY_RATES,
        ),
        "head_of_household": _with_rates(
            (12_800.0, 17_650.0, 20_900.0, 107_650.0, 269_300.0, 1_616_450.0, 5_000_000.0, 25_000_000.0),
            _NY_RATES,
        ),
    },
    # No state income tax.
    "FL": {status: [] for status in FILING_STATUSES},
}

SUPPORTED_STATES: Final[tuple[str, ...]] = tuple(STATE_BRACKETS)

CAPITAL_GAINS_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [(50_800.0, 0.00), (557_000.0, 0.15), (None, 0.20)],
    "married_filing_jointly": [(101_600.0, 0.00), (626_350.0, 0.15), (None, 0.20)],
    "married_filing_separately": [(50_800.0, 0.00), (313_175.0, 0.15), (None, 0.20)],
    "head_of_household": [(68_050.0, 0.00), (595_350.0, 0.15), (None, 0.20)],
}

FICA_RATES: Final[dict[str, float]] = {
    "social_security_rate": 0.062,
    "social_security_wage_base": 184_500.0,
    "medicare_rate": 0.0145,
    "additional_medicare_rate": 0.009,
}

ADDITIONAL_MEDICARE_THRESHOLDS: Final[dict[str, float]] = {
    "single": 200_000.0,
    "married_filing_jointly": 250_000.0,
    "married_filing_separately": 125_000.0,
    "head_of_household": 200_000.0,
}

TAXABLE_SOCIAL_SECURITY_FRACTION: Final[float] = 0.85
DEFAULT_COST_BASIS_FRACTION: Final[float] = 0.25

# IRS Uniform Lifetime Table.
UNIFORM_LIFETIME_DIVISORS: Final[dict[int, float]] = {
    72: 27.4,
    73: 26.5,
    74: 25.5,
    75: 24.6,
    76: 23.7,
    77: 22.9,
    78: 22.0,
    79: 21.1,
    80: 20.2,
    81: 19.4,
    82: 18.5,
    83: 17.7,
    84: 16.8,
    85: 16.0,
    86: 15.2,
    87: 14.4,
    88: 13.7,
    89: 12.9,
    90: 12.2,
    91: 11.5,
    92: 10.8,
    93: 10.1,
    94: 9.5,
    95: 8.9,
    96: 8.4,
    97: 7.8,
    98: 7.3,
    99: 6.8,
    100: 6.4,
    101: 6.0,
    102: 5.6,
    103: 5.2,
    104: 4.9,
    105: 4.6,
    106: 4.3,
    107: 4.1,
    108: 3.9,
    109: 3.7,
    110: 3.5,
    111: 3.4,
    112: 3.3,
    113: 3.1,
    114: 3.0,
    115: 2.9,
    116: 2.8,
    117: 2.7,
    118: 2.5,
    119: 2.3,
    120: 2.0,
}
