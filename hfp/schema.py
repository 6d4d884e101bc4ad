"""Plan schema dataclasses and JSON/CSV loading."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from enum import Enum
import json
from pathlib import Path
from typing import Any

from .mortgage import DEFAULT_MORTGAGE_RATE
from .tax_data import DEFAULT_COST_BASIS_FRACTION

UNKNOWN_OWNER = "Unknown"
MIN_BIRTH_YEAR = 1900
MAX_BIRTH_YEAR = 2100

ENTRY_CSV_COLUMNS = ("owner", "type", "description", "value", "start_year", "end_year")


class SchemaError(ValueError):
    """Raised when raw JSON or CSV cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _as_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise SchemaError(f"{path}: expected integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            raise SchemaError(f"{path}: expected integer, got {value!r}") from None
        if number.is_integer():
            return int(number)
    raise SchemaError(f"{path}: expected integer, got {value!r}")


def _as_float(value: Any, path: str) -> float:
    if isinstance(value, bool):
        raise SchemaError(f"{path}: expected number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SchemaError(f"{path}: expected number, got {value!r}") from None


def normalize_token(value: str) -> str:
    """Upper-case a label and collapse spaces, hyphens and underscores to `_`."""
    return "_".join(value.strip().upper().replace("-", " ").replace("_", " ").split())


class ItemType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    NON_QUALIFIED = "non_qualified"
    QUALIFIED = "qualified"
    ROTH = "roth"
    CASH = "cash"
    LIFE_INSURANCE_BENEFIT = "life_insurance_benefit"
    REAL_ESTATE = "real_estate"
    SOCIAL_SECURITY_BENEFITS = "social_security_benefits"
    ROTH_CONTRIBUTION = "roth_contribution"
    QUALIFIED_CONTRIBUTION = "qualified_contribution"
    LIFE_INSURANCE_CONTRIBUTION = "life_insurance_contribution"
    MORTGAGE = "mortgage"
    MORTGAGE_REPAYMENT = "mortgage_repayment"

    @classmethod
    def parse(cls, value: Any) -> "ItemType":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Unknown item type: {value!r}")
        try:
            return ITEM_TYPE_ALIASES[normalize_token(value)]
        except KeyError:
            raise ValueError(f"Unknown item type: {value!r}") from None


ITEM_TYPE_ALIASES: dict[str, ItemType] = {
    **{member.name: member for member in ItemType},
    "NONQUALIFIED": ItemType.NON_QUALIFIED,
    "ASSET": ItemType.NON_QUALIFIED,
    "401K": ItemType.QUALIFIED,
    "SOCIAL_SECURITY": ItemType.SOCIAL_SECURITY_BENEFITS,
    "SSA": ItemType.SOCIAL_SECURITY_BENEFITS,
    "401K_CONTRIBUTION": ItemType.QUALIFIED_CONTRIBUTION,
    "MORTGAGE_LOAN": ItemType.MORTGAGE,
    "EXTRA_PRINCIPAL": ItemType.MORTGAGE_REPAYMENT,
}


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "married_filing_jointly"
    MARRIED_FILING_SEPARATELY = "married_filing_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"

    @classmethod
    def parse(cls, value: Any) -> "FilingStatus":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Unknown filing status: {value!r}")
        try:
            return FILING_STATUS_ALIASES[normalize_token(value)]
        except KeyError:
            raise ValueError(f"Unknown filing status: {value!r}") from None


FILING_STATUS_ALIASES: dict[str, FilingStatus] = {
    **{member.name: member for member in FilingStatus},
    "MFJ": FilingStatus.MARRIED_FILING_JOINTLY,
    "MFS": FilingStatus.MARRIED_FILING_SEPARATELY,
    "HOH": FilingStatus.HEAD_OF_HOUSEHOLD,
}


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    birth_year: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Person name cannot be blank")
        object.__setattr__(self, "name", self.name.strip())
        if isinstance(self.birth_year, bool) or not isinstance(self.birth_year, int):
            raise ValueError(f"Birth year must be an integer, got {self.birth_year!r}")
        if not MIN_BIRTH_YEAR <= self.birth_year <= MAX_BIRTH_YEAR:
            raise ValueError(
                f"Birth year must be between {MIN_BIRTH_YEAR} and {MAX_BIRTH_YEAR}, got {self.birth_year}"
            )

    def age_in_year(self, year: int) -> int:
        return year - self.birth_year

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Person":
        name = _require(data, "name", path)
        birth_year = _as_int(_require(data, "birth_year", path), f"{path}.birth_year")
        try:
            return cls(name=name, birth_year=birth_year)
        except ValueError as exc:
            raise SchemaError(f"{path}: {exc}") from exc


@dataclass(frozen=True, slots=True)
class Entry:
    """A dated amount of one item type owned by one person.

    Flow types grow from their start year; stock types contribute their raw
    value once, in the start year, and are carried by the ledger afterwards.
    """

    item_type: ItemType
    value: int
    start_year: int
    end_year: int
    owner: str = UNKNOWN_OWNER
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "item_type", ItemType.parse(self.item_type))
        if self.owner is not None and not isinstance(self.owner, str):
            raise ValueError(f"Owner must be a string, got {self.owner!r}")
        object.__setattr__(self, "owner", (self.owner or "").strip() or UNKNOWN_OWNER)
        if self.description is not None and not isinstance(self.description, str):
            raise ValueError(f"Description must be a string, got {self.description!r}")
        object.__setattr__(self, "description", (self.description or "").strip())
        for name in ("value", "start_year", "end_year"):
            raw = getattr(self, name)
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise ValueError(f"{name} must be an integer, got {raw!r}")
        if self.value < 0:
            raise ValueError(f"Value cannot be negative, got {self.value}")
        if self.start_year > self.end_year:
            raise ValueError("Start year cannot be after end year")

    def is_active(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year

    def value_for_year(self, year: int, rate_percent: float) -> float:
        if not self.is_active(year):
            return 0.0
        return self.value * (1.0 + rate_percent / 100.0) ** (year - self.start_year)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Entry":
        raw_type = _require(data, "type", path)
        try:
            item_type = ItemType.parse(raw_type)
        except ValueError as exc:
            raise SchemaError(f"{path}.type: {exc}") from exc
        value = _as_int(_require(data, "value", path), f"{path}.value")
        start_year = _as_int(_require(data, "start_year", path), f"{path}.start_year")
        end_year = _as_int(_require(data, "end_year", path), f"{path}.end_year")
        try:
            return cls(
                item_type=item_type,
                value=value,
                start_year=start_year,
                end_year=end_year,
                owner=_optional(data, "owner"),
                description=_optional(data, "description"),
            )
        except ValueError as exc:
            raise SchemaError(f"{path}: {exc}") from exc


@dataclass(slots=True)
class PlanSettings:
    filing_status: FilingStatus = FilingStatus.MARRIED_FILING_JOINTLY
    state: str = "NJ"
    self_employed: bool = False
    cost_basis_fraction: float = DEFAULT_COST_BASIS_FRACTION
    qualified_withdrawal_min_age: int | None = 59
    roth_conversions: bool = False

    def __post_init__(self) -> None:
        self.filing_status = FilingStatus.parse(self.filing_status)
        self.state = self.state.strip().upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "settings") -> "PlanSettings":
        try:
            filing_status = FilingStatus.parse(_optional(data, "filing_status", FilingStatus.MARRIED_FILING_JOINTLY))
        except ValueError as exc:
            raise SchemaError(f"{path}.filing_status: {exc}") from exc
        min_age = _optional(data, "qualified_withdrawal_min_age", 59)
        return cls(
            filing_status=filing_status,
            state=str(_optional(data, "state", "NJ")).strip().upper(),
            self_employed=bool(_optional(data, "self_employed", False)),
            cost_basis_fraction=_as_float(
                _optional(data, "cost_basis_fraction", DEFAULT_COST_BASIS_FRACTION), f"{path}.cost_basis_fraction"
            ),
            qualified_withdrawal_min_age=None if min_age is None else _as_int(min_age, f"{path}.qualified_withdrawal_min_age"),
            roth_conversions=bool(_optional(data, "roth_conversions", False)),
        )


@dataclass(slots=True)
class Plan:
    persons: list[Person]
    entries: list[Entry]
    rates: dict[ItemType, float] = field(default_factory=dict)
    settings: PlanSettings = field(default_factory=PlanSettings)

    def persons_by_name(self) -> dict[str, Person]:
        return {person.name: person for person in self.persons}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Plan":
        return cls(
            persons=[
                Person.from_dict(_expect_dict(item, f"persons[{idx}]"), f"persons[{idx}]")
                for idx, item in enumerate(_expect_list(_optional(data, "persons", []), "persons"))
            ],
            entries=[
                Entry.from_dict(_expect_dict(item, f"entries[{idx}]"), f"entries[{idx}]")
                for idx, item in enumerate(_expect_list(_optional(data, "entries", []), "entries"))
            ],
            rates=parse_rates(_expect_dict(_optional(data, "rates", {}), "rates"), fill_defaults=True),
            settings=PlanSettings.from_dict(_expect_dict(_optional(data, "settings", {}), "settings")),
        )


def parse_rates(data: dict[str, Any], path: str = "rates", fill_defaults: bool = False) -> dict[ItemType, float]:
    """Rates keyed by item type.

    With `fill_defaults`, a plan that names no mortgage rate gets DEFAULT_MORTGAGE_RATE;
    the projection itself treats every missing rate as 0.
    """
    rates: dict[ItemType, float] = {}
    for key, value in data.items():
        try:
            item_type = ItemType.parse(key)
        except ValueError as exc:
            raise SchemaError(f"{path}.{key}: {exc}") from exc
        rates[item_type] = _as_float(value, f"{path}.{key}")
    if fill_defaults:
        rates.setdefault(ItemType.MORTGAGE, DEFAULT_MORTGAGE_RATE)
    return rates


def load_plan(path: str | Path) -> Plan:
    """Load plan JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("plan: root must be a JSON object")
    return Plan.from_dict(raw)


def load_entries_csv(path: str | Path) -> list[Entry]:
    """Load entries from a CSV file with an `owner,type,description,value,start_year,end_year` header.

    The first malformed row rejects the whole file.
    """
    entries: list[Entry] = []
    with Path(path).open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = [column for column in ENTRY_CSV_COLUMNS if column not in (reader.fieldnames or [])]
        if missing:
            raise SchemaError(f"line 1: missing columns {', '.join(missing)}")
        for row in reader:
            if not any((cell or "").strip() for cell in row.values() if isinstance(cell, str)):
                continue
            try:
                entries.append(Entry.from_dict({key: value for key, value in row.items() if key in ENTRY_CSV_COLUMNS}, "entry"))
            except SchemaError as exc:
                raise SchemaError(f"Error parsing line {reader.line_num}: {exc}") from exc
    return entries
