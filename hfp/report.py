"""Tabular CSV export of projected summaries."""

from __future__ import annotations

import csv
from dataclasses import dataclass
import io
from pathlib import Path
from typing import Callable, Sequence

from .summary import SummaryFields, YearlySummary


@dataclass(slots=True)
class ExportRow:
    label: str
    values: list[str]


# (total label, per-person suffix, field)
PER_PERSON_METRICS: tuple[tuple[str, str, str], ...] = (
    ("Total Income", "Income", "income"),
    ("Total RMD Withdrawals", "RMD Withdrawals", "rmd_withdrawals"),
    ("Total Qualified Withdrawals", "Qualified Withdrawals", "qualified_withdrawals"),
    ("Total Non-Qualified Withdrawals", "Non-Qualified Withdrawals", "non_qualified_withdrawals"),
    ("Total Social Security Benefits", "Social Security Benefits", "social_security_benefits"),
)

TOTAL_METRICS: tuple[tuple[str, str], ...] = (
    ("Total Federal Income Tax", "federal_income_tax"),
    ("Total State Income Tax", "state_income_tax"),
    ("Total Capital Gains Tax", "capital_gains_tax"),
    ("Total Social Security Tax", "social_security_tax"),
    ("Total Medicare Tax", "medicare_tax"),
    ("Total Expenses", "expenses"),
)

DETAILED_METRICS: tuple[tuple[str, str], ...] = (
    ("Total Roth Withdrawals", "roth_withdrawals"),
    ("Total Cash Withdrawals", "cash_withdrawals"),
    ("Total Roth Conversions", "roth_conversions"),
    ("Total Roth Contributions", "roth_contributions"),
    ("Total Qualified Contributions", "qualified_contributions"),
    ("Total Non-Qualified Contributions", "non_qualified_contributions"),
    ("Total Life Insurance Contributions", "life_insurance_contributions"),
    ("Total Mortgage Payments", "mortgage_payment"),
    ("Total Extra Principal", "mortgage_repayment"),
    ("Total Taxes", "total_taxes"),
    ("Total Cash Inflows", "total_cash_inflows"),
    ("Total Cash Outflows", "total_cash_outflows"),
    ("Deficit", "deficit"),
    ("Qualified Assets", "qualified_assets"),
    ("Non-Qualified Assets", "non_qualified_assets"),
    ("Roth Assets", "roth_assets"),
    ("Cash", "cash"),
    ("Real Estate", "real_estate"),
    ("Life Insurance Benefits", "life_insurance_benefits"),
    ("Mortgage Balance", "mortgage_balance"),
    ("Net Worth", "net_worth"),
)


def _money(value: float) -> str:
    return f"{value:.2f}"


def _names(summaries: Sequence[YearlySummary]) -> list[str]:
    return sorted({name for summary in summaries for name in summary.individuals})


def _row(label: str, summaries: Sequence[YearlySummary], getter: Callable[[YearlySummary], str]) -> ExportRow:
    return ExportRow(label=label, values=[getter(summary) for summary in summaries])


def _person_value(summary: YearlySummary, name: str, field_name: str) -> str:
    person: SummaryFields | None = summary.individuals.get(name)
    return _money(getattr(person, field_name) if person is not None else 0.0)


def _age(summary: YearlySummary, name: str) -> str:
    person = summary.individuals.get(name)
    age = person.age if person is not None else None
    return "" if age is None else str(age)


def build_export_rows(summaries: Sequence[YearlySummary], detailed: bool = False) -> list[ExportRow]:
    """Rows in export order: ages, per-person metrics with their totals, then tax and expense totals."""
    names = _names(summaries)
    rows = [_row(f"{name} Age", summaries, lambda s, n=name: _age(s, n)) for name in names]

    for total_label, suffix, field_name in PER_PERSON_METRICS:
        rows.append(_row(total_label, summaries, lambda s, f=field_name: _money(getattr(s, f))))
        for name in names:
            rows.append(_row(f"{name} {suffix}", summaries, lambda s, n=name, f=field_name: _person_value(s, n, f)))

    for label, field_name in TOTAL_METRICS:
        rows.append(_row(label, summaries, lambda s, f=field_name: _money(getattr(s, f))))

    if detailed:
        for label, field_name in DETAILED_METRICS:
            rows.append(_row(label, summaries, lambda s, f=field_name: _money(getattr(s, f))))
    return rows


def render_csv(summaries: Sequence[YearlySummary], detailed: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Item", *(str(summary.year) for summary in summaries)])
    for row in build_export_rows(summaries, detailed=detailed):
        writer.writerow([row.label, *row.values])
    return buffer.getvalue()


def write_export(path: str | Path, summaries: Sequence[YearlySummary], detailed: bool = False) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_csv(summaries, detailed=detailed), encoding="utf-8")


def parse_export(text: str) -> dict[str, dict[int, float]]:
    """Read an export back into `{label: {year: value}}`; blank cells are skipped."""
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if not header or header[0] != "Item":
        raise ValueError("export: first row must start with 'Item'")
    years = [int(cell) for cell in header[1:]]
    table: dict[str, dict[int, float]] = {}
    for row in reader:
        if not row:
            continue
        table[row[0]] = {year: float(cell) for year, cell in zip(years, row[1:]) if cell.strip()}
    return table


def render_summary(summaries: Sequence[YearlySummary]) -> str:
    """Short plain-text overview for the CLI."""
    if not summaries:
        return "No years projected."
    first, last = summaries[0], summaries[-1]
    deficit_years = [summary.year for summary in summaries if summary.deficit > 0]
    lines = [
        f"Years: {first.year}-{last.year}",
        f"Total taxes: ${sum(summary.total_taxes for summary in summaries):,.0f}",
        f"Ending net worth: ${last.net_worth:,.0f}",
        f"Deficit years: {len(deficit_years)}",
    ]
    if deficit_years:
        lines.append(f"First deficit: {deficit_years[0]}")
    return "\n".join(lines)
