# offgrid_calculator/services/load_aggregator.py

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.models.load import CategoryLoad, LoadSummary
from offgrid_calculator.services.validation import in_range, non_negative

log = logging.getLogger(__name__)

MAX_HOURS_PER_DAY = 24.0


def _checked_watt_hours(appliance: Appliance) -> float:
    label = appliance.name or "appliance"
    watts = non_negative(appliance.watts, f"{label}: watts")
    hours = in_range(appliance.hours_per_day, f"{label}: hours_per_day", 0.0, MAX_HOURS_PER_DAY)
    return watts * hours


def total_watt_hours(appliances: Iterable[Appliance]) -> float:
    """
    Daily energy draw of *appliances* in watt-hours.

    Each appliance contributes ``watts * hours_per_day``. An empty input
    yields 0. Negative watts or hours, or more than 24 hours a day,
    raise InvalidInput.
    """
    return sum((_checked_watt_hours(a) for a in appliances), 0.0)


def essential_watt_hours(appliances: Iterable[Appliance]) -> float:
    return sum((_checked_watt_hours(a) for a in appliances if a.essential), 0.0)


def _pct(part: float, total: float) -> float:
    return part / total * 100 if total > 0 else 0.0


def category_breakdown(appliances: Sequence[Appliance], total: float | None = None) -> List[CategoryLoad]:
    """Group load by lower-cased category, in first-seen order."""
    if total is None:
        total = total_watt_hours(appliances)

    order: list[str] = []
    wh_by_cat: dict[str, float] = {}
    count_by_cat: dict[str, int] = {}
    for appliance in appliances:
        key = (appliance.category or "other").strip().lower()
        if key not in wh_by_cat:
            order.append(key)
            wh_by_cat[key] = 0.0
            count_by_cat[key] = 0
        wh_by_cat[key] += _checked_watt_hours(appliance)
        count_by_cat[key] += 1

    return [
        CategoryLoad(
            category=key,
            watt_hours=wh_by_cat[key],
            percentage=_pct(wh_by_cat[key], total),
            appliance_count=count_by_cat[key],
        )
        for key in order
    ]


def summarize_load(appliances: Iterable[Appliance]) -> LoadSummary:
    items = list(appliances)
    total = total_watt_hours(items)
    essential = essential_watt_hours(items)
    non_essential = total - essential
    summary = LoadSummary(
        total_wh=total,
        essential_wh=essential,
        non_essential_wh=non_essential,
        kwh_per_day=total / 1000,
        essential_pct=_pct(essential, total),
        non_essential_pct=_pct(non_essential, total),
        appliance_count=len(items),
        categories=category_breakdown(items, total),
    )
    log.debug(
        "Load summary: %d appliances, total=%.1fWh essential=%.1fWh",
        summary.appliance_count,
        summary.total_wh,
        summary.essential_wh,
    )
    return summary
