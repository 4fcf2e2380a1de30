# offgrid_calculator/services/output_formatter.py

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Iterable, Optional

from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.models.load import LoadSummary
from offgrid_calculator.models.sizing import BatteryRecommendation, SystemDesign


def appliance_to_dict(appliance: Appliance) -> dict:
    return {
        "name": appliance.name,
        "watts": appliance.watts,
        "hours_per_day": appliance.hours_per_day,
        "category": appliance.category,
        "essential": appliance.essential,
        "watt_hours": appliance.watt_hours,
    }


def summary_to_dict(summary: LoadSummary) -> dict:
    return {
        "total_wh": summary.total_wh,
        "essential_wh": summary.essential_wh,
        "non_essential_wh": summary.non_essential_wh,
        "kwh_per_day": summary.kwh_per_day,
        "essential_pct": summary.essential_pct,
        "non_essential_pct": summary.non_essential_pct,
        "appliance_count": summary.appliance_count,
        "categories": [asdict(c) for c in summary.categories],
    }


def battery_to_dict(battery: BatteryRecommendation) -> dict:
    return {
        "total_wh": battery.total_wh,
        "essential_wh": battery.essential_wh,
        "safety_margin": battery.params.safety_margin,
        "depth_of_discharge": battery.params.depth_of_discharge,
        "days_of_autonomy": battery.params.days_of_autonomy,
    }


def home_load_payload(
    summary: LoadSummary,
    battery: BatteryRecommendation,
    minimum_array_watts: int,
    peak_sun_hours: float,
) -> dict:
    return {
        "summary": summary_to_dict(summary),
        "battery": battery_to_dict(battery),
        "array": {
            "minimum_watts": minimum_array_watts,
            "peak_sun_hours": peak_sun_hours,
        },
    }


def design_to_dict(design: SystemDesign) -> dict:
    return {
        "daily_usage_wh": design.daily_usage_wh,
        "panel_wattage": design.panel_wattage,
        "number_of_panels": design.number_of_panels,
        "array_watts": design.array_watts,
        "minimum_array_watts": design.minimum_array_watts,
        "battery_capacity_wh": design.battery_capacity_wh,
        "inverter_size_w": design.inverter_size_w,
        "average_sun_hours": design.params.average_sun_hours,
        "efficiency_loss": design.params.efficiency_loss,
    }


def emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def _fmt_wh(value: float) -> str:
    return f"{value:,.0f} Wh"


def format_load_human(
    summary: LoadSummary,
    battery: Optional[BatteryRecommendation] = None,
    minimum_array_watts: Optional[int] = None,
    peak_sun_hours: Optional[float] = None,
) -> list[str]:
    lines = [
        f"Total daily consumption: {_fmt_wh(summary.total_wh)}/day "
        f"({summary.kwh_per_day:.2f} kWh) across {summary.appliance_count} appliances",
        f"  Essential:     {_fmt_wh(summary.essential_wh)}/day ({summary.essential_pct:.0f}%)",
        f"  Non-essential: {_fmt_wh(summary.non_essential_wh)}/day ({summary.non_essential_pct:.0f}%)",
    ]
    if summary.categories:
        lines.append("Category breakdown:")
        for cat in summary.categories:
            lines.append(f"  {cat.category:<14} {_fmt_wh(cat.watt_hours):>12}  {cat.percentage:5.1f}%")
    if battery is not None:
        lines.append(
            f"Minimum battery capacity: {battery.total_wh:,} Wh "
            f"(essential only: {battery.essential_wh:,} Wh)"
        )
        lines.append(
            f"  {battery.params.days_of_autonomy:g} day(s) autonomy, "
            f"{(battery.params.safety_margin - 1) * 100:.0f}% safety margin, "
            f"{battery.params.depth_of_discharge * 100:.0f}% depth of discharge"
        )
    if minimum_array_watts is not None:
        hours_txt = f" ({peak_sun_hours:g} peak sun hours)" if peak_sun_hours else ""
        lines.append(f"Minimum solar array: {minimum_array_watts:,} W{hours_txt}")
    return lines


def format_design_human(design: SystemDesign) -> list[str]:
    return [
        f"Daily usage: {_fmt_wh(design.daily_usage_wh)}",
        f"Panels: {design.number_of_panels} x {design.panel_wattage:g} W "
        f"= {design.array_watts:,.0f} W array",
        f"  {design.params.average_sun_hours:g} sun hours, "
        f"{design.params.efficiency_loss * 100:.0f}% system losses",
        f"Minimum array (before losses): {design.minimum_array_watts:,} W",
        f"Battery capacity: {design.battery_capacity_wh:,} Wh",
        f"Inverter size (connected load): {design.inverter_size_w:,} W",
    ]


def format_catalog_human(appliances: Iterable[Appliance]) -> list[str]:
    lines = []
    current = None
    for appliance in appliances:
        if appliance.category != current:
            current = appliance.category
            lines.append(f"[{current}]")
        marker = " *" if appliance.essential else ""
        lines.append(f"  {appliance.name:<30} {appliance.watts:>6g} W{marker}")
    return lines


def emit_human(lines: Iterable[str]) -> None:
    for line in lines:
        print(line)
