# offgrid_calculator/services/panel_sizing.py

from __future__ import annotations

import logging
from math import ceil, isfinite
from typing import Iterable

from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.models.load import LoadSummary
from offgrid_calculator.models.sizing import (
    BatteryParams,
    BatteryRecommendation,
    SolarSystemParams,
    SystemDesign,
)
from offgrid_calculator.services.load_aggregator import summarize_load
from offgrid_calculator.services.validation import (
    InvalidInput,
    loss_fraction,
    non_negative,
    positive,
)

log = logging.getLogger(__name__)

DEFAULT_SUN_HOURS = 5.0
DEFAULT_EFFICIENCY_LOSS = 0.2
DEFAULT_PEAK_SUN_HOURS = 4.0


def _round_up(value: float, what: str) -> int:
    if not isfinite(value):
        raise InvalidInput(f"{what} is out of range for the given inputs")
    return ceil(value)


def panels_needed(
    daily_usage_wh: float,
    panel_wattage: float,
    average_sun_hours: float = DEFAULT_SUN_HOURS,
    efficiency_loss: float = DEFAULT_EFFICIENCY_LOSS,
) -> int:
    """
    Number of panels needed to cover *daily_usage_wh*.

    Demand is inflated by the system losses, spread over the peak-equivalent
    sun hours, and divided by the panel rating. The result is rounded up so
    the array never under-provisions:

        panels * panel_wattage * average_sun_hours * (1 - efficiency_loss) >= daily_usage_wh

    ``efficiency_loss`` is a loss fraction; 0.2 means 80% of generated
    energy is usable.
    """
    usage = non_negative(daily_usage_wh, "daily_usage_wh")
    wattage = positive(panel_wattage, "panel_wattage")
    sun_hours = positive(average_sun_hours, "average_sun_hours")
    loss = loss_fraction(efficiency_loss)

    adjusted_usage = usage / (1 - loss)
    daily_wattage_needed = adjusted_usage / sun_hours
    panels = _round_up(daily_wattage_needed / wattage, "panel count")
    log.debug(
        "Panel sizing: usage=%.1fWh adjusted=%.1fWh capacity=%.1fW panel=%.0fW -> %d",
        usage,
        adjusted_usage,
        daily_wattage_needed,
        wattage,
        panels,
    )
    return panels


def panels_for(daily_usage_wh: float, params: SolarSystemParams) -> int:
    return panels_needed(
        daily_usage_wh,
        params.panel_wattage,
        params.average_sun_hours,
        params.efficiency_loss,
    )


def battery_capacity_wh(daily_wh: float, params: BatteryParams | None = None) -> int:
    """Battery bank size in Wh, with safety margin and depth of discharge applied."""
    params = params or BatteryParams()
    usage = non_negative(daily_wh, "daily_wh")
    margin = positive(params.safety_margin, "safety_margin")
    if margin < 1:
        raise InvalidInput(f"safety_margin must be at least 1 (got {margin:g})")
    dod = positive(params.depth_of_discharge, "depth_of_discharge")
    if dod > 1:
        raise InvalidInput(f"depth_of_discharge must be at most 1 (got {dod:g})")
    days = positive(params.days_of_autonomy, "days_of_autonomy")
    return _round_up(usage * days * margin / dod, "battery capacity")


def recommend_battery(summary: LoadSummary, params: BatteryParams | None = None) -> BatteryRecommendation:
    params = params or BatteryParams()
    return BatteryRecommendation(
        total_wh=battery_capacity_wh(summary.total_wh, params),
        essential_wh=battery_capacity_wh(summary.essential_wh, params),
        params=params,
    )


def minimum_array_watts(daily_wh: float, peak_sun_hours: float = DEFAULT_PEAK_SUN_HOURS) -> int:
    """Smallest array rating (W) that yields *daily_wh* in *peak_sun_hours*, before losses."""
    usage = non_negative(daily_wh, "daily_wh")
    hours = positive(peak_sun_hours, "peak_sun_hours")
    return _round_up(usage / hours, "array size")


def design_system(
    appliances: Iterable[Appliance],
    params: SolarSystemParams,
    battery: BatteryParams | None = None,
    peak_sun_hours: float = DEFAULT_PEAK_SUN_HOURS,
) -> SystemDesign:
    """Size panels, battery and inverter for a household of appliances."""
    items = list(appliances)
    summary = summarize_load(items)
    panels = panels_for(summary.total_wh, params)
    wattage = positive(params.panel_wattage, "panel_wattage")
    # All loads running at once.
    connected_load = sum(float(a.watts) for a in items)

    design = SystemDesign(
        daily_usage_wh=summary.total_wh,
        panel_wattage=wattage,
        number_of_panels=panels,
        array_watts=panels * wattage,
        minimum_array_watts=minimum_array_watts(summary.total_wh, peak_sun_hours),
        battery_capacity_wh=battery_capacity_wh(summary.total_wh, battery),
        inverter_size_w=_round_up(connected_load, "inverter size"),
        params=params,
    )
    log.info(
        "System design: %d x %.0fW panels, battery %dWh, inverter %dW",
        design.number_of_panels,
        design.panel_wattage,
        design.battery_capacity_wh,
        design.inverter_size_w,
    )
    return design
