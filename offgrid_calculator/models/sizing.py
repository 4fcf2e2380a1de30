# offgrid_calculator/models/sizing.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SolarSystemParams:
    panel_wattage: float
    average_sun_hours: float = 5.0
    efficiency_loss: float = 0.2  # 0.2 -> 80% of generated energy is usable

    @property
    def system_efficiency(self) -> float:
        return 1 - self.efficiency_loss


@dataclass(frozen=True)
class BatteryParams:
    safety_margin: float = 1.2
    depth_of_discharge: float = 0.8
    days_of_autonomy: float = 1.0


@dataclass
class BatteryRecommendation:
    total_wh: int
    essential_wh: int
    params: BatteryParams


@dataclass
class SystemDesign:
    daily_usage_wh: float
    panel_wattage: float
    number_of_panels: int
    array_watts: float
    minimum_array_watts: int
    battery_capacity_wh: int
    inverter_size_w: int
    params: SolarSystemParams
