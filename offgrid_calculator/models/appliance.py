# offgrid_calculator/models/appliance.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Appliance:
    name: str
    watts: float          # rated draw while running
    hours_per_day: float  # 0..24
    category: str = "Other"
    essential: bool = False

    @property
    def watt_hours(self) -> float:
        return self.watts * self.hours_per_day
