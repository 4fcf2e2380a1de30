# offgrid_calculator/models/load.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CategoryLoad:
    category: str  # lower-cased grouping key
    watt_hours: float
    percentage: float
    appliance_count: int


@dataclass
class LoadSummary:
    total_wh: float
    essential_wh: float
    non_essential_wh: float
    kwh_per_day: float
    essential_pct: float
    non_essential_pct: float
    appliance_count: int
    categories: list[CategoryLoad] = field(default_factory=list)
