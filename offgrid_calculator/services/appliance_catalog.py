# offgrid_calculator/services/appliance_catalog.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.services.validation import InvalidInput, in_range, non_negative

log = logging.getLogger(__name__)


# Typical running wattage: (name, watts, essential)
COMMON_APPLIANCES: Dict[str, List[tuple[str, float, bool]]] = {
    "kitchen": [
        ("Refrigerator", 150, True),
        ("Freezer", 200, True),
        ("Microwave", 1000, False),
        ("Coffee Maker", 800, False),
        ("Toaster", 850, False),
        ("Blender", 300, False),
        ("Electric Kettle", 1500, False),
        ("Slow Cooker", 270, False),
        ("Induction Cooktop", 1800, False),
    ],
    "lighting": [
        ("LED Light Bulb", 10, True),
        ("CFL Light Bulb", 14, True),
        ("Incandescent Bulb", 60, True),
        ("LED Strip Lights", 20, False),
    ],
    "entertainment": [
        ('TV (LED 32")', 50, False),
        ('TV (LED 50")', 100, False),
        ("Laptop", 50, False),
        ("Desktop Computer", 200, False),
        ("Gaming Console", 150, False),
        ("Stereo System", 80, False),
        ("Tablet Charging", 10, False),
        ("Smartphone Charging", 5, False),
    ],
    "climate": [
        ("Ceiling Fan", 75, False),
        ("Box Fan", 100, False),
        ("Space Heater", 1500, False),
        ("Dehumidifier", 280, False),
        ("Air Purifier", 50, False),
    ],
    "bathroom": [
        ("Hair Dryer", 1500, False),
        ("Electric Shaver", 15, False),
        ("Electric Toothbrush Charger", 5, False),
    ],
    "laundry": [
        ("Washing Machine", 500, False),
        ("Clothes Dryer", 3000, False),
        ("Iron", 1200, False),
    ],
    "office": [
        ("Printer", 50, False),
        ("Router/Modem", 15, True),
        ("Monitor", 30, False),
    ],
    "other": [
        ("Water Pump", 250, True),
        ("Well Pump", 750, True),
        ("Power Tools", 1000, False),
        ("Sump Pump", 800, True),
    ],
}

# Example household shown before the user enters anything.
DEFAULT_HOUSEHOLD = (
    Appliance("Refrigerator", 150, 24, "Kitchen", True),
    Appliance("LED Lights (5 bulbs)", 50, 6, "Lighting", True),
    Appliance("Laptop", 50, 4, "Entertainment", False),
    Appliance('TV (LED 32")', 50, 3, "Entertainment", False),
    Appliance("Router/Modem", 15, 24, "Office", True),
    Appliance("Smartphone Charging", 5, 2, "Entertainment", True),
)


def default_appliances() -> List[Appliance]:
    return list(DEFAULT_HOUSEHOLD)


def list_catalog(category: Optional[str] = None, hours_per_day: float = 1.0) -> List[Appliance]:
    """
    Catalog entries as Appliance values, optionally for one category.

    Catalog entries carry no usage pattern; *hours_per_day* fills it in.
    """
    if category is not None:
        key = category.strip().lower()
        if key not in COMMON_APPLIANCES:
            known = ", ".join(sorted(COMMON_APPLIANCES))
            raise InvalidInput(f"Unknown appliance category '{category}' (known: {known})")
        keys = [key]
    else:
        keys = list(COMMON_APPLIANCES)

    return [
        Appliance(name, watts, hours_per_day, key.capitalize(), essential)
        for key in keys
        for name, watts, essential in COMMON_APPLIANCES[key]
    ]


def lookup(name: str) -> Optional[Appliance]:
    wanted = name.strip().lower()
    for appliance in list_catalog():
        if appliance.name.lower() == wanted:
            return appliance
    return None


def appliance_from_mapping(raw: Mapping[str, Any], index: int = 0) -> Appliance:
    """Build an Appliance from a JSON object; accepts ``hours_per_day`` or ``hoursPerDay``."""
    if not isinstance(raw, Mapping):
        raise InvalidInput(f"Appliance #{index} must be an object, got {type(raw).__name__}")

    name = str(raw.get("name") or f"Appliance {index}")
    if "watts" not in raw:
        raise InvalidInput(f"{name}: missing 'watts'")
    hours = raw.get("hours_per_day", raw.get("hoursPerDay"))
    if hours is None:
        raise InvalidInput(f"{name}: missing 'hours_per_day'")
    essential = raw.get("essential", False)
    if not isinstance(essential, bool):
        raise InvalidInput(f"{name}: essential must be true or false, got {essential!r}")

    return Appliance(
        name=name,
        watts=non_negative(raw["watts"], f"{name}: watts"),
        hours_per_day=in_range(hours, f"{name}: hours_per_day", 0.0, 24.0),
        category=str(raw.get("category") or "Other"),
        essential=essential,
    )


def appliances_from_list(payload: Any) -> List[Appliance]:
    if isinstance(payload, Mapping) and "appliances" in payload:
        payload = payload["appliances"]
    if not isinstance(payload, list):
        raise InvalidInput("Appliance data must be a list of objects")
    return [appliance_from_mapping(item, idx) for idx, item in enumerate(payload, start=1)]


def load_appliances(path: str | Path) -> List[Appliance]:
    """Read appliances from a JSON file (a list, or an object with an ``appliances`` list)."""
    target = Path(path).expanduser()
    try:
        with target.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidInput(f"{target}: not a UTF-8 JSON file ({exc})") from exc

    appliances = appliances_from_list(payload)
    log.debug("Loaded %d appliances from %s", len(appliances), target)
    return appliances
