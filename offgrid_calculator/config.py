# offgrid_calculator/config.py
from dataclasses import dataclass, field
from pathlib import Path
import configparser

from offgrid_calculator.models.sizing import BatteryParams, SolarSystemParams


@dataclass
class SizingConfig:
    panel_wattage: float = 300.0
    average_sun_hours: float = 5.0
    efficiency_loss: float = 0.2

    def as_params(self) -> SolarSystemParams:
        return SolarSystemParams(
            panel_wattage=self.panel_wattage,
            average_sun_hours=self.average_sun_hours,
            efficiency_loss=self.efficiency_loss,
        )


@dataclass
class BatteryConfig:
    safety_margin: float = 1.2
    depth_of_discharge: float = 0.8
    days_of_autonomy: float = 1.0

    def as_params(self) -> BatteryParams:
        return BatteryParams(
            safety_margin=self.safety_margin,
            depth_of_discharge=self.depth_of_discharge,
            days_of_autonomy=self.days_of_autonomy,
        )


@dataclass
class ArrayConfig:
    peak_sun_hours: float = 4.0


@dataclass
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 3001
    service_name: str = "off-grid-living-api"
    base_url: str = "http://127.0.0.1:3001"
    timeout: float = 10.0


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    sizing: SizingConfig = field(default_factory=SizingConfig)
    battery: BatteryConfig = field(default_factory=BatteryConfig)
    array: ArrayConfig = field(default_factory=ArrayConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class Config:
    def __init__(self, path: str):
        self.path = Path(path)
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        read = self.parser.read(self.path)
        if not read:
            raise FileNotFoundError(f"Config file not found: {self.path}")

    @staticmethod
    def defaults() -> AppConfig:
        return AppConfig()

    @classmethod
    def load(cls, path: str) -> AppConfig:
        cfg = cls(path)

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _float(sec, key: str) -> float:
            raw = sec[key].strip()
            try:
                return float(raw)
            except ValueError:
                raise ValueError(f"[{sec.name}] {key} must be a number, got '{raw}'") from None

        # --- Sizing ---
        sizing_kwargs = {}
        if "sizing" in p:
            sizing_sec = p["sizing"]
            for key in ("panel_wattage", "average_sun_hours", "efficiency_loss"):
                if key in sizing_sec:
                    sizing_kwargs[key] = _float(sizing_sec, key)
        sizing_cfg = SizingConfig(**sizing_kwargs)
        if sizing_cfg.panel_wattage <= 0:
            raise ValueError("[sizing] panel_wattage must be greater than zero")
        if sizing_cfg.average_sun_hours <= 0:
            raise ValueError("[sizing] average_sun_hours must be greater than zero")
        if not 0 <= sizing_cfg.efficiency_loss < 1:
            raise ValueError("[sizing] efficiency_loss must be in [0, 1)")

        # --- Battery ---
        battery_kwargs = {}
        if "battery" in p:
            battery_sec = p["battery"]
            for key in ("safety_margin", "depth_of_discharge", "days_of_autonomy"):
                if key in battery_sec:
                    battery_kwargs[key] = _float(battery_sec, key)
        battery_cfg = BatteryConfig(**battery_kwargs)
        if battery_cfg.safety_margin < 1:
            raise ValueError("[battery] safety_margin must be at least 1")
        if not 0 < battery_cfg.depth_of_discharge <= 1:
            raise ValueError("[battery] depth_of_discharge must be in (0, 1]")
        if battery_cfg.days_of_autonomy <= 0:
            raise ValueError("[battery] days_of_autonomy must be greater than zero")

        # --- Array ---
        array_kwargs = {}
        if "array" in p and "peak_sun_hours" in p["array"]:
            array_kwargs["peak_sun_hours"] = _float(p["array"], "peak_sun_hours")
        array_cfg = ArrayConfig(**array_kwargs)
        if array_cfg.peak_sun_hours <= 0:
            raise ValueError("[array] peak_sun_hours must be greater than zero")

        # --- API ---
        api_kwargs = {}
        if "api" in p:
            api_sec = p["api"]
            if "host" in api_sec:
                api_kwargs["host"] = api_sec["host"].strip()
            if "port" in api_sec:
                api_kwargs["port"] = int(api_sec["port"])
            if "service_name" in api_sec:
                api_kwargs["service_name"] = api_sec["service_name"].strip()
            if "timeout" in api_sec:
                api_kwargs["timeout"] = _float(api_sec, "timeout")
            if "base_url" in api_sec:
                api_kwargs["base_url"] = api_sec["base_url"].strip()
            elif "host" in api_kwargs or "port" in api_kwargs:
                host = api_kwargs.get("host", APIConfig.host)
                port = api_kwargs.get("port", APIConfig.port)
                api_kwargs["base_url"] = f"http://{host}:{port}"
        api_cfg = APIConfig(**api_kwargs)

        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            sizing=sizing_cfg,
            battery=battery_cfg,
            array=array_cfg,
            api=api_cfg,
            logging=logging_cfg,
        )
