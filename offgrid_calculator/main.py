# offgrid_calculator/main.py

from datetime import datetime, timezone
from dataclasses import replace
import logging
from pathlib import Path
import sys

from .cli import build_parser
from .config import Config
from .logging import CalculationLogEntry, ConsoleLog, StructuredLog

from .services.api_client import CalculatorAPIClient
from .services.appliance_catalog import default_appliances, list_catalog, load_appliances
from .services.http_service import serve
from .services.load_aggregator import summarize_load
from .services.output_formatter import (
    appliance_to_dict,
    design_to_dict,
    emit_human,
    emit_json,
    format_catalog_human,
    format_design_human,
    format_load_human,
    home_load_payload,
)
from .services.panel_sizing import design_system, minimum_array_watts, panels_needed, recommend_battery
from .services.validation import InvalidInput

DEFAULT_CONFIG = "offgrid_calculator.conf"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def _load_config(path: str, log: logging.Logger):
    if Path(path).exists() or path != DEFAULT_CONFIG:
        return Config.load(path)
    log.debug("No %s found; using built-in defaults", path)
    return Config.defaults()


def _appliances_from_args(args, log):
    if args.defaults or not args.appliances:
        if not args.defaults:
            log.info("No appliance file given; using the example household.")
        return default_appliances()
    return load_appliances(args.appliances)


def _solar_params(args, app_cfg):
    sizing = app_cfg.sizing
    overrides = {}
    if args.panel_watts is not None:
        overrides["panel_wattage"] = args.panel_watts
    if args.sun_hours is not None:
        overrides["average_sun_hours"] = args.sun_hours
    if args.efficiency_loss is not None:
        overrides["efficiency_loss"] = args.efficiency_loss
    return replace(sizing.as_params(), **overrides)


def run_load(args, app_cfg, log):
    appliances = _appliances_from_args(args, log)
    battery_params = app_cfg.battery.as_params()
    if args.days_of_autonomy is not None:
        battery_params = replace(battery_params, days_of_autonomy=args.days_of_autonomy)

    summary = summarize_load(appliances)
    battery = recommend_battery(summary, battery_params)
    peak_hours = app_cfg.array.peak_sun_hours
    min_array = minimum_array_watts(summary.total_wh, peak_hours)

    payload = home_load_payload(summary, battery, min_array, peak_hours)
    if args.json:
        emit_json(payload)
    else:
        emit_human(format_load_human(summary, battery, min_array, peak_hours))
    inputs = {"appliances": [appliance_to_dict(a) for a in appliances]}
    return inputs, payload


def run_panels(args, app_cfg, log):
    params = _solar_params(args, app_cfg)
    panels = panels_needed(
        args.daily_wh,
        params.panel_wattage,
        params.average_sun_hours,
        params.efficiency_loss,
    )
    inputs = {
        "daily_usage_wh": args.daily_wh,
        "panel_wattage": params.panel_wattage,
        "average_sun_hours": params.average_sun_hours,
        "efficiency_loss": params.efficiency_loss,
    }
    payload = dict(inputs, panels=panels)
    if args.json:
        emit_json(payload)
    else:
        print(
            f"{panels} x {params.panel_wattage:g} W panels for {args.daily_wh:,.0f} Wh/day "
            f"({params.average_sun_hours:g} sun hours, {params.efficiency_loss * 100:.0f}% losses)"
        )
    return inputs, payload


def run_design(args, app_cfg, log):
    appliances = _appliances_from_args(args, log)
    params = _solar_params(args, app_cfg)
    design = design_system(
        appliances,
        params,
        app_cfg.battery.as_params(),
        app_cfg.array.peak_sun_hours,
    )
    payload = design_to_dict(design)
    if args.json:
        emit_json(payload)
    else:
        emit_human(format_design_human(design))
    inputs = {"appliances": [appliance_to_dict(a) for a in appliances], "panel_wattage": params.panel_wattage}
    return inputs, payload


def run_catalog(args, app_cfg, log):
    appliances = list_catalog(args.category)
    if args.json:
        emit_json({"appliances": [appliance_to_dict(a) for a in appliances]})
    else:
        emit_human(format_catalog_human(appliances))
    return {"category": args.category}, {"count": len(appliances)}


def run_ping(args, app_cfg, log):
    client = CalculatorAPIClient(app_cfg.api, log, base_url=args.url)
    payload = client.health()
    if payload is None:
        log.error("Calculator API at %s is not reachable", client.base_url)
        return {"url": client.base_url}, None
    if args.json:
        emit_json(payload)
    else:
        print(f"{payload.get('service')} status={payload.get('status')} at {payload.get('timestamp')}")
    return {"url": client.base_url}, payload


COMMANDS = {
    "load": run_load,
    "panels": run_panels,
    "design": run_design,
    "catalog": run_catalog,
    "ping": run_ping,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    bootstrap_log = logging.getLogger("offgrid")
    try:
        app_cfg = _load_config(args.config, bootstrap_log)
    except (FileNotFoundError, ValueError) as exc:
        ConsoleLog(level="INFO", quiet=args.quiet).setup()
        bootstrap_log.error("Configuration error: %s", exc)
        return EXIT_BAD_INPUT

    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )

    if args.command == "serve":
        serve(app_cfg, log, host=args.host, port=args.port)
        return EXIT_OK

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise ValueError(f"Unsupported command: {args.command}")

    now = datetime.now(timezone.utc)
    try:
        inputs, result = handler(args, app_cfg, log)
    except (InvalidInput, FileNotFoundError) as exc:
        log.error("%s", exc)
        structured_logger.write(
            CalculationLogEntry(
                timestamp=now.isoformat(),
                command=args.command,
                inputs=None,
                result=None,
                error=str(exc),
            )
        )
        return EXIT_BAD_INPUT

    structured_logger.write(
        CalculationLogEntry(
            timestamp=now.isoformat(),
            command=args.command,
            inputs=inputs,
            result=result,
        )
    )
    return EXIT_OK if result is not None else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
