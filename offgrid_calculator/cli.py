# offgrid_calculator/cli.py
import argparse


def _add_solar_options(parser, require_daily: bool = False):
    if require_daily:
        parser.add_argument(
            "--daily-wh",
            type=float,
            required=True,
            help="Daily energy requirement in watt-hours",
        )
    parser.add_argument(
        "--panel-watts",
        type=float,
        help="Panel rating in watts (default: [sizing] panel_wattage)",
    )
    parser.add_argument(
        "--sun-hours",
        type=float,
        help="Average peak-equivalent sun hours per day (default: [sizing] average_sun_hours)",
    )
    parser.add_argument(
        "--efficiency-loss",
        type=float,
        help="System loss fraction, e.g. 0.2 for 80%% usable (default: [sizing] efficiency_loss)",
    )


def _add_appliance_source(parser):
    parser.add_argument(
        "appliances",
        nargs="?",
        help="JSON file with a list of appliances",
    )
    parser.add_argument(
        "--defaults",
        action="store_true",
        help="Use the built-in example household instead of a file",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="offgrid-calc",
        description="Off-grid home load and solar sizing calculator"
    )

    parser.add_argument(
        "--config",
        default="offgrid_calculator.conf",
        help="Path to configuration file (defaults are used if it does not exist)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # Home load summary
    cmd_load = sub.add_parser("load", help="Summarize daily appliance load")
    _add_appliance_source(cmd_load)
    cmd_load.add_argument(
        "--days-of-autonomy",
        type=float,
        help="Days the battery bank must carry the load (default: [battery] days_of_autonomy)",
    )

    # Panel count only
    cmd_panels = sub.add_parser("panels", help="Estimate the number of solar panels")
    _add_solar_options(cmd_panels, require_daily=True)

    # Whole system
    cmd_design = sub.add_parser("design", help="Size panels, battery and inverter for a household")
    _add_appliance_source(cmd_design)
    _add_solar_options(cmd_design)

    cmd_catalog = sub.add_parser("catalog", help="List common appliances and typical wattage")
    cmd_catalog.add_argument("--category", help="Only list one category")

    cmd_serve = sub.add_parser("serve", help="Run the calculator HTTP API")
    cmd_serve.add_argument("--host", help="Bind address (default: [api] host)")
    cmd_serve.add_argument("--port", type=int, help="Bind port (default: [api] port)")

    cmd_ping = sub.add_parser("ping", help="Check a running calculator API")
    cmd_ping.add_argument("--url", help="Base URL (default: [api] base_url)")

    return parser
