# File: src/alkeparking/main.py
"""
Application entry point for AlkeParking

Sub-commands:
    demo    Fill the lot with sample vehicles, exercise the edge cases and
            print the statistics
    fee     Print the fee for a vehicle type and stay length
    config  Print the effective configuration as YAML
"""

from typing import List, Optional, Sequence, Tuple
import argparse
import logging
import os
import sys

from .application.parking_service import ParkingServiceFactory
from .domain.models import VehicleType
from .domain.strategies import PricingStrategyFactory
from .infrastructure.config import (
    LOG_LEVELS, ConfigurationError, Settings, dump_settings, load_settings
)
from .presentation.console import ConsoleView, ParkingPresenter


# (plate, vehicle type, discount card)
SAMPLE_VEHICLES: List[Tuple[str, str, Optional[str]]] = [
    ("AA111AA", "car", "DISCOUNT_CARD_001"),
    ("B222BBB", "motorcycle", None),
    ("DD444DD", "bus", "DISCOUNT_CARD_002"),
    ("CC333CC", "mini_bus", None),
    ("DD55DD", "bus", "DISCOUNT_CARD_002"),
    ("AA111BB", "car", "DISCOUNT_CARD_003"),
    ("B222CCC", "motorcycle", "DISCOUNT_CARD_004"),
    ("CC333DD", "mini_bus", None),
    ("DD444EE", "bus", "DISCOUNT_CARD_005"),
    ("AA111CC", "car", None),
    ("B222DDD", "motorcycle", None),
    ("CC333EE", "mini_bus", None),
    ("DD444GG", "bus", "DISCOUNT_CARD_006"),
    ("AA111DD", "car", "DISCOUNT_CARD_007"),
    ("B222EEE", "motorcycle", None),
    ("CC333FF", "mini_bus", None),
    ("AA444HH", "bus", "DISCOUNT_CARD_008"),
    ("AA888PP", "car", "DISCOUNT_CARD_009"),
    ("B555QQQ", "motorcycle", None),
]


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup application logging configuration
    Raises: ValueError for a name that is not a logging level
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    return logging.getLogger("alkeparking")


def run_demo(presenter: ParkingPresenter) -> None:
    """Walk the lot through a full day: fill it, hit every limit, check two vehicles out"""
    view = presenter.view

    view.show_section(f"Checking in {len(SAMPLE_VEHICLES)} vehicles:")
    for plate, vehicle_type, discount_card in SAMPLE_VEHICLES:
        presenter.check_in(plate, vehicle_type, discount_card)
    view.show_separator()

    view.show_section("Repeated plate:")
    presenter.check_in("AA111CC", "car")
    view.show_separator()

    view.show_section("Checking in vehicle number 20:")
    presenter.check_in("BB712PP", "motorcycle")
    view.show_separator()

    view.show_section("Checking in with the lot full:")
    presenter.check_in("UU986YH", "mini_bus")
    view.show_separator()

    view.show_section("Checking out 2 parked vehicles:")
    presenter.check_out("DD55DD")
    presenter.show_statistics()

    view.show_separator()
    presenter.check_out("AA444HH")
    presenter.show_statistics()

    view.show_section("Vehicles still parked:")
    presenter.list_vehicles()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alkeparking",
        description="AlkeParking - parking lot check-in, check-out and fees"
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS,
        help="Override the configured log level"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("demo", help="Run the sample parking scenario")
    subparsers.add_parser("config", help="Show the effective configuration")

    fee_parser = subparsers.add_parser("fee", help="Calculate a parking fee")
    fee_parser.add_argument(
        "--type", dest="vehicle_type", required=True,
        help=f"One of: {', '.join(t.value for t in VehicleType)}"
    )
    fee_parser.add_argument("--minutes", type=int, required=True, help="Minutes parked")
    fee_parser.add_argument("--discount", action="store_true", help="Vehicle has a discount card")
    fee_parser.add_argument(
        "--strategy", choices=PricingStrategyFactory.available_types(),
        help="Pricing strategy (defaults to the configured one)"
    )
    return parser


def calculate_fee_command(args: argparse.Namespace, settings: Settings, view: ConsoleView) -> int:
    if args.minutes < 0:
        view.show_error("minutes cannot be negative")
        return 2
    try:
        vehicle_type = VehicleType.from_string(args.vehicle_type)
    except ValueError as e:
        view.show_error(str(e))
        return 2

    strategy = PricingStrategyFactory.create_by_type(args.strategy or settings.pricing_strategy)
    fee = strategy.calculate_parking_fee(vehicle_type, args.minutes, args.discount)
    view.show_message(f"{vehicle_type} parked {args.minutes} min: ${fee}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    view = ConsoleView()

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        view.show_error(str(e))
        return 2

    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level})

    logger = setup_logging(settings.log_level, settings.log_file)
    logger.info(f"Starting AlkeParking ({args.command or 'demo'})")

    if args.command == "fee":
        return calculate_fee_command(args, settings, view)
    if args.command == "config":
        view.show_message(dump_settings(settings).rstrip())
        return 0

    service = ParkingServiceFactory.create_service_with_settings(settings)
    run_demo(ParkingPresenter(service, view))
    return 0


if __name__ == "__main__":
    sys.exit(main())
