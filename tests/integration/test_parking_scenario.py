# File: tests/integration/test_parking_scenario.py
"""
Integration tests for complete parking scenarios

Runs the console presenter, the application service, the event bus and the
parking lot together:
1. The sample day: 20 vehicles in, duplicate and overflow rejected, two out
2. Fees over time through every layer
3. Command line entry point
"""

import io
import logging
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from tests.fixtures import FakeClock

from alkeparking.application.parking_service import ParkingService
from alkeparking.domain.aggregates import ParkingLot, ParkingPolicies
from alkeparking.domain.strategies import PricingStrategyFactory
from alkeparking.infrastructure.config import CONFIG_ENV_VAR
from alkeparking.infrastructure.messaging import AuditLogEventHandler, create_event_bus
from alkeparking.main import SAMPLE_VEHICLES, main, run_demo, setup_logging
from alkeparking.presentation.console import ConsoleView, ParkingPresenter


class IntegrationTestBase(unittest.TestCase):
    """Wires a full stack around a controllable clock"""

    pricing = "non_negative"
    capacity = 20

    def setUp(self):
        self.clock = FakeClock()
        self.lot = ParkingLot(
            name="AlkeParking",
            policies=ParkingPolicies(max_vehicles=self.capacity),
            pricing_strategy=PricingStrategyFactory.create_by_type(self.pricing),
            clock=self.clock
        )
        self.audit = AuditLogEventHandler()
        self.service = ParkingService(
            parking_lot=self.lot,
            event_bus=create_event_bus(self.audit)
        )
        self.output = io.StringIO()
        self.presenter = ParkingPresenter(self.service, ConsoleView(self.output))

    def lines(self):
        return self.output.getvalue().splitlines()


# ============================================================================
# SAMPLE DAY
# ============================================================================

class TestSampleDay(IntegrationTestBase):
    """The demo scenario with the lot filled to capacity"""

    def test_sample_vehicles_fill_all_but_one_space(self):
        self.assertEqual(len(SAMPLE_VEHICLES), 19)
        self.assertEqual(len({plate for plate, _, _ in SAMPLE_VEHICLES}), 19)

    def test_demo_admissions(self):
        run_demo(self.presenter)
        lines = self.lines()

        self.assertEqual(lines.count("Welcome to AlkeParking!"), 20)
        self.assertEqual(lines.count("Sorry, the check-in failed"), 2)
        self.assertNotIn("Sorry, the check-out failed", lines)

        parked = self.service.list_parked_vehicles()
        self.assertEqual(len(parked), 18)
        self.assertIn("BB712PP", parked)
        self.assertNotIn("UU986YH", parked)
        self.assertNotIn("DD55DD", parked)
        self.assertNotIn("AA444HH", parked)

    def test_demo_statistics_without_negative_fees(self):
        run_demo(self.presenter)
        lines = self.lines()

        self.assertEqual(lines.count("Your fee is $0. Come back soon"), 2)
        self.assertIn("1 vehicles have checked out and have earnings of $0", lines)
        self.assertIn("2 vehicles have checked out and have earnings of $0", lines)

    def test_demo_lists_remaining_plates(self):
        run_demo(self.presenter)
        listed = [line for line in self.lines() if line.startswith("Vehicle plate is ")]
        self.assertEqual(len(listed), 18)

    def test_demo_events_audited(self):
        run_demo(self.presenter)
        event_types = [event.event_type for event in self.audit.events]
        self.assertEqual(event_types.count("vehicle.checked_in"), 20)
        self.assertEqual(event_types.count("vehicle.checked_out"), 2)


class TestSampleDayTieredPricing(IntegrationTestBase):
    """The demo scenario billed with unclamped tiered pricing"""

    pricing = "tiered"

    def test_immediate_check_outs_are_negative(self):
        run_demo(self.presenter)
        lines = self.lines()

        # Buses with discount cards leaving at once: floor((30 - 8 * 7) * 0.85)
        self.assertEqual(lines.count("Your fee is $-23. Come back soon"), 2)
        self.assertIn("2 vehicles have checked out and have earnings of $-46", lines)


# ============================================================================
# FEES OVER TIME
# ============================================================================

class TestFeesOverTime(IntegrationTestBase):

    def test_fees_follow_elapsed_time(self):
        self.presenter.check_in("AA111AA", "car", "DISCOUNT_CARD_001")
        self.presenter.check_in("B222BBB", "motorcycle")
        self.presenter.check_in("CC333CC", "MiniBus")

        self.clock.advance(minutes=100)
        self.assertEqual(self.presenter.check_out("CC333CC"), 19)  # 25 - 6

        self.clock.advance(minutes=20)
        self.assertEqual(self.presenter.check_out("B222BBB"), 15)

        self.clock.advance(minutes=300)
        self.assertEqual(self.presenter.check_out("AA111AA"), 17)

        stats = self.presenter.show_statistics()
        self.assertEqual(stats.total_checkouts, 3)
        self.assertEqual(stats.total_earnings, 19 + 15 + 17)
        self.assertEqual(stats.occupied_spaces, 0)

    def test_unknown_plate(self):
        self.assertIsNone(self.presenter.check_out("ZZ999ZZ"))
        self.assertIn("Sorry, the check-out failed", self.lines())
        self.assertEqual(self.service.get_statistics().total_checkouts, 0)

    def test_invalid_vehicle_type_reported(self):
        self.assertFalse(self.presenter.check_in("TT123TT", "truck"))
        self.assertEqual(self.lines(), ["Error: invalid vehicle 'TT123TT'"])
        self.assertEqual(self.lot.occupied_spaces, 0)


# ============================================================================
# COMMAND LINE
# ============================================================================

@patch("alkeparking.main.setup_logging")
class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ)
        self.env.start()
        os.environ.pop(CONFIG_ENV_VAR, None)

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def run_main(self, argv):
        output = io.StringIO()
        with redirect_stdout(output):
            code = main(argv)
        return code, output.getvalue().splitlines()

    def test_demo_is_default_command(self, mock_setup_logging):
        code, lines = self.run_main([])
        self.assertEqual(code, 0)
        self.assertEqual(lines.count("Welcome to AlkeParking!"), 20)
        mock_setup_logging.assert_called_once_with("WARNING", None)

    def test_demo_with_config(self, mock_setup_logging):
        config = Path(self.temp_dir) / "config.yaml"
        config.write_text("max_vehicles: 5\nlog_level: info\n", encoding="utf-8")

        code, lines = self.run_main(["--config", str(config), "demo"])

        self.assertEqual(code, 0)
        # Only the first 5 sample vehicles fit
        self.assertEqual(lines.count("Welcome to AlkeParking!"), 5)
        mock_setup_logging.assert_called_once_with("INFO", None)

    def test_log_level_override(self, mock_setup_logging):
        self.run_main(["--log-level", "DEBUG", "demo"])
        mock_setup_logging.assert_called_once_with("DEBUG", None)

    def test_log_level_override_case_insensitive(self, mock_setup_logging):
        self.run_main(["--log-level", "debug", "demo"])
        mock_setup_logging.assert_called_once_with("DEBUG", None)

    def test_unknown_log_level_rejected(self, mock_setup_logging):
        with redirect_stderr(io.StringIO()) as errors:
            with self.assertRaises(SystemExit) as ctx:
                self.run_main(["--log-level", "verbose", "demo"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("invalid choice", errors.getvalue())
        mock_setup_logging.assert_not_called()

    def test_config_command(self, mock_setup_logging):
        code, lines = self.run_main(["--log-level", "info", "config"])
        self.assertEqual(code, 0)
        self.assertIn("max_vehicles: 20", lines)
        self.assertIn("pricing_strategy: non_negative", lines)
        self.assertIn("log_level: INFO", lines)

    def test_missing_config(self, mock_setup_logging):
        code, lines = self.run_main(["--config", str(Path(self.temp_dir) / "nope.yaml")])
        self.assertEqual(code, 2)
        self.assertTrue(lines[0].startswith("Error: Configuration file not found"))
        mock_setup_logging.assert_not_called()

    def test_fee_command(self, mock_setup_logging):
        code, lines = self.run_main(["fee", "--type", "car", "--minutes", "120", "--discount"])
        self.assertEqual(code, 0)
        self.assertEqual(lines, ["Car parked 120 min: $17"])

    def test_fee_command_strategy(self, mock_setup_logging):
        _, clamped = self.run_main(["fee", "--type", "motorcycle", "--minutes", "0"])
        _, tiered = self.run_main(
            ["fee", "--type", "motorcycle", "--minutes", "0", "--strategy", "tiered"]
        )
        self.assertEqual(clamped, ["Motorcycle parked 0 min: $0"])
        self.assertEqual(tiered, ["Motorcycle parked 0 min: $-9"])

    def test_fee_command_rejects_bad_input(self, mock_setup_logging):
        code, lines = self.run_main(["fee", "--type", "truck", "--minutes", "10"])
        self.assertEqual(code, 2)
        self.assertIn("truck", lines[0])

        code, _ = self.run_main(["fee", "--type", "car", "--minutes", "-1"])
        self.assertEqual(code, 2)


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in self.root.handlers[:]:
            self.root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root.addHandler(handler)
        self.root.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir)

    def test_log_file_directory_created(self):
        log_file = os.path.join(self.temp_dir, "logs", "alkeparking.log")
        logger = setup_logging("debug", log_file)
        logger.info("started")

        self.assertEqual(self.root.level, logging.DEBUG)
        self.assertTrue(os.path.isdir(os.path.dirname(log_file)))
        self.assertEqual(len(self.root.handlers), 2)

    def test_unknown_level_rejected(self):
        with self.assertRaises(ValueError):
            setup_logging("basic_format")
        self.assertEqual(self.root.handlers, self.saved_handlers)


if __name__ == "__main__":
    unittest.main()
