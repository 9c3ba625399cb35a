# File: src/alkeparking/presentation/console.py
"""
Console presentation for AlkeParking

ConsoleView only prints. ParkingPresenter turns user input into DTOs, calls
the ParkingService and hands the outcome to the view.
"""

from typing import List, Optional, TextIO
import logging
import sys

from pydantic import ValidationError

from ..application.dtos import (
    CheckInRequestDTO, CheckInResultDTO,
    CheckOutResultDTO, ParkingStatisticsDTO
)
from ..application.parking_service import ParkingService, ParkingServiceError


class ConsoleView:
    """Writes parking messages to a text stream"""

    SEPARATOR = "****"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def show_message(self, text: str) -> None:
        print(text, file=self.stream)

    def show_section(self, title: str) -> None:
        self.show_message(self.SEPARATOR)
        self.show_message(title)

    def show_separator(self) -> None:
        self.show_message(self.SEPARATOR)

    def show_error(self, text: str) -> None:
        self.show_message(f"Error: {text}")

    def show_check_in_result(self, result: CheckInResultDTO) -> None:
        if result.success:
            self.show_message("Welcome to AlkeParking!")
        else:
            self.show_message("Sorry, the check-in failed")

    def show_check_out_result(self, result: CheckOutResultDTO) -> None:
        if result.success:
            self.show_message(f"Your fee is ${result.fee}. Come back soon")
        else:
            self.show_message("Sorry, the check-out failed")

    def show_statistics(self, statistics: ParkingStatisticsDTO) -> None:
        self.show_message(
            f"{statistics.total_checkouts} vehicles have checked out and have "
            f"earnings of ${statistics.total_earnings}"
        )

    def show_parked_vehicles(self, plates: List[str]) -> None:
        for plate in plates:
            self.show_message(f"Vehicle plate is {plate}")


class ParkingPresenter:
    """Mediates between the console view and the parking service"""

    def __init__(self, service: ParkingService, view: ConsoleView):
        self.service = service
        self.view = view
        self.logger = logging.getLogger(self.__class__.__name__)

    def check_in(
        self,
        plate: str,
        vehicle_type: str,
        discount_card: Optional[str] = None
    ) -> bool:
        """Check a vehicle in; invalid input is shown as an error and returns False"""
        try:
            request = CheckInRequestDTO(
                plate=plate,
                vehicle_type=vehicle_type,
                discount_card=discount_card
            )
            result = self.service.check_in(request)
        except (ValidationError, ParkingServiceError) as e:
            self.logger.warning(f"Invalid check-in request for {plate!r}: {e}")
            self.view.show_error(f"invalid vehicle {plate!r}")
            return False

        self.view.show_check_in_result(result)
        return result.success

    def check_out(self, plate: str) -> Optional[int]:
        """Check a vehicle out; returns the fee or None if it was not parked"""
        result = self.service.check_out(plate)
        self.view.show_check_out_result(result)
        return result.fee if result.success else None

    def show_statistics(self) -> ParkingStatisticsDTO:
        statistics = self.service.get_statistics()
        self.view.show_statistics(statistics)
        return statistics

    def list_vehicles(self) -> List[str]:
        plates = self.service.list_parked_vehicles()
        self.view.show_parked_vehicles(plates)
        return plates
