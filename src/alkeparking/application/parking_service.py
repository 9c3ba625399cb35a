# File: src/alkeparking/application/parking_service.py
"""
Parking Management Application Service

Orchestrates the use cases of AlkeParking on top of the ParkingLot aggregate:
1. Vehicle check-in
2. Vehicle check-out and fee collection
3. Statistics and occupancy queries

After each use case the domain events recorded by the lot are drained and
published on the event bus.
"""

from typing import List, Optional
import logging

from ..domain.aggregates import AdmissionRejection, ParkingLot
from ..domain.models import Vehicle, VehicleType
from ..infrastructure.config import Settings
from ..infrastructure.messaging import EventBus, create_event_bus
from .dtos import (
    CheckInRequestDTO, CheckInResultDTO,
    CheckOutResultDTO, ParkingStatisticsDTO
)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for parking service errors"""
    pass


class VehicleValidationError(ParkingServiceError, ValueError):
    """Exception for vehicle validation errors"""
    pass


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for parking management

    Admission failures and unknown plates are reported in the returned DTOs;
    only invalid input raises.
    """

    def __init__(
        self,
        parking_lot: Optional[ParkingLot] = None,
        event_bus: Optional[EventBus] = None,
        settings: Optional[Settings] = None
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.settings = settings or Settings()

        if parking_lot is not None:
            self.parking_lot = parking_lot
        else:
            self.parking_lot = ParkingLot(
                name=self.settings.lot_name,
                policies=self.settings.create_policies(),
                pricing_strategy=self.settings.create_pricing_strategy()
            )

        self.event_bus = event_bus if event_bus is not None else create_event_bus()
        self.logger.info(f"ParkingService initialized for {self.parking_lot.name}")

    def check_in(self, request: CheckInRequestDTO) -> CheckInResultDTO:
        """
        Use Case: Vehicle Check-in
        Raises: VehicleValidationError if the vehicle type is not recognised,
        or the check-in time is in the future or in another timezone than the lot clock
        """
        vehicle = self._build_vehicle(request)

        rejection = self.parking_lot.admission_check(vehicle)
        admitted = self.parking_lot.check_in_vehicle(vehicle)
        self._publish_pending_events()

        if admitted:
            return CheckInResultDTO(
                success=True,
                plate=vehicle.plate,
                vehicle_type=vehicle.vehicle_type.value,
                message=f"Vehicle {vehicle.plate} checked in"
            )

        return CheckInResultDTO(
            success=False,
            plate=vehicle.plate,
            vehicle_type=vehicle.vehicle_type.value,
            rejection_reason=rejection.value if rejection else None,
            message=self._rejection_message(vehicle.plate, rejection)
        )

    def check_out(self, plate: str) -> CheckOutResultDTO:
        """Use Case: Vehicle Check-out"""
        result = self.parking_lot.check_out_vehicle(plate)
        self._publish_pending_events()

        if not result.success:
            return CheckOutResultDTO(
                success=False,
                plate=plate,
                message=f"Vehicle {plate} is not parked here"
            )

        return CheckOutResultDTO(
            success=True,
            plate=plate,
            fee=result.fee,
            parked_minutes=result.parked_minutes,
            message=f"Vehicle {plate} checked out"
        )

    def get_statistics(self) -> ParkingStatisticsDTO:
        """Use Case: Report check-outs, earnings and occupancy"""
        lot = self.parking_lot
        total_checkouts, total_earnings = lot.statistics.as_tuple()
        return ParkingStatisticsDTO(
            lot_name=lot.name,
            total_checkouts=total_checkouts,
            total_earnings=total_earnings,
            occupied_spaces=lot.occupied_spaces,
            capacity=lot.capacity,
            parked_plates=lot.list_vehicles()
        )

    def list_parked_vehicles(self) -> List[str]:
        return self.parking_lot.list_vehicles()

    # ========================================================================
    # INTERNAL HELPERS
    # ========================================================================

    def _build_vehicle(self, request: CheckInRequestDTO) -> Vehicle:
        try:
            vehicle_type = VehicleType.from_string(request.vehicle_type)
        except ValueError as e:
            raise VehicleValidationError(str(e)) from e

        check_in_time = request.check_in_time
        if check_in_time is not None:
            now = self.parking_lot.clock()
            # Naive and aware datetimes cannot be subtracted at check-out
            if (check_in_time.tzinfo is None) != (now.tzinfo is None):
                raise VehicleValidationError(
                    f"Check-in time for {request.plate} does not match the lot clock's timezone"
                )
            if check_in_time > now:
                raise VehicleValidationError(
                    f"Check-in time for {request.plate} is in the future: "
                    f"{check_in_time.isoformat()}"
                )

        return Vehicle(
            plate=request.plate,
            vehicle_type=vehicle_type,
            discount_card=request.discount_card,
            check_in_time=request.check_in_time,
            clock=self.parking_lot.clock
        )

    def _publish_pending_events(self) -> None:
        events = self.parking_lot.clear_events()
        if events:
            self.event_bus.publish_all(events)

    @staticmethod
    def _rejection_message(plate: str, rejection: Optional[AdmissionRejection]) -> str:
        messages = {
            AdmissionRejection.DUPLICATE_PLATE: f"Vehicle {plate} is already parked",
            AdmissionRejection.LOT_FULL: "The parking lot is full",
        }
        return messages.get(rejection, f"Vehicle {plate} was not admitted")


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class ParkingServiceFactory:
    """Factory for creating parking service instances"""

    @staticmethod
    def create_default_service() -> ParkingService:
        """Create a parking service with default settings"""
        return ParkingService()

    @staticmethod
    def create_service_with_settings(settings: Settings) -> ParkingService:
        """Create a parking service from loaded settings"""
        return ParkingService(settings=settings)
