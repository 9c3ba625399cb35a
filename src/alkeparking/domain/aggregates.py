# File: src/alkeparking/domain/aggregates.py
"""
Aggregate Roots for AlkeParking
Following Domain-Driven Design (DDD) Aggregate Pattern

Aggregates:
1. ParkingLot - Root aggregate for check-in, check-out and statistics

Key Concepts:
- The aggregate root enforces its invariants (capacity, unique plates)
- Parked vehicles are reached only through the root
- Domain events are recorded for state changes and drained by the caller
- Expected failures (lot full, duplicate plate, unknown plate) are returned
  as values, not raised
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging
import uuid

from .models import (
    Clock, Vehicle, DomainEvent,
    VehicleCheckedInEvent, VehicleCheckedOutEvent
)
from .strategies import PricingStrategy, PricingStrategyFactory


DEFAULT_CAPACITY = 20


# ============================================================================
# ERRORS AND RESULTS
# ============================================================================

class ParkingError(Exception):
    """Base exception for parking domain errors"""
    pass


class VehicleNotFoundError(ParkingError):
    """Raised when a result for an unknown plate is unwrapped"""

    def __init__(self, plate: str):
        super().__init__(f"Vehicle {plate} is not parked")
        self.plate = plate


class AdmissionRejection(Enum):
    """Why a vehicle was refused at check-in"""
    DUPLICATE_PLATE = "duplicate_plate"
    LOT_FULL = "lot_full"


class CheckOutError(Enum):
    """Why a check-out failed"""
    VEHICLE_NOT_FOUND = "vehicle_not_found"


@dataclass(frozen=True)
class CheckOutResult:
    """
    Outcome of a check-out: either a fee or an error, never both.
    Callers inspect `success` or call `unwrap()`.
    """
    plate: str
    fee: Optional[int] = None
    parked_minutes: Optional[int] = None
    error: Optional[CheckOutError] = None

    @classmethod
    def charged(cls, plate: str, fee: int, parked_minutes: int) -> 'CheckOutResult':
        return cls(plate=plate, fee=fee, parked_minutes=parked_minutes)

    @classmethod
    def not_found(cls, plate: str) -> 'CheckOutResult':
        return cls(plate=plate, error=CheckOutError.VEHICLE_NOT_FOUND)

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> int:
        """
        Get the fee
        Raises: VehicleNotFoundError if the check-out failed
        """
        if self.error is CheckOutError.VEHICLE_NOT_FOUND:
            raise VehicleNotFoundError(self.plate)
        return self.fee


@dataclass(frozen=True)
class ParkingStatistics:
    """Value Object: Check-outs and earnings accumulated by a lot"""
    total_checkouts: int = 0
    total_earnings: int = 0

    def as_tuple(self) -> Tuple[int, int]:
        return self.total_checkouts, self.total_earnings

    def __str__(self) -> str:
        return (
            f"{self.total_checkouts} vehicles have checked out and have "
            f"earnings of ${self.total_earnings}"
        )


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot:
    """
    Base class for aggregate roots
    Carries an id, a version bumped on every accepted change, and the domain
    events recorded since the caller last drained them
    """

    def __init__(self, id: Optional[str] = None):
        self._id = id or str(uuid.uuid4())
        self._version: int = 1
        self._pending_events: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def id(self) -> str:
        return self._id

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _record(self, event: DomainEvent) -> None:
        """Bump the version and queue the event describing the change"""
        self._version += 1
        self._pending_events.append(event)
        self._logger.debug(f"Recorded {event.event_type} (version {self._version})")

    def clear_events(self) -> List[DomainEvent]:
        """Drain the events recorded since the last call"""
        events, self._pending_events = self._pending_events, []
        return events


# ============================================================================
# PARKING LOT AGGREGATE
# ============================================================================

@dataclass
class ParkingPolicies:
    """Value Object: Parking lot business policies"""
    max_vehicles: int = DEFAULT_CAPACITY

    def __post_init__(self):
        if self.max_vehicles < 1:
            raise ValueError("Max vehicles must be at least 1")


class ParkingLot(AggregateRoot):
    """
    Aggregate Root: A fixed-capacity lot of parked vehicles
    Admits vehicles, charges them on exit and keeps running statistics
    """

    def __init__(
        self,
        name: str = "AlkeParking",
        policies: Optional[ParkingPolicies] = None,
        pricing_strategy: Optional[PricingStrategy] = None,
        clock: Clock = datetime.now,
        id: Optional[str] = None
    ):
        super().__init__(id)
        self.name = name
        self.policies = policies or ParkingPolicies()
        self.pricing_strategy = pricing_strategy or PricingStrategyFactory.create_default()
        self.clock = clock

        self._vehicles: Dict[str, Vehicle] = {}  # plate -> Vehicle

        # Statistics, only ever increased by check_out_vehicle
        self._total_checkouts: int = 0
        self._total_earnings: int = 0

        self._validate_invariants()
        self._logger.info(
            f"Created ParkingLot: {self.name} (ID: {self.id}, capacity: {self.capacity}, "
            f"pricing: {self.pricing_strategy})"
        )

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants"""
        if len(self._vehicles) > self.capacity:
            raise ValueError(
                f"Lot holds {len(self._vehicles)} vehicles, capacity is {self.capacity}"
            )

        for plate, vehicle in self._vehicles.items():
            if plate != vehicle.plate:
                raise ValueError(f"Vehicle {vehicle.plate} stored under plate {plate}")

        if self._total_checkouts < 0:
            raise ValueError("Check-out count cannot be negative")

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    def admission_check(self, vehicle: Vehicle) -> Optional[AdmissionRejection]:
        """
        Check whether a vehicle would be admitted right now
        Returns: The rejection reason, or None if it would be admitted
        """
        if vehicle.plate in self._vehicles:
            return AdmissionRejection.DUPLICATE_PLATE
        if len(self._vehicles) >= self.capacity:
            return AdmissionRejection.LOT_FULL
        return None

    def check_in_vehicle(self, vehicle: Vehicle) -> bool:
        """
        Admit a vehicle into the lot
        Returns: True if admitted; False for a duplicate plate or a full lot,
        in which case nothing changes
        """
        rejection = self.admission_check(vehicle)
        if rejection is not None:
            self._logger.warning(
                f"Check-in rejected for {vehicle.plate}: {rejection.value} "
                f"({len(self._vehicles)}/{self.capacity} parked)"
            )
            return False

        self._vehicles[vehicle.plate] = vehicle
        self._validate_invariants()

        self._record(VehicleCheckedInEvent(
            parking_lot_id=self.id,
            plate=vehicle.plate,
            vehicle_type=vehicle.vehicle_type,
            has_discount_card=vehicle.has_discount_card,
            check_in_time=vehicle.check_in_time
        ))

        self._logger.info(
            f"Vehicle {vehicle.plate} ({vehicle.vehicle_type}) checked in "
            f"({len(self._vehicles)}/{self.capacity} parked)"
        )
        return True

    def check_out_vehicle(self, plate: str) -> CheckOutResult:
        """
        Release a vehicle and charge its fee
        Returns: CheckOutResult with the fee, or with VEHICLE_NOT_FOUND if the
        plate is not parked (statistics are then left untouched)
        """
        vehicle = self._vehicles.get(plate)
        if vehicle is None:
            self._logger.warning(f"Check-out failed: vehicle {plate} is not parked")
            return CheckOutResult.not_found(plate)

        # Fee is settled before the vehicle leaves the lot
        parked_minutes = vehicle.parked_minutes(self.clock())
        fee = self.pricing_strategy.calculate_parking_fee(
            vehicle.vehicle_type,
            parked_minutes,
            vehicle.has_discount_card
        )

        del self._vehicles[plate]
        self._total_earnings += fee
        self._total_checkouts += 1
        self._validate_invariants()

        self._record(VehicleCheckedOutEvent(
            parking_lot_id=self.id,
            plate=plate,
            vehicle_type=vehicle.vehicle_type,
            parked_minutes=parked_minutes,
            fee=fee
        ))

        self._logger.info(
            f"Vehicle {plate} checked out after {parked_minutes} min. Fee: ${fee}"
        )
        return CheckOutResult.charged(plate, fee, parked_minutes)

    # ========================================================================
    # QUERY METHODS (Read-only)
    # ========================================================================

    @property
    def capacity(self) -> int:
        return self.policies.max_vehicles

    @property
    def occupied_spaces(self) -> int:
        return len(self._vehicles)

    @property
    def available_spaces(self) -> int:
        return self.capacity - self.occupied_spaces

    @property
    def is_full(self) -> bool:
        return self.occupied_spaces >= self.capacity

    def is_parked(self, plate: str) -> bool:
        return plate in self._vehicles

    def get_vehicle(self, plate: str) -> Optional[Vehicle]:
        return self._vehicles.get(plate)

    def list_vehicles(self) -> List[str]:
        """Snapshot of the plates currently parked, in no particular order"""
        return list(self._vehicles)

    @property
    def total_checkouts(self) -> int:
        return self._total_checkouts

    @property
    def total_earnings(self) -> int:
        return self._total_earnings

    @property
    def statistics(self) -> ParkingStatistics:
        """Check-outs and earnings since the lot was created"""
        return ParkingStatistics(
            total_checkouts=self._total_checkouts,
            total_earnings=self._total_earnings
        )

    def __str__(self) -> str:
        return f"{self.name}: {self.occupied_spaces}/{self.capacity} parked"
