# File: src/alkeparking/domain/models.py
"""
Domain Models for AlkeParking

This module contains:
1. Enums: Vehicle types and the base rate each one pays
2. Entities: The record of a vehicle parked in the lot
3. Domain Events: Events raised when vehicles check in and out

A vehicle is identified by its plate alone. Two records carrying the same
plate are the same vehicle, whatever their type or discount card.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional
import uuid


# Source of "now" for anything that measures elapsed time
Clock = Callable[[], datetime]


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class VehicleType(Enum):
    """
    Enumeration of vehicle types accepted by the lot
    Each type has a base rate covering up to two hours of parking
    """
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    MINI_BUS = "mini_bus"
    BUS = "bus"

    @property
    def rate(self) -> int:
        """Get the base rate for up to two hours of parking"""
        rates = {
            VehicleType.CAR: 20,
            VehicleType.MOTORCYCLE: 15,
            VehicleType.MINI_BUS: 25,
            VehicleType.BUS: 30,
        }
        return rates[self]

    @classmethod
    def from_string(cls, value: str) -> 'VehicleType':
        """
        Parse a vehicle type from user input
        Accepts the enum value, the member name and a few spellings ("MiniBus")
        """
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {"minibus": "mini_bus"}
        normalized = aliases.get(normalized, normalized)

        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid vehicle type: {value}") from None

    def __str__(self) -> str:
        names = {
            VehicleType.CAR: "Car",
            VehicleType.MOTORCYCLE: "Motorcycle",
            VehicleType.MINI_BUS: "Mini Bus",
            VehicleType.BUS: "Bus",
        }
        return names[self]


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Vehicle:
    """
    Entity: A vehicle parked (or about to park) in the lot
    Identity, equality and hashing are defined by the plate only
    """

    def __init__(
        self,
        plate: str,
        vehicle_type: VehicleType,
        discount_card: Optional[str] = None,
        check_in_time: Optional[datetime] = None,
        clock: Clock = datetime.now
    ):
        self._plate = plate
        self._vehicle_type = vehicle_type
        self._discount_card = discount_card
        self._clock = clock
        self._check_in_time = check_in_time if check_in_time is not None else clock()

    @property
    def plate(self) -> str:
        return self._plate

    @property
    def vehicle_type(self) -> VehicleType:
        return self._vehicle_type

    @property
    def discount_card(self) -> Optional[str]:
        return self._discount_card

    @property
    def check_in_time(self) -> datetime:
        return self._check_in_time

    @property
    def has_discount_card(self) -> bool:
        """Only the presence of a card matters, not its value"""
        return self._discount_card is not None

    def parked_minutes(self, now: Optional[datetime] = None) -> int:
        """
        Whole minutes elapsed since check-in
        Recomputed on every call; never negative
        """
        if now is None:
            now = self._clock()
        elapsed_seconds = (now - self._check_in_time).total_seconds()
        return max(0, int(elapsed_seconds // 60))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "plate": self._plate,
            "vehicle_type": self._vehicle_type.value,
            "discount_card": self._discount_card,
            "check_in_time": self._check_in_time.isoformat(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vehicle):
            return NotImplemented
        return self._plate == other._plate

    def __hash__(self) -> int:
        return hash(self._plate)

    def __repr__(self) -> str:
        return f"Vehicle(plate={self._plate!r}, vehicle_type={self._vehicle_type.name})"

    def __str__(self) -> str:
        return f"{self._vehicle_type} [{self._plate}]"


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    event_type: str = ""

    def __init__(self, timestamp: Optional[datetime] = None):
        self.event_id = str(uuid.uuid4())
        self.timestamp = timestamp or datetime.now()
        self.version = "1.0"

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.timestamp}"


class VehicleCheckedInEvent(DomainEvent):
    """Event raised when a vehicle is admitted into the lot"""

    event_type = "vehicle.checked_in"

    def __init__(
        self,
        parking_lot_id: str,
        plate: str,
        vehicle_type: VehicleType,
        has_discount_card: bool,
        check_in_time: datetime,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.parking_lot_id = parking_lot_id
        self.plate = plate
        self.vehicle_type = vehicle_type
        self.has_discount_card = has_discount_card
        self.check_in_time = check_in_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": {
                "parking_lot_id": self.parking_lot_id,
                "plate": self.plate,
                "vehicle_type": self.vehicle_type.value,
                "has_discount_card": self.has_discount_card,
                "check_in_time": self.check_in_time.isoformat(),
            }
        }


class VehicleCheckedOutEvent(DomainEvent):
    """Event raised when a vehicle leaves and its fee is charged"""

    event_type = "vehicle.checked_out"

    def __init__(
        self,
        parking_lot_id: str,
        plate: str,
        vehicle_type: VehicleType,
        parked_minutes: int,
        fee: int,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.parking_lot_id = parking_lot_id
        self.plate = plate
        self.vehicle_type = vehicle_type
        self.parked_minutes = parked_minutes
        self.fee = fee

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": {
                "parking_lot_id": self.parking_lot_id,
                "plate": self.plate,
                "vehicle_type": self.vehicle_type.value,
                "parked_minutes": self.parked_minutes,
                "fee": self.fee,
            }
        }
