# File: src/alkeparking/application/dtos.py
"""
Data Transfer Objects (DTOs) for AlkeParking

DTOs carry data between the presentation layer and the application service:
1. Input DTOs - Check-in requests, validated at creation
2. Output DTOs - Check-in / check-out outcomes and lot statistics

DTO Principles:
- Validation at creation
- No business logic, only data
- Serialization/deserialization support
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import VehicleType


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseDTO':
        """Create DTO from dictionary"""
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        """Create DTO from JSON string"""
        data = json.loads(json_str)
        return cls(**data)


# ============================================================================
# INPUT DTOs
# ============================================================================

class CheckInRequestDTO(BaseDTO):
    """Request to admit a vehicle"""
    plate: str = Field(min_length=1, description="License plate, case-sensitive")
    vehicle_type: str = Field(description="car, motorcycle, mini_bus or bus")
    discount_card: Optional[str] = Field(default=None, description="Discount card id, if any")
    check_in_time: Optional[datetime] = Field(default=None, description="Defaults to now")

    @field_validator('plate')
    @classmethod
    def validate_plate(cls, v: str) -> str:
        """Plates are kept exactly as given, but may not be blank"""
        if not v.strip():
            raise ValueError("Plate cannot be blank")
        return v

    @field_validator('vehicle_type')
    @classmethod
    def validate_vehicle_type(cls, v: str) -> str:
        return VehicleType.from_string(v).value

    @field_validator('check_in_time')
    @classmethod
    def validate_check_in_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Aware times are converted to naive local time, matching the lot clock"""
        if v is not None and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v


# ============================================================================
# OUTPUT DTOs
# ============================================================================

class CheckInResultDTO(BaseDTO):
    """Outcome of a check-in"""
    success: bool
    plate: str
    vehicle_type: Optional[str] = None
    rejection_reason: Optional[str] = None
    message: Optional[str] = None


class CheckOutResultDTO(BaseDTO):
    """Outcome of a check-out"""
    success: bool
    plate: str
    fee: Optional[int] = None
    parked_minutes: Optional[int] = Field(default=None, ge=0)
    message: Optional[str] = None


class ParkingStatisticsDTO(BaseDTO):
    """Running statistics and occupancy of a lot"""
    lot_name: str
    total_checkouts: int = Field(ge=0)
    total_earnings: int
    occupied_spaces: int = Field(ge=0)
    capacity: int = Field(ge=1)
    parked_plates: List[str] = Field(default_factory=list)

    @property
    def available_spaces(self) -> int:
        return self.capacity - self.occupied_spaces
