# File: src/alkeparking/domain/strategies.py
"""
Pricing Strategies for AlkeParking

The fee a vehicle pays on check-out is computed by a PricingStrategy. The
lot is handed one strategy at construction and never branches on pricing
rules itself.

Strategies:
1. TieredPricingStrategy - base rate for two hours, reduced in 15 minute
   blocks for shorter stays, 15% off with a discount card
2. NonNegativePricingStrategy - the same tiers, never charging below zero

Tier arithmetic:
- A stay of 120 minutes or more pays the base rate (no extra charge for
  longer stays)
- A shorter stay pays base_rate + ceil((minutes - 120) / 15) * (base_rate // 4),
  where the block count is zero or negative
- A discount card multiplies the result by 0.85, rounded down
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, List, Type
import logging
import math

from .models import VehicleType


BASE_PERIOD_MINUTES = 120
FEE_BLOCK_MINUTES = 15
DISCOUNT_FACTOR = Decimal('0.85')


# ============================================================================
# STRATEGY INTERFACE
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_parking_fee(
        self,
        vehicle_type: VehicleType,
        parked_minutes: int,
        has_discount_card: bool = False
    ) -> int:
        """
        Calculate the fee for a stay of parked_minutes
        Returns: Fee as a whole amount
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("PricingStrategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Pricing"


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class TieredPricingStrategy(PricingStrategy):
    """
    Base rate for two hours, reduced in 15 minute blocks for shorter stays.
    Very short stays can come out negative (a motorcycle leaving at once is
    billed -9); use NonNegativePricingStrategy to clamp.
    """

    def calculate_parking_fee(
        self,
        vehicle_type: VehicleType,
        parked_minutes: int,
        has_discount_card: bool = False
    ) -> int:
        base_rate = vehicle_type.rate

        if parked_minutes >= BASE_PERIOD_MINUTES:
            total = base_rate
        else:
            minutes_over = parked_minutes - BASE_PERIOD_MINUTES
            fee_blocks = math.ceil(minutes_over / float(FEE_BLOCK_MINUTES))
            total = base_rate + fee_blocks * (base_rate // 4)

        if has_discount_card:
            total = self.apply_discount(total)

        self.logger.debug(
            f"{vehicle_type} parked {parked_minutes} min "
            f"(discount card: {has_discount_card}) -> fee {total}"
        )
        return total

    @staticmethod
    def apply_discount(amount: int) -> int:
        """Take 15% off, rounding down"""
        discounted = Decimal(amount) * DISCOUNT_FACTOR
        return int(discounted.to_integral_value(rounding=ROUND_FLOOR))


class NonNegativePricingStrategy(TieredPricingStrategy):
    """Tiered pricing that never charges less than zero"""

    def calculate_parking_fee(
        self,
        vehicle_type: VehicleType,
        parked_minutes: int,
        has_discount_card: bool = False
    ) -> int:
        fee = super().calculate_parking_fee(vehicle_type, parked_minutes, has_discount_card)
        if fee < 0:
            self.logger.debug(f"Clamped negative fee {fee} to 0")
            return 0
        return fee


# ============================================================================
# STRATEGY FACTORY
# ============================================================================

class PricingStrategyFactory:
    """Creates pricing strategies by their configuration name"""

    _strategies: Dict[str, Type[PricingStrategy]] = {
        "tiered": TieredPricingStrategy,
        "non_negative": NonNegativePricingStrategy,
    }

    DEFAULT = "non_negative"

    @classmethod
    def create_by_type(cls, strategy_type: str) -> PricingStrategy:
        """
        Create a strategy from its name
        Raises: ValueError for an unknown name
        """
        key = strategy_type.strip().lower()
        if key not in cls._strategies:
            raise ValueError(
                f"Unknown pricing strategy: {strategy_type}. "
                f"Available: {', '.join(cls.available_types())}"
            )
        return cls._strategies[key]()

    @classmethod
    def create_default(cls) -> PricingStrategy:
        return cls.create_by_type(cls.DEFAULT)

    @classmethod
    def available_types(cls) -> List[str]:
        return sorted(cls._strategies)
