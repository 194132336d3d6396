"""
Pump resources.

Pumps are interchangeable servers. PumpPool tracks free pumps on a
capacity-bounded stack of pump indices, so acquire and release are O(1).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fuelsim.common.errors import (
    DepartureWithNoCarError,
    NoPumpAvailableError,
    PumpBusyError,
    ReleaseOfFreePumpError,
)
from fuelsim.station.car import Car

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Pump:
    """
    One fuel pump.

    Attributes:
        index: Position of the pump in its pool (stable handle)
        car_in_service: Car currently being fuelled (None when idle)
    """
    index: int
    car_in_service: Optional[Car] = field(default=None)

    @property
    def is_busy(self) -> bool:
        return self.car_in_service is not None

    def attach_car(self, car: Car) -> None:
        if self.car_in_service is not None:
            raise PumpBusyError(f"Pump {self.index} is already serving a car", resource=self)
        self.car_in_service = car

    def detach_car(self) -> Car:
        """
        Remove and return the car in service.

        Raises:
            DepartureWithNoCarError: If the pump has no car
        """
        car = self.car_in_service
        if car is None:
            raise DepartureWithNoCarError("No car in service when expected", resource=self)
        self.car_in_service = None
        return car

    def __repr__(self) -> str:
        state = "busy" if self.is_busy else "idle"
        return f"Pump({self.index}, {state})"


class PumpPool:
    """
    Fixed-size pool of pumps with a LIFO free-list.

    Invariant: number of free pumps + number of busy pumps == capacity,
    and no pump index appears twice on the free-list.
    """

    def __init__(self, num_pumps: int):
        """
        Initialize the pool with every pump free.

        Args:
            num_pumps: Number of pumps (at least 1)
        """
        if num_pumps < 1:
            raise ValueError(f"Need at least 1 pump, got {num_pumps}")
        self.pumps: List[Pump] = [Pump(index=i) for i in range(num_pumps)]
        # Top of the stack is the end of the list
        self._free: List[int] = list(range(num_pumps))
        self._is_free: List[bool] = [True] * num_pumps

    @property
    def capacity(self) -> int:
        return len(self.pumps)

    @property
    def num_free(self) -> int:
        return len(self._free)

    @property
    def num_busy(self) -> int:
        return self.capacity - len(self._free)

    def is_available(self) -> bool:
        """Check if any pump is free."""
        return bool(self._free)

    def try_acquire(self) -> Optional[Pump]:
        """
        Take a free pump if there is one.

        Returns:
            A free pump, or None if all pumps are busy
        """
        if not self._free:
            return None
        index = self._free.pop()
        self._is_free[index] = False
        return self.pumps[index]

    def take_available_pump(self) -> Pump:
        """
        Take a free pump; the caller must have checked is_available().

        Raises:
            NoPumpAvailableError: If every pump is busy
        """
        pump = self.try_acquire()
        if pump is None:
            raise NoPumpAvailableError("No pump available when needed", resource=self)
        return pump

    def release(self, pump: Pump) -> None:
        """
        Return a pump to the free-list.

        Raises:
            ReleaseOfFreePumpError: If the pump is already free
        """
        if self._is_free[pump.index]:
            raise ReleaseOfFreePumpError("Attempt to release a free pump", resource=pump)
        self._is_free[pump.index] = True
        self._free.append(pump.index)
        logger.debug("Pump %d released (%d/%d free)", pump.index, self.num_free, self.capacity)

    def busy_pumps(self) -> List[Pump]:
        return [pump for pump in self.pumps if not self._is_free[pump.index]]

    def __repr__(self) -> str:
        return f"PumpPool(capacity={self.capacity}, free={self.num_free})"
