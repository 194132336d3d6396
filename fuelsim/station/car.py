"""
Car - one customer of the fuel station.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Car:
    """
    A car wanting fuel.

    Attributes:
        fuel_demand: Litres wanted, fixed when the car is created
        arrival_time: When the car was admitted to a pump or the queue
                      (None until admitted; balking cars are never stamped)
    """
    fuel_demand: float
    arrival_time: Optional[float] = field(default=None)

    def stamp_arrival(self, now: float) -> None:
        """Record admission time. A car is admitted at most once."""
        if self.arrival_time is not None:
            raise ValueError(f"Car already admitted at t={self.arrival_time}")
        self.arrival_time = now

    def waiting_time(self, now: float) -> float:
        """Time spent between admission and ``now``."""
        if self.arrival_time is None:
            raise ValueError("Car was never admitted")
        return now - self.arrival_time
