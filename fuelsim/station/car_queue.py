"""
CarQueue - the single FIFO line of cars waiting for a pump.

The queue also integrates how long it has been empty, which feeds the
"no queue fraction" column of the statistics table.
"""

from collections import deque
from typing import Deque, Optional

from fuelsim.common.errors import EmptyQueueError
from fuelsim.station.car import Car


class CarQueue:
    """
    FIFO queue of waiting cars with idle-time accounting.

    The queue starts empty at time zero, so idle time accrues from the start
    of the run until the first car is enqueued.

    Attributes:
        total_empty_time: Sum of all closed empty intervals
        currently_empty: True iff no car is waiting
        empty_since: Start of the open empty interval (meaningful while empty)
    """

    def __init__(self, start_time: float = 0.0):
        self._cars: Deque[Car] = deque()
        self.total_empty_time: float = 0.0
        self.currently_empty: bool = True
        self.empty_since: float = start_time

    def push_back(self, car: Car, now: float) -> None:
        """
        Add a car to the tail of the queue.

        Args:
            car: Car that has to wait
            now: Current simulation time
        """
        if self.currently_empty:
            # Close the empty spell
            self.total_empty_time += now - self.empty_since
            self.currently_empty = False
        self._cars.append(car)

    def pop_front(self, now: float) -> Car:
        """
        Remove and return the car at the head of the queue.

        Args:
            now: Current simulation time

        Returns:
            The longest-waiting car

        Raises:
            EmptyQueueError: If no car is waiting
        """
        if not self._cars:
            raise EmptyQueueError("Car queue unexpectedly empty", resource=self)
        car = self._cars.popleft()
        if not self._cars:
            self.currently_empty = True
            self.empty_since = now
        return car

    def peek(self) -> Optional[Car]:
        """Car at the head of the queue, or None."""
        return self._cars[0] if self._cars else None

    def idle_time_as_of(self, clock: float) -> float:
        """Total time the queue has been empty up to ``clock``."""
        if self.currently_empty:
            return self.total_empty_time + (clock - self.empty_since)
        return self.total_empty_time

    def __len__(self) -> int:
        return len(self._cars)

    def __repr__(self) -> str:
        return f"CarQueue(length={len(self._cars)}, empty_time={self.total_empty_time:.3f})"
