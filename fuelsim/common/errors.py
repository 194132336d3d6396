"""
Fatal simulation errors.

Every error here signals a broken contract between components, never an
expected runtime condition. The engine attaches the simulated clock and the
kind of event being executed before the error propagates.
"""

from typing import Any, Optional


class SimulationError(Exception):
    """
    Base class for contract violations detected during a run.

    Attributes:
        clock: Simulated time at which the error surfaced (None if unknown)
        event_type: Kind of event being executed (None if outside an event)
        resource: The offending pump, queue or schedule, when there is one
    """

    def __init__(self, message: str, resource: Any = None):
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.clock: Optional[float] = None
        self.event_type: Any = None

    def add_context(self, clock: float, event_type: Any = None) -> None:
        """Record where in the run the error happened (first call wins)."""
        if self.clock is None:
            self.clock = clock
        if self.event_type is None:
            self.event_type = event_type

    def __str__(self) -> str:
        parts = [self.message]
        if self.clock is not None:
            parts.append(f"clock={self.clock:.3f}")
        if self.event_type is not None:
            parts.append(f"event={getattr(self.event_type, 'name', self.event_type)}")
        if self.resource is not None:
            parts.append(f"resource={self.resource!r}")
        return "; ".join(parts)


class EmptyScheduleError(SimulationError):
    """Future event list ran dry before the end-of-simulation event fired."""


class EmptyQueueError(SimulationError):
    """A car was taken from an empty queue."""


class ReleaseOfFreePumpError(SimulationError):
    """A pump was returned to the pool while already free."""


class NoPumpAvailableError(SimulationError):
    """A pump was taken without checking that one is free."""


class DepartureWithNoCarError(SimulationError):
    """A departure fired for a pump with no car in service."""


class PumpBusyError(SimulationError):
    """A car was put on a pump that is already serving one."""
