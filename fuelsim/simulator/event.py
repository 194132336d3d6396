"""
Event system for the fuel station simulation.

Key design decision: EventQueue breaks timestamp ties by insertion order.
Every push stamps the event with a monotonically increasing sequence number,
so a new event at time t lands after all queued events with time <= t.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional
from heapq import heappush, heappop

from fuelsim.common.errors import EmptyScheduleError

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events in the simulation."""
    ARRIVAL = 1            # A car pulls into the station
    DEPARTURE = 2          # A pump finishes serving its car
    REPORT = 3             # Periodic statistics snapshot
    END_OF_SIMULATION = 4  # Final snapshot, stops the driver loop


@dataclass(order=True)
class Event:
    """
    Discrete event in the simulation.

    Events are ordered by timestamp (primary) and queue sequence (secondary).
    The payload is not compared for ordering.

    Attributes:
        timestamp: Simulation time when event occurs (seconds)
        event_type: Type of event
        sequence: Insertion counter assigned by EventQueue.push (None while not queued)
        payload: Event-specific data (not used for ordering)
    """
    timestamp: float
    event_type: EventType = field(compare=False)
    sequence: Optional[int] = field(default=None, compare=True)
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        """Validate timestamp is non-negative."""
        if self.timestamp < 0:
            raise ValueError(f"Event timestamp must be non-negative, got {self.timestamp}")

    @property
    def is_scheduled(self) -> bool:
        return self.sequence is not None

    def successor(self, timestamp: float) -> 'Event':
        """Fresh event of the same kind and payload, for self-rescheduling events."""
        return Event(timestamp=timestamp, event_type=self.event_type, payload=dict(self.payload))


class EventQueue:
    """
    Future event list, ordered by timestamp with stable tie-breaking.

    Uses heapq for O(log n) push/pop operations. An event is a member of the
    queue from push until pop and can never be queued twice at once.
    """

    def __init__(self):
        self._heap: List[Event] = []
        self._event_counter: int = 0  # For stable ordering of same-timestamp events

    def push(self, event: Event) -> None:
        """
        Add an event to the queue.

        Args:
            event: Event to schedule

        Raises:
            ValueError: If the event is already queued
        """
        if event.is_scheduled:
            raise ValueError(f"Event already scheduled: {event}")
        event.sequence = self._event_counter
        self._event_counter += 1
        heappush(self._heap, event)
        logger.debug("Event queued: %s at t=%.3f", event.event_type.name, event.timestamp)

    def pop(self) -> Event:
        """
        Remove and return the next event (earliest timestamp).

        Returns:
            Next event to process

        Raises:
            EmptyScheduleError: If queue is empty
        """
        if not self._heap:
            raise EmptyScheduleError("Ran out of events before end of simulation", resource=self)
        event = heappop(self._heap)
        event.sequence = None
        logger.debug("Event dequeued: %s at t=%.3f", event.event_type.name, event.timestamp)
        return event

    def peek(self) -> Optional[Event]:
        """
        Get the next event without removing it.

        Returns:
            Next event, or None if queue is empty
        """
        return self._heap[0] if self._heap else None

    def is_empty(self) -> bool:
        """Check if queue has no events."""
        return len(self._heap) == 0

    def size(self) -> int:
        """Get number of events in queue."""
        return len(self._heap)

    def count(self, event_type: EventType) -> int:
        """Number of queued events of the given kind."""
        return sum(1 for event in self._heap if event.event_type == event_type)

    def __len__(self) -> int:
        """Support len() function."""
        return len(self._heap)

    def __bool__(self) -> bool:
        """Support bool() function - True if queue has events."""
        return bool(self._heap)

    def __repr__(self) -> str:
        return f"EventQueue(size={len(self._heap)})"
