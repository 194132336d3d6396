"""
SimulationEngine - core discrete-event simulation loop of the fuel station.

Key design: the engine is the world context. It owns the clock, the future
event list, the car queue, the pump pool, the random streams and the
statistics collector, and every event handler works on it directly.
"""

import logging
from typing import Dict, Optional, TextIO

from fuelsim.common.errors import DepartureWithNoCarError, SimulationError
from fuelsim.metrics.collector import StatisticsCollector
from fuelsim.simulator.event import EventQueue, Event, EventType
from fuelsim.simulator.resource import Pump, PumpPool
from fuelsim.station.car import Car
from fuelsim.station.car_queue import CarQueue
from fuelsim.station.parameters import ModelParameters, RunParameters
from fuelsim.station.streams import RandomStreams

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Discrete-event simulator of a fuel station with a single FIFO line.

    Architecture:
    - EventQueue holds ARRIVAL, DEPARTURE, REPORT and END_OF_SIMULATION events
    - Each step extracts the earliest event, jumps the clock to its timestamp
      and runs the matching handler to completion
    - ARRIVAL and REPORT reschedule a fresh successor of themselves
    - The loop stops right after END_OF_SIMULATION executes

    Attributes:
        pump_pool: Pumps and their free-list
        streams: Independent random streams
        statistics: Statistics collector
        report_interval: Time between REPORT events
        ending_time: Timestamp of the END_OF_SIMULATION event
        current_time: Current simulation time (seconds)
        event_queue: Future event list
        car_queue: Cars waiting for a pump
    """

    def __init__(self,
                 pump_pool: PumpPool,
                 streams: RandomStreams,
                 statistics: StatisticsCollector,
                 report_interval: float,
                 ending_time: float):
        """
        Initialize simulation engine.

        Args:
            pump_pool: Pool of pumps
            streams: Random streams for all stochastic draws
            statistics: Collector that receives increments and snapshots
            report_interval: Time between periodic snapshots
            ending_time: Simulation horizon
        """
        self.pump_pool = pump_pool
        self.streams = streams
        self.statistics = statistics
        self.report_interval = report_interval
        self.ending_time = ending_time

        self.current_time: float = 0.0
        self.event_queue = EventQueue()
        self.car_queue = CarQueue(start_time=self.current_time)

        # Statistics
        self.total_steps: int = 0
        self.initialized: bool = False
        self.finished: bool = False

    @classmethod
    def from_parameters(cls,
                        run_parameters: RunParameters,
                        model_parameters: Optional[ModelParameters] = None,
                        stream: Optional[TextIO] = None) -> 'SimulationEngine':
        """
        Build a complete world for one run.

        Args:
            run_parameters: Horizon, report interval, pump count and seeds
            model_parameters: Model constants (defaults if None)
            stream: Where the statistics table is printed (default: stdout)

        Returns:
            Engine ready to run
        """
        if model_parameters is None:
            model_parameters = ModelParameters()
        statistics = StatisticsCollector(
            parameters=model_parameters,
            num_pumps=run_parameters.num_pumps,
            stream=stream
        )
        return cls(
            pump_pool=PumpPool(run_parameters.num_pumps),
            streams=RandomStreams.from_run_parameters(run_parameters, model_parameters),
            statistics=statistics,
            report_interval=run_parameters.report_interval,
            ending_time=run_parameters.ending_time
        )

    def schedule_event(self, event: Event) -> None:
        """
        Add an event to the future event list.

        Args:
            event: Event to schedule (never earlier than the current clock)
        """
        assert event.timestamp >= self.current_time, (
            f"Cannot schedule {event.event_type.name} at t={event.timestamp} "
            f"before current time {self.current_time}"
        )
        self.event_queue.push(event)

    def initialize(self) -> None:
        """Schedule the end of simulation, the first report and the first arrival."""
        self.schedule_event(Event(timestamp=self.ending_time, event_type=EventType.END_OF_SIMULATION))
        if self.report_interval <= self.ending_time:
            self.schedule_event(Event(timestamp=self.report_interval, event_type=EventType.REPORT))
        self.schedule_event(Event(timestamp=0.0, event_type=EventType.ARRIVAL))
        self.initialized = True

    def run(self) -> None:
        """Run the simulation until the END_OF_SIMULATION event fires."""
        if not self.initialized:
            self.initialize()
        logger.info(
            "Starting simulation: %d pumps, seeds %s, horizon %.1f, report interval %.1f",
            self.pump_pool.capacity, " ".join(str(seed) for seed in self.streams.seeds),
            self.ending_time, self.report_interval
        )
        self.statistics.print_header()

        while not self.finished:
            self.step()

        logger.info("Simulation finished at t=%.3f after %d steps", self.current_time, self.total_steps)

    def step(self) -> Event:
        """
        Extract the earliest event, advance the clock to it and execute it.

        Returns:
            The event that was executed

        Raises:
            SimulationError: On any broken contract, with clock and event attached
        """
        if self.finished:
            raise RuntimeError("Simulation already finished")
        try:
            event = self.event_queue.pop()
        except SimulationError as exc:
            exc.add_context(clock=self.current_time)
            logger.error("Aborting run: %s", exc)
            raise

        self.current_time = event.timestamp
        try:
            self._execute(event)
        except SimulationError as exc:
            exc.add_context(clock=self.current_time, event_type=event.event_type)
            logger.error("Aborting run: %s", exc)
            raise

        self.total_steps += 1
        return event

    def _execute(self, event: Event) -> None:
        if event.event_type == EventType.ARRIVAL:
            self._handle_arrival(event)
        elif event.event_type == EventType.DEPARTURE:
            self._handle_departure(event)
        elif event.event_type == EventType.REPORT:
            self._handle_report(event)
        elif event.event_type == EventType.END_OF_SIMULATION:
            self._handle_end_of_simulation(event)
        else:
            raise ValueError(f"Unknown event type: {event.event_type}")

    def _handle_arrival(self, event: Event) -> None:
        """
        Handle ARRIVAL event.

        Creates a car, lets it balk or admits it to a free pump or the queue,
        then schedules the next arrival.

        Args:
            event: ARRIVAL event (no payload)
        """
        car = Car(fuel_demand=self.streams.draw_fuel_demand())
        self.statistics.count_arrival()

        if self.streams.draw_balk_decision(car.fuel_demand, len(self.car_queue)):
            self.statistics.accum_balk(car.fuel_demand)
            logger.debug("t=%.3f car wanting %.1f L balked (queue %d)",
                         self.current_time, car.fuel_demand, len(self.car_queue))
        else:
            car.stamp_arrival(self.current_time)
            pump = self.pump_pool.try_acquire()
            if pump is not None:
                self._start_service(pump, car)
            else:
                self.car_queue.push_back(car, self.current_time)

        self.schedule_event(event.successor(self.current_time + self.streams.draw_interarrival()))

    def _start_service(self, pump: Pump, car: Car) -> None:
        """
        Put a car on a pump and schedule its departure.

        Args:
            pump: Pump taken from the pool (or kept busy by a departure)
            car: Admitted car
        """
        pump.attach_car(car)
        service_time = self.streams.draw_service_time(car.fuel_demand)
        self.statistics.accum_waiting_time(car.waiting_time(self.current_time))
        self.statistics.accum_service_time(service_time)
        self.schedule_event(Event(
            timestamp=self.current_time + service_time,
            event_type=EventType.DEPARTURE,
            payload={'pump': pump}
        ))
        logger.debug("t=%.3f pump %d serving %.1f L for %.3f",
                     self.current_time, pump.index, car.fuel_demand, service_time)

    def _handle_departure(self, event: Event) -> None:
        """
        Handle DEPARTURE event.

        Records the sale, then either hands the pump straight to the next car
        in line or returns it to the pool.

        Args:
            event: DEPARTURE event with payload {'pump': Pump}
        """
        pump = event.payload.get('pump')
        if pump is None:
            logger.warning("t=%.3f departure without a pump ignored", self.current_time)
            return
        try:
            car = pump.detach_car()
        except DepartureWithNoCarError as exc:
            logger.warning("t=%.3f departure ignored: %s", self.current_time, exc)
            return

        self.statistics.accum_sale(car.fuel_demand)
        if len(self.car_queue) > 0:
            self._start_service(pump, self.car_queue.pop_front(self.current_time))
        else:
            self.pump_pool.release(pump)

    def _handle_report(self, event: Event) -> None:
        """Print a snapshot and schedule the next report."""
        self.statistics.snapshot(self.current_time, self.car_queue)
        self.schedule_event(event.successor(self.current_time + self.report_interval))

    def _handle_end_of_simulation(self, event: Event) -> None:
        """Print the final snapshot and stop the loop."""
        self.statistics.snapshot(self.current_time, self.car_queue)
        self.finished = True

    def cars_in_service(self) -> int:
        return len(self.pump_pool.busy_pumps())

    def get_statistics(self) -> Dict:
        """
        Get simulation statistics.

        Returns:
            Dictionary with statistics
        """
        stats = self.statistics
        return {
            'current_time': self.current_time,
            'total_steps': self.total_steps,
            'total_arrivals': stats.total_arrivals,
            'customers_served': stats.customers_served,
            'balking_customers': stats.balking_customers,
            'cars_queued': len(self.car_queue),
            'cars_in_service': self.cars_in_service(),
            'free_pumps': self.pump_pool.num_free,
            'pending_events': len(self.event_queue),
            'finished': self.finished,
        }
