"""
Basic integration tests for simulation engine.
"""

import io
import unittest

from fuelsim.common.errors import EmptyScheduleError, ReleaseOfFreePumpError
from fuelsim.simulator.simulation_engine import SimulationEngine
from fuelsim.simulator.event import Event, EventType
from fuelsim.station.car import Car
from fuelsim.station.parameters import ModelParameters, RunParameters
from fuelsim.station.streams import make_generator


def make_run(report_interval=100.0, ending_time=2000.0, num_pumps=2, seeds=(1, 2, 3, 4)):
    return RunParameters(
        report_interval=report_interval,
        ending_time=ending_time,
        num_pumps=num_pumps,
        arrival_seed=seeds[0],
        litre_seed=seeds[1],
        balking_seed=seeds[2],
        service_seed=seeds[3],
    )


class TestBasicSimulation(unittest.TestCase):
    """Test basic simulation functionality."""

    def setUp(self):
        """Set up an output buffer for the statistics table."""
        self.output = io.StringIO()

    def make_engine(self, run, model=None):
        return SimulationEngine.from_parameters(run, model, stream=self.output)

    def test_arrival_uses_free_pump(self):
        """Test: First arrival at t=0 takes the only pump and reschedules itself."""
        engine = self.make_engine(make_run(num_pumps=1))
        engine.initialize()

        event = engine.step()

        self.assertEqual(event.event_type, EventType.ARRIVAL)
        self.assertEqual(engine.current_time, 0.0)
        self.assertIsNone(engine.pump_pool.try_acquire())
        self.assertEqual(engine.event_queue.count(EventType.ARRIVAL), 1)
        self.assertEqual(engine.event_queue.count(EventType.DEPARTURE), 1)

    def test_single_pump_no_balking(self):
        """Test: Queued car starts service exactly at the previous departure."""
        model = ModelParameters(balk_a=1e9, mean_interarrival=1.0, service_spread=0.0)
        engine = self.make_engine(make_run(report_interval=5000.0, ending_time=1000.0, num_pumps=1), model)
        engine.initialize()

        engine.step()
        pump = engine.pump_pool.pumps[0]
        first_car = pump.car_in_service
        self.assertIsNotNone(first_car)
        self.assertEqual(first_car.arrival_time, 0.0)
        self.assertEqual(engine.statistics.wait_samples, [0.0])
        expected_departure = 150.0 + 0.5 * first_car.fuel_demand

        second_car = None
        while True:
            event = engine.step()
            if second_car is None:
                second_car = engine.car_queue.peek()
            if event.event_type == EventType.DEPARTURE:
                break
        self.assertIsNotNone(second_car)
        self.assertEqual(engine.statistics.balking_customers, 0)

        # Expected: departure after base + per-litre time, next car on the pump at once
        self.assertAlmostEqual(event.timestamp, expected_departure, places=6)
        self.assertIs(pump.car_in_service, second_car)
        self.assertEqual(engine.pump_pool.num_free, 0)
        self.assertEqual(engine.statistics.customers_served, 1)
        wait = engine.statistics.wait_samples[1]
        self.assertGreater(wait, 0.0)
        self.assertAlmostEqual(wait, expected_departure - second_car.arrival_time, places=6)

    def test_balking_accounts_missed_litres(self):
        """Test: Balked cars feed the missed litres and lost profit, and arrivals keep coming."""
        model = ModelParameters(balk_a=-1e9, mean_interarrival=10.0)
        engine = self.make_engine(make_run(report_interval=5000.0, ending_time=3000.0, num_pumps=1), model)
        engine.initialize()
        stats = engine.statistics
        # Every arrival consumes exactly one fuel-demand draw
        litres = make_generator(2)

        expected_missed = 0.0
        while not engine.finished:
            balked_before = stats.balking_customers
            queued_before = len(engine.car_queue)
            event = engine.step()
            if event.event_type == EventType.ARRIVAL:
                demand = 10.0 + litres.random() * 50.0
                if stats.balking_customers > balked_before:
                    self.assertEqual(stats.balking_customers, balked_before + 1)
                    self.assertGreater(queued_before, 0)
                    self.assertEqual(len(engine.car_queue), queued_before)
                    expected_missed += demand
            self.assertEqual(engine.event_queue.count(EventType.ARRIVAL), 1)

        self.assertGreater(stats.balking_customers, 0)
        self.assertAlmostEqual(stats.total_litres_missed, expected_missed, places=6)
        final = stats.snapshots[-1]
        self.assertEqual(final['time'], 3000.0)
        self.assertAlmostEqual(final['lost_profit'], expected_missed * 0.025, places=6)

    def test_zero_balking_denominator_runs_to_completion(self):
        """Test: A zero balking denominator means no car balks, and the run finishes."""
        model = ModelParameters(balk_b=0.0)
        engine = self.make_engine(make_run(report_interval=500.0, ending_time=2000.0, num_pumps=1), model)
        engine.run()

        self.assertTrue(engine.finished)
        self.assertEqual(engine.current_time, 2000.0)
        self.assertEqual(engine.statistics.balking_customers, 0)
        self.assertGreater(engine.statistics.total_arrivals, 1)

    def test_start_log_names_seeds(self):
        engine = self.make_engine(make_run(report_interval=5000.0, ending_time=100.0, seeds=(11, -12, 13, 14)))
        with self.assertLogs('fuelsim.simulator.simulation_engine', level='INFO') as logs:
            engine.run()

        self.assertIn("seeds 11 -12 13 14", logs.output[0])

    def test_conservation_and_time_monotonicity(self):
        """Test: Resource and car accounting hold after every event."""
        engine = self.make_engine(make_run(report_interval=500.0, ending_time=20000.0, num_pumps=3))
        engine.initialize()
        stats = engine.statistics
        pool = engine.pump_pool

        last_time = 0.0
        while not engine.finished:
            event = engine.step()
            self.assertGreaterEqual(event.timestamp, last_time)
            last_time = event.timestamp

            self.assertEqual(pool.num_free + pool.num_busy, pool.capacity)
            self.assertEqual(pool.num_busy, engine.cars_in_service())
            self.assertEqual(
                stats.total_arrivals,
                stats.balking_customers + stats.customers_served
                + len(engine.car_queue) + engine.cars_in_service()
            )
            self.assertEqual(engine.car_queue.currently_empty, len(engine.car_queue) == 0)
            if len(engine.car_queue) > 0:
                self.assertFalse(pool.is_available())

        self.assertEqual(engine.current_time, 20000.0)
        self.assertGreater(stats.customers_served, 0)

    def test_deterministic_replay(self):
        """Test: Same seeds and configuration give identical output."""
        run = make_run(report_interval=250.0, ending_time=10000.0, num_pumps=2, seeds=(7, 8, 9, 10))

        first = SimulationEngine.from_parameters(run, stream=io.StringIO())
        first.run()
        second = SimulationEngine.from_parameters(run, stream=io.StringIO())
        second.run()

        self.assertEqual(first.statistics.stream.getvalue(), second.statistics.stream.getvalue())
        self.assertEqual(first.statistics.snapshots, second.statistics.snapshots)

    def test_different_seeds_differ(self):
        first = SimulationEngine.from_parameters(make_run(seeds=(1, 2, 3, 4)), stream=io.StringIO())
        first.run()
        second = SimulationEngine.from_parameters(make_run(seeds=(5, 6, 7, 8)), stream=io.StringIO())
        second.run()

        self.assertNotEqual(first.statistics.snapshots, second.statistics.snapshots)

    def test_report_suppressed(self):
        """Test: Report interval beyond the horizon leaves only the final snapshot."""
        engine = self.make_engine(make_run(report_interval=5000.0, ending_time=1000.0))
        engine.run()

        self.assertEqual(len(engine.statistics.snapshots), 1)
        self.assertEqual(engine.statistics.snapshots[0]['time'], 1000.0)
        # Header block plus one data line
        self.assertEqual(len(self.output.getvalue().splitlines()), 4)

    def test_report_at_ending_time_fires_after_end(self):
        """Test: End of simulation wins the tie with a report at the same time."""
        engine = self.make_engine(make_run(report_interval=1000.0, ending_time=1000.0))
        engine.run()

        self.assertEqual(len(engine.statistics.snapshots), 1)

    def test_periodic_reports(self):
        engine = self.make_engine(make_run(report_interval=100.0, ending_time=1000.0))
        engine.run()

        times = [snapshot['time'] for snapshot in engine.statistics.snapshots]
        self.assertEqual(times, [100.0 * i for i in range(1, 10)] + [1000.0])
        self.assertTrue(engine.finished)

    def test_empty_schedule_raises(self):
        """Test: Stepping with no events signals a missing end-of-simulation event."""
        engine = self.make_engine(make_run())
        with self.assertLogs('fuelsim.simulator.simulation_engine', level='ERROR'):
            with self.assertRaises(EmptyScheduleError) as ctx:
                engine.step()
        self.assertEqual(ctx.exception.clock, 0.0)

    def test_departure_without_car_is_ignored(self):
        engine = self.make_engine(make_run(num_pumps=1))
        pump = engine.pump_pool.pumps[0]
        engine.schedule_event(Event(timestamp=5.0, event_type=EventType.DEPARTURE, payload={'pump': pump}))

        with self.assertLogs('fuelsim.simulator.simulation_engine', level='WARNING'):
            engine.step()

        self.assertEqual(engine.current_time, 5.0)
        self.assertEqual(engine.statistics.customers_served, 0)
        self.assertEqual(engine.pump_pool.num_free, 1)

    def test_fatal_error_carries_context(self):
        """Test: A double release reports clock and event kind."""
        engine = self.make_engine(make_run(num_pumps=1))
        pump = engine.pump_pool.pumps[0]
        # Car attached without taking the pump from the pool
        pump.attach_car(Car(fuel_demand=20.0, arrival_time=0.0))
        engine.schedule_event(Event(timestamp=5.0, event_type=EventType.DEPARTURE, payload={'pump': pump}))

        with self.assertLogs('fuelsim.simulator.simulation_engine', level='ERROR'):
            with self.assertRaises(ReleaseOfFreePumpError) as ctx:
                engine.step()

        self.assertEqual(ctx.exception.clock, 5.0)
        self.assertEqual(ctx.exception.event_type, EventType.DEPARTURE)
        self.assertIs(ctx.exception.resource, pump)
        self.assertIn("clock=5.000", str(ctx.exception))

    def test_statistics_summary(self):
        engine = self.make_engine(make_run(report_interval=5000.0, ending_time=5000.0))
        engine.run()

        stats = engine.get_statistics()
        self.assertTrue(stats['finished'])
        self.assertEqual(stats['current_time'], 5000.0)
        self.assertEqual(
            stats['total_arrivals'],
            stats['balking_customers'] + stats['customers_served']
            + stats['cars_queued'] + stats['cars_in_service']
        )


if __name__ == '__main__':
    unittest.main()
