"""
StatisticsCollector - accumulates station statistics and prints snapshots.
"""

import sys
from typing import Dict, List, Optional, TextIO

import numpy as np

from fuelsim.common.constants import UNKNOWN
from fuelsim.station.car_queue import CarQueue
from fuelsim.station.parameters import ModelParameters


HEADER_LINES = (
    "Current  Total  NoQueue  Car->Car  Average  Number  Average    Pump    Total     Lost",
    "  Time    Cars  Fraction   Time     Litres  Balked    Wait     Usage   Profit   Profit",
    "-" * 90,
)


class StatisticsCollector:
    """
    Collects statistics during simulation and prints periodic snapshots.

    Tracks:
    - Arrivals, sales and balks (with the litres behind each)
    - Total waiting time of served cars and total pump busy time
    - Every snapshot taken, as a dict, for later inspection
    """

    def __init__(self,
                 parameters: Optional[ModelParameters] = None,
                 num_pumps: int = 1,
                 stream: Optional[TextIO] = None):
        """
        Initialize statistics collector.

        Args:
            parameters: Model constants (profit per litre, pump cost)
            num_pumps: Number of pumps, for utilization and fixed costs
            stream: Where snapshot lines are printed (default: sys.stdout)
        """
        self.parameters = parameters if parameters is not None else ModelParameters()
        self.num_pumps = num_pumps
        self.stream = stream

        self.total_arrivals: int = 0
        self.customers_served: int = 0
        self.balking_customers: int = 0
        self.total_litres_sold: float = 0.0
        self.total_litres_missed: float = 0.0
        self.total_waiting_time: float = 0.0
        self.total_service_time: float = 0.0

        # Raw waits of served cars, for distribution statistics
        self.wait_samples: List[float] = []

        self.snapshots: List[Dict] = []

    # Increment interface used by the event handlers

    def count_arrival(self) -> None:
        self.total_arrivals += 1

    def accum_balk(self, litres: float) -> None:
        self.balking_customers += 1
        self.total_litres_missed += litres

    def accum_sale(self, litres: float) -> None:
        self.customers_served += 1
        self.total_litres_sold += litres

    def accum_service_time(self, service_time: float) -> None:
        self.total_service_time += service_time

    def accum_waiting_time(self, waiting_time: float) -> None:
        self.total_waiting_time += waiting_time
        self.wait_samples.append(waiting_time)

    # Derived figures

    def total_profit(self) -> float:
        p = self.parameters
        return self.total_litres_sold * p.profit_per_litre - p.pump_cost * self.num_pumps

    def lost_profit(self) -> float:
        return self.total_litres_missed * self.parameters.profit_per_litre

    def pump_usage(self, current_time: float) -> float:
        if self.num_pumps <= 0 or current_time <= 0:
            return 0.0
        return self.total_service_time / (self.num_pumps * current_time)

    def _output(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def print_header(self) -> None:
        """Print the table heading once, before the first snapshot."""
        for line in HEADER_LINES:
            print(line, file=self._output())

    def snapshot(self, current_time: float, car_queue: CarQueue) -> Dict:
        """
        Record and print the state of the statistics at ``current_time``.

        Waits are accumulated when service starts but averaged over completed
        sales, so cars still at a pump count toward the numerator only.

        Args:
            current_time: Current simulation time
            car_queue: Queue whose idle time feeds the no-queue fraction

        Returns:
            The snapshot record (also appended to ``snapshots``)
        """
        if current_time > 0:
            no_queue_fraction = car_queue.idle_time_as_of(current_time) / current_time
        else:
            no_queue_fraction = 0.0

        if self.total_arrivals > 0:
            car_to_car_time = current_time / self.total_arrivals
            average_litres = (self.total_litres_sold + self.total_litres_missed) / self.total_arrivals
        else:
            car_to_car_time = None
            average_litres = None

        average_wait = (self.total_waiting_time / self.customers_served
                        if self.customers_served > 0 else None)

        record = {
            'time': current_time,
            'total_arrivals': self.total_arrivals,
            'no_queue_fraction': no_queue_fraction,
            'car_to_car_time': car_to_car_time,
            'average_litres': average_litres,
            'balked': self.balking_customers,
            'average_wait': average_wait,
            'pump_usage': self.pump_usage(current_time),
            'total_profit': self.total_profit(),
            'lost_profit': self.lost_profit(),
        }
        self.snapshots.append(record)
        print(self.format_snapshot(record), file=self._output())
        return record

    @staticmethod
    def format_snapshot(record: Dict) -> str:
        """Render one snapshot record as a fixed-width table row."""
        return "".join([
            f"{record['time']:8.0f}",
            f"{record['total_arrivals']:7d}",
            f"{record['no_queue_fraction']:9.3f}",
            _fmt_optional(record['car_to_car_time'], 9, 3),
            _fmt_optional(record['average_litres'], 8, 3),
            f"{record['balked']:8d}",
            _fmt_optional(record['average_wait'], 9, 3),
            f"{record['pump_usage']:8.3f}",
            f"{record['total_profit']:10.2f}",
            f"{record['lost_profit']:9.2f}",
        ])

    def get_wait_statistics(self) -> Dict:
        """
        Get waiting-time statistics over served cars.

        Returns:
            Dictionary with count, mean, median, p95, max and std
        """
        if not self.wait_samples:
            return {
                'count': 0,
                'mean': 0.0,
                'median': 0.0,
                'p95': 0.0,
                'max': 0.0,
                'std': 0.0
            }

        waits = np.array(self.wait_samples)

        return {
            'count': len(self.wait_samples),
            'mean': float(np.mean(waits)),
            'median': float(np.median(waits)),
            'p95': float(np.percentile(waits, 95)),
            'max': float(np.max(waits)),
            'std': float(np.std(waits))
        }

    def get_summary(self, current_time: float) -> Dict:
        """
        Get end-of-run totals.

        Args:
            current_time: Simulation time the totals refer to

        Returns:
            Dictionary with counts, litres, money, utilization and waits
        """
        return {
            'time': current_time,
            'arrivals': self.total_arrivals,
            'served': self.customers_served,
            'balked': self.balking_customers,
            'litres_sold': self.total_litres_sold,
            'litres_lost': self.total_litres_missed,
            'total_profit': self.total_profit(),
            'lost_profit': self.lost_profit(),
            'pump_usage': self.pump_usage(current_time),
            'wait': self.get_wait_statistics(),
        }

    def print_summary(self, current_time: float) -> None:
        """Print a formatted end-of-run summary."""
        summary = self.get_summary(current_time)
        out = self._output()

        print("\n" + "=" * 90, file=out)
        print("FUEL STATION SUMMARY", file=out)
        print("=" * 90, file=out)
        print(f"  Simulated time: {summary['time']:.1f}s", file=out)
        print(f"  Arrivals:       {summary['arrivals']}", file=out)
        print(f"  Served:         {summary['served']}", file=out)
        print(f"  Balked:         {summary['balked']}", file=out)
        print(f"  Litres sold:    {summary['litres_sold']:.1f}", file=out)
        print(f"  Litres lost:    {summary['litres_lost']:.1f}", file=out)
        print(f"  Total profit:   ${summary['total_profit']:,.2f}", file=out)
        print(f"  Lost profit:    ${summary['lost_profit']:,.2f}", file=out)
        print(f"  Pump usage:     {summary['pump_usage']*100:.1f}%", file=out)

        wait = summary['wait']
        print("\nWAITING TIME:", file=out)
        print("-" * 90, file=out)
        print(f"  Count:  {wait['count']}", file=out)
        print(f"  Mean:   {wait['mean']:.3f}s", file=out)
        print(f"  Median: {wait['median']:.3f}s", file=out)
        print(f"  P95:    {wait['p95']:.3f}s", file=out)
        print(f"  Max:    {wait['max']:.3f}s", file=out)
        print("=" * 90, file=out)


def _fmt_optional(value: Optional[float], width: int, precision: int) -> str:
    if value is None:
        return f"{UNKNOWN:>{width}}"
    return f"{value:{width}.{precision}f}"
