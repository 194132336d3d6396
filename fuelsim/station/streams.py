"""
RandomStreams - the four independent random number streams of the model.

Each stochastic behaviour draws from its own seeded numpy Generator, so
changing one seed never perturbs the draw sequence of another behaviour.
"""

from typing import Optional

import numpy as np

from fuelsim.common.constants import MIN_SERVICE_TIME
from fuelsim.station.parameters import ModelParameters, RunParameters


def make_generator(seed: int) -> np.random.Generator:
    """Generator for a 32-bit signed seed; negative seeds map to distinct valid ones."""
    return np.random.default_rng(seed & 0xFFFFFFFF)


class RandomStreams:
    """
    Draw sources for interarrival times, fuel demand, balking and service time.

    Attributes:
        parameters: Model constants used by the draw formulas
        arrival: Stream for interarrival times
        litres: Stream for fuel demand
        balking: Stream for balking decisions
        service: Stream for service-time noise
    """

    def __init__(self,
                 arrival_seed: int,
                 litre_seed: int,
                 balking_seed: int,
                 service_seed: int,
                 parameters: Optional[ModelParameters] = None):
        self.parameters = parameters if parameters is not None else ModelParameters()
        self.seeds = (arrival_seed, litre_seed, balking_seed, service_seed)
        self.arrival = make_generator(arrival_seed)
        self.litres = make_generator(litre_seed)
        self.balking = make_generator(balking_seed)
        self.service = make_generator(service_seed)

    @classmethod
    def from_run_parameters(cls,
                            run_parameters: RunParameters,
                            parameters: Optional[ModelParameters] = None) -> 'RandomStreams':
        return cls(*run_parameters.seeds, parameters=parameters)

    def draw_interarrival(self) -> float:
        """
        Exponential interarrival time via the inverse CDF.

        A uniform draw of exactly 0 yields +inf, i.e. no further arrivals.
        """
        u = self.arrival.random()
        with np.errstate(divide="ignore"):
            return float(-self.parameters.mean_interarrival * np.log(u))

    def draw_fuel_demand(self) -> float:
        p = self.parameters
        return p.litres_min + self.litres.random() * p.litres_range

    def draw_balk_decision(self, fuel_demand: float, queue_length: int) -> bool:
        """
        Decide whether an arriving car leaves without service.

        Cars never balk at an empty queue, and no draw is consumed then.
        The not-balk probability is left unclamped, and a zero denominator
        follows IEEE division (+inf or nan never balk, -inf always balks).

        Args:
            fuel_demand: Litres the car wants
            queue_length: Cars already waiting

        Returns:
            True if the car balks
        """
        if queue_length == 0:
            return False
        p = self.parameters
        with np.errstate(divide="ignore", invalid="ignore"):
            p_not_balk = np.float64(p.balk_a + fuel_demand) / np.float64(p.balk_b * (p.balk_c + queue_length))
        return bool(self.balking.random() > p_not_balk)

    def draw_service_time(self, fuel_demand: float) -> float:
        p = self.parameters
        service_time = (p.service_base
                        + p.service_per_litre * fuel_demand
                        + p.service_spread * self.service.standard_normal())
        return max(float(service_time), MIN_SERVICE_TIME)
