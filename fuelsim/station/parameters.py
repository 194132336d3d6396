"""
Run and model parameters.

RunParameters are read once per run, one scalar per line, in a fixed order.
ModelParameters hold the station's economic and behavioural constants and
can be overridden from a YAML config.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Iterator, Tuple

from fuelsim.common import constants


@dataclass(frozen=True)
class RunParameters:
    """
    Parameters of a single simulation run.

    Attributes:
        report_interval: Time between periodic snapshots (seconds)
        ending_time: Simulation horizon (seconds)
        num_pumps: Number of pumps at the station
        arrival_seed: Seed of the interarrival-time stream
        litre_seed: Seed of the fuel-demand stream
        balking_seed: Seed of the balking-decision stream
        service_seed: Seed of the service-time noise stream
    """
    report_interval: float
    ending_time: float
    num_pumps: int
    arrival_seed: int
    litre_seed: int
    balking_seed: int
    service_seed: int

    def __post_init__(self):
        if self.num_pumps < 1:
            raise ValueError(f"Need at least 1 pump, got {self.num_pumps}")

    # Field name and parser, in input order
    INPUT_ORDER = (
        ("report_interval", float),
        ("ending_time", float),
        ("num_pumps", int),
        ("arrival_seed", int),
        ("litre_seed", int),
        ("balking_seed", int),
        ("service_seed", int),
    )

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> 'RunParameters':
        """
        Read run parameters, one value per line.

        Args:
            lines: Text lines (e.g. sys.stdin); blank lines are skipped

        Returns:
            Parsed RunParameters

        Raises:
            ValueError: If a value is missing or malformed
        """
        values = _non_blank(lines)
        parsed: Dict[str, Any] = {}
        for name, parse in cls.INPUT_ORDER:
            raw = next(values, None)
            if raw is None:
                raise ValueError(f"Expected {name} but input ended")
            try:
                parsed[name] = parse(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from None
        return cls(**parsed)

    @classmethod
    def from_config(cls, config: Dict) -> 'RunParameters':
        """
        Create RunParameters from a configuration dict.

        Args:
            config: Mapping with every field of RunParameters
        """
        missing = [name for name, _ in cls.INPUT_ORDER if name not in config]
        if missing:
            raise ValueError(f"Missing run parameters: {', '.join(missing)}")
        return cls(**{name: parse(config[name]) for name, parse in cls.INPUT_ORDER})

    @property
    def seeds(self) -> Tuple[int, int, int, int]:
        return self.arrival_seed, self.litre_seed, self.balking_seed, self.service_seed

    def banner(self) -> str:
        seeds = " ".join(str(seed) for seed in self.seeds)
        return (f"This simulation run uses {self.num_pumps} pumps "
                f"and the following random number seeds: {seeds}")


@dataclass
class ModelParameters:
    """Economic and behavioural constants of the station model."""
    profit_per_litre: float = constants.PROFIT_PER_LITRE
    pump_cost: float = constants.PUMP_COST
    litres_min: float = constants.LITRES_MIN
    litres_range: float = constants.LITRES_RANGE
    service_base: float = constants.SERVICE_BASE
    service_per_litre: float = constants.SERVICE_PER_LITRE
    service_spread: float = constants.SERVICE_SPREAD
    balk_a: float = constants.BALK_A
    balk_b: float = constants.BALK_B
    balk_c: float = constants.BALK_C
    mean_interarrival: float = constants.MEAN_INTERARRIVAL

    def __post_init__(self):
        if self.mean_interarrival < 0:
            raise ValueError(f"mean_interarrival must be non-negative, got {self.mean_interarrival}")
        if self.litres_range < 0:
            raise ValueError(f"litres_range must be non-negative, got {self.litres_range}")

    @classmethod
    def from_config(cls, config: Dict) -> 'ModelParameters':
        """
        Create ModelParameters from a configuration dict.

        Args:
            config: Mapping of field name to value, e.g. the ``model`` section
                    of a YAML file. Missing keys keep their defaults.

        Returns:
            Initialized ModelParameters

        Raises:
            ValueError: On unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown model parameters: {', '.join(unknown)}")
        return cls(**{key: float(value) for key, value in config.items()})


def _non_blank(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        stripped = line.strip()
        if stripped:
            yield stripped
