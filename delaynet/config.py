"""Define the configuration of a network simulation."""
from dataclasses import dataclass, field
from typing import Optional

from delaynet.types import AirportCode

FAR_FUTURE_TIME = 24.0


@dataclass
class PriorConfig:
    """Bounds of the uniform priors placed on the latent parameters.

    Attributes:
        measurement_variation: bounds on the standard deviation of measurement noise.
        travel_time_variation: bounds on the fractional variation in travel time.
        turnaround_time_variation: bounds on the fractional variation in turnaround
            time.
        mean_turnaround_time: bounds on each airport's mean turnaround time.
        mean_service_time: bounds on each airport's mean runway service time.
        travel_time: bounds on the nominal travel time between two airports.
    """

    measurement_variation: tuple[float, float] = (0.0, 0.1)
    travel_time_variation: tuple[float, float] = (0.0, 0.1)
    turnaround_time_variation: tuple[float, float] = (0.0, 0.1)
    mean_turnaround_time: tuple[float, float] = (0.0, 1.0)
    mean_service_time: tuple[float, float] = (0.0, 0.1)
    travel_time: tuple[float, float] = (0.0, 6.0)

    def __post_init__(self):
        for name, (low, high) in vars(self).items():
            if not 0.0 <= low < high:
                raise ValueError(
                    f"Prior bounds for {name} must satisfy 0 <= low < high, "
                    f"got ({low}, {high})"
                )


@dataclass
class SimulationConfig:
    """Configuration for simulating one or more days of network operations.

    Any latent parameter given a fixed value here is not sampled from its prior;
    the fixed value is recorded in the trace instead.

    Attributes:
        end_time: the time at which to stop simulating each day, in hours.
        dt: the time resolution of the simulation, in hours.
        measurement_variation: fixed standard deviation of measurement noise.
        travel_time_variation: fixed fractional variation in travel time.
        turnaround_time_variation: fixed fractional variation in turnaround time.
        mean_service_times: fixed mean service time for some airports.
        mean_turnaround_times: fixed mean turnaround time for some airports.
        travel_times: fixed nominal travel time for some (origin, destination) pairs.
        stochastic_service_times: if True, sample service times; otherwise use the
            mean service time of each airport.
        stochastic_turnaround_times: if True, sample turnaround times; otherwise use
            the mean turnaround time of each airport.
        stochastic_travel_times: if True, sample travel times; otherwise use the
            nominal travel time.
        priors: the priors for latent parameters that are not fixed.
    """

    end_time: float = FAR_FUTURE_TIME
    dt: float = 0.1
    measurement_variation: Optional[float] = None
    travel_time_variation: Optional[float] = None
    turnaround_time_variation: Optional[float] = None
    mean_service_times: dict[AirportCode, float] = field(default_factory=dict)
    mean_turnaround_times: dict[AirportCode, float] = field(default_factory=dict)
    travel_times: dict[tuple[AirportCode, AirportCode], float] = field(
        default_factory=dict
    )
    stochastic_service_times: bool = False
    stochastic_turnaround_times: bool = False
    stochastic_travel_times: bool = False
    priors: PriorConfig = field(default_factory=PriorConfig)

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.end_time < 0:
            raise ValueError(f"end_time must be non-negative, got {self.end_time}")
        if self.measurement_variation is not None and self.measurement_variation <= 0:
            raise ValueError("measurement_variation must be positive")

        fixed_values = {
            "travel_time_variation": self.travel_time_variation,
            "turnaround_time_variation": self.turnaround_time_variation,
            **{
                f"{code}_mean_service_time": v
                for code, v in self.mean_service_times.items()
            },
            **{
                f"{code}_mean_turnaround_time": v
                for code, v in self.mean_turnaround_times.items()
            },
            **{f"travel_time_{o}_{d}": v for (o, d), v in self.travel_times.items()},
        }
        for name, value in fixed_values.items():
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        for origin, destination in self.travel_times:
            if origin == destination:
                raise ValueError(
                    f"Travel time given from {origin} to itself; origin and "
                    "destination must differ"
                )
