"""Define a probabilistic model for an air traffic network."""
import logging
from copy import deepcopy
from dataclasses import replace
from typing import Callable, Optional

import torch

from delaynet.config import SimulationConfig
from delaynet.network import NetworkState
from delaynet.sampling import PyroSampler, Sampler, uniform
from delaynet.simulator import simulate_day

logger = logging.getLogger(__name__)


def _latent(
    sampler: Sampler,
    name: str,
    bounds: tuple[float, float],
    fixed_value: Optional[float] = None,
) -> torch.Tensor:
    """Sample a latent parameter from its prior, or record its fixed value."""
    if fixed_value is not None:
        return sampler.deterministic(name, float(fixed_value))

    return sampler.sample(name, uniform(*bounds))


def air_traffic_network_model(
    states: list[NetworkState],
    end_time: Optional[float] = None,
    dt: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
    sampler: Optional[Sampler] = None,
    should_stop: Optional[Callable[[float], bool]] = None,
) -> list[NetworkState]:
    """
    Simulate the behavior of an air traffic network.

    Latent parameters shared by all days (noise levels, per-airport service and
    turnaround times, travel times between airports) are drawn once, then each
    day is simulated independently with its own site name prefix ("day0_",
    "day1_", ...).

    Args:
        states: the starting states of the simulation (will run an independent
            simulation from each start state). All states must include the same
            airports. These states are not modified.
        end_time: the time at which to stop simulating each day, in hours; overrides
            `config.end_time` if given.
        dt: the time resolution of the simulation, in hours; overrides `config.dt`
            if given.
        config: the simulation configuration; defaults to `SimulationConfig()`.
        sampler: used to draw all random choices; defaults to a new `PyroSampler`.
        should_stop: optional callback checked at each tick boundary to stop a day
            early.

    Returns:
        the simulated states, one per starting state.
    """
    if config is None:
        config = SimulationConfig()
    if end_time is not None:
        config = replace(config, end_time=end_time)
    if dt is not None:
        config = replace(config, dt=dt)
    if sampler is None:
        sampler = PyroSampler()

    if not states:
        raise ValueError("At least one starting state is required")

    airport_codes = list(states[0].airports.keys())
    for state in states[1:]:
        if set(state.airports.keys()) != set(airport_codes):
            raise ValueError("All states must include the same airports")

    # Copy state to avoid modifying it
    states = deepcopy(states)
    priors = config.priors

    # Define system-level parameters
    measurement_variation = _latent(
        sampler,
        "measurement_variation",
        priors.measurement_variation,
        config.measurement_variation,
    )
    travel_time_variation = _latent(
        sampler,
        "travel_time_variation",
        priors.travel_time_variation,
        config.travel_time_variation,
    )
    turnaround_time_variation = _latent(
        sampler,
        "turnaround_time_variation",
        priors.turnaround_time_variation,
        config.turnaround_time_variation,
    )

    # Sample latent variables for airports
    airport_turnaround_times = {
        code: _latent(
            sampler,
            f"{code}_mean_turnaround_time",
            priors.mean_turnaround_time,
            config.mean_turnaround_times.get(code),
        )
        for code in airport_codes
    }
    airport_service_times = {
        code: _latent(
            sampler,
            f"{code}_mean_service_time",
            priors.mean_service_time,
            config.mean_service_times.get(code),
        )
        for code in airport_codes
    }
    travel_times = {
        (origin, destination): _latent(
            sampler,
            f"travel_time_{origin}_{destination}",
            priors.travel_time,
            config.travel_times.get((origin, destination)),
        )
        for origin in airport_codes
        for destination in airport_codes
        if origin != destination
    }

    # Simulate for each state
    for day_ind, state in enumerate(states):
        var_prefix = f"day{day_ind}_"

        # Assign the latent variables to the airports
        for airport in state.airports.values():
            airport.mean_service_time = airport_service_times[airport.code]
            airport.mean_turnaround_time = airport_turnaround_times[airport.code]
            airport.turnaround_time_std_dev = (
                turnaround_time_variation * airport.mean_turnaround_time
            )
            airport.stochastic_service_times = config.stochastic_service_times
            airport.stochastic_turnaround_times = config.stochastic_turnaround_times

        simulate_day(
            state,
            config.end_time,
            config.dt,
            travel_times,
            travel_time_variation,
            measurement_variation,
            sampler,
            var_prefix,
            stochastic_travel_times=config.stochastic_travel_times,
            should_stop=should_stop,
        )
        logger.info(
            "Simulated day %d: %d of %d flights completed",
            day_ind,
            len(state.completed_flights),
            state.num_flights,
        )

    return states
