"""Simulate one day of operations in an air traffic network."""
import logging
import math
from typing import Callable, Optional, Union

import torch

from delaynet.network import NetworkState
from delaynet.sampling import Sampler, normal
from delaynet.types import AirportCode, Flight, Time

logger = logging.getLogger(__name__)

# Slack used when deciding whether the last tick lands on end_time
TICK_TOLERANCE = 1e-9


def simulation_ticks(end_time: float, dt: float) -> list[float]:
    """Return the times 0, dt, 2 dt, ... up to and including end_time."""
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    num_ticks = math.floor(end_time / dt + TICK_TOLERANCE)
    return [k * dt for k in range(num_ticks + 1)]


def simulate_day(
    state: NetworkState,
    end_time: float,
    dt: float,
    travel_times: dict[tuple[AirportCode, AirportCode], Time],
    travel_time_variation: Union[torch.tensor, float],
    measurement_variation: Union[torch.tensor, float],
    sampler: Sampler,
    var_prefix: str = "",
    stochastic_travel_times: bool = False,
    should_stop: Optional[Callable[[float], bool]] = None,
) -> NetworkState:
    """Simulate the network state from time 0 until `end_time`, in increments of `dt`.

    Modifies `state` in place. Once the simulation finishes, every flight is given a
    noisy measured departure and arrival time, whether or not it completed.

    Args:
        state: the starting state of the network.
        end_time: the time at which to stop the simulation, in hours.
        dt: the time resolution of the simulation, in hours.
        travel_times: a dictionary mapping pairs of airport codes to nominal travel
            times between those airports.
        travel_time_variation: the fractional variation of travel time.
        measurement_variation: the standard deviation of measurement noise.
        sampler: used to draw all random choices.
        var_prefix: prefix for sampled variable names.
        stochastic_travel_times: if True, sample travel times; otherwise use the
            nominal travel times.
        should_stop: optional callback checked at the start of each tick; if it
            returns True, the simulation stops and unfinished flights are observed
            at that time.

    Flights that did not complete by the horizon are observed there. Only their
    missing simulated times are anchored at the horizon: a flight still in transit
    keeps its simulated departure time as the center of its measured departure.

    Returns:
        the simulated state.
    """
    logger.debug(
        "Starting %s: %d pending flights",
        var_prefix or "simulation",
        len(state.pending_flights),
    )

    horizon = end_time
    for t in simulation_ticks(end_time, dt):
        if should_stop is not None and should_stop(t):
            logger.debug("Stopping early at %s", t)
            horizon = t
            break

        # Aircraft that have finished turning around become available; this must
        # happen first so they can be reused by departures in the same tick
        for airport in state.airports.values():
            airport.update_available_aircraft(t)

        # Flights with an aircraft and a crew move to the runway at their origin
        ready_to_depart = state.pop_ready_to_depart_flights(t)
        state.add_ready_to_depart_flights(ready_to_depart)

        # Flights in transit join the runway queue at their destination
        state.update_in_transit_flights(t)

        # All runway queues get serviced
        for airport in state.airports.values():
            departed_flights, landed_flights = airport.update_runway_queue(
                t, sampler, var_prefix
            )
            state.add_in_transit_flights(
                departed_flights,
                travel_times,
                travel_time_variation,
                sampler,
                var_prefix,
                stochastic=stochastic_travel_times,
            )
            state.add_completed_flights(landed_flights)

    # Link simulated and measured times for every flight
    horizon = Time(float(horizon))
    for flight in state.completed_flights:
        _observe_flight(
            flight,
            flight.simulated_departure_time,
            flight.simulated_arrival_time,
            measurement_variation,
            sampler,
            var_prefix,
        )

    # Flights that did not complete are observed at the horizon
    unfinished_flights = state.unfinished_flights()
    for flight in unfinished_flights:
        _observe_flight(
            flight,
            flight.simulated_departure_time if flight.departed else horizon,
            flight.simulated_arrival_time if flight.landed else horizon,
            measurement_variation,
            sampler,
            var_prefix,
        )

    logger.debug(
        "Finished %s (%s): %d completed flights, %d unfinished flights",
        var_prefix or "simulation",
        "complete" if state.complete else "incomplete",
        len(state.completed_flights),
        len(unfinished_flights),
    )

    return state


def _observe_flight(
    flight: Flight,
    departure_time: Time,
    arrival_time: Time,
    measurement_variation: Union[torch.tensor, float],
    sampler: Sampler,
    var_prefix: str = "",
) -> None:
    """Draw noisy measurements of a flight's departure and arrival times.

    The flight's actual times, where known, are used as observations.
    """
    flight.measured_departure_time = sampler.sample(
        var_prefix + str(flight) + "_actual_departure_time",
        normal(departure_time, measurement_variation),
        obs=flight.actual_departure_time,
    )
    flight.measured_arrival_time = sampler.sample(
        var_prefix + str(flight) + "_actual_arrival_time",
        normal(arrival_time, measurement_variation),
        obs=flight.actual_arrival_time,
    )
