"""Summarize the results of a simulation as pandas dataframes."""
from typing import Optional

import pandas as pd

from delaynet.network import NetworkState
from delaynet.types import Flight, Time


def _to_float(time: Optional[Time]) -> Optional[float]:
    return None if time is None else float(time)


def _flight_record(flight: Flight, status: str) -> dict:
    return {
        "flight_number": flight.flight_number,
        "origin_airport": flight.origin,
        "destination_airport": flight.destination,
        "status": status,
        "scheduled_departure_time": _to_float(flight.scheduled_departure_time),
        "scheduled_arrival_time": _to_float(flight.scheduled_arrival_time),
        "simulated_departure_time": _to_float(flight.simulated_departure_time),
        "simulated_arrival_time": _to_float(flight.simulated_arrival_time),
        "measured_departure_time": _to_float(flight.measured_departure_time),
        "measured_arrival_time": _to_float(flight.measured_arrival_time),
        "actual_departure_time": _to_float(flight.actual_departure_time),
        "actual_arrival_time": _to_float(flight.actual_arrival_time),
    }


def flights_dataframe(state: NetworkState) -> pd.DataFrame:
    """List every flight in the network along with its simulated and measured times.

    The status column is one of "completed", "in_transit", "queued" or "pending".
    """
    records = [_flight_record(f, "completed") for f in state.completed_flights]
    records += [_flight_record(f, "in_transit") for f, _ in state.in_transit_flights]
    records += [_flight_record(f, "queued") for f in state.queued_flights]
    records += [_flight_record(f, "pending") for f in state.pending_flights]
    return pd.DataFrame.from_records(records)


def airports_dataframe(state: NetworkState) -> pd.DataFrame:
    """Summarize the resources and queues at each airport."""
    return pd.DataFrame.from_records(
        [
            {
                "airport": code,
                "available_aircraft": airport.num_available_aircraft,
                "available_crew": airport.num_available_crew,
                "runway_queue_length": len(airport.runway_queue),
                "turnaround_queue_length": len(airport.turnaround_queue),
            }
            for code, airport in state.airports.items()
        ]
    )
