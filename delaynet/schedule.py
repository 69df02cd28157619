"""Define methods for turning a flight schedule into network objects."""
from typing import Mapping, Optional

import pandas as pd

from delaynet.types import Airport, Flight, Time


def _optional_time(value) -> Optional[Time]:
    """Convert a possibly-missing schedule entry into a time."""
    if value is None or pd.isna(value):
        return None

    return Time(float(value))


def parse_flight(schedule_row: Mapping) -> Flight:
    """
    Parse a row of the schedule into a Flight object.

    Args:
        schedule_row: a mapping (e.g. a pandas Series) with the following items
            - flight_number
            - origin_airport
            - destination_airport
            - scheduled_departure_time
            - scheduled_arrival_time
            - actual_departure_time (optional; missing or NaN if not observed)
            - actual_arrival_time (optional; missing or NaN if not observed)
    """
    return Flight(
        flight_number=str(schedule_row["flight_number"]),
        origin=schedule_row["origin_airport"],
        destination=schedule_row["destination_airport"],
        scheduled_departure_time=Time(float(schedule_row["scheduled_departure_time"])),
        scheduled_arrival_time=Time(float(schedule_row["scheduled_arrival_time"])),
        actual_departure_time=_optional_time(
            schedule_row.get("actual_departure_time")
        ),
        actual_arrival_time=_optional_time(schedule_row.get("actual_arrival_time")),
    )


def parse_schedule(schedule_df: pd.DataFrame) -> tuple[list[Flight], list[Airport]]:
    """Parse a pandas dataframe for a schedule into a list of pending flights.

    Args:
        schedule_df: A pandas dataframe with the following columns:
            flight_number: The flight number
            origin_airport: The airport code of the origin airport
            destination_airport: The airport code of the destination airport
            scheduled_departure_time: The scheduled departure time
            scheduled_arrival_time: The scheduled arrival time
            actual_departure_time: The actual departure time (optional)
            actual_arrival_time: The actual arrival time (optional)

    Returns:
        a list of flights, and
        a list of airports
    """
    flights = [parse_flight(row) for _, row in schedule_df.iterrows()]

    # Unique airport codes, in order of first appearance
    airport_codes = pd.concat(
        [schedule_df["origin_airport"], schedule_df["destination_airport"]]
    ).unique()
    airports = [Airport(code) for code in airport_codes]

    return flights, airports
