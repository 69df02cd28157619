"""Define types for flights in the network."""
from dataclasses import dataclass
from typing import Optional

from delaynet.types.util import AirportCode, Time


@dataclass
class Flight:
    """A flight between two airports.

    Attributes:
        flight_number: The flight number.
        origin: The origin airport code.
        destination: The destination airport code.
        scheduled_departure_time: The scheduled departure time.
        scheduled_arrival_time: The scheduled arrival time.
        simulated_departure_time: The simulated departure time.
        simulated_arrival_time: The simulated arrival time.
        actual_departure_time: The actual (externally observed) departure time.
        actual_arrival_time: The actual (externally observed) arrival time.
        measured_departure_time: The noisy measurement of the departure time.
        measured_arrival_time: The noisy measurement of the arrival time.
    """

    flight_number: str
    origin: AirportCode
    destination: AirportCode
    scheduled_departure_time: Time
    scheduled_arrival_time: Time
    simulated_departure_time: Optional[Time] = None
    simulated_arrival_time: Optional[Time] = None
    actual_departure_time: Optional[Time] = None
    actual_arrival_time: Optional[Time] = None
    measured_departure_time: Optional[Time] = None
    measured_arrival_time: Optional[Time] = None

    @property
    def departed(self) -> bool:
        """Return True if the flight has been assigned a departure time."""
        return self.simulated_departure_time is not None

    @property
    def landed(self) -> bool:
        """Return True if the flight has been assigned an arrival time."""
        return self.simulated_arrival_time is not None

    def __str__(self) -> str:
        return f"{self.flight_number}_{self.origin}_{self.destination}"
