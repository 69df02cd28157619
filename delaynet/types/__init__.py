"""Define types used in the network simulation."""
from delaynet.types.airport import Airport, QueueEntry
from delaynet.types.flight import Flight
from delaynet.types.util import AirportCode, Time

__all__ = [
    "AirportCode",
    "Time",
    "Flight",
    "Airport",
    "QueueEntry",
]
