"""Define the network model"""
import logging
from dataclasses import dataclass, field
from typing import Union

import torch

from delaynet.sampling import Sampler, normal
from delaynet.types import Airport, AirportCode, Flight, QueueEntry, Time

logger = logging.getLogger(__name__)


class UnknownAirportError(ValueError):
    """Raised when a flight references an airport that is not in the network."""


@dataclass
class NetworkState:
    """The state of the network at a given time.

    Every flight is held by exactly one of: the pending flights list, the runway
    queue of some airport, the in-transit flights list, or the completed flights
    list.

    Attributes:
        airports: A dictionary mapping airport codes to Airport objects.
        pending_flights: A list of flights that have not yet departed, sorted by
            scheduled departure time. Will be sorted after initialization.
        in_transit_flights: A list of flights that are currently in the air, along with
            the time at which they will arrive at their destination.
        completed_flights: A list of flights that have completed their journeys.
    """

    airports: dict[AirportCode, Airport]
    pending_flights: list[Flight]
    in_transit_flights: list[tuple[Flight, Time]] = field(default_factory=list)
    completed_flights: list[Flight] = field(default_factory=list)

    def __post_init__(self):
        for flight in self.pending_flights:
            for code in (flight.origin, flight.destination):
                self._check_airport(flight, code)
        for flight, _ in self.in_transit_flights:
            self._check_airport(flight, flight.destination)

        # Stable sort, so flights scheduled at the same time keep their given order
        self.pending_flights.sort(key=lambda flight: flight.scheduled_departure_time)

    def _check_airport(self, flight: Flight, code: AirportCode) -> None:
        if code not in self.airports:
            raise UnknownAirportError(
                f"Flight {flight} references unknown airport {code}"
            )

    @property
    def queued_flights(self) -> list[Flight]:
        """All flights currently waiting in a runway queue."""
        return [
            queue_entry.flight
            for airport in self.airports.values()
            for queue_entry in airport.runway_queue
        ]

    @property
    def num_flights(self) -> int:
        """The total number of flights held anywhere in the network."""
        return (
            len(self.pending_flights)
            + len(self.queued_flights)
            + len(self.in_transit_flights)
            + len(self.completed_flights)
        )

    @property
    def complete(self) -> bool:
        """Return True if all flights have completed their journeys."""
        return (
            len(self.pending_flights) == 0
            and len(self.in_transit_flights) == 0
            and all(len(a.runway_queue) == 0 for a in self.airports.values())
        )

    def unfinished_flights(self) -> list[Flight]:
        """Return all flights that have not completed, in a stable order.

        Pending flights come first, then queued flights (airport by airport), then
        in-transit flights.
        """
        return (
            list(self.pending_flights)
            + self.queued_flights
            + [flight for flight, _ in self.in_transit_flights]
        )

    def pop_ready_to_depart_flights(self, time: Time) -> list[tuple[Flight, Time]]:
        """Pop all flights from the pending flights list that are able to depart.

        A flight can depart once its scheduled departure time has passed and an
        aircraft and a crew are available at its origin. Flights are considered in
        the order of the pending flights list; flights that cannot depart stay
        pending.

        Args:
            time: The time at which to check for flights ready to depart.

        Returns:
            A list of (flight, ready time) pairs for the flights that are ready to
            depart.
        """
        ready_to_depart = []
        new_pending_flights = []
        for flight in self.pending_flights:
            ready_time = None
            if flight.scheduled_departure_time <= time:
                ready_time = self.airports[flight.origin].try_depart(flight)

            if ready_time is None:
                new_pending_flights.append(flight)
            else:
                logger.debug(
                    "%s ready to depart at %s (scheduled %s)",
                    flight,
                    float(ready_time),
                    float(flight.scheduled_departure_time),
                )
                ready_to_depart.append((flight, ready_time))

        self.pending_flights = new_pending_flights

        return ready_to_depart

    def add_ready_to_depart_flights(
        self, ready_to_depart: list[tuple[Flight, Time]]
    ) -> None:
        """Move flights that are ready to depart into their origin's runway queue.

        Args:
            ready_to_depart: (flight, ready time) pairs, as returned by
                `pop_ready_to_depart_flights`.
        """
        for flight, ready_time in ready_to_depart:
            queue_entry = QueueEntry(flight=flight, queue_start_time=ready_time)
            self.airports[flight.origin].runway_queue.append(queue_entry)

    def add_in_transit_flights(
        self,
        departing_flights: list[Flight],
        travel_times: dict[tuple[AirportCode, AirportCode], Time],
        travel_time_variation: Union[torch.tensor, float],
        sampler: Sampler,
        var_prefix: str = "",
        stochastic: bool = False,
    ) -> None:
        """Add a list of flights to the in-transit flights list.

        Args:
            departing_flights: The list of flights to add.
            travel_times: A dictionary mapping origin-destination pairs to nominal
                travel times.
            travel_time_variation: The fractional variation in travel time.
            sampler: used to draw travel times.
            var_prefix: prefix for sampled variable names.
            stochastic: if True, sample travel times from a normal distribution
                around the nominal travel time; otherwise use the nominal value.
        """
        for flight in departing_flights:
            nominal_travel_time = torch.clamp(
                torch.as_tensor(travel_times[flight.origin, flight.destination]),
                min=0.0,
            )
            var_name = var_prefix + str(flight) + "_travel_time"
            if stochastic:
                travel_time = sampler.sample(
                    var_name,
                    normal(
                        nominal_travel_time,
                        nominal_travel_time * travel_time_variation,
                    ),
                )
            else:
                travel_time = sampler.deterministic(var_name, nominal_travel_time)
            travel_time = torch.clamp(travel_time, min=0.0)

            arrival_time = flight.simulated_departure_time + travel_time
            self.in_transit_flights.append((flight, arrival_time))
            logger.debug(
                "%s assigned travel time %s (nominal %s), will arrive at %s",
                flight,
                float(travel_time),
                float(nominal_travel_time),
                float(arrival_time),
            )

    def add_completed_flights(self, landing_flights: list[Flight]) -> None:
        """Add a list of flights to the completed flights list.

        Args:
            landing_flights: The list of flights to add.
        """
        self.completed_flights.extend(landing_flights)

    def update_in_transit_flights(self, time: Time) -> None:
        """Move in-transit flights that are ready to arrive into the runway queue.

        Args:
            time: The current time.
        """
        new_in_transit_flights = []

        for flight, arrival_time in self.in_transit_flights:
            if arrival_time <= time:
                queue_entry = QueueEntry(flight=flight, queue_start_time=arrival_time)
                self.airports[flight.destination].runway_queue.append(queue_entry)
            else:
                new_in_transit_flights.append((flight, arrival_time))

        self.in_transit_flights = new_in_transit_flights
