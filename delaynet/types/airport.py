"""Define types for airports in the network."""
import logging
from dataclasses import dataclass, field
from typing import Optional

import torch

from delaynet.sampling import Sampler, exponential, normal
from delaynet.types.flight import Flight
from delaynet.types.util import AirportCode, Time

logger = logging.getLogger(__name__)


@dataclass
class QueueEntry:
    """An entry in a runway queue.

    Attributes:
        flight: The flight associated with this queue entry.
        queue_start_time: The time at which the flight entered the queue.
        total_wait_time: The total duration the flight has spent in the queue.
        assigned_service_time: The time at which the flight will be serviced.
    """

    flight: Flight
    queue_start_time: Time
    total_wait_time: Time = field(default_factory=lambda: Time(0.0))
    assigned_service_time: Optional[Time] = None


@dataclass
class Airport:
    """Represents a single airport in the network.

    Attributes:
        code: The airport code.
        mean_service_time: The mean service time for departing and arriving aircraft.
        mean_turnaround_time: The nominal turnaround time for aircraft landing at
            this airport.
        turnaround_time_std_dev: The standard deviation of the turnaround time for
            aircraft landing at this airport.
        runway_queue: The queue of aircraft waiting to take off or land.
        turnaround_queue: The queue of aircraft waiting to be cleaned/refueled/etc..
            Each entry in this queue represents a time at which the aircraft will be
            ready for its next departure.
        available_aircraft: a list of times at which aircraft became available (after
            turnaround).
        available_crew: a list of times at which crews became available (after
            turnaround). The crew for one aircraft is treated as a single unit.
        stochastic_service_times: if True, sample service times from an exponential
            distribution; otherwise use the mean service time.
        stochastic_turnaround_times: if True, sample turnaround times from a normal
            distribution; otherwise use the mean turnaround time.
    """

    code: AirportCode
    mean_service_time: Time = field(default_factory=lambda: Time(1.0))
    mean_turnaround_time: Time = field(default_factory=lambda: Time(1.0))
    turnaround_time_std_dev: Time = field(default_factory=lambda: Time(1.0))
    runway_queue: list[QueueEntry] = field(default_factory=list)
    turnaround_queue: list[Time] = field(default_factory=list)
    available_aircraft: list[Time] = field(default_factory=list)
    available_crew: list[Time] = field(default_factory=list)
    stochastic_service_times: bool = False
    stochastic_turnaround_times: bool = False

    @property
    def num_available_aircraft(self) -> int:
        return len(self.available_aircraft)

    @property
    def num_available_crew(self) -> int:
        return len(self.available_crew)

    def update_available_aircraft(self, time: Time) -> None:
        """Update the available aircraft and crew by checking the turnaround queue.

        Args:
            time: The current time.
        """
        new_turnaround_queue = []
        for turnaround_time in self.turnaround_queue:
            if turnaround_time <= time:
                # The aircraft and its crew are ready to depart
                self.available_aircraft.append(turnaround_time)
                self.available_crew.append(turnaround_time)
            else:
                new_turnaround_queue.append(turnaround_time)

        self.turnaround_queue = new_turnaround_queue

    def try_depart(self, flight: Flight) -> Optional[Time]:
        """Reserve an aircraft and a crew for a departing flight, if possible.

        Args:
            flight: The flight that wants to depart.

        Returns: the time at which the flight is ready to enter the runway queue, or
            None if no aircraft or no crew is available (nothing is reserved).
        """
        if not self.available_aircraft or not self.available_crew:
            return None

        aircraft_ready_time = self.available_aircraft.pop()
        crew_ready_time = self.available_crew.pop()
        return max(
            aircraft_ready_time, crew_ready_time, flight.scheduled_departure_time
        )

    def update_runway_queue(
        self, time: Time, sampler: Sampler, var_prefix: str = ""
    ) -> tuple[list[Flight], list[Flight]]:
        """Update the runway queue by removing flights that have been serviced.

        The runway is a single first-in-first-out server shared by departures and
        arrivals, so a flight is never serviced before the flights ahead of it.

        Args:
            time: The current time.
            sampler: used to draw service and turnaround times.
            var_prefix: the prefix for sampled variable names

        Returns: a list of flights that have departed and a list of flights that have
            landed.
        """
        departed_flights = []
        landed_flights = []
        while self.runway_queue and (
            self.runway_queue[0].assigned_service_time is None
            or self.runway_queue[0].assigned_service_time <= time
        ):
            # If no service time is assigned, assign one now
            if self.runway_queue[0].assigned_service_time is None:
                self._assign_service_time(self.runway_queue[0], sampler, var_prefix)

            # The service time may lie in the future, in which case the flight (and
            # everyone behind it) keeps waiting
            if self.runway_queue[0].assigned_service_time > time:
                break

            queue_entry = self.runway_queue.pop(0)
            flight = queue_entry.flight

            departing = flight.origin == self.code
            if departing:
                self._assign_departure_time(queue_entry)
                departed_flights.append(flight)
            else:
                self._assign_arrival_time(queue_entry)
                self._assign_turnaround_time(flight, sampler, var_prefix)
                landed_flights.append(flight)

        return departed_flights, landed_flights

    def _assign_service_time(
        self, queue_entry: QueueEntry, sampler: Sampler, var_prefix: str = ""
    ) -> None:
        """Draw a service time for the entry at the head of the runway queue.

        Args:
            queue_entry: The queue entry to assign a service time to.
            sampler: used to draw the service time.
            var_prefix: prefix for sampled variable names.
        """
        departing = queue_entry.flight.origin == self.code
        var_name = var_prefix + str(queue_entry.flight)
        var_name += "_departure" if departing else "_arrival"
        var_name += "_service_time"
        if self.stochastic_service_times:
            service_time = sampler.sample(
                var_name, exponential(self.mean_service_time)
            )
        else:
            service_time = sampler.deterministic(var_name, self.mean_service_time)

        # Every aircraft still waiting is pushed back by this service
        for other_queue_entry in self.runway_queue:
            other_queue_entry.total_wait_time = (
                other_queue_entry.total_wait_time + service_time
            )

        queue_entry.assigned_service_time = (
            queue_entry.queue_start_time + queue_entry.total_wait_time
        )

        logger.debug(
            "%s entered %s queue at %s, assigned service time %s",
            queue_entry.flight,
            "departure" if departing else "arrival",
            float(queue_entry.queue_start_time),
            float(queue_entry.assigned_service_time),
        )

    def _assign_departure_time(self, queue_entry: QueueEntry) -> None:
        """Assign a departure time to a flight that is using the runway.

        Args:
            queue_entry: The queue entry for the flight to assign a departure time to.
        """
        flight = queue_entry.flight
        flight.simulated_departure_time = queue_entry.assigned_service_time
        logger.debug(
            "%s departing at %s (scheduled %s)",
            flight,
            float(flight.simulated_departure_time),
            float(flight.scheduled_departure_time),
        )

    def _assign_arrival_time(self, queue_entry: QueueEntry) -> None:
        """Assign an arrival time to a flight that is using the runway.

        Args:
            queue_entry: The queue entry for the flight to assign an arrival time to.
        """
        flight = queue_entry.flight
        flight.simulated_arrival_time = queue_entry.assigned_service_time
        logger.debug(
            "%s arriving at %s (scheduled %s)",
            flight,
            float(flight.simulated_arrival_time),
            float(flight.scheduled_arrival_time),
        )

    def _assign_turnaround_time(
        self, flight: Flight, sampler: Sampler, var_prefix: str = ""
    ) -> None:
        """Draw a turnaround time for an arrived aircraft.

        Args:
            flight: The flight to assign a turnaround time to.
            sampler: used to draw the turnaround time.
            var_prefix: prefix for sampled variable names.
        """
        var_name = var_prefix + str(flight) + "_turnaround_time"
        if self.stochastic_turnaround_times:
            turnaround_time = sampler.sample(
                var_name,
                normal(self.mean_turnaround_time, self.turnaround_time_std_dev),
            )
            turnaround_time = torch.clamp(turnaround_time, min=0.0)
        else:
            turnaround_time = sampler.deterministic(
                var_name, self.mean_turnaround_time
            )

        self.turnaround_queue.append(flight.simulated_arrival_time + turnaround_time)
