"""Test the delaynet.network module."""
import unittest

import pyro
import torch

from delaynet.network import NetworkState, UnknownAirportError
from delaynet.sampling import PyroSampler
from delaynet.types import Airport, Flight, QueueEntry, Time


def make_flight(number, origin, destination, departure, arrival=None):
    if arrival is None:
        arrival = departure + 1.0
    return Flight(number, origin, destination, Time(departure), Time(arrival))


class TestNetworkState(unittest.TestCase):
    def setUp(self):
        self.airports = {
            "ABC": Airport("ABC"),
            "XYZ": Airport("XYZ"),
        }
        self.sampler = PyroSampler()

    def test_unknown_airport(self):
        with self.assertRaises(UnknownAirportError):
            NetworkState(
                airports=self.airports,
                pending_flights=[make_flight("F1", "ABC", "QQQ", 0.0)],
            )

    def test_unknown_in_transit_destination(self):
        with self.assertRaises(UnknownAirportError):
            NetworkState(
                airports=self.airports,
                pending_flights=[],
                in_transit_flights=[(make_flight("F1", "ABC", "QQQ", 0.0), Time(1.0))],
            )

    def test_pending_flights_sorted(self):
        flights = [
            make_flight("F1", "ABC", "XYZ", 2.0),
            make_flight("F2", "ABC", "XYZ", 1.0),
            make_flight("F3", "XYZ", "ABC", 2.0),
        ]
        state = NetworkState(airports=self.airports, pending_flights=flights)

        # Flights with equal departure times keep their original order
        self.assertEqual(
            [f.flight_number for f in state.pending_flights], ["F2", "F1", "F3"]
        )

    def test_pop_ready_to_depart_flights(self):
        self.airports["ABC"].available_aircraft.append(Time(0.5))
        self.airports["ABC"].available_crew.append(Time(0.0))
        first = make_flight("F1", "ABC", "XYZ", 1.0)
        second = make_flight("F2", "ABC", "XYZ", 1.0)
        later = make_flight("F3", "ABC", "XYZ", 5.0)
        state = NetworkState(
            airports=self.airports, pending_flights=[first, second, later]
        )

        # Nothing is ready before the scheduled departure time
        self.assertEqual(state.pop_ready_to_depart_flights(0.5), [])
        self.assertEqual(len(state.pending_flights), 3)

        # Only one aircraft is available, so only the first flight can go
        ready = state.pop_ready_to_depart_flights(1.0)
        self.assertEqual(len(ready), 1)
        flight, ready_time = ready[0]
        self.assertIs(flight, first)
        self.assertEqual(float(ready_time), 1.0)
        self.assertEqual(state.pending_flights, [second, later])
        self.assertEqual(self.airports["ABC"].num_available_aircraft, 0)
        self.assertEqual(self.airports["ABC"].num_available_crew, 0)

        # Without any aircraft, the remaining flights stay pending
        self.assertEqual(state.pop_ready_to_depart_flights(10.0), [])
        self.assertEqual(state.pending_flights, [second, later])

    def test_add_ready_to_depart_flights(self):
        flight = make_flight("F1", "ABC", "XYZ", 1.0)
        state = NetworkState(airports=self.airports, pending_flights=[])

        state.add_ready_to_depart_flights([(flight, Time(1.5))])

        queue = self.airports["ABC"].runway_queue
        self.assertEqual(len(queue), 1)
        self.assertIs(queue[0].flight, flight)
        self.assertEqual(float(queue[0].queue_start_time), 1.5)
        self.assertIsNone(queue[0].assigned_service_time)

    def test_add_in_transit_flights(self):
        flight = make_flight("F1", "ABC", "XYZ", 1.0)
        flight.simulated_departure_time = Time(2.0)
        state = NetworkState(airports=self.airports, pending_flights=[])

        state.add_in_transit_flights(
            [flight], {("ABC", "XYZ"): 1.5}, 0.1, self.sampler, "day0_"
        )

        self.assertEqual(len(state.in_transit_flights), 1)
        in_transit_flight, arrival_time = state.in_transit_flights[0]
        self.assertIs(in_transit_flight, flight)
        self.assertEqual(float(arrival_time), 3.5)
        self.assertIn("day0_F1_ABC_XYZ_travel_time", self.sampler.site_names)

    def test_negative_travel_time_is_clamped(self):
        flight = make_flight("F1", "ABC", "XYZ", 1.0)
        flight.simulated_departure_time = Time(2.0)
        state = NetworkState(airports=self.airports, pending_flights=[])

        state.add_in_transit_flights(
            [flight], {("ABC", "XYZ"): -1.0}, 0.1, self.sampler
        )

        self.assertEqual(float(state.in_transit_flights[0][1]), 2.0)

    def test_stochastic_travel_time(self):
        flight = make_flight("F1", "ABC", "XYZ", 1.0)
        flight.simulated_departure_time = Time(2.0)
        state = NetworkState(airports=self.airports, pending_flights=[])

        def add():
            state.add_in_transit_flights(
                [flight], {("ABC", "XYZ"): 1.5}, 0.1, self.sampler, stochastic=True
            )

        trace = pyro.poutine.trace(add).get_trace()

        site = trace.nodes["F1_ABC_XYZ_travel_time"]
        self.assertIsInstance(site["fn"], pyro.distributions.Normal)
        self.assertTrue(torch.allclose(site["fn"].loc, torch.tensor(1.5)))
        self.assertTrue(torch.allclose(site["fn"].scale, torch.tensor(0.15)))
        expected_arrival = 2.0 + max(float(site["value"]), 0.0)
        self.assertAlmostEqual(
            float(state.in_transit_flights[0][1]), expected_arrival, places=5
        )

    def test_update_in_transit_flights(self):
        arriving = make_flight("F1", "ABC", "XYZ", 0.0)
        still_flying = make_flight("F2", "ABC", "XYZ", 0.0)
        state = NetworkState(
            airports=self.airports,
            pending_flights=[],
            in_transit_flights=[(arriving, Time(1.0)), (still_flying, Time(3.0))],
        )

        state.update_in_transit_flights(2.0)

        queue = self.airports["XYZ"].runway_queue
        self.assertEqual(len(queue), 1)
        self.assertIs(queue[0].flight, arriving)
        self.assertEqual(float(queue[0].queue_start_time), 1.0)
        self.assertEqual(len(state.in_transit_flights), 1)
        self.assertIs(state.in_transit_flights[0][0], still_flying)

    def test_flight_bookkeeping(self):
        pending = make_flight("F1", "ABC", "XYZ", 5.0)
        queued = make_flight("F2", "ABC", "XYZ", 0.0)
        in_transit = make_flight("F3", "XYZ", "ABC", 0.0)
        completed = make_flight("F4", "XYZ", "ABC", 0.0)
        self.airports["ABC"].runway_queue.append(QueueEntry(queued, Time(0.0)))
        state = NetworkState(
            airports=self.airports,
            pending_flights=[pending],
            in_transit_flights=[(in_transit, Time(1.0))],
            completed_flights=[completed],
        )

        self.assertEqual(state.num_flights, 4)
        self.assertEqual(state.queued_flights, [queued])
        self.assertEqual(state.unfinished_flights(), [pending, queued, in_transit])
        self.assertFalse(state.complete)

        state.pending_flights = []
        state.in_transit_flights = []
        self.airports["ABC"].runway_queue = []
        self.assertTrue(state.complete)


if __name__ == "__main__":
    unittest.main()
