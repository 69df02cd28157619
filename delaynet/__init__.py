"""Simulate delay propagation in an air traffic network."""
from delaynet.config import PriorConfig, SimulationConfig
from delaynet.model import air_traffic_network_model
from delaynet.network import NetworkState, UnknownAirportError
from delaynet.sampling import PyroSampler, Sampler, SiteCollisionError
from delaynet.schedule import parse_schedule
from delaynet.simulator import simulate_day
from delaynet.types import Airport, Flight, QueueEntry

__all__ = [
    "Airport",
    "Flight",
    "NetworkState",
    "PriorConfig",
    "PyroSampler",
    "QueueEntry",
    "Sampler",
    "SimulationConfig",
    "SiteCollisionError",
    "UnknownAirportError",
    "air_traffic_network_model",
    "parse_schedule",
    "simulate_day",
]
