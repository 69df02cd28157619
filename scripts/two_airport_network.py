"""Run the simulation for a simple two-airport network."""
import logging

import click
import pandas as pd
import pyro
import torch
import tqdm

from delaynet.config import SimulationConfig
from delaynet.model import air_traffic_network_model
from delaynet.network import NetworkState
from delaynet.schedule import parse_schedule
from delaynet.summary import airports_dataframe, flights_dataframe


def make_states(num_days: int) -> list[NetworkState]:
    """Build one starting state per day for a schedule that flies A1 -> A2 -> A1."""
    states = []
    for _ in range(num_days):
        schedule = pd.DataFrame(
            {
                "flight_number": ["F1", "F1"],
                "origin_airport": ["A1", "A2"],
                "destination_airport": ["A2", "A1"],
                "scheduled_departure_time": [0.0, 2.0],
                "scheduled_arrival_time": [1.0, 3.5],
                "actual_departure_time": [
                    0.0 + float(torch.rand(())) * 0.3,
                    2.0 + float(torch.rand(())) * 0.3,
                ],
                "actual_arrival_time": [
                    1.0 + float(torch.rand(())) * 0.3,
                    3.5 + float(torch.rand(())) * 0.3,
                ],
            }
        )
        flights, airports = parse_schedule(schedule)
        # One aircraft and its crew start the day at A1
        airports[0].available_aircraft.append(torch.tensor(0.0))
        airports[0].available_crew.append(torch.tensor(0.0))
        states.append(
            NetworkState(
                airports={airport.code: airport for airport in airports},
                pending_flights=flights,
            )
        )

    return states


@click.command()
@click.option("--days", default=3, help="Number of days to simulate")
@click.option("--n-samples", default=100, help="Number of prior samples to draw")
@click.option("--end-time", default=24.0, help="Hours to simulate each day")
@click.option("--dt", default=0.1, help="Time resolution of the simulation, in hours")
@click.option("--stochastic", is_flag=True, help="Sample service/turnaround/travel")
@click.option("--seed", default=1, help="Random seed")
@click.option("--log-level", default="WARNING", help="Logging level")
def main(days, n_samples, end_time, dt, stochastic, seed, log_level):
    logging.basicConfig(level=log_level.upper())
    pyro.enable_validation(True)
    pyro.set_rng_seed(seed)

    states = make_states(days)
    config = SimulationConfig(
        end_time=end_time,
        dt=dt,
        stochastic_service_times=stochastic,
        stochastic_turnaround_times=stochastic,
        stochastic_travel_times=stochastic,
    )

    # Draw samples from the prior and record the resulting arrival delays
    records = []
    for _ in tqdm.tqdm(range(n_samples)):
        trace = pyro.poutine.trace(air_traffic_network_model).get_trace(
            states, config=config
        )
        output_states = trace.nodes["_RETURN"]["value"]
        flights_df = pd.concat(
            [flights_dataframe(state) for state in output_states], ignore_index=True
        )
        delays = (
            flights_df["simulated_arrival_time"]
            - flights_df["scheduled_arrival_time"]
        )
        records.append(
            {
                "travel_time_A1_A2": float(trace.nodes["travel_time_A1_A2"]["value"]),
                "travel_time_A2_A1": float(trace.nodes["travel_time_A2_A1"]["value"]),
                "mean_arrival_delay": delays.mean(),
                "completed_fraction": (flights_df["status"] == "completed").mean(),
                "log_prob": float(trace.log_prob_sum()),
            }
        )

    samples_df = pd.DataFrame.from_records(records)
    click.echo(samples_df.describe().to_string())

    click.echo("\nFinal airport state (last sample, last day):")
    click.echo(airports_dataframe(output_states[-1]).to_string(index=False))


if __name__ == "__main__":
    main()
