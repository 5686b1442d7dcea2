"""Run-length Monte Carlo simulator for epoch slot assignments."""

from monte_carlo.simulation import (
    RANDOM_SLOT,
    SimulationConfig,
    AggregateStatistics,
    simulate_epochs,
    draw_target_slots,
    find_runs,
    longest_runs,
    tally_runs,
    tally_target_epoch,
    run_simulation,
    sample_run_lengths,
    empirical_pmf,
)

__all__ = [
    "RANDOM_SLOT",
    "SimulationConfig",
    "AggregateStatistics",
    "simulate_epochs",
    "draw_target_slots",
    "find_runs",
    "longest_runs",
    "tally_runs",
    "tally_target_epoch",
    "run_simulation",
    "sample_run_lengths",
    "empirical_pmf",
]
