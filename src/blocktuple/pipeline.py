"""End-to-end run: fetch pool stakes, compute run-length statistics, persist tables."""

import logging
import numbers
from dataclasses import dataclass
from typing import Optional

import numpy as np

from monte_carlo.simulation import (
    AggregateStatistics,
    SimulationConfig,
    empirical_pmf,
    run_simulation,
)

from .api.rated import ValidatorPool, fetch_validator_pools, get_pool_probability
from .config import Config
from .distribution import RunLengthDistribution, run_length_distribution
from .project_config import SimulationSettings
from .projection import calculate_epoch_probabilities
from .storage.sqlite import SCOPE_HORIZON, SCOPE_TARGET_EPOCH, SQLiteWriter
from .tables import pmf_table, projection_table, run_length_table

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything computed for one pool.

    Attributes:
        pool_id: Pool the probability was taken from
        p: Per-slot success probability of the pool
        distribution: Exact longest-run distribution
        monte_carlo_pmf: Empirical longest-run PMF
        horizon: Statistics over every simulated epoch
        target: Statistics for the target epoch (None if not configured)
        epoch_probabilities: Per-epoch projection terms (None if not configured)
        pools: Pool snapshot the run started from
    """
    pool_id: str
    p: float
    distribution: RunLengthDistribution
    monte_carlo_pmf: np.ndarray
    horizon: AggregateStatistics
    target: Optional[AggregateStatistics] = None
    epoch_probabilities: Optional[list[float]] = None
    pools: Optional[list[ValidatorPool]] = None


def projection_slot(settings: SimulationSettings) -> Optional[int]:
    """Threshold slot for the epoch projection, if one can be fixed."""
    if settings.projection_slot is not None:
        return settings.projection_slot
    slot = settings.target_slot
    if isinstance(slot, numbers.Integral) and not isinstance(slot, bool):
        return int(slot)
    return None


def compute_statistics(p: float, settings: SimulationSettings, pool_id: str = "") -> PipelineResult:
    """Run every statistic for a single success probability."""
    n = settings.epoch_length
    # Independent streams for each sampler, all derived from the one seed
    pmf_seed, horizon_seed, target_seed = np.random.SeedSequence(settings.seed).spawn(3)

    distribution = run_length_distribution(n, p)
    mc_pmf = empirical_pmf(
        settings.pmf_samples, p, n, seed=pmf_seed, workers=settings.workers
    )

    horizon = run_simulation(SimulationConfig(
        n_simulations=settings.num_simulations,
        p=p,
        n_epochs=settings.num_epochs,
        epoch_length=n,
        seed=horizon_seed,
        workers=settings.workers,
    ))

    target = None
    epoch_probabilities = None
    if settings.target_epoch is not None:
        target = run_simulation(SimulationConfig(
            n_simulations=settings.num_simulations,
            p=p,
            n_epochs=settings.num_epochs,
            target_epoch=settings.target_epoch,
            target_slot=settings.target_slot,
            epoch_length=n,
            seed=target_seed,
            workers=settings.workers,
        ))

        slot = projection_slot(settings)
        if slot is not None:
            epoch_probabilities = calculate_epoch_probabilities(
                settings.target_epoch, slot, p, n
            )

    return PipelineResult(
        pool_id=pool_id,
        p=p,
        distribution=distribution,
        monte_carlo_pmf=mc_pmf,
        horizon=horizon,
        target=target,
        epoch_probabilities=epoch_probabilities,
    )


def persist(result: PipelineResult, writer: SQLiteWriter) -> None:
    """Write every table of a pipeline result."""
    if result.pools:
        writer.write_pools(result.pools)

    writer.write_pmf(result.pool_id, pmf_table(result.distribution.pmf, result.monte_carlo_pmf))
    writer.write_run_length_stats(
        result.pool_id,
        SCOPE_HORIZON,
        run_length_table(result.horizon.median_counts, result.horizon.odds),
    )

    if result.target is not None:
        writer.write_run_length_stats(
            result.pool_id,
            SCOPE_TARGET_EPOCH,
            run_length_table(result.target.median_counts, result.target.odds),
        )
        if result.target.median_target_slot_hits is not None:
            writer.write_target_slot_hits(
                result.pool_id,
                result.target.config.target_epoch,
                result.target.config.target_slot,
                result.target.median_target_slot_hits,
            )

    if result.epoch_probabilities is not None:
        writer.write_projection(result.pool_id, projection_table(result.epoch_probabilities))

    logger.info(f"Persisted results for {result.pool_id} to {writer.db_path}")


async def run_pipeline(
    config: Config,
    settings: SimulationSettings,
    writer: Optional[SQLiteWriter] = None,
) -> PipelineResult:
    """Fetch the pool snapshot, compute statistics for the configured pool, persist them.

    Errors from the pool source propagate unchanged; nothing is written unless
    every statistic was computed.
    """
    pools = await fetch_validator_pools(config)
    p = get_pool_probability(pools, settings.pool_id)
    logger.info(f"Pool {settings.pool_id}: p={p:.6f}")

    result = compute_statistics(p, settings, pool_id=settings.pool_id)
    result.pools = pools

    if writer is not None:
        persist(result, writer)
    return result
