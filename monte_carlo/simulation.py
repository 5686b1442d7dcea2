"""
Run-Length Simulator

Monte Carlo counterpart to the exact longest-run distribution in
blocktuple.distribution. Each simulation draws a sequence of epochs of
independent slots (success with probability p), tallies every maximal run of
successes by length, and the tallies of all simulations are reduced to
medians and empirical odds.

A simulation's tallies never depend on another simulation: batches of
simulations draw from generators spawned off one SeedSequence, so results
depend on the seed and batch size only.
"""

import logging
import numbers
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from blocktuple.distribution import SLOTS_PER_EPOCH
from blocktuple.errors import (
    InvalidSimulationParameters,
    InvalidTrialCount,
    validate_probability,
)

logger = logging.getLogger(__name__)

# Draw the target slot uniformly once per simulation
RANDOM_SLOT = "random"

# Upper bound on slots materialized per batch
DEFAULT_BATCH_SLOTS = 1 << 22


@dataclass
class SimulationConfig:
    """Configuration for run-length simulation.

    Attributes:
        n_simulations: Number of independent simulations
        p: Per-slot success probability
        n_epochs: Epochs per simulation
        target_epoch: 1-indexed epoch to restrict tallying to (None = all)
        target_slot: 1-indexed slot in the target epoch, or RANDOM_SLOT
        epoch_length: Slots per epoch
        seed: RNG seed, or a SeedSequence to spawn batch seeds from
        batch_size: Simulations per batch (None = sized from DEFAULT_BATCH_SLOTS)
        workers: Threads used to run batches
    """
    n_simulations: int = 50_000
    p: float = 0.0
    n_epochs: int = 225
    target_epoch: Optional[int] = None
    target_slot: Optional[Union[int, str]] = None
    epoch_length: int = SLOTS_PER_EPOCH
    seed: Optional[Union[int, np.random.SeedSequence]] = None
    batch_size: Optional[int] = None
    workers: int = 1

    def validate(self) -> None:
        """Reject parameters before any sampling happens."""
        validate_probability(self.p)

        if self.n_simulations <= 0:
            raise InvalidSimulationParameters(
                f"Number of simulations must be positive, got {self.n_simulations}"
            )
        if self.n_epochs <= 0:
            raise InvalidSimulationParameters(
                f"Number of epochs must be positive, got {self.n_epochs}"
            )
        if self.epoch_length <= 0:
            raise InvalidTrialCount(
                f"Epoch length must be positive, got {self.epoch_length}"
            )
        if self.target_epoch is not None and not 1 <= self.target_epoch <= self.n_epochs:
            raise InvalidSimulationParameters(
                f"Target epoch must lie in 1..{self.n_epochs}, got {self.target_epoch}"
            )
        if self.target_slot is not None:
            if self.target_epoch is None:
                raise InvalidSimulationParameters(
                    "A target slot requires a target epoch"
                )
            if self.target_slot != RANDOM_SLOT and not (
                isinstance(self.target_slot, numbers.Integral)
                and not isinstance(self.target_slot, bool)
                and 1 <= self.target_slot <= self.epoch_length
            ):
                raise InvalidTrialCount(
                    f"Target slot must lie in 1..{self.epoch_length} "
                    f"or be {RANDOM_SLOT!r}, got {self.target_slot!r}"
                )
        if self.batch_size is not None and self.batch_size <= 0:
            raise InvalidSimulationParameters(
                f"Batch size must be positive, got {self.batch_size}"
            )
        if self.workers <= 0:
            raise InvalidSimulationParameters(
                f"Worker count must be positive, got {self.workers}"
            )

    @property
    def epochs_scanned(self) -> int:
        """Epochs whose runs are tallied in each simulation."""
        return 1 if self.target_epoch is not None else self.n_epochs

    @property
    def tracks_target_slot(self) -> bool:
        return self.target_slot is not None


@dataclass
class AggregateStatistics:
    """Results reduced over all simulations.

    Attributes:
        config: The configuration used
        median_counts: Array of shape (epoch_length + 1,), median number of
                       runs of exactly length k per simulation
        odds: median_counts divided by the slots simulated (n_epochs * epoch_length)
        empirical_pmf: Array of shape (epoch_length + 1,), observed frequency of
                       the longest run over every scanned epoch
        median_target_slot_hits: Median target-slot hits (None if not tracked)
    """
    config: SimulationConfig
    median_counts: np.ndarray
    odds: np.ndarray
    empirical_pmf: np.ndarray
    median_target_slot_hits: Optional[float] = None


def simulate_epochs(
    rng: np.random.Generator,
    n_runs: int,
    n_epochs: int,
    epoch_length: int,
    p: float,
) -> np.ndarray:
    """Draw epochs of independent slots.

    Returns:
        slots: bool array of shape (n_runs, n_epochs, epoch_length)
               slots[i, j, s] = True if slot s of epoch j in simulation i succeeded
    """
    # One uniform variate per slot, success below p
    return rng.random((n_runs, n_epochs, epoch_length)) < p


def draw_target_slots(rng: np.random.Generator, n_runs: int, epoch_length: int) -> np.ndarray:
    """Draw one 1-indexed target slot per simulation, uniform over the epoch."""
    return np.floor(rng.random(n_runs) * epoch_length).astype(np.int64) + 1


def find_runs(slots: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Locate every maximal run of successes.

    Args:
        slots: bool array of shape (rows, epoch_length)

    Returns:
        (rows, starts, ends): row index, first slot and one-past-last slot of
        each run, in row-major order
    """
    n_rows, epoch_length = slots.shape
    padded = np.zeros((n_rows, epoch_length + 2), dtype=np.int8)
    padded[:, 1:-1] = slots

    # +1 where a run opens, -1 one past where it closes
    edges = np.diff(padded, axis=1)
    rows, starts = np.nonzero(edges == 1)
    _, ends = np.nonzero(edges == -1)
    return rows, starts, ends


def longest_runs(slots: np.ndarray) -> np.ndarray:
    """Longest run of successes in each row of a (rows, epoch_length) array."""
    rows, starts, ends = find_runs(slots)
    longest = np.zeros(slots.shape[0], dtype=np.int64)
    np.maximum.at(longest, rows, ends - starts)
    return longest


def _count_by_length(
    owners: np.ndarray,
    lengths: np.ndarray,
    n_runs: int,
    epoch_length: int,
) -> np.ndarray:
    width = epoch_length + 1
    counts = np.bincount(owners * width + lengths, minlength=n_runs * width)
    return counts.reshape(n_runs, width)


def tally_runs(epochs: np.ndarray) -> np.ndarray:
    """Count runs of each length per simulation.

    Runs closed by a failure or by the end of the epoch are counted; a run of
    length 0 never is.

    Args:
        epochs: bool array of shape (n_runs, n_epochs, epoch_length)

    Returns:
        counts: int array of shape (n_runs, epoch_length + 1)
    """
    n_runs, n_epochs, epoch_length = epochs.shape
    rows, starts, ends = find_runs(epochs.reshape(n_runs * n_epochs, epoch_length))
    return _count_by_length(rows // n_epochs, ends - starts, n_runs, epoch_length)


def tally_target_epoch(
    epoch: np.ndarray,
    target_slots: Optional[np.ndarray] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Count runs in the target epoch, stopping at a successful target slot.

    When the target slot (1-indexed) of a simulation succeeds, the scan stops
    there: the hit is recorded and neither the run holding the target slot nor
    any later run is counted. Otherwise the whole epoch is counted.

    Args:
        epoch: bool array of shape (n_runs, epoch_length)
        target_slots: int array of shape (n_runs,), or None for no target slot

    Returns:
        (counts, hits): counts of shape (n_runs, epoch_length + 1) and
        per-simulation target-slot hits of shape (n_runs,)
    """
    n_runs, epoch_length = epoch.shape
    rows, starts, ends = find_runs(epoch)

    if target_slots is None:
        hits = np.zeros(n_runs, dtype=np.int64)
        return _count_by_length(rows, ends - starts, n_runs, epoch_length), hits

    target_index = target_slots - 1
    hit = epoch[np.arange(n_runs), target_index]

    # Runs closed before the target slot survive the early stop
    keep = ~hit[rows] | (ends <= target_index[rows])
    counts = _count_by_length(rows[keep], (ends - starts)[keep], n_runs, epoch_length)
    return counts, hit.astype(np.int64)


def _batch_sizes(config: SimulationConfig) -> list[int]:
    batch_size = config.batch_size
    if batch_size is None:
        slots_per_run = config.epochs_scanned * config.epoch_length
        batch_size = max(1, DEFAULT_BATCH_SLOTS // slots_per_run)

    full, remainder = divmod(config.n_simulations, batch_size)
    return [batch_size] * full + ([remainder] if remainder else [])


def _root_seed(seed: Optional[Union[int, np.random.SeedSequence]]) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        # Fresh copy so spawning leaves the caller's sequence untouched
        return np.random.SeedSequence(
            seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size
        )
    return np.random.SeedSequence(seed)


def _simulate_batch(
    config: SimulationConfig,
    seed: np.random.SeedSequence,
    n_runs: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Simulate one batch; returns (counts, hits, longest-run histogram)."""
    rng = np.random.default_rng(seed)
    n = config.epoch_length

    if config.target_epoch is None:
        epochs = simulate_epochs(rng, n_runs, config.n_epochs, n, config.p)
        counts = tally_runs(epochs)
        hits = np.zeros(n_runs, dtype=np.int64)
        scanned = epochs.reshape(-1, n)
    else:
        # Epochs are independent, so only the target epoch is drawn
        epoch = simulate_epochs(rng, n_runs, 1, n, config.p)[:, 0, :]
        target_slots = None
        if config.target_slot == RANDOM_SLOT:
            target_slots = draw_target_slots(rng, n_runs, n)
        elif config.target_slot is not None:
            target_slots = np.full(n_runs, config.target_slot, dtype=np.int64)
        counts, hits = tally_target_epoch(epoch, target_slots)
        scanned = epoch

    histogram = np.bincount(longest_runs(scanned), minlength=n + 1)
    return counts, hits, histogram


def run_simulation(config: Optional[SimulationConfig] = None) -> AggregateStatistics:
    """Run the run-length simulation.

    Args:
        config: Simulation configuration (uses defaults if None)

    Returns:
        AggregateStatistics with medians, odds and the empirical longest-run PMF
    """
    if config is None:
        config = SimulationConfig()
    config.validate()

    sizes = _batch_sizes(config)
    seeds = _root_seed(config.seed).spawn(len(sizes))

    logger.info(
        f"Simulating {config.n_simulations} runs x {config.n_epochs} epochs "
        f"(p={config.p:.6f}) in {len(sizes)} batches"
    )
    start = time.time()

    if config.workers == 1:
        batches = [_simulate_batch(config, s, size) for s, size in zip(seeds, sizes)]
    else:
        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            batches = list(executor.map(
                lambda args: _simulate_batch(config, *args), zip(seeds, sizes)
            ))

    # Collect every simulation's tallies, then reduce
    counts = np.concatenate([b[0] for b in batches])
    hits = np.concatenate([b[1] for b in batches])
    histogram = np.sum([b[2] for b in batches], axis=0)

    median_counts = np.median(counts, axis=0)
    odds = median_counts / (config.n_epochs * config.epoch_length)
    empirical = histogram / histogram.sum()

    median_hits = float(np.median(hits)) if config.tracks_target_slot else None

    logger.info(f"Simulation finished in {time.time() - start:.2f}s")

    return AggregateStatistics(
        config=config,
        median_counts=median_counts,
        odds=odds,
        empirical_pmf=empirical,
        median_target_slot_hits=median_hits,
    )


def sample_run_lengths(
    n_simulations: int,
    p: float,
    n_epochs: int,
    target_epoch: Optional[int] = None,
    target_slot: Optional[Union[int, str]] = None,
    **kwargs,
) -> AggregateStatistics:
    """Convenience wrapper building a SimulationConfig from arguments.

    Extra keyword arguments (epoch_length, seed, batch_size, workers) are
    passed through to SimulationConfig.
    """
    config = SimulationConfig(
        n_simulations=n_simulations,
        p=p,
        n_epochs=n_epochs,
        target_epoch=target_epoch,
        target_slot=target_slot,
        **kwargs,
    )
    return run_simulation(config)


def empirical_pmf(
    n_samples: int,
    p: float,
    epoch_length: int = SLOTS_PER_EPOCH,
    seed: Optional[Union[int, np.random.SeedSequence]] = None,
    workers: int = 1,
) -> np.ndarray:
    """Estimate the longest-run PMF by sampling independent epochs.

    Returns:
        pmf: Array of shape (epoch_length + 1,), fraction of sampled epochs
             whose longest run has length k
    """
    config = SimulationConfig(
        n_simulations=n_samples,
        p=p,
        n_epochs=1,
        epoch_length=epoch_length,
        seed=seed,
        workers=workers,
    )
    return run_simulation(config).empirical_pmf
