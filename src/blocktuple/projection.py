"""Per-epoch probability terms leading up to a target slot in a future epoch."""

import logging

from .distribution import SLOTS_PER_EPOCH, run_length_distribution
from .errors import InvalidSimulationParameters, InvalidTrialCount

logger = logging.getLogger(__name__)


def calculate_epoch_probabilities(
    target_epoch: int,
    target_slot: int,
    p: float,
    n: int = SLOTS_PER_EPOCH,
) -> list[float]:
    """Probability of the longest run staying within the cap, epoch by epoch.

    Every epoch before ``target_epoch`` is considered over all ``n`` slots, so
    its term is cdf[n]. In the target epoch only the prefix up to
    ``target_slot`` matters and the term is cdf[target_slot]. Combining the
    terms into a multi-epoch probability is left to the caller.

    Args:
        target_epoch: 1-indexed epoch holding the target slot
        target_slot: Run threshold applied in the target epoch (0..n)
        p: Per-slot success probability
        n: Slots per epoch

    Returns:
        List of target_epoch probabilities, one per epoch 1..target_epoch
    """
    if target_epoch < 1:
        raise InvalidSimulationParameters(
            f"Target epoch must be at least 1, got {target_epoch}"
        )
    if not 0 <= target_slot <= n:
        raise InvalidTrialCount(
            f"Target slot must lie in 0..{n}, got {target_slot}"
        )

    # Same distribution for every epoch, only the threshold moves
    distribution = run_length_distribution(n, p)
    full_epoch = distribution.prob_at_most(n)

    probabilities = [full_epoch] * (target_epoch - 1)
    probabilities.append(distribution.prob_at_most(target_slot))

    logger.debug(f"Projected {target_epoch} epoch terms for p={p:.6f}, target slot {target_slot}")
    return probabilities
