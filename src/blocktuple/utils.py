"""Utility functions for blocktuple scripts."""

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (default INFO).
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def survival_probability(epoch_probabilities: list[float]) -> float:
    """Chain per-epoch probabilities into the probability all epochs hold.

    Epochs are independent, so this is the product of the terms.
    """
    result = 1.0
    for probability in epoch_probabilities:
        result *= probability
    return result
