"""Exceptions raised by the blocktuple statistics engine and its adapters."""


class BlocktupleError(Exception):
    """Base class for all blocktuple errors."""
    pass


class InvalidProbability(BlocktupleError, ValueError):
    """Exception raised when a success probability lies outside [0, 1]."""
    pass


class InvalidTrialCount(BlocktupleError, ValueError):
    """Exception raised for a negative trial count or an out-of-range threshold."""
    pass


class InvalidSimulationParameters(BlocktupleError, ValueError):
    """Exception raised when Monte Carlo parameters cannot describe a simulation."""
    pass


class UpstreamDataUnavailable(BlocktupleError):
    """Exception raised when the validator pool source fails or returns malformed data."""
    pass


def validate_probability(p: float) -> float:
    """Return ``p`` as a float, raising InvalidProbability outside [0, 1].

    NaN is rejected as well since every comparison against it is false.
    """
    try:
        value = float(p)
    except (TypeError, ValueError) as exc:
        raise InvalidProbability(f"Probability must be a number, got {p!r}") from exc
    if not 0.0 <= value <= 1.0:
        raise InvalidProbability(f"Probability must lie in [0, 1], got {p!r}")
    return value
