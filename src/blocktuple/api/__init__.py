"""External data sources."""

from .rated import (
    ValidatorPool,
    fetch_validator_pools,
    get_pool_probability,
    parse_pools,
)

__all__ = [
    "ValidatorPool",
    "fetch_validator_pools",
    "get_pool_probability",
    "parse_pools",
]
