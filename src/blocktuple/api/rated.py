"""Rated API client for validator pool stake fractions."""

import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..config import Config
from ..errors import UpstreamDataUnavailable

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)


@dataclass
class ValidatorPool:
    """A staking pool and its share of the validator set."""

    pool_id: str
    network_penetration: float

    @property
    def success_probability(self) -> float:
        """Chance the pool is assigned any single slot."""
        return self.network_penetration


def operators_url(config: Config) -> str:
    """Build the operators endpoint URL for the configured window and id type."""
    return (
        f"{config.host.rstrip('/')}/v0/eth/operators"
        f"?window={config.window}&idType={config.id_type}"
    )


def request_headers(config: Config) -> dict[str, str]:
    return {
        "accept": "application/json",
        "X-Rated-Network": config.network,
        "Authorization": f"Bearer {config.api_token}",
    }


async def fetch_validator_pools(
    config: Config,
    session: Optional[aiohttp.ClientSession] = None,
) -> list[ValidatorPool]:
    """Fetch every validator pool with its network penetration.

    Args:
        config: Rated API configuration.
        session: Optional session to reuse; a new one is opened otherwise.

    Returns:
        List of ValidatorPool objects, in reverse response order.

    Raises:
        UpstreamDataUnavailable: On transport failure, non-200 status or a
            malformed payload.
    """
    url = operators_url(config)

    if session is None:
        async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT) as own_session:
            return await _fetch(own_session, url, config)
    return await _fetch(session, url, config)


async def _fetch(session: aiohttp.ClientSession, url: str, config: Config) -> list[ValidatorPool]:
    try:
        async with session.get(url, headers=request_headers(config)) as response:
            if response.status != 200:
                logger.error(f"Failed to fetch validator pools: HTTP {response.status}")
                raise UpstreamDataUnavailable(
                    f"Failed to retrieve validator pools: HTTP {response.status}"
                )
            data = await response.json()
    except aiohttp.ClientError as e:
        logger.error(f"Failed to fetch validator pools: {e}")
        raise UpstreamDataUnavailable(f"Failed to retrieve validator pools: {e}") from e

    pools = parse_pools(data)
    logger.info(f"Fetched {len(pools)} validator pools from {config.network}")
    return pools


def parse_pools(data) -> list[ValidatorPool]:
    """Parse the operators response into pools, reversing the response order.

    Raises:
        UpstreamDataUnavailable: If the payload lacks the expected fields.
    """
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        raise UpstreamDataUnavailable("Malformed operators response: missing 'data' list")

    pools = []
    for entry in data["data"]:
        try:
            pools.append(ValidatorPool(
                pool_id=str(entry["id"]),
                network_penetration=float(entry["networkPenetration"]),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamDataUnavailable(
                f"Malformed operator entry {entry!r}: {e}"
            ) from e

    pools.reverse()
    return pools


def get_pool_probability(pools: list[ValidatorPool], pool_id: str) -> float:
    """Look up the success probability of one pool (case-insensitive id match).

    Raises:
        UpstreamDataUnavailable: If no pool has the requested id.
    """
    wanted = pool_id.lower()
    for pool in pools:
        if pool.pool_id.lower() == wanted:
            return pool.success_probability
    raise UpstreamDataUnavailable(f"Validator pool not found: {pool_id}")
