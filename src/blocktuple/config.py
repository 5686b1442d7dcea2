"""Configuration management for the Rated API client."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:
    """Configuration for Rated API access."""

    api_token: str
    network: str = "mainnet"
    host: str = "https://api.rated.network"
    window: str = "1d"
    id_type: str = "pool"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        api_token = os.getenv("RATED_API_BEARER_TOKEN")

        if not api_token:
            raise ValueError(
                "Missing required environment variables. "
                "Ensure RATED_API_BEARER_TOKEN is set."
            )

        return cls(
            api_token=api_token,
            network=os.getenv("RATED_NETWORK", "mainnet"),
            host=os.getenv("RATED_HOST", "https://api.rated.network"),
            window=os.getenv("RATED_WINDOW", "1d"),
            id_type=os.getenv("RATED_ID_TYPE", "pool"),
        )

    @classmethod
    def from_env_optional(cls) -> Optional["Config"]:
        """Load configuration from environment, returning None if not available."""
        try:
            return cls.from_env()
        except ValueError:
            return None
