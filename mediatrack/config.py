"""Configuration for MediaTrack.

Simple dataclass-based configuration with sensible defaults.
Store connection settings come from the standard NEO4J_* variables; tunables
can be overridden via environment variables with the MEDIATRACK_ prefix.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from mediatrack.log_config import get_logger

log = get_logger("config")

# Look for .env in the working directory, then next to the package
_pkg_dir = Path(__file__).parent.parent
_env_loaded = load_dotenv(Path.cwd() / ".env") or load_dotenv(_pkg_dir / ".env")
log.debug(f"Loaded .env file: {_env_loaded}")

SUPPORTED_SCHEMES = ("neo4j", "neo4j+s", "neo4j+ssc", "bolt", "bolt+s", "bolt+ssc")


def _get_env(key: str, default: str) -> str:
    """Get environment variable with MEDIATRACK_ prefix."""
    return os.getenv(f"MEDIATRACK_{key}", default)


def _get_env_float(key: str) -> float | None:
    """Get optional float environment variable (unset or empty means None)."""
    val = os.getenv(f"MEDIATRACK_{key}")
    if not val:
        return None
    return float(val)


@dataclass
class Config:
    """MediaTrack configuration.

    Attributes:
        neo4j_uri: Store endpoint (default: neo4j://localhost:7687)
        neo4j_username: Principal used to authenticate (default: neo4j)
        neo4j_password: Credential used to authenticate (default: empty)
        neo4j_database: Target database, None for the server default
        connection_timeout: Seconds to wait when opening a connection
        max_connection_pool_size: Upper bound on pooled connections
        max_retry_time: Seconds the driver may spend retrying a managed transaction
        query_timeout: Default transaction deadline in seconds (None = no deadline)
    """

    neo4j_uri: str = field(
        default_factory=lambda: os.getenv("NEO4J_URI", "neo4j://localhost:7687")
    )
    neo4j_username: str = field(
        default_factory=lambda: os.getenv("NEO4J_USERNAME", "neo4j")
    )
    neo4j_password: str = field(
        default_factory=lambda: os.getenv("NEO4J_PASSWORD", "")
    )
    neo4j_database: str | None = field(
        default_factory=lambda: os.getenv("NEO4J_DATABASE") or None
    )

    connection_timeout: float = field(
        default_factory=lambda: float(_get_env("CONNECTION_TIMEOUT", "30"))
    )
    max_connection_pool_size: int = field(
        default_factory=lambda: int(_get_env("MAX_CONNECTION_POOL_SIZE", "50"))
    )
    max_retry_time: float = field(
        default_factory=lambda: float(_get_env("MAX_RETRY_TIME", "30"))
    )
    query_timeout: float | None = field(
        default_factory=lambda: _get_env_float("QUERY_TIMEOUT")
    )

    def __post_init__(self):
        """Validate the endpoint and log the resolved settings."""
        scheme = urlparse(self.neo4j_uri).scheme
        if scheme not in SUPPORTED_SCHEMES:
            raise ValueError(
                f"Unsupported URI scheme {scheme!r} in {self.neo4j_uri!r}; "
                f"use one of: {', '.join(SUPPORTED_SCHEMES)}"
            )
        if scheme == "bolt":
            log.warning("Using unencrypted bolt:// protocol; prefer neo4j+s:// for hosted stores")

        log.debug(f"neo4j_uri={self.neo4j_uri}, database={self.neo4j_database or '<default>'}")
        log.debug(f"neo4j_username={self.neo4j_username} (password={'set' if self.neo4j_password else 'unset'})")
        log.debug(
            f"connection_timeout={self.connection_timeout}, "
            f"pool={self.max_connection_pool_size}, "
            f"max_retry_time={self.max_retry_time}, "
            f"query_timeout={self.query_timeout}"
        )
