"""Graph store connection and session management for MediaTrack.

Wraps the neo4j Python driver. One GraphConnection owns one pooled driver
for the life of the process; every repository call borrows a session for a
single managed transaction and returns it before the call completes.

Read and write work go through different entry points because a cluster
routes them to different members. Transient failures inside a managed
transaction are retried by the driver (bounded by max_retry_time); this
module never loops on its own.
"""

import socket
from typing import Any, Callable, TypeVar
from urllib.parse import urlparse

import neo4j
from neo4j import GraphDatabase, ManagedTransaction
from neo4j.exceptions import (
    AuthError,
    ConstraintError,
    ServiceUnavailable,
    SessionExpired,
)

from mediatrack.config import Config
from mediatrack.db.query_builder import Statement
from mediatrack.errors import ConnectivityError, ConstraintViolationError
from mediatrack.log_config import get_logger, log_timing

log = get_logger("db.connection")

T = TypeVar("T")
TransactionWork = Callable[[ManagedTransaction], T]


class GraphConnection:
    """Pooled connection to the graph store.

    The driver is created and verified once, in the constructor. After that
    the object is never mutated, so a single instance can be shared by
    concurrent callers; each call gets its own session.

    Example:
        with GraphConnection.from_config(Config()) as conn:
            rows = conn.with_read_session(lambda tx: run(tx, Statement("RETURN 1 AS one")))
    """

    def __init__(
        self,
        uri: str,
        username: str = "",
        password: str = "",
        *,
        database: str | None = None,
        connection_timeout: float = 30.0,
        max_connection_pool_size: int = 50,
        max_retry_time: float = 30.0,
        default_timeout: float | None = None,
    ):
        """Create the driver and verify connectivity.

        Args:
            uri: Store endpoint (neo4j://, neo4j+s://, bolt://, ...)
            username: Principal for basic auth (empty for no auth)
            password: Credential for basic auth
            database: Target database (None for the server default)
            connection_timeout: Seconds to wait when opening a connection
            max_connection_pool_size: Upper bound on pooled connections
            max_retry_time: Seconds the driver may spend retrying a managed transaction
            default_timeout: Transaction deadline applied when a call passes none

        Raises:
            ConnectivityError: If the store cannot be reached or rejects the credentials
        """
        self.uri = uri
        self.database = database
        self.default_timeout = default_timeout

        auth = (username, password) if (username or password) else None
        log.info(f"Connecting to graph store at {uri} (auth={'yes' if auth else 'no'})")

        self._driver = GraphDatabase.driver(
            uri,
            auth=auth,
            connection_timeout=connection_timeout,
            max_connection_pool_size=max_connection_pool_size,
            max_transaction_retry_time=max_retry_time,
        )

        try:
            self._driver.verify_connectivity()
        except (ServiceUnavailable, SessionExpired, AuthError, OSError) as e:
            self._driver.close()
            log.error(f"Graph store connectivity check failed: {e}")
            raise ConnectivityError(f"failed to verify connectivity to {uri}: {e}") from e

        log.info(f"Graph store connected: {uri}")

    @classmethod
    def from_config(cls, config: Config) -> "GraphConnection":
        return cls(
            config.neo4j_uri,
            config.neo4j_username,
            config.neo4j_password,
            database=config.neo4j_database,
            connection_timeout=config.connection_timeout,
            max_connection_pool_size=config.max_connection_pool_size,
            max_retry_time=config.max_retry_time,
            default_timeout=config.query_timeout,
        )

    def __enter__(self) -> "GraphConnection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ══════════════════════════════════════════════════════════════════════════════
    # SESSIONS
    # ══════════════════════════════════════════════════════════════════════════════

    def with_read_session(
        self,
        work: TransactionWork,
        *,
        timeout: float | None = None,
        operation: str = "read",
    ) -> T:
        """Run `work` in a managed read transaction; never issue writes from it."""
        return self._execute(neo4j.READ_ACCESS, work, timeout, operation)

    def with_write_session(
        self,
        work: TransactionWork,
        *,
        timeout: float | None = None,
        operation: str = "write",
    ) -> T:
        """Run `work` in a managed write transaction (all-or-nothing)."""
        return self._execute(neo4j.WRITE_ACCESS, work, timeout, operation)

    def _execute(self, access_mode: str, work: TransactionWork, timeout: float | None, operation: str) -> T:
        deadline = timeout if timeout is not None else self.default_timeout
        unit = neo4j.unit_of_work(timeout=deadline, metadata={"app": "mediatrack", "operation": operation})(
            _bind(work)
        )

        try:
            with log_timing(f"{operation} transaction", log, level="trace"):
                with self._driver.session(database=self.database, default_access_mode=access_mode) as session:
                    if access_mode == neo4j.READ_ACCESS:
                        return session.execute_read(unit)
                    return session.execute_write(unit)
        except ConstraintError as e:
            log.warning(f"{operation}: constraint violation: {e}")
            raise ConstraintViolationError(f"{operation}: {e}") from e
        except (ServiceUnavailable, SessionExpired, AuthError) as e:
            log.error(f"{operation}: graph store unavailable: {e}")
            raise ConnectivityError(f"{operation}: graph store unavailable: {e}") from e

    # ══════════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════════════════════

    def health_check(self) -> bool:
        """Check if the store answers a trivial query.

        Returns:
            True if the connection is operational
        """
        try:
            self.with_read_session(lambda tx: tx.run("RETURN 1").consume(), operation="health_check")
            return True
        except ConnectivityError as e:
            log.warning(f"Graph store health check failed: {e}")
            return False

    def close(self) -> None:
        log.info("Closing graph store connection")
        self._driver.close()


def _bind(work: TransactionWork) -> TransactionWork:
    """Fresh function object per call, so unit_of_work attributes never leak between calls."""

    def _work(tx: ManagedTransaction):
        return work(tx)

    return _work


# ══════════════════════════════════════════════════════════════════════════════
# TRANSACTION HELPERS
# ══════════════════════════════════════════════════════════════════════════════


def run(tx: ManagedTransaction, statement: Statement) -> list[dict[str, Any]]:
    """Execute a statement and return every row as a dict."""
    log.trace(f"Cypher: {statement.text[:120]}...")
    return tx.run(statement.text, statement.params).data()


def run_single(tx: ManagedTransaction, statement: Statement) -> dict[str, Any] | None:
    """Execute a statement and return its first row, or None when no row matched."""
    rows = run(tx, statement)
    return rows[0] if rows else None


def run_summary(tx: ManagedTransaction, statement: Statement):
    """Execute a statement for its side effects and return the result summary."""
    log.trace(f"Cypher: {statement.text[:120]}...")
    return tx.run(statement.text, statement.params).consume()


def is_neo4j_available(
    uri: str = "neo4j://localhost:7687",
    username: str = "neo4j",
    password: str = "",
    timeout: float = 2.0,
) -> bool:
    """Check if a graph store is reachable at the given address.

    Uses a socket-level pre-check before the driver to avoid long hangs.

    Returns:
        True if the store is reachable and accepts the credentials
    """
    parsed = urlparse(uri)
    host = parsed.hostname or "localhost"
    port = parsed.port or 7687

    try:
        sock = socket.create_connection((host, port), timeout=timeout)
        sock.close()
    except OSError as e:
        log.debug(f"Graph store socket check failed at {host}:{port}: {e}")
        return False

    try:
        conn = GraphConnection(uri, username, password, connection_timeout=timeout)
    except ConnectivityError as e:
        log.debug(f"Graph store not available at {uri}: {e}")
        return False

    try:
        return conn.health_check()
    finally:
        conn.close()
