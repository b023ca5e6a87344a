"""Shared plumbing for the MediaTrack repositories.

Each repository builds a Statement, hands a unit of work to the connection
and maps rows inside the transaction, so a decode failure aborts the
transaction instead of leaving a half-reported write behind.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

from neo4j import ManagedTransaction

from mediatrack.db.connection import GraphConnection, run, run_single, run_summary
from mediatrack.db.query_builder import Statement
from mediatrack.errors import NotFoundError, ValidationError
from mediatrack.log_config import get_logger

log = get_logger("db.repository")

T = TypeVar("T")
RowMapper = Callable[[Mapping[str, Any]], T]


@dataclass(frozen=True)
class Endpoint:
    """A node that must already exist for a create to proceed.

    Attributes:
        label: Node label to match
        param: Statement parameter holding the node's id
        role: Human-readable role used in error messages ("user", "media")
    """

    label: str
    param: str
    role: str


class BaseRepository:
    """Common read/write helpers; subclasses set ENTITY."""

    ENTITY = "entity"

    def __init__(self, connection: GraphConnection):
        self.connection = connection

    def _fetch_one(
        self,
        statement: Statement,
        mapper: RowMapper,
        *,
        identifier: Any,
        timeout: float | None = None,
        operation: str = "get",
        entity: str | None = None,
    ) -> T:
        """Read exactly one record; zero rows raises NotFoundError."""

        def work(tx: ManagedTransaction):
            row = run_single(tx, statement)
            return mapper(row) if row is not None else None

        record = self.connection.with_read_session(work, timeout=timeout, operation=operation)
        if record is None:
            raise self._not_found(identifier, entity)
        return record

    def _fetch_all(
        self,
        statement: Statement,
        mapper: RowMapper,
        *,
        timeout: float | None = None,
        operation: str = "list",
    ) -> list[T]:
        return self.connection.with_read_session(
            lambda tx: [mapper(row) for row in run(tx, statement)],
            timeout=timeout,
            operation=operation,
        )

    def _write_one(
        self,
        statement: Statement,
        mapper: RowMapper,
        *,
        identifier: Any,
        timeout: float | None = None,
        operation: str = "update",
        entity: str | None = None,
    ) -> T:
        """Write against an existing node; zero rows raises NotFoundError."""

        def work(tx: ManagedTransaction):
            row = run_single(tx, statement)
            if row is None:
                raise self._not_found(identifier, entity)
            return mapper(row)

        return self.connection.with_write_session(work, timeout=timeout, operation=operation)

    def _create_linked(
        self,
        statement: Statement,
        mapper: RowMapper,
        endpoints: tuple[Endpoint, ...] = (),
        *,
        timeout: float | None = None,
        operation: str = "create",
    ) -> T:
        """Run a create whose MATCH clauses require existing endpoints.

        When the statement yields no row nothing was created; the endpoints
        are then probed in the same transaction to name what is missing.
        """

        def work(tx: ManagedTransaction):
            row = run_single(tx, statement)
            if row is not None:
                return mapper(row)
            missing = [
                f"{ep.role} {statement.params.get(ep.param)}"
                for ep in endpoints
                if not self._exists(tx, ep.label, statement.params.get(ep.param))
            ]
            raise ValidationError(
                f"cannot create {self.ENTITY}: {', '.join(missing) or 'referenced node'} not found",
                entity=self.ENTITY,
            )

        return self.connection.with_write_session(work, timeout=timeout, operation=operation)

    def _delete(
        self,
        statement: Statement,
        *,
        timeout: float | None = None,
        operation: str = "delete",
    ) -> bool:
        """DETACH DELETE; True if a node was removed, False if nothing matched."""
        summary = self.connection.with_write_session(
            lambda tx: run_summary(tx, statement),
            timeout=timeout,
            operation=operation,
        )
        return summary.counters.nodes_deleted > 0

    @staticmethod
    def _exists(tx: ManagedTransaction, label: str, node_id: Any) -> bool:
        row = run_single(tx, Statement(f"MATCH (n:{label} {{id: $id}}) RETURN count(n) AS found", {"id": node_id}))
        return bool(row and row.get("found"))

    def _not_found(self, identifier: Any, entity: str | None = None) -> NotFoundError:
        entity = entity or self.ENTITY
        return NotFoundError(f"{entity} {identifier} not found", entity=entity, identifier=identifier)
