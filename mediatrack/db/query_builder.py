"""Cypher statement assembly for MediaTrack.

All values travel as bound parameters. Labels and property names cannot be
parameterized in Cypher, so they come only from the code-defined catalogs
and are checked against an identifier pattern before being rendered.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from mediatrack.db.values import as_param
from mediatrack.errors import ValidationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid Cypher identifier: {name!r}")
    return name


@dataclass(frozen=True)
class Statement:
    """A Cypher statement and its parameter map."""

    text: str
    params: dict[str, Any] = field(default_factory=dict)


def node_projection(alias: str, *extra: str) -> str:
    """RETURN clause yielding the node's property map as "node" plus extra columns."""
    columns = [f"{_check_identifier(alias)} {{.*}} AS node", *extra]
    return "RETURN " + ", ".join(columns)


def create_node(
    alias: str,
    labels: Iterable[str],
    properties: dict[str, Any],
    *,
    timestamps: Iterable[str] = ("createdAt", "updatedAt"),
) -> tuple[str, dict[str, Any]]:
    """Render a CREATE clause with one bound parameter per property.

    Returns:
        (clause text, parameters) - the caller appends MATCH/RETURN clauses.
        Parameter names equal property names.
    """
    label_expr = "".join(f":{_check_identifier(label)}" for label in labels)
    assignments = [f"{_check_identifier(name)}: ${name}" for name in properties]
    assignments += [f"{_check_identifier(ts)}: datetime()" for ts in timestamps]
    clause = f"CREATE ({_check_identifier(alias)}{label_expr} {{{', '.join(assignments)}}})"
    return clause, {name: as_param(value) for name, value in properties.items()}


class UpdateBuilder:
    """Accumulates supplied fields for a partial update and renders it once.

    The rendered statement always refreshes the timestamp property, then
    assigns each supplied field in the order of `allowed_fields`, so the
    text depends only on which fields were supplied, never on call order.

    Example:
        builder = UpdateBuilder("u", "MATCH (u:User {id: $id})", {"id": uid},
                                allowed_fields=("name", "email", "authProvider"))
        builder.set("email", "new@example.com")
        statement = builder.build(node_projection("u"))
        # MATCH (u:User {id: $id})
        # SET u.updatedAt = datetime(), u.email = $email
        # RETURN u {.*} AS node
    """

    def __init__(
        self,
        alias: str,
        match_clause: str,
        params: dict[str, Any],
        allowed_fields: Iterable[str],
        timestamp_field: str = "updatedAt",
        entity: str | None = None,
    ):
        self.alias = _check_identifier(alias)
        self.match_clause = match_clause
        self.params = dict(params)
        self.allowed_fields = tuple(_check_identifier(f) for f in allowed_fields)
        self.timestamp_field = _check_identifier(timestamp_field)
        self.entity = entity
        self._supplied: dict[str, Any] = {}

    def set(self, field_name: str, value: Any) -> "UpdateBuilder":
        """Record a field; None means "not supplied" and leaves it untouched."""
        if field_name not in self.allowed_fields:
            raise ValidationError(
                f"{self.entity or 'entity'} has no updatable field {field_name!r}",
                entity=self.entity,
                field=field_name,
            )
        if field_name in self.params:
            raise ValueError(f"Field {field_name!r} collides with a match parameter")
        if value is None:
            return self
        self._supplied[field_name] = as_param(value)
        return self

    def update(self, fields: dict[str, Any]) -> "UpdateBuilder":
        for name, value in fields.items():
            self.set(name, value)
        return self

    @property
    def supplied_fields(self) -> list[str]:
        return [f for f in self.allowed_fields if f in self._supplied]

    def build(self, returning: str) -> Statement:
        assignments = [f"{self.alias}.{self.timestamp_field} = datetime()"]
        params = dict(self.params)
        for name in self.supplied_fields:
            assignments.append(f"{self.alias}.{name} = ${name}")
            params[name] = self._supplied[name]

        text = "\n".join([
            self.match_clause.strip(),
            "SET " + ", ".join(assignments),
            returning.strip(),
        ])
        return Statement(text, params)
