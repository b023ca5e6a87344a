"""Schema initialization for MediaTrack.

Declares uniqueness constraints and secondary indexes. Every statement uses
IF NOT EXISTS, so running the initializer on every startup is safe.
"""

from dataclasses import dataclass, field

from mediatrack.db.connection import GraphConnection, run_summary
from mediatrack.db.query_builder import Statement
from mediatrack.errors import SchemaError
from mediatrack.log_config import get_logger
from mediatrack.models import MediaKind

log = get_logger("db.schema")


def _unique_id(name: str, label: str) -> tuple[str, str]:
    return name, f"CREATE CONSTRAINT {name} IF NOT EXISTS FOR (n:{label}) REQUIRE n.id IS UNIQUE"


def _index(name: str, label: str, prop: str) -> tuple[str, str]:
    return name, f"CREATE INDEX {name} IF NOT EXISTS FOR (n:{label}) ON (n.{prop})"


CONSTRAINTS: list[tuple[str, str]] = [
    _unique_id("user_id_unique", "User"),
    ("user_email_unique", "CREATE CONSTRAINT user_email_unique IF NOT EXISTS FOR (u:User) REQUIRE u.email IS UNIQUE"),
    # Media ids are unique across every variant, not only within one
    _unique_id("media_id_unique", "Media"),
    *[_unique_id(f"{kind.label.lower()}_id_unique", kind.label) for kind in MediaKind],
    _unique_id("activity_id_unique", "UserActivity"),
    _unique_id("recommendation_id_unique", "Recommendation"),
    (
        "rating_user_media_unique",
        "CREATE CONSTRAINT rating_user_media_unique IF NOT EXISTS "
        "FOR (r:Rating) REQUIRE (r.userId, r.mediaId) IS UNIQUE",
    ),
]

INDEXES: list[tuple[str, str]] = [
    _index("media_title_index", "Media", "title"),
    _index("media_release_date_index", "Media", "releaseDate"),
    *[_index(f"{kind.label.lower()}_title_index", kind.label, "title") for kind in MediaKind],
    _index("user_name_index", "User", "name"),
    _index("activity_user_index", "UserActivity", "userId"),
    _index("activity_media_index", "UserActivity", "mediaId"),
    _index("activity_status_index", "UserActivity", "statusId"),
    _index("activity_created_index", "UserActivity", "createdAt"),
    _index("rating_user_index", "Rating", "userId"),
    _index("rating_media_index", "Rating", "mediaId"),
    _index("rating_score_index", "Rating", "score"),
    _index("recommendation_user_index", "Recommendation", "userId"),
    _index("recommendation_media_index", "Recommendation", "mediaId"),
    _index("recommendation_created_index", "Recommendation", "createdAt"),
]


@dataclass
class SchemaReport:
    """Names of the constraints and indexes declared by ensure_schema()."""

    constraints: list[str] = field(default_factory=list)
    indexes: list[str] = field(default_factory=list)


class SchemaInitializer:
    """Declares constraints, then indexes, one write transaction each."""

    def __init__(self, connection: GraphConnection):
        self.connection = connection

    def ensure_schema(self) -> SchemaReport:
        """Declare every constraint and index.

        Returns:
            SchemaReport listing what was declared

        Raises:
            SchemaError: On the first statement the store rejects; later
                statements are not attempted
        """
        log.info(f"Ensuring schema: {len(CONSTRAINTS)} constraints, {len(INDEXES)} indexes")
        report = SchemaReport()

        for name, cypher in CONSTRAINTS:
            self._apply(name, cypher)
            report.constraints.append(name)

        for name, cypher in INDEXES:
            self._apply(name, cypher)
            report.indexes.append(name)

        log.info("Schema ready")
        return report

    def _apply(self, name: str, cypher: str) -> None:
        statement = Statement(cypher)
        try:
            self.connection.with_write_session(
                lambda tx: run_summary(tx, statement),
                operation=f"schema:{name}",
            )
        except Exception as e:
            log.error(f"Schema statement {name} failed: {e}")
            raise SchemaError(f"failed to apply {name!r}: {e}", statement=cypher) from e
        log.trace(f"Applied {name}")
