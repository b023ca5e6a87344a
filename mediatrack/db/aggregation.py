"""Read-time rating aggregates for MediaTrack.

Averages are computed from the Rating nodes on every call; nothing is
maintained on the write path.
"""

from uuid import UUID

from mediatrack.db import values
from mediatrack.db.connection import GraphConnection, run_single
from mediatrack.db.query_builder import Statement
from mediatrack.log_config import get_logger
from mediatrack.models import RatingSummary

log = get_logger("db.aggregation")

AVERAGE_RATING_QUERY = """
MATCH (r:Rating {mediaId: $mediaID})
RETURN avg(r.score) AS averageRating, count(r) AS ratingCount
"""


def average_rating_clause(alias: str, *carry: str) -> str:
    """Cypher fragment that attaches `averageRating` to each matched media row.

    Keeps `alias` and any `carry` variables in scope; rows with no ratings
    get a null average.
    """
    kept = ", ".join([alias, *carry])
    return (
        f"OPTIONAL MATCH (rating:Rating)-[:RATING_FOR]->({alias})\n"
        f"WITH {kept}, avg(rating.score) AS averageRating"
    )


class RatingAggregates:
    """Rating statistics computed per call."""

    def __init__(self, connection: GraphConnection):
        self.connection = connection

    def average_rating(self, media_id: UUID, *, timeout: float | None = None) -> float | None:
        """Arithmetic mean of every Rating score for the media item.

        Returns:
            The mean, or None when the item has no ratings yet (never 0.0 for "none")
        """
        return self.rating_summary(media_id, timeout=timeout).average

    def rating_summary(self, media_id: UUID, *, timeout: float | None = None) -> RatingSummary:
        statement = Statement(AVERAGE_RATING_QUERY, {"mediaID": str(media_id)})
        row = self.connection.with_read_session(
            lambda tx: run_single(tx, statement),
            timeout=timeout,
            operation="average_rating",
        ) or {}

        count = values.required_int32(row, "ratingCount")
        average = values.optional_float(row, "averageRating") if count else None
        log.trace(f"Rating summary for {media_id}: count={count}, average={average}")
        return RatingSummary(media_id=media_id, count=count, average=average)
