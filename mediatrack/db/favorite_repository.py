"""Favorites: a FAVORITES relationship from a user to a media item.

A favorite is an edge, not a node; it carries only the time it was added.
"""

from uuid import UUID

from mediatrack.db.aggregation import average_rating_clause
from mediatrack.db.base_repository import BaseRepository, Endpoint
from mediatrack.db.connection import run_summary
from mediatrack.db.mapper import map_favorite
from mediatrack.db.query_builder import Statement, node_projection
from mediatrack.log_config import get_logger
from mediatrack.models import Favorite

log = get_logger("db.favorites")

FAVORITE_RETURNING = "\n".join([
    average_rating_clause("m", "u", "f"),
    node_projection("m", "labels(m) AS labels", "averageRating", "u.id AS userId", "f.addedAt AS addedAt"),
])

ADD_FAVORITE_QUERY = f"""
MATCH (u:User {{id: $userID}})
MATCH (m:Media {{id: $mediaID}})
MERGE (u)-[f:FAVORITES]->(m)
ON CREATE SET f.addedAt = datetime()
WITH u, m, f
{FAVORITE_RETURNING}
"""

ENDPOINTS = (
    Endpoint("User", "userID", "user"),
    Endpoint("Media", "mediaID", "media"),
)


class FavoriteRepository(BaseRepository):
    ENTITY = "Favorite"

    def add_favorite(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> Favorite:
        """Mark a media item as a favorite of the user.

        Adding an existing favorite again is a no-op that returns the
        original record, addedAt included.

        Raises:
            ValidationError: The user or media item does not exist
        """
        statement = Statement(ADD_FAVORITE_QUERY, {"userID": str(user_id), "mediaID": str(media_id)})
        favorite = self._create_linked(statement, map_favorite, ENDPOINTS, timeout=timeout, operation="add_favorite")
        log.info(f"Favorite user={user_id} media={media_id}")
        return favorite

    def remove_favorite(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> bool:
        """Remove the favorite; True if one existed, False otherwise."""
        statement = Statement(
            "MATCH (:User {id: $userID})-[f:FAVORITES]->(:Media {id: $mediaID})\nDELETE f",
            {"userID": str(user_id), "mediaID": str(media_id)},
        )
        summary = self.connection.with_write_session(
            lambda tx: run_summary(tx, statement),
            timeout=timeout,
            operation="remove_favorite",
        )
        removed = summary.counters.relationships_deleted > 0
        log.info(f"Removed favorite user={user_id} media={media_id}: {removed}")
        return removed

    def list_favorites(self, user_id: UUID, *, timeout: float | None = None) -> list[Favorite]:
        """The user's favorites, most recently added first."""
        statement = Statement(
            f"MATCH (u:User {{id: $userID}})-[f:FAVORITES]->(m:Media)\n"
            f"{FAVORITE_RETURNING}\n"
            f"ORDER BY f.addedAt DESC, id(f) DESC",
            {"userID": str(user_id)},
        )
        return self._fetch_all(statement, map_favorite, timeout=timeout, operation="list_favorites")
