"""Rating persistence.

A rating has no id of its own: it is identified by the (userId, mediaId)
pair, which the rating_user_media_unique constraint keeps unique.
"""

from uuid import UUID

from mediatrack.db.base_repository import BaseRepository, Endpoint
from mediatrack.db.mapper import map_rating
from mediatrack.db.query_builder import Statement, UpdateBuilder, node_projection
from mediatrack.errors import ConstraintViolationError
from mediatrack.log_config import get_logger
from mediatrack.models import Rating

log = get_logger("db.ratings")

CREATE_RATING_QUERY = f"""
MATCH (u:User {{id: $userID}})
MATCH (m:Media {{id: $mediaID}})
CREATE (r:Rating {{userId: $userID, mediaId: $mediaID, score: $score, ratedAt: datetime()}})
CREATE (u)-[:RATED]->(r)
CREATE (r)-[:RATING_FOR]->(m)
{node_projection('r')}
"""

MATCH_RATING = "MATCH (r:Rating {userId: $userID, mediaId: $mediaID})"

RATING_ORDER = "ORDER BY r.ratedAt DESC, id(r) DESC"

ENDPOINTS = (
    Endpoint("User", "userID", "user"),
    Endpoint("Media", "mediaID", "media"),
)


def _key(user_id: UUID, media_id: UUID) -> dict[str, str]:
    return {"userID": str(user_id), "mediaID": str(media_id)}


class RatingRepository(BaseRepository):
    ENTITY = "Rating"

    def create_rating(self, user_id: UUID, media_id: UUID, score: float, *, timeout: float | None = None) -> Rating:
        """Rate a media item on behalf of a user.

        Raises:
            ValidationError: The user or media item does not exist
            ConstraintViolationError: The user already rated this item
        """
        statement = Statement(CREATE_RATING_QUERY, {**_key(user_id, media_id), "score": float(score)})
        try:
            rating = self._create_linked(statement, map_rating, ENDPOINTS, timeout=timeout, operation="create_rating")
        except ConstraintViolationError as e:
            raise ConstraintViolationError(
                f"user {user_id} has already rated media {media_id}",
                entity=self.ENTITY,
                identifier=(user_id, media_id),
            ) from e

        log.info(f"Created rating user={user_id} media={media_id} score={score}")
        return rating

    def get_rating(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> Rating:
        statement = Statement(f"{MATCH_RATING}\n{node_projection('r')}", _key(user_id, media_id))
        return self._fetch_one(
            statement, map_rating, identifier=(user_id, media_id), timeout=timeout, operation="get_rating"
        )

    def list_user_ratings(self, user_id: UUID, *, timeout: float | None = None) -> list[Rating]:
        """Ratings the user gave, most recently rated first."""
        statement = Statement(
            f"MATCH (:User {{id: $userID}})-[:RATED]->(r:Rating)\n{node_projection('r')}\n{RATING_ORDER}",
            {"userID": str(user_id)},
        )
        return self._fetch_all(statement, map_rating, timeout=timeout, operation="list_user_ratings")

    def list_media_ratings(self, media_id: UUID, *, timeout: float | None = None) -> list[Rating]:
        """Ratings the media item received, most recently rated first."""
        statement = Statement(
            f"MATCH (r:Rating)-[:RATING_FOR]->(:Media {{id: $mediaID}})\n{node_projection('r')}\n{RATING_ORDER}",
            {"mediaID": str(media_id)},
        )
        return self._fetch_all(statement, map_rating, timeout=timeout, operation="list_media_ratings")

    def update_rating(
        self,
        user_id: UUID,
        media_id: UUID,
        score: float,
        *,
        timeout: float | None = None,
    ) -> Rating:
        """Replace the score; ratedAt moves to the time of the update."""
        builder = UpdateBuilder(
            "r",
            MATCH_RATING,
            _key(user_id, media_id),
            allowed_fields=("score",),
            timestamp_field="ratedAt",
            entity=self.ENTITY,
        )
        builder.set("score", float(score))

        rating = self._write_one(
            builder.build(node_projection("r")),
            map_rating,
            identifier=(user_id, media_id),
            timeout=timeout,
            operation="update_rating",
        )
        log.debug(f"Updated rating user={user_id} media={media_id} score={score}")
        return rating

    def delete_rating(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> bool:
        statement = Statement(f"{MATCH_RATING}\nDETACH DELETE r", _key(user_id, media_id))
        deleted = self._delete(statement, timeout=timeout, operation="delete_rating")
        log.info(
            f"Deleted rating user={user_id} media={media_id}"
            if deleted
            else f"Delete rating user={user_id} media={media_id}: nothing matched"
        )
        return deleted
