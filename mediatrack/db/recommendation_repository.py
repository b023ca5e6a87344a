"""Recommendation persistence.

(User)-[:RECEIVED_RECOMMENDATION]->(Recommendation)-[:RECOMMENDS]->(Media),
plus (Recommendation)-[:RECOMMENDED_BY]->(User) when another user made it.
"""

from uuid import UUID, uuid4

from mediatrack.db.base_repository import BaseRepository, Endpoint
from mediatrack.db.mapper import map_recommendation
from mediatrack.db.query_builder import Statement, UpdateBuilder, node_projection
from mediatrack.log_config import get_logger
from mediatrack.models import Recommendation

log = get_logger("db.recommendations")

MATCH_ENDPOINTS = """
MATCH (u:User {id: $userID})
MATCH (m:Media {id: $mediaID})
"""

MATCH_RECOMMENDER = "MATCH (r:User {id: $recommenderID})\n"

CREATE_RECOMMENDATION = """
CREATE (rec:Recommendation {
    id: $recommendationID,
    userId: $userID,
    mediaId: $mediaID,
    recommenderId: $recommenderID,
    source: $source,
    score: $score,
    createdAt: datetime(),
    updatedAt: datetime()
})
CREATE (u)-[:RECEIVED_RECOMMENDATION]->(rec)
CREATE (rec)-[:RECOMMENDS]->(m)
"""

LINK_RECOMMENDER = "CREATE (rec)-[:RECOMMENDED_BY]->(r)\n"

RECOMMENDATION_ORDER = "ORDER BY rec.createdAt DESC, id(rec) DESC"

ENDPOINTS = (
    Endpoint("User", "userID", "user"),
    Endpoint("Media", "mediaID", "media"),
)
RECOMMENDER = Endpoint("User", "recommenderID", "recommender")


class RecommendationRepository(BaseRepository):
    ENTITY = "Recommendation"

    def create_recommendation(
        self,
        user_id: UUID,
        media_id: UUID,
        recommender_id: UUID | None = None,
        source: str | None = None,
        score: float | None = None,
        *,
        timeout: float | None = None,
    ) -> Recommendation:
        """Recommend a media item to a user.

        When recommender_id is given the recommender must exist as well;
        otherwise the recommendation has no RECOMMENDED_BY edge.

        Raises:
            ValidationError: The user, media item or recommender does not exist
        """
        clauses = [MATCH_ENDPOINTS.lstrip(), CREATE_RECOMMENDATION.lstrip()]
        endpoints = ENDPOINTS
        if recommender_id is not None:
            clauses = [MATCH_ENDPOINTS.lstrip(), MATCH_RECOMMENDER, CREATE_RECOMMENDATION.lstrip(), LINK_RECOMMENDER]
            endpoints += (RECOMMENDER,)
        text = "".join(clauses)

        statement = Statement(
            text + node_projection("rec"),
            {
                "recommendationID": str(uuid4()),
                "userID": str(user_id),
                "mediaID": str(media_id),
                "recommenderID": str(recommender_id) if recommender_id is not None else None,
                "source": source,
                "score": score,
            },
        )

        recommendation = self._create_linked(
            statement, map_recommendation, endpoints, timeout=timeout, operation="create_recommendation"
        )
        log.info(f"Created recommendation {recommendation.id} (user={user_id}, media={media_id})")
        return recommendation

    def get_recommendation(self, recommendation_id: UUID, *, timeout: float | None = None) -> Recommendation:
        statement = Statement(
            f"MATCH (rec:Recommendation {{id: $recommendationID}})\n{node_projection('rec')}",
            {"recommendationID": str(recommendation_id)},
        )
        return self._fetch_one(
            statement,
            map_recommendation,
            identifier=recommendation_id,
            timeout=timeout,
            operation="get_recommendation",
        )

    def list_recommendations(self, user_id: UUID, *, timeout: float | None = None) -> list[Recommendation]:
        """Recommendations the user received, newest first."""
        statement = Statement(
            f"MATCH (:User {{id: $userID}})-[:RECEIVED_RECOMMENDATION]->(rec:Recommendation)\n"
            f"{node_projection('rec')}\n{RECOMMENDATION_ORDER}",
            {"userID": str(user_id)},
        )
        return self._fetch_all(statement, map_recommendation, timeout=timeout, operation="list_recommendations")

    def update_recommendation(
        self,
        recommendation_id: UUID,
        *,
        source: str | None = None,
        score: float | None = None,
        timeout: float | None = None,
    ) -> Recommendation:
        builder = UpdateBuilder(
            "rec",
            "MATCH (rec:Recommendation {id: $id})",
            {"id": str(recommendation_id)},
            allowed_fields=("source", "score"),
            entity=self.ENTITY,
        )
        builder.update({"source": source, "score": score})

        recommendation = self._write_one(
            builder.build(node_projection("rec")),
            map_recommendation,
            identifier=recommendation_id,
            timeout=timeout,
            operation="update_recommendation",
        )
        log.debug(f"Updated recommendation {recommendation_id}: {builder.supplied_fields}")
        return recommendation

    def delete_recommendation(self, recommendation_id: UUID, *, timeout: float | None = None) -> bool:
        statement = Statement(
            "MATCH (rec:Recommendation {id: $id})\nDETACH DELETE rec",
            {"id": str(recommendation_id)},
        )
        deleted = self._delete(statement, timeout=timeout, operation="delete_recommendation")
        log.info(
            f"Deleted recommendation {recommendation_id}"
            if deleted
            else f"Delete recommendation {recommendation_id}: nothing matched"
        )
        return deleted
