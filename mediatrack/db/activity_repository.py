"""User activity persistence.

An activity hangs between its owner and its target:
(User)-[:HAS_ACTIVITY]->(UserActivity)-[:ACTIVITY_FOR]->(Media).
The owner and target ids are also stored on the node so the indexes on
userId/mediaId serve direct lookups.
"""

from uuid import UUID, uuid4

from mediatrack.db.base_repository import BaseRepository, Endpoint
from mediatrack.db.mapper import map_activity
from mediatrack.db.query_builder import Statement, UpdateBuilder, node_projection
from mediatrack.errors import ValidationError
from mediatrack.log_config import get_logger
from mediatrack.models import ActivityStatus, UserActivity

log = get_logger("db.activities")

CREATE_ACTIVITY_QUERY = f"""
MATCH (u:User {{id: $userID}})
MATCH (m:Media {{id: $mediaID}})
CREATE (a:UserActivity {{
    id: $activityID,
    userId: $userID,
    mediaId: $mediaID,
    statusId: $statusID,
    rating: $rating,
    review: $review,
    startedAt: $startedAt,
    finishedAt: $finishedAt,
    createdAt: datetime(),
    updatedAt: datetime()
}})
CREATE (u)-[:HAS_ACTIVITY]->(a)
CREATE (a)-[:ACTIVITY_FOR]->(m)
{node_projection('a')}
"""

ACTIVITY_ORDER = "ORDER BY a.createdAt DESC, id(a) DESC"

UPDATABLE_FIELDS = ("statusId", "rating", "review", "startedAt", "finishedAt")

ENDPOINTS = (
    Endpoint("User", "userID", "user"),
    Endpoint("Media", "mediaID", "media"),
)


def check_status(status_id: int | None) -> None:
    """Reject status ids outside the ActivityStatus enumeration (None passes)."""
    if status_id is None:
        return
    try:
        ActivityStatus(status_id)
    except ValueError:
        raise ValidationError(
            f"unknown activity status {status_id!r}", entity="UserActivity", field="statusId"
        ) from None


class ActivityRepository(BaseRepository):
    ENTITY = "UserActivity"

    def create_activity(
        self,
        user_id: UUID,
        media_id: UUID,
        status_id: int,
        rating: float | None = None,
        review: str | None = None,
        started_at: str | None = None,
        finished_at: str | None = None,
        *,
        timeout: float | None = None,
    ) -> UserActivity:
        """Create an activity linking an existing user to an existing media item.

        Raises:
            ValidationError: Unknown status, or the user or media item does not exist
        """
        check_status(status_id)
        statement = Statement(
            CREATE_ACTIVITY_QUERY,
            {
                "activityID": str(uuid4()),
                "userID": str(user_id),
                "mediaID": str(media_id),
                "statusID": int(status_id),
                "rating": rating,
                "review": review,
                "startedAt": started_at,
                "finishedAt": finished_at,
            },
        )

        activity = self._create_linked(statement, map_activity, ENDPOINTS, timeout=timeout, operation="create_activity")
        log.info(f"Created activity {activity.id} (user={user_id}, media={media_id}, status={status_id})")
        return activity

    def get_activity(self, activity_id: UUID, *, timeout: float | None = None) -> UserActivity:
        statement = Statement(
            f"MATCH (a:UserActivity {{id: $activityID}})\n{node_projection('a')}",
            {"activityID": str(activity_id)},
        )
        return self._fetch_one(
            statement, map_activity, identifier=activity_id, timeout=timeout, operation="get_activity"
        )

    def list_user_activities(self, user_id: UUID, *, timeout: float | None = None) -> list[UserActivity]:
        """The user's activities, newest first."""
        statement = Statement(
            f"MATCH (:User {{id: $userID}})-[:HAS_ACTIVITY]->(a:UserActivity)\n"
            f"{node_projection('a')}\n{ACTIVITY_ORDER}",
            {"userID": str(user_id)},
        )
        return self._fetch_all(statement, map_activity, timeout=timeout, operation="list_user_activities")

    def list_media_activities(self, media_id: UUID, *, timeout: float | None = None) -> list[UserActivity]:
        """Every user's activity on the media item, newest first."""
        statement = Statement(
            f"MATCH (a:UserActivity)-[:ACTIVITY_FOR]->(:Media {{id: $mediaID}})\n"
            f"{node_projection('a')}\n{ACTIVITY_ORDER}",
            {"mediaID": str(media_id)},
        )
        return self._fetch_all(statement, map_activity, timeout=timeout, operation="list_media_activities")

    def update_activity(
        self,
        activity_id: UUID,
        *,
        status_id: int | None = None,
        rating: float | None = None,
        review: str | None = None,
        started_at: str | None = None,
        finished_at: str | None = None,
        timeout: float | None = None,
    ) -> UserActivity:
        """Apply the supplied fields; the owner and target never change."""
        check_status(status_id)
        builder = UpdateBuilder(
            "a",
            "MATCH (a:UserActivity {id: $id})",
            {"id": str(activity_id)},
            allowed_fields=UPDATABLE_FIELDS,
            entity=self.ENTITY,
        )
        builder.update({
            "statusId": status_id,
            "rating": rating,
            "review": review,
            "startedAt": started_at,
            "finishedAt": finished_at,
        })

        activity = self._write_one(
            builder.build(node_projection("a")),
            map_activity,
            identifier=activity_id,
            timeout=timeout,
            operation="update_activity",
        )
        log.debug(f"Updated activity {activity_id}: {builder.supplied_fields}")
        return activity

    def delete_activity(self, activity_id: UUID, *, timeout: float | None = None) -> bool:
        statement = Statement("MATCH (a:UserActivity {id: $id})\nDETACH DELETE a", {"id": str(activity_id)})
        deleted = self._delete(statement, timeout=timeout, operation="delete_activity")
        log.info(f"Deleted activity {activity_id}" if deleted else f"Delete activity {activity_id}: nothing matched")
        return deleted
