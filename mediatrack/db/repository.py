"""Repository façade for MediaTrack.

Composes one repository per entity kind over a single shared connection.
Each public method delegates to the owning repository; the repositories are
also reachable as attributes (`repo.users`, `repo.media`, ...) for callers
that only need one kind.
"""

from typing import Any
from uuid import UUID

from mediatrack.config import Config
from mediatrack.db.activity_repository import ActivityRepository
from mediatrack.db.aggregation import RatingAggregates
from mediatrack.db.connection import GraphConnection, run
from mediatrack.db.favorite_repository import FavoriteRepository
from mediatrack.db.media_repository import MediaRepository
from mediatrack.db.query_builder import Statement
from mediatrack.db.rating_repository import RatingRepository
from mediatrack.db.recommendation_repository import RecommendationRepository
from mediatrack.db.schema import SchemaInitializer, SchemaReport
from mediatrack.db.user_repository import UserRepository
from mediatrack.log_config import get_logger
from mediatrack.models import (
    Book,
    Favorite,
    Game,
    Media,
    MediaKind,
    Movie,
    MusicAlbum,
    Rating,
    RatingSummary,
    Recommendation,
    TVShow,
    User,
    UserActivity,
)

log = get_logger("db.repository")

NODE_COUNTS_QUERY = """
UNWIND $labels AS label
CALL {
    WITH label
    MATCH (n) WHERE label IN labels(n)
    RETURN count(n) AS count
}
RETURN label, count
"""

COUNTED_LABELS = [
    "User",
    "Media",
    *[kind.label for kind in MediaKind],
    "UserActivity",
    "Rating",
    "Recommendation",
]


class Repository:
    """Single entry point to every MediaTrack persistence operation.

    The façade owns no state beyond the injected connection; it is safe to
    share between threads because every call borrows its own session.

    Example:
        with GraphConnection.from_config(Config()) as conn:
            repo = Repository(conn)
            repo.ensure_schema()
            user = repo.create_user("Ada", "ada@example.com")
    """

    def __init__(self, connection: GraphConnection):
        self.connection = connection

        self.users = UserRepository(connection)
        self.media = MediaRepository(connection)
        self.activities = ActivityRepository(connection)
        self.ratings = RatingRepository(connection)
        self.recommendations = RecommendationRepository(connection)
        self.favorites = FavoriteRepository(connection)
        self.aggregates = RatingAggregates(connection)
        self.schema = SchemaInitializer(connection)

    @classmethod
    def from_config(cls, config: Config) -> "Repository":
        """Open a connection from configuration and wrap it."""
        return cls(GraphConnection.from_config(config))

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ══════════════════════════════════════════════════════════════════════════════
    # SCHEMA / MAINTENANCE
    # ══════════════════════════════════════════════════════════════════════════════

    def ensure_schema(self) -> SchemaReport:
        return self.schema.ensure_schema()

    def health_check(self) -> bool:
        return self.connection.health_check()

    def node_counts(self, *, timeout: float | None = None) -> dict[str, int]:
        """Number of nodes carrying each MediaTrack label."""
        statement = Statement(NODE_COUNTS_QUERY, {"labels": COUNTED_LABELS})
        rows = self.connection.with_read_session(
            lambda tx: run(tx, statement), timeout=timeout, operation="node_counts"
        )
        counts = {row["label"]: row["count"] for row in rows}
        log.debug(f"Node counts: {counts}")
        return counts

    # ══════════════════════════════════════════════════════════════════════════════
    # USERS
    # ══════════════════════════════════════════════════════════════════════════════

    def create_user(
        self, name: str, email: str, auth_provider: str | None = None, *, timeout: float | None = None
    ) -> User:
        return self.users.create_user(name, email, auth_provider, timeout=timeout)

    def get_user(self, user_id: UUID, *, timeout: float | None = None) -> User:
        return self.users.get_user(user_id, timeout=timeout)

    def get_user_by_email(self, email: str, *, timeout: float | None = None) -> User:
        return self.users.get_user_by_email(email, timeout=timeout)

    def list_users(self, *, timeout: float | None = None) -> list[User]:
        return self.users.list_users(timeout=timeout)

    def update_user(
        self,
        user_id: UUID,
        *,
        name: str | None = None,
        email: str | None = None,
        auth_provider: str | None = None,
        timeout: float | None = None,
    ) -> User:
        return self.users.update_user(user_id, name=name, email=email, auth_provider=auth_provider, timeout=timeout)

    def delete_user(self, user_id: UUID, *, timeout: float | None = None) -> bool:
        return self.users.delete_user(user_id, timeout=timeout)

    # ══════════════════════════════════════════════════════════════════════════════
    # MEDIA
    # ══════════════════════════════════════════════════════════════════════════════

    def create_movie(self, title: str, **fields: Any) -> Movie:
        """Keyword fields as MediaRepository.create_movie (release_date, runtime, ...)."""
        return self.media.create_movie(title, **fields)

    def create_tv_show(self, title: str, **fields: Any) -> TVShow:
        return self.media.create_tv_show(title, **fields)

    def create_book(self, title: str, **fields: Any) -> Book:
        return self.media.create_book(title, **fields)

    def create_game(self, title: str, **fields: Any) -> Game:
        return self.media.create_game(title, **fields)

    def create_music_album(self, title: str, **fields: Any) -> MusicAlbum:
        return self.media.create_music_album(title, **fields)

    def get_movie(self, media_id: UUID, *, timeout: float | None = None) -> Movie:
        return self.media.get_movie(media_id, timeout=timeout)

    def get_tv_show(self, media_id: UUID, *, timeout: float | None = None) -> TVShow:
        return self.media.get_tv_show(media_id, timeout=timeout)

    def get_book(self, media_id: UUID, *, timeout: float | None = None) -> Book:
        return self.media.get_book(media_id, timeout=timeout)

    def get_game(self, media_id: UUID, *, timeout: float | None = None) -> Game:
        return self.media.get_game(media_id, timeout=timeout)

    def get_music_album(self, media_id: UUID, *, timeout: float | None = None) -> MusicAlbum:
        return self.media.get_music_album(media_id, timeout=timeout)

    def get_media(self, media_id: UUID, *, timeout: float | None = None) -> Media:
        return self.media.get_media(media_id, timeout=timeout)

    def list_movies(self, *, timeout: float | None = None) -> list[Movie]:
        return self.media.list_movies(timeout=timeout)

    def list_tv_shows(self, *, timeout: float | None = None) -> list[TVShow]:
        return self.media.list_tv_shows(timeout=timeout)

    def list_books(self, *, timeout: float | None = None) -> list[Book]:
        return self.media.list_books(timeout=timeout)

    def list_games(self, *, timeout: float | None = None) -> list[Game]:
        return self.media.list_games(timeout=timeout)

    def list_music_albums(self, *, timeout: float | None = None) -> list[MusicAlbum]:
        return self.media.list_music_albums(timeout=timeout)

    def list_media(self, *, timeout: float | None = None) -> list[Media]:
        return self.media.list_media(timeout=timeout)

    def update_media(self, media_id: UUID, *, timeout: float | None = None, **fields: Any) -> Media:
        return self.media.update_media(media_id, timeout=timeout, **fields)

    def delete_media(self, media_id: UUID, *, timeout: float | None = None) -> bool:
        return self.media.delete_media(media_id, timeout=timeout)

    # ══════════════════════════════════════════════════════════════════════════════
    # ACTIVITIES
    # ══════════════════════════════════════════════════════════════════════════════

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
        return self.activities.create_activity(
            user_id, media_id, status_id, rating, review, started_at, finished_at, timeout=timeout
        )

    def get_activity(self, activity_id: UUID, *, timeout: float | None = None) -> UserActivity:
        return self.activities.get_activity(activity_id, timeout=timeout)

    def list_user_activities(self, user_id: UUID, *, timeout: float | None = None) -> list[UserActivity]:
        return self.activities.list_user_activities(user_id, timeout=timeout)

    def list_media_activities(self, media_id: UUID, *, timeout: float | None = None) -> list[UserActivity]:
        return self.activities.list_media_activities(media_id, timeout=timeout)

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
        return self.activities.update_activity(
            activity_id,
            status_id=status_id,
            rating=rating,
            review=review,
            started_at=started_at,
            finished_at=finished_at,
            timeout=timeout,
        )

    def delete_activity(self, activity_id: UUID, *, timeout: float | None = None) -> bool:
        return self.activities.delete_activity(activity_id, timeout=timeout)

    # ══════════════════════════════════════════════════════════════════════════════
    # RATINGS
    # ══════════════════════════════════════════════════════════════════════════════

    def create_rating(self, user_id: UUID, media_id: UUID, score: float, *, timeout: float | None = None) -> Rating:
        return self.ratings.create_rating(user_id, media_id, score, timeout=timeout)

    def get_rating(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> Rating:
        return self.ratings.get_rating(user_id, media_id, timeout=timeout)

    def list_user_ratings(self, user_id: UUID, *, timeout: float | None = None) -> list[Rating]:
        return self.ratings.list_user_ratings(user_id, timeout=timeout)

    def list_media_ratings(self, media_id: UUID, *, timeout: float | None = None) -> list[Rating]:
        return self.ratings.list_media_ratings(media_id, timeout=timeout)

    def update_rating(self, user_id: UUID, media_id: UUID, score: float, *, timeout: float | None = None) -> Rating:
        return self.ratings.update_rating(user_id, media_id, score, timeout=timeout)

    def delete_rating(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> bool:
        return self.ratings.delete_rating(user_id, media_id, timeout=timeout)

    def average_rating(self, media_id: UUID, *, timeout: float | None = None) -> float | None:
        return self.aggregates.average_rating(media_id, timeout=timeout)

    def rating_summary(self, media_id: UUID, *, timeout: float | None = None) -> RatingSummary:
        return self.aggregates.rating_summary(media_id, timeout=timeout)

    # ══════════════════════════════════════════════════════════════════════════════
    # RECOMMENDATIONS
    # ══════════════════════════════════════════════════════════════════════════════

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
        return self.recommendations.create_recommendation(
            user_id, media_id, recommender_id, source, score, timeout=timeout
        )

    def get_recommendation(self, recommendation_id: UUID, *, timeout: float | None = None) -> Recommendation:
        return self.recommendations.get_recommendation(recommendation_id, timeout=timeout)

    def list_recommendations(self, user_id: UUID, *, timeout: float | None = None) -> list[Recommendation]:
        return self.recommendations.list_recommendations(user_id, timeout=timeout)

    def update_recommendation(
        self,
        recommendation_id: UUID,
        *,
        source: str | None = None,
        score: float | None = None,
        timeout: float | None = None,
    ) -> Recommendation:
        return self.recommendations.update_recommendation(
            recommendation_id, source=source, score=score, timeout=timeout
        )

    def delete_recommendation(self, recommendation_id: UUID, *, timeout: float | None = None) -> bool:
        return self.recommendations.delete_recommendation(recommendation_id, timeout=timeout)

    # ══════════════════════════════════════════════════════════════════════════════
    # FAVORITES
    # ══════════════════════════════════════════════════════════════════════════════

    def add_favorite(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> Favorite:
        return self.favorites.add_favorite(user_id, media_id, timeout=timeout)

    def remove_favorite(self, user_id: UUID, media_id: UUID, *, timeout: float | None = None) -> bool:
        return self.favorites.remove_favorite(user_id, media_id, timeout=timeout)

    def list_favorites(self, user_id: UUID, *, timeout: float | None = None) -> list[Favorite]:
        return self.favorites.list_favorites(user_id, timeout=timeout)
