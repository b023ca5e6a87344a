"""Integration tests for the Repository against a live Neo4j server.

Skipped unless a server answers at NEO4J_URI with NEO4J_USERNAME /
NEO4J_PASSWORD. Every test creates its own users and media with unique
names and removes them afterwards, so the suite can run against a shared
database.
"""

import time
import uuid

import pytest

from mediatrack.config import Config
from mediatrack.db import GraphConnection, Repository, is_neo4j_available
from mediatrack.errors import ConstraintViolationError, DecodeError, NotFoundError, ValidationError
from mediatrack.models import Book, Movie

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def repo():
    """Repository over a live connection with the schema declared."""
    config = Config()
    if not is_neo4j_available(config.neo4j_uri, config.neo4j_username, config.neo4j_password):
        pytest.skip("Neo4j server not running")

    repository = Repository(GraphConnection.from_config(config))
    repository.ensure_schema()
    yield repository
    repository.close()


@pytest.fixture
def make_user(repo):
    """Factory creating users that are deleted after the test."""
    created = []

    def _make(name: str = "Test User"):
        user = repo.create_user(name, f"{uuid.uuid4().hex}@example.com", "local")
        created.append(user.id)
        return user

    yield _make
    for user_id in created:
        repo.delete_user(user_id)


@pytest.fixture
def make_movie(repo):
    """Factory creating movies that are deleted after the test."""
    created = []

    def _make(title: str | None = None, **fields):
        movie = repo.create_movie(title or f"Movie {uuid.uuid4().hex[:8]}", **fields)
        created.append(movie.id)
        return movie

    yield _make
    for media_id in created:
        repo.delete_media(media_id)


class TestCreateAndGet:
    """Created records round-trip through GetByID."""

    def test_user(self, repo, make_user):
        user = make_user("Ada")
        assert user.id.version == 4
        assert repo.get_user(user.id) == user
        assert repo.get_user_by_email(user.email) == user

    def test_movie_and_generic_lookup(self, repo, make_movie):
        movie = make_movie("Alien", runtime=117, budget=11000000)
        fetched = repo.get_movie(movie.id)
        assert fetched == movie
        assert isinstance(repo.get_media(movie.id), Movie)

    def test_typed_get_of_other_variant(self, repo, make_movie):
        movie = make_movie()
        with pytest.raises(NotFoundError):
            repo.get_book(movie.id)

    def test_book(self, repo):
        book = repo.create_book(f"Dune {uuid.uuid4().hex[:6]}", pages=412, isbn="978-0441013593")
        try:
            fetched = repo.get_media(book.id)
            assert isinstance(fetched, Book)
            assert fetched.pages == 412
        finally:
            assert repo.delete_media(book.id) is True

    def test_fresh_ids(self, make_user):
        assert make_user().id != make_user().id

    def test_duplicate_email(self, repo, make_user):
        user = make_user()
        with pytest.raises(ConstraintViolationError):
            repo.create_user("Copy", user.email)


class TestEndpointValidation:
    """Creates that reference missing nodes fail and leave nothing behind."""

    def test_activity_with_missing_media(self, repo, make_user):
        user = make_user()
        with pytest.raises(ValidationError, match="media"):
            repo.create_activity(user.id, uuid.uuid4(), 1)
        assert repo.list_user_activities(user.id) == []

    def test_rating_with_missing_user(self, repo, make_movie):
        movie = make_movie()
        with pytest.raises(ValidationError, match="user"):
            repo.create_rating(uuid.uuid4(), movie.id, 4.0)
        assert repo.list_media_ratings(movie.id) == []

    def test_recommendation_with_missing_recommender(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        with pytest.raises(ValidationError, match="recommender"):
            repo.create_recommendation(user.id, movie.id, recommender_id=uuid.uuid4())
        assert repo.list_recommendations(user.id) == []


class TestRatings:
    def test_duplicate_pair_rejected(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        repo.create_rating(user.id, movie.id, 4.0)
        with pytest.raises(ConstraintViolationError):
            repo.create_rating(user.id, movie.id, 5.0)
        assert len(repo.list_media_ratings(movie.id)) == 1

    def test_average(self, repo, make_user, make_movie):
        movie = make_movie()
        assert repo.average_rating(movie.id) is None

        repo.create_rating(make_user().id, movie.id, 4.0)
        repo.create_rating(make_user().id, movie.id, 5.0)

        assert repo.average_rating(movie.id) == 4.5
        assert repo.get_media(movie.id).average_rating == 4.5
        assert repo.rating_summary(movie.id).count == 2

    def test_update_refreshes_rated_at(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        created = repo.create_rating(user.id, movie.id, 2.0)
        time.sleep(0.01)
        updated = repo.update_rating(user.id, movie.id, 3.0)
        assert updated.score == 3.0
        assert updated.rated_at > created.rated_at


class TestPartialUpdates:
    def test_update_without_fields_only_touches_timestamp(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        activity = repo.create_activity(user.id, movie.id, 2, rating=4.0, review="Good", started_at="2024-05-01")
        time.sleep(0.01)

        updated = repo.update_activity(activity.id)

        assert updated.updated_at > activity.updated_at
        assert (updated.status_id, updated.rating, updated.review, updated.started_at, updated.finished_at) == (
            activity.status_id,
            activity.rating,
            activity.review,
            activity.started_at,
            activity.finished_at,
        )

    def test_update_review_only(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        activity = repo.create_activity(user.id, movie.id, 2, rating=4.0, started_at="2024-05-01")

        repo.update_activity(activity.id, review="Changed my mind")
        fetched = repo.get_activity(activity.id)

        assert fetched.review == "Changed my mind"
        assert fetched.status_id == 2
        assert fetched.rating == 4.0
        assert fetched.started_at == "2024-05-01"
        assert fetched.finished_at is None

    def test_update_media_field_of_stored_variant(self, repo, make_movie):
        movie = make_movie(runtime=100)
        updated = repo.update_media(movie.id, runtime=120)
        assert updated.runtime == 120
        with pytest.raises(ValidationError):
            repo.update_media(movie.id, isbn="978-0")

    def test_update_missing(self, repo):
        with pytest.raises(NotFoundError):
            repo.update_user(uuid.uuid4(), name="Nobody")


class TestDeletes:
    def test_delete_removes_node_and_relationships(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        activity = repo.create_activity(user.id, movie.id, 1)

        assert repo.delete_activity(activity.id) is True
        with pytest.raises(NotFoundError):
            repo.get_activity(activity.id)
        assert repo.list_user_activities(user.id) == []

    def test_delete_missing_returns_false(self, repo):
        assert repo.delete_activity(uuid.uuid4()) is False
        assert repo.delete_media(uuid.uuid4()) is False

    def test_delete_media_cascades_ratings(self, repo, make_user):
        user = make_user()
        movie = repo.create_movie("Short-lived")
        repo.create_rating(user.id, movie.id, 3.0)

        assert repo.delete_media(movie.id) is True
        assert repo.list_user_ratings(user.id) == []


class TestFavorites:
    def test_add_is_idempotent(self, repo, make_user, make_movie):
        user, movie = make_user(), make_movie()
        first = repo.add_favorite(user.id, movie.id)
        second = repo.add_favorite(user.id, movie.id)

        assert first.added_at == second.added_at
        assert [f.media.id for f in repo.list_favorites(user.id)] == [movie.id]
        assert repo.remove_favorite(user.id, movie.id) is True
        assert repo.remove_favorite(user.id, movie.id) is False


class TestOrdering:
    def test_lists_are_stable(self, repo, make_user, make_movie):
        user = make_user()
        for title in ("B", "A", "C"):
            repo.create_activity(user.id, make_movie(title).id, 1)

        first = repo.list_user_activities(user.id)
        second = repo.list_user_activities(user.id)
        assert [a.id for a in first] == [a.id for a in second]
        assert [a.created_at for a in first] == sorted((a.created_at for a in first), reverse=True)

    def test_media_listed_by_title(self, repo, make_movie):
        suffix = uuid.uuid4().hex[:6]
        make_movie(f"zz-{suffix}-b")
        make_movie(f"zz-{suffix}-a")
        titles = [m.title for m in repo.list_movies() if suffix in m.title]
        assert titles == [f"zz-{suffix}-a", f"zz-{suffix}-b"]


class TestDecodeFailures:
    def test_malformed_stored_value(self, repo, make_movie):
        movie = make_movie()
        repo.connection.with_write_session(
            lambda tx: tx.run("MATCH (m:Movie {id: $id}) SET m.runtime = 'forever'", {"id": str(movie.id)}).consume()
        )
        with pytest.raises(DecodeError):
            repo.get_movie(movie.id)
