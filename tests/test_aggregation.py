"""Tests for read-time rating aggregates."""

from uuid import UUID

from mediatrack.db.aggregation import AVERAGE_RATING_QUERY, RatingAggregates, average_rating_clause

MEDIA = UUID("0d9e8f7a-6b5c-4d3e-8f21-0a1b2c3d4e5f")


class TestAverageRating:
    def test_no_ratings_is_absent_not_zero(self, fake_connection):
        fake_connection.script([{"averageRating": None, "ratingCount": 0}])
        assert RatingAggregates(fake_connection).average_rating(MEDIA) is None

    def test_mean(self, fake_connection):
        fake_connection.script([{"averageRating": 4.5, "ratingCount": 2}])
        assert RatingAggregates(fake_connection).average_rating(MEDIA) == 4.5

    def test_query_and_params(self, fake_connection):
        fake_connection.script([{"averageRating": 3.0, "ratingCount": 1}])
        RatingAggregates(fake_connection).average_rating(MEDIA, timeout=1.5)

        text, params = fake_connection.tx.calls[0]
        assert text == AVERAGE_RATING_QUERY
        assert params == {"mediaID": str(MEDIA)}
        assert fake_connection.sessions == [("read", "average_rating", 1.5)]

    def test_summary(self, fake_connection):
        fake_connection.script([{"averageRating": 4, "ratingCount": 3}])
        summary = RatingAggregates(fake_connection).rating_summary(MEDIA)
        assert summary.media_id == MEDIA
        assert summary.count == 3
        assert summary.average == 4.0


class TestAverageRatingClause:
    def test_keeps_alias(self):
        clause = average_rating_clause("m")
        assert clause.splitlines() == [
            "OPTIONAL MATCH (rating:Rating)-[:RATING_FOR]->(m)",
            "WITH m, avg(rating.score) AS averageRating",
        ]

    def test_carries_extra_variables(self):
        assert average_rating_clause("m", "u", "f").endswith("WITH m, u, f, avg(rating.score) AS averageRating")
