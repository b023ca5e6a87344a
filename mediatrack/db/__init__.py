"""Graph persistence for MediaTrack.

This package provides Repository, the single entry point to every
persistence operation, over an explicitly constructed GraphConnection.

Environment Variables:
- NEO4J_URI / NEO4J_USERNAME / NEO4J_PASSWORD / NEO4J_DATABASE: store connection
- MEDIATRACK_QUERY_TIMEOUT: default per-transaction deadline (seconds)

Module Structure:
- connection.py: GraphConnection, read/write session entry points
- schema.py: SchemaInitializer (constraints and indexes)
- values.py: dynamic value coercion
- mapper.py: property catalogs and row -> record mapping
- query_builder.py: Statement, create_node, UpdateBuilder
- aggregation.py: RatingAggregates (read-time averages)
- *_repository.py: one repository per entity kind
- repository.py: Repository façade composing all of the above

Example:
    from mediatrack.config import Config
    from mediatrack.db import GraphConnection, Repository

    with Repository(GraphConnection.from_config(Config())) as repo:
        repo.ensure_schema()
        movie = repo.create_movie("Alien", runtime=117)
        print(repo.get_media(movie.id))
"""

from mediatrack.db.aggregation import RatingAggregates
from mediatrack.db.connection import GraphConnection, is_neo4j_available
from mediatrack.db.repository import Repository
from mediatrack.db.schema import SchemaInitializer, SchemaReport

__all__ = [
    "GraphConnection",
    "RatingAggregates",
    "Repository",
    "SchemaInitializer",
    "SchemaReport",
    "is_neo4j_available",
]
