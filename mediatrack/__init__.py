"""MediaTrack - graph persistence for a media tracking service.

Stores users, media items (movies, TV shows, books, games, music albums),
activities, ratings, recommendations and favorites in Neo4j.
"""

__version__ = "0.1.0"

from mediatrack.config import Config
from mediatrack.db import GraphConnection, Repository
from mediatrack.errors import (
    ConnectivityError,
    ConstraintViolationError,
    DecodeError,
    MediaTrackError,
    NotFoundError,
    SchemaError,
    ValidationError,
)

__all__ = [
    "Config",
    "GraphConnection",
    "Repository",
    "MediaTrackError",
    "NotFoundError",
    "ValidationError",
    "ConstraintViolationError",
    "ConnectivityError",
    "DecodeError",
    "SchemaError",
]
