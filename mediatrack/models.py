"""Domain records for MediaTrack.

Typed records returned by the repositories. Media variants share the Media
base fields and add their own payload; the variant is identified by
MediaKind, which maps one-to-one onto the variant node label.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import ClassVar
from uuid import UUID


class MediaKind(str, Enum):
    """Media variant, valued by its graph label."""

    MOVIE = "Movie"
    TV_SHOW = "TVShow"
    BOOK = "Book"
    GAME = "Game"
    MUSIC_ALBUM = "MusicAlbum"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_labels(cls, labels) -> "MediaKind | None":
        """Pick the variant out of a node's label set (None if no variant label)."""
        for kind in cls:
            if kind.value in labels:
                return kind
        return None


class ActivityStatus(IntEnum):
    """Activity status enumeration referenced by UserActivity.status_id."""

    PLANNED = 1
    IN_PROGRESS = 2
    COMPLETED = 3
    DROPPED = 4
    ON_HOLD = 5

    @property
    def display_name(self) -> str:
        return {
            ActivityStatus.PLANNED: "Want to Watch/Read/Play",
            ActivityStatus.IN_PROGRESS: "Currently Watching/Reading/Playing",
            ActivityStatus.COMPLETED: "Completed",
            ActivityStatus.DROPPED: "Dropped",
            ActivityStatus.ON_HOLD: "On Hold",
        }[self]


# ══════════════════════════════════════════════════════════════════════════════
# MEDIA
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class Media:
    """Fields shared by every media variant.

    Attributes:
        id: Identifier, unique across all variants
        title: Display title
        release_date: Release date as supplied (free-form text)
        description: Synopsis
        cover_url: Cover art location
        created_at: Server timestamp of creation
        updated_at: Server timestamp of the last update
        average_rating: Mean Rating score at read time (None = no ratings yet)
    """

    id: UUID
    title: str
    release_date: str | None = None
    description: str | None = None
    cover_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    average_rating: float | None = None

    KIND: ClassVar[MediaKind | None] = None  # set on each variant

    @property
    def kind(self) -> MediaKind:
        return self.KIND


@dataclass
class Movie(Media):
    runtime: int | None = None
    budget: int | None = None
    box_office: int | None = None

    KIND = MediaKind.MOVIE


@dataclass
class TVShow(Media):
    seasons: int | None = None
    episodes: int | None = None
    status: str | None = None

    KIND = MediaKind.TV_SHOW


@dataclass
class Book(Media):
    pages: int | None = None
    isbn: str | None = None
    publisher: str | None = None

    KIND = MediaKind.BOOK


@dataclass
class Game(Media):
    developer: str | None = None
    publisher: str | None = None
    platform: str | None = None

    KIND = MediaKind.GAME


@dataclass
class MusicAlbum(Media):
    artist: str | None = None
    track_count: int | None = None
    label: str | None = None

    KIND = MediaKind.MUSIC_ALBUM


MEDIA_TYPES: dict[MediaKind, type[Media]] = {
    MediaKind.MOVIE: Movie,
    MediaKind.TV_SHOW: TVShow,
    MediaKind.BOOK: Book,
    MediaKind.GAME: Game,
    MediaKind.MUSIC_ALBUM: MusicAlbum,
}


# ══════════════════════════════════════════════════════════════════════════════
# USERS AND USER-OWNED RECORDS
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class User:
    id: UUID
    name: str
    email: str
    auth_provider: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class UserActivity:
    """A user's progress on one media item.

    Attributes:
        id: Activity identifier
        user_id: Owning user
        media_id: Target media item
        status_id: ActivityStatus value
        rating: Optional score given with the activity
        review: Optional free-text review
        started_at: When the user started (as supplied)
        finished_at: When the user finished (as supplied)
    """

    id: UUID
    user_id: UUID
    media_id: UUID
    status_id: int
    rating: float | None = None
    review: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def status(self) -> ActivityStatus | None:
        try:
            return ActivityStatus(self.status_id)
        except ValueError:
            return None


@dataclass
class Rating:
    """A user's score for a media item; identified by (user_id, media_id)."""

    user_id: UUID
    media_id: UUID
    score: float
    rated_at: datetime | None = None


@dataclass
class Recommendation:
    id: UUID
    user_id: UUID
    media_id: UUID
    recommender_id: UUID | None = None
    source: str | None = None
    score: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Favorite:
    """A media item a user marked as favorite."""

    user_id: UUID
    media: Media
    added_at: datetime | None = None


@dataclass
class RatingSummary:
    """Rating aggregate for one media item, computed at read time."""

    media_id: UUID
    count: int
    average: float | None = None
