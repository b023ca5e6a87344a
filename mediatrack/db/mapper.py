"""Entity mapping between graph properties and MediaTrack records.

Each node kind has a property catalog: (property name, record attribute,
decoder) triples. The catalogs drive decoding here and also tell the
repositories which properties a create writes and which an update may touch.
Rows handed to the map_* functions are the projections the repositories
RETURN: the node's property map under "node" plus any derived columns.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from mediatrack.db import values
from mediatrack.errors import DecodeError
from mediatrack.models import (
    MEDIA_TYPES,
    Favorite,
    Media,
    MediaKind,
    Rating,
    Recommendation,
    User,
    UserActivity,
)


@dataclass(frozen=True)
class Prop:
    """One stored property: graph name, record attribute, decoder."""

    name: str
    attr: str
    decode: Callable[[Mapping[str, Any], str], Any]


# ══════════════════════════════════════════════════════════════════════════════
# PROPERTY CATALOGS
# ══════════════════════════════════════════════════════════════════════════════

TIMESTAMP_PROPS = (
    Prop("createdAt", "created_at", values.optional_datetime),
    Prop("updatedAt", "updated_at", values.optional_datetime),
)

SHARED_MEDIA_PROPS = (
    Prop("title", "title", values.required_str),
    Prop("releaseDate", "release_date", values.optional_str),
    Prop("description", "description", values.optional_str),
    Prop("coverUrl", "cover_url", values.optional_str),
)

VARIANT_PROPS: dict[MediaKind, tuple[Prop, ...]] = {
    MediaKind.MOVIE: (
        Prop("runtime", "runtime", values.optional_int32),
        Prop("budget", "budget", values.optional_int32),
        Prop("boxOffice", "box_office", values.optional_int32),
    ),
    MediaKind.TV_SHOW: (
        Prop("seasons", "seasons", values.optional_int32),
        Prop("episodes", "episodes", values.optional_int32),
        Prop("status", "status", values.optional_str),
    ),
    MediaKind.BOOK: (
        Prop("pages", "pages", values.optional_int32),
        Prop("isbn", "isbn", values.optional_str),
        Prop("publisher", "publisher", values.optional_str),
    ),
    MediaKind.GAME: (
        Prop("developer", "developer", values.optional_str),
        Prop("publisher", "publisher", values.optional_str),
        Prop("platform", "platform", values.optional_str),
    ),
    MediaKind.MUSIC_ALBUM: (
        Prop("artist", "artist", values.optional_str),
        Prop("trackCount", "track_count", values.optional_int32),
        Prop("label", "label", values.optional_str),
    ),
}

USER_PROPS = (
    Prop("name", "name", values.required_str),
    Prop("email", "email", values.required_str),
    Prop("authProvider", "auth_provider", values.optional_str),
)

ACTIVITY_PROPS = (
    Prop("userId", "user_id", values.required_uuid),
    Prop("mediaId", "media_id", values.required_uuid),
    Prop("statusId", "status_id", values.required_int32),
    Prop("rating", "rating", values.optional_float),
    Prop("review", "review", values.optional_str),
    Prop("startedAt", "started_at", values.optional_str),
    Prop("finishedAt", "finished_at", values.optional_str),
)

RATING_PROPS = (
    Prop("userId", "user_id", values.required_uuid),
    Prop("mediaId", "media_id", values.required_uuid),
    Prop("score", "score", values.required_float),
    Prop("ratedAt", "rated_at", values.optional_datetime),
)

RECOMMENDATION_PROPS = (
    Prop("userId", "user_id", values.required_uuid),
    Prop("mediaId", "media_id", values.required_uuid),
    Prop("recommenderId", "recommender_id", values.optional_uuid),
    Prop("source", "source", values.optional_str),
    Prop("score", "score", values.optional_float),
)


def media_props(kind: MediaKind) -> tuple[Prop, ...]:
    """Shared plus variant-specific properties for a media kind."""
    return SHARED_MEDIA_PROPS + VARIANT_PROPS[kind]


def attr_to_prop(props: tuple[Prop, ...]) -> dict[str, str]:
    """Record attribute name -> graph property name."""
    return {p.attr: p.name for p in props}


# ══════════════════════════════════════════════════════════════════════════════
# DECODING
# ══════════════════════════════════════════════════════════════════════════════


def _node(row: Mapping[str, Any], entity: str) -> Mapping[str, Any]:
    node = row.get("node")
    if not isinstance(node, Mapping):
        raise DecodeError(f"{entity} row has no node properties", entity=entity)
    return node


def _decode(node: Mapping[str, Any], props: tuple[Prop, ...], entity: str) -> dict[str, Any]:
    """Run each property's decoder, attaching entity/identifier context to failures."""
    try:
        return {p.attr: p.decode(node, p.name) for p in props}
    except DecodeError as e:
        e.entity = entity
        e.identifier = node.get("id")
        raise


def map_user(row: Mapping[str, Any]) -> User:
    node = _node(row, "User")
    fields = _decode(node, USER_PROPS + TIMESTAMP_PROPS, "User")
    return User(id=_decode_id(node, "User"), **fields)


def map_media(row: Mapping[str, Any]) -> Media:
    """Decode a media row, dispatching on the variant label.

    Expects "node", "labels" and optionally "averageRating" columns.
    """
    node = _node(row, "Media")
    labels = row.get("labels") or ()
    kind = MediaKind.from_labels(labels)
    if kind is None:
        raise DecodeError(
            f"media node carries no variant label (labels={list(labels)})",
            entity="Media",
            identifier=node.get("id"),
        )

    fields = _decode(node, media_props(kind) + TIMESTAMP_PROPS, kind.label)
    fields["average_rating"] = values.optional_float(row, "averageRating")
    return MEDIA_TYPES[kind](id=_decode_id(node, kind.label), **fields)


def map_activity(row: Mapping[str, Any]) -> UserActivity:
    node = _node(row, "UserActivity")
    fields = _decode(node, ACTIVITY_PROPS + TIMESTAMP_PROPS, "UserActivity")
    return UserActivity(id=_decode_id(node, "UserActivity"), **fields)


def map_rating(row: Mapping[str, Any]) -> Rating:
    node = _node(row, "Rating")
    return Rating(**_decode(node, RATING_PROPS, "Rating"))


def map_recommendation(row: Mapping[str, Any]) -> Recommendation:
    node = _node(row, "Recommendation")
    fields = _decode(node, RECOMMENDATION_PROPS + TIMESTAMP_PROPS, "Recommendation")
    return Recommendation(id=_decode_id(node, "Recommendation"), **fields)


def map_favorite(row: Mapping[str, Any]) -> Favorite:
    """Decode a favorites row: the media columns plus "userId" and "addedAt"."""
    return Favorite(
        user_id=values.required_uuid(row, "userId"),
        media=map_media(row),
        added_at=values.optional_datetime(row, "addedAt"),
    )


def _decode_id(node: Mapping[str, Any], entity: str):
    try:
        return values.required_uuid(node, "id")
    except DecodeError as e:
        e.entity = entity
        e.identifier = node.get("id")
        raise
