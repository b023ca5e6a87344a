"""Media persistence for every variant.

Media nodes carry the shared Media label plus exactly one variant label
(Movie, TVShow, Book, Game or MusicAlbum). Typed accessors match on the
variant label; the generic accessors match on Media and let the mapper
dispatch on the labels returned with each row, so a lookup never has to
guess the variant.
"""

from typing import Any
from uuid import UUID, uuid4

from neo4j import ManagedTransaction

from mediatrack.db import values
from mediatrack.db.aggregation import average_rating_clause
from mediatrack.db.base_repository import BaseRepository
from mediatrack.db.connection import run_single
from mediatrack.db.mapper import attr_to_prop, map_media, media_props
from mediatrack.db.query_builder import Statement, UpdateBuilder, create_node, node_projection
from mediatrack.errors import DecodeError, ValidationError
from mediatrack.log_config import get_logger
from mediatrack.models import Book, Game, Media, MediaKind, Movie, MusicAlbum, TVShow

log = get_logger("db.media")

MEDIA_ORDER = "ORDER BY m.title, id(m)"

DELETE_MEDIA_QUERY = """
MATCH (m:Media {id: $id})
OPTIONAL MATCH (m)<-[:ACTIVITY_FOR|RATING_FOR|RECOMMENDS]-(owned)
DETACH DELETE m, owned
"""


def _check_int_fields(kind: MediaKind, fields: dict[str, Any]) -> None:
    """Range-check every integer field of the variant before it is written."""
    for prop in media_props(kind):
        if prop.decode is values.optional_int32:
            values.check_int32(prop.attr, fields.get(prop.attr), entity=kind.label)


def _media_returning(alias: str = "m") -> str:
    """Attach the read-time average and project node, labels and average."""
    return "\n".join([
        average_rating_clause(alias),
        node_projection(alias, f"labels({alias}) AS labels", "averageRating"),
    ])


class MediaRepository(BaseRepository):
    ENTITY = "Media"

    # ══════════════════════════════════════════════════════════════════════════════
    # CREATE
    # ══════════════════════════════════════════════════════════════════════════════

    def create_movie(
        self,
        title: str,
        *,
        release_date: str | None = None,
        description: str | None = None,
        cover_url: str | None = None,
        runtime: int | None = None,
        budget: int | None = None,
        box_office: int | None = None,
        timeout: float | None = None,
    ) -> Movie:
        return self._create(
            MediaKind.MOVIE,
            dict(
                title=title,
                release_date=release_date,
                description=description,
                cover_url=cover_url,
                runtime=runtime,
                budget=budget,
                box_office=box_office,
            ),
            timeout,
        )

    def create_tv_show(
        self,
        title: str,
        *,
        release_date: str | None = None,
        description: str | None = None,
        cover_url: str | None = None,
        seasons: int | None = None,
        episodes: int | None = None,
        status: str | None = None,
        timeout: float | None = None,
    ) -> TVShow:
        return self._create(
            MediaKind.TV_SHOW,
            dict(
                title=title,
                release_date=release_date,
                description=description,
                cover_url=cover_url,
                seasons=seasons,
                episodes=episodes,
                status=status,
            ),
            timeout,
        )

    def create_book(
        self,
        title: str,
        *,
        release_date: str | None = None,
        description: str | None = None,
        cover_url: str | None = None,
        pages: int | None = None,
        isbn: str | None = None,
        publisher: str | None = None,
        timeout: float | None = None,
    ) -> Book:
        return self._create(
            MediaKind.BOOK,
            dict(
                title=title,
                release_date=release_date,
                description=description,
                cover_url=cover_url,
                pages=pages,
                isbn=isbn,
                publisher=publisher,
            ),
            timeout,
        )

    def create_game(
        self,
        title: str,
        *,
        release_date: str | None = None,
        description: str | None = None,
        cover_url: str | None = None,
        developer: str | None = None,
        publisher: str | None = None,
        platform: str | None = None,
        timeout: float | None = None,
    ) -> Game:
        return self._create(
            MediaKind.GAME,
            dict(
                title=title,
                release_date=release_date,
                description=description,
                cover_url=cover_url,
                developer=developer,
                publisher=publisher,
                platform=platform,
            ),
            timeout,
        )

    def create_music_album(
        self,
        title: str,
        *,
        release_date: str | None = None,
        description: str | None = None,
        cover_url: str | None = None,
        artist: str | None = None,
        track_count: int | None = None,
        label: str | None = None,
        timeout: float | None = None,
    ) -> MusicAlbum:
        return self._create(
            MediaKind.MUSIC_ALBUM,
            dict(
                title=title,
                release_date=release_date,
                description=description,
                cover_url=cover_url,
                artist=artist,
                track_count=track_count,
                label=label,
            ),
            timeout,
        )

    def _create(self, kind: MediaKind, fields: dict[str, Any], timeout: float | None) -> Media:
        """Create a `:<Variant>:Media` node from record-attribute fields."""
        _check_int_fields(kind, fields)
        props = attr_to_prop(media_props(kind))
        properties = {"id": uuid4(), **{props[attr]: value for attr, value in fields.items()}}
        clause, params = create_node("m", [kind.label, "Media"], properties)
        statement = Statement(
            f"{clause}\n{node_projection('m', 'labels(m) AS labels', 'null AS averageRating')}",
            params,
        )

        media = self._create_linked(statement, map_media, timeout=timeout, operation=f"create_{kind.label.lower()}")
        log.info(f"Created {kind.label} {media.id}: {media.title!r}")
        return media

    # ══════════════════════════════════════════════════════════════════════════════
    # READ
    # ══════════════════════════════════════════════════════════════════════════════

    def get_movie(self, media_id: UUID, *, timeout: float | None = None) -> Movie:
        return self._get(MediaKind.MOVIE.label, media_id, timeout)

    def get_tv_show(self, media_id: UUID, *, timeout: float | None = None) -> TVShow:
        return self._get(MediaKind.TV_SHOW.label, media_id, timeout)

    def get_book(self, media_id: UUID, *, timeout: float | None = None) -> Book:
        return self._get(MediaKind.BOOK.label, media_id, timeout)

    def get_game(self, media_id: UUID, *, timeout: float | None = None) -> Game:
        return self._get(MediaKind.GAME.label, media_id, timeout)

    def get_music_album(self, media_id: UUID, *, timeout: float | None = None) -> MusicAlbum:
        return self._get(MediaKind.MUSIC_ALBUM.label, media_id, timeout)

    def get_media(self, media_id: UUID, *, timeout: float | None = None) -> Media:
        """Look up a media item of any variant; the returned type follows its label."""
        return self._get("Media", media_id, timeout)

    def list_movies(self, *, timeout: float | None = None) -> list[Movie]:
        return self._list(MediaKind.MOVIE.label, timeout)

    def list_tv_shows(self, *, timeout: float | None = None) -> list[TVShow]:
        return self._list(MediaKind.TV_SHOW.label, timeout)

    def list_books(self, *, timeout: float | None = None) -> list[Book]:
        return self._list(MediaKind.BOOK.label, timeout)

    def list_games(self, *, timeout: float | None = None) -> list[Game]:
        return self._list(MediaKind.GAME.label, timeout)

    def list_music_albums(self, *, timeout: float | None = None) -> list[MusicAlbum]:
        return self._list(MediaKind.MUSIC_ALBUM.label, timeout)

    def list_media(self, *, timeout: float | None = None) -> list[Media]:
        """Every media item across all variants, alphabetical by title."""
        return self._list("Media", timeout)

    def _get(self, label: str, media_id: UUID, timeout: float | None) -> Media:
        statement = Statement(
            f"MATCH (m:{label} {{id: $id}})\n{_media_returning()}",
            {"id": str(media_id)},
        )
        return self._fetch_one(
            statement,
            map_media,
            identifier=media_id,
            timeout=timeout,
            operation=f"get_{label.lower()}",
            entity=label,
        )

    def _list(self, label: str, timeout: float | None) -> list[Media]:
        statement = Statement(f"MATCH (m:{label})\n{_media_returning()}\n{MEDIA_ORDER}")
        return self._fetch_all(statement, map_media, timeout=timeout, operation=f"list_{label.lower()}")

    # ══════════════════════════════════════════════════════════════════════════════
    # UPDATE / DELETE
    # ══════════════════════════════════════════════════════════════════════════════

    def update_media(self, media_id: UUID, *, timeout: float | None = None, **fields: Any) -> Media:
        """Apply the supplied record-attribute fields to a media item.

        The stored variant decides which fields are allowed: `runtime` is
        valid for a Movie, `isbn` for a Book, and so on. None values are
        treated as not supplied.

        Raises:
            NotFoundError: No media item has this id
            ValidationError: A field does not belong to the stored variant
        """

        def work(tx: ManagedTransaction) -> Media:
            row = run_single(
                tx,
                Statement("MATCH (m:Media {id: $id}) RETURN labels(m) AS labels", {"id": str(media_id)}),
            )
            if row is None:
                raise self._not_found(media_id)
            kind = MediaKind.from_labels(row["labels"])
            if kind is None:
                raise DecodeError(
                    f"media node carries no variant label (labels={row['labels']})",
                    entity=self.ENTITY,
                    identifier=media_id,
                )

            props = attr_to_prop(media_props(kind))
            unknown = sorted(set(fields) - set(props))
            if unknown:
                raise ValidationError(
                    f"{kind.label} has no updatable field {unknown[0]!r}",
                    entity=kind.label,
                    identifier=media_id,
                    field=unknown[0],
                )

            _check_int_fields(kind, fields)

            builder = UpdateBuilder(
                "m",
                "MATCH (m:Media {id: $id})",
                {"id": str(media_id)},
                allowed_fields=props.values(),
                entity=kind.label,
            )
            builder.update({props[attr]: value for attr, value in fields.items()})
            statement = builder.build(f"WITH m\n{_media_returning()}")
            log.debug(f"Updating {kind.label} {media_id}: {builder.supplied_fields}")

            updated = run_single(tx, statement)
            if updated is None:
                raise self._not_found(media_id)
            return map_media(updated)

        return self.connection.with_write_session(work, timeout=timeout, operation="update_media")

    def delete_media(self, media_id: UUID, *, timeout: float | None = None) -> bool:
        """Delete a media item with its activities, ratings and recommendations.

        Favorites pointing at the item are relationships and go with it.
        """
        statement = Statement(DELETE_MEDIA_QUERY, {"id": str(media_id)})
        deleted = self._delete(statement, timeout=timeout, operation="delete_media")
        log.info(f"Deleted media {media_id}" if deleted else f"Delete media {media_id}: nothing matched")
        return deleted
