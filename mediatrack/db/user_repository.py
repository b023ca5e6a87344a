"""User persistence."""

from uuid import UUID, uuid4

from mediatrack.db.base_repository import BaseRepository
from mediatrack.db.mapper import USER_PROPS, map_user
from mediatrack.db.query_builder import Statement, UpdateBuilder, create_node, node_projection
from mediatrack.errors import ConstraintViolationError
from mediatrack.log_config import get_logger
from mediatrack.models import User

log = get_logger("db.users")

USER_ORDER = "ORDER BY u.name, id(u)"

DELETE_USER_QUERY = """
MATCH (u:User {id: $id})
OPTIONAL MATCH (u)-[:HAS_ACTIVITY|RATED|RECEIVED_RECOMMENDATION]->(owned)
DETACH DELETE u, owned
"""


class UserRepository(BaseRepository):
    ENTITY = "User"

    def create_user(
        self,
        name: str,
        email: str,
        auth_provider: str | None = None,
        *,
        timeout: float | None = None,
    ) -> User:
        """Create a user with a fresh id.

        Raises:
            ConstraintViolationError: If the email is already registered
        """
        user_id = uuid4()
        clause, params = create_node(
            "u",
            ["User"],
            {"id": user_id, "name": name, "email": email, "authProvider": auth_provider},
        )
        statement = Statement(f"{clause}\n{node_projection('u')}", params)

        try:
            user = self._create_linked(statement, map_user, timeout=timeout, operation="create_user")
        except ConstraintViolationError as e:
            raise ConstraintViolationError(
                f"user with email {email!r} already exists", entity=self.ENTITY, field="email"
            ) from e

        log.info(f"Created user {user.id}")
        return user

    def get_user(self, user_id: UUID, *, timeout: float | None = None) -> User:
        statement = Statement(f"MATCH (u:User {{id: $id}})\n{node_projection('u')}", {"id": str(user_id)})
        return self._fetch_one(statement, map_user, identifier=user_id, timeout=timeout, operation="get_user")

    def get_user_by_email(self, email: str, *, timeout: float | None = None) -> User:
        statement = Statement(f"MATCH (u:User {{email: $email}})\n{node_projection('u')}", {"email": email})
        return self._fetch_one(statement, map_user, identifier=email, timeout=timeout, operation="get_user_by_email")

    def list_users(self, *, timeout: float | None = None) -> list[User]:
        """All users, alphabetical by name."""
        statement = Statement(f"MATCH (u:User)\n{node_projection('u')}\n{USER_ORDER}")
        return self._fetch_all(statement, map_user, timeout=timeout, operation="list_users")

    def update_user(
        self,
        user_id: UUID,
        *,
        name: str | None = None,
        email: str | None = None,
        auth_provider: str | None = None,
        timeout: float | None = None,
    ) -> User:
        """Apply the supplied fields; updatedAt is refreshed even when none are."""
        builder = UpdateBuilder(
            "u",
            "MATCH (u:User {id: $id})",
            {"id": str(user_id)},
            allowed_fields=[p.name for p in USER_PROPS],
            entity=self.ENTITY,
        )
        builder.update({"name": name, "email": email, "authProvider": auth_provider})
        statement = builder.build(node_projection("u"))

        try:
            user = self._write_one(statement, map_user, identifier=user_id, timeout=timeout, operation="update_user")
        except ConstraintViolationError as e:
            raise ConstraintViolationError(
                f"user with email {email!r} already exists", entity=self.ENTITY, identifier=user_id, field="email"
            ) from e

        log.debug(f"Updated user {user_id}: {builder.supplied_fields}")
        return user

    def delete_user(self, user_id: UUID, *, timeout: float | None = None) -> bool:
        """Delete the user, the activities, ratings and recommendations it owns,
        and every relationship attached to any of them.

        Recommendations the user made for others survive; they only lose
        their RECOMMENDED_BY edge.
        """
        statement = Statement(DELETE_USER_QUERY, {"id": str(user_id)})
        deleted = self._delete(statement, timeout=timeout, operation="delete_user")
        log.info(f"Deleted user {user_id}" if deleted else f"Delete user {user_id}: nothing matched")
        return deleted
