"""Role store backed by the ``user_roles`` table."""

import logging
from typing import Optional

from sqlalchemy import func, select  # type: ignore[import-untyped]

from endpoint_registry.core.database import Database
from endpoint_registry.core.models import UserRole
from endpoint_registry.core.schema import UserRoleRow

logger = logging.getLogger(__name__)


class RoleRepository:
    """Answers "what role does user X have" and records role grants."""

    def __init__(self, db: Database):
        self.db = db

    def get_role(self, user_id: str) -> Optional[str]:
        """Get the stored role for a user.

        Args:
            user_id: User identifier

        Returns:
            Stored role value, or None if the user has no role record

        Raises:
            PersistenceError: If the store cannot be read
        """
        with self.db.transaction() as session:
            row = session.get(UserRoleRow, user_id)
            return row.role if row else None

    def set_role(self, user_id: str, role: UserRole) -> None:
        """Create or replace a user's role record."""
        with self.db.transaction() as session:
            row = session.get(UserRoleRow, user_id)
            if row is None:
                session.add(UserRoleRow(user_id=user_id, role=role.value))
            else:
                row.role = role.value
        logger.info(f"Set role of {user_id} to {role.value}")

    def remove(self, user_id: str) -> bool:
        """Delete a user's role record.

        Returns:
            True if a record was deleted, False if none existed
        """
        with self.db.transaction() as session:
            row = session.get(UserRoleRow, user_id)
            if row is None:
                return False
            session.delete(row)
        logger.info(f"Removed role record of {user_id}")
        return True

    def count_users(self) -> int:
        """Count users that have a role record."""
        with self.db.transaction() as session:
            return int(session.scalar(select(func.count()).select_from(UserRoleRow)) or 0)
