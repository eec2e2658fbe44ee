"""Tag reference data."""

import logging
from typing import Iterable, Optional

from sqlalchemy import func, select  # type: ignore[import-untyped]
from sqlalchemy.orm import Session  # type: ignore[import-untyped]

from endpoint_registry.core.database import Database
from endpoint_registry.core.errors import ValidationError
from endpoint_registry.core.models import Tag
from endpoint_registry.core.schema import TagRow
from endpoint_registry.core.validation import validate_tag

logger = logging.getLogger(__name__)


def load_tags(session: Session, tag_ids: Iterable[str]) -> list[TagRow]:
    """Load tag rows for the given ids, preserving order.

    Args:
        session: Open session
        tag_ids: Tag identifiers

    Returns:
        Tag rows in the order of ``tag_ids``

    Raises:
        ValidationError: On ``tagIds`` if any id has no tag
    """
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    rows = session.scalars(select(TagRow).where(TagRow.id.in_(wanted))).all()
    by_id = {row.id: row for row in rows}
    missing = [tag_id for tag_id in wanted if tag_id not in by_id]
    if missing:
        raise ValidationError.for_field("tagIds", f"Unknown tag: {', '.join(missing)}")
    return [by_id[tag_id] for tag_id in wanted]


class TagRepository:
    """Reads and seeds tags. Tags are shared, never owned by entries."""

    def __init__(self, db: Database):
        self.db = db

    def list_tags(self) -> list[Tag]:
        """List all tags ordered by name."""
        with self.db.transaction() as session:
            rows = session.scalars(select(TagRow).order_by(TagRow.name)).all()
            return [row.to_domain() for row in rows]

    def get_by_slug(self, slug: str) -> Optional[Tag]:
        with self.db.transaction() as session:
            row = session.scalars(select(TagRow).where(TagRow.slug == slug)).first()
            return row.to_domain() if row else None

    def create(self, name: str, slug: str, color: str) -> Tag:
        """Create a tag.

        Args:
            name: Display name
            slug: Unique URL-safe identifier
            color: Hex color code

        Returns:
            Created tag

        Raises:
            ValidationError: If the values are invalid or the slug is taken
        """
        submission = validate_tag({"name": name, "slug": slug, "color": color})
        with self.db.transaction() as session:
            taken = session.scalar(
                select(func.count()).select_from(TagRow).where(TagRow.slug == submission.slug)
            )
            if taken:
                raise ValidationError.for_field("slug", f"Slug already exists: {submission.slug}")
            row = TagRow(name=submission.name, slug=submission.slug, color=submission.color)
            session.add(row)
            session.flush()
            tag = row.to_domain()
        logger.info(f"Created tag {tag.slug} ({tag.id})")
        return tag
