# sportbook/repositories/profile_repository.py
"""Data access for teacher and student profiles."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import ProfileRole
from ..core.exceptions import RepositoryException
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        """Resolve a profile from an identity-provider user id."""
        return self.find_one_by(user_id=user_id)

    def get_by_slug(self, slug: str) -> Optional[Profile]:
        return self.find_one_by(slug=slug)

    def list_teachers(self, search: Optional[str] = None) -> List[Profile]:
        """
        Teacher profiles, newest first.

        Args:
            search: Optional case-insensitive substring matched against the
                name or the bio

        Returns:
            Matching teacher profiles
        """
        query = self._build_query().filter(Profile.role == ProfileRole.TEACHER.value)

        term = (search or "").strip()
        if term:
            search_term = f"%{term}%"
            query = query.filter(or_(Profile.full_name.ilike(search_term), Profile.bio.ilike(search_term)))

        return self._execute_query(query.order_by(Profile.created_at.desc(), Profile.id.desc()))

    def set_rating_aggregate(self, profile_id: str, average_rating: float, total_reviews: int) -> None:
        try:
            self.db.query(Profile).filter(Profile.id == profile_id).update(
                {"average_rating": average_rating, "total_reviews": total_reviews},
                synchronize_session="fetch",
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating rating aggregate for {profile_id}: {str(e)}")
            raise RepositoryException(f"Failed to update rating aggregate: {str(e)}") from e

    def delete_profile(self, profile_id: str) -> int:
        """Delete the row directly; dependent rows must already be gone."""
        return self._execute_delete(self._build_query().filter(Profile.id == profile_id))
