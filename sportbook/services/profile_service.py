# sportbook/services/profile_service.py
"""
Profile discovery: the teacher directory students browse and the public
profile page reached by slug.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import ProfileRole
from ..core.exceptions import NotFoundException
from ..repositories import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from ..schemas.profile import ProfileOut
from .base import BaseService

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    """Read-only queries over teacher profiles."""

    def __init__(self, db: Session, repository: Optional[ProfileRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_profile_repository(db)

    @BaseService.measure_operation("browse_teachers")
    def browse_teachers(self, search: Optional[str] = None) -> List[ProfileOut]:
        """
        List teachers, newest first, optionally filtered by a search string.

        Args:
            search: Case-insensitive text matched against name or bio; blank
                means no filter

        Returns:
            Teacher profiles
        """
        teachers = self.repository.list_teachers(search)
        self.logger.debug(f"Teacher search {search!r} matched {len(teachers)} profiles")
        return [ProfileOut.model_validate(teacher) for teacher in teachers]

    def get_public_profile(self, slug: str) -> ProfileOut:
        """
        Resolve a teacher's public page.

        Raises:
            NotFoundException: No teacher carries this slug
        """
        profile = self.repository.get_by_slug(slug)
        if profile is None or profile.role != ProfileRole.TEACHER.value:
            raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND", details={"slug": slug})
        return ProfileOut.model_validate(profile)
