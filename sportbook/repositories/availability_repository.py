# sportbook/repositories/availability_repository.py
"""
Availability Repository for the Sportbook booking core

Reads and replaces a teacher's weekly windows. Replacement is a
delete-then-insert inside the caller's transaction; it never commits.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..models.availability import Availability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[Availability]):
    def __init__(self, db: Session):
        super().__init__(db, Availability)

    def get_windows(
        self,
        teacher_id: str,
        weekdays: Optional[Iterable[int]] = None,
        active_only: bool = True,
    ) -> List[Availability]:
        """
        Get a teacher's windows ordered by day then start time.

        Args:
            teacher_id: Teacher profile id
            weekdays: Optional day-of-week filter (Sunday=0)
            active_only: Only return windows flagged available

        Returns:
            List of availability rows
        """
        query = self._build_query().filter(Availability.teacher_id == teacher_id)
        if active_only:
            query = query.filter(Availability.is_available.is_(True))
        if weekdays is not None:
            query = query.filter(Availability.day_of_week.in_(list(weekdays)))
        query = query.order_by(Availability.day_of_week, Availability.start_time, Availability.end_time)
        return self._execute_query(query)

    def delete_for_teacher(self, teacher_id: str) -> int:
        return self._execute_delete(self._build_query().filter(Availability.teacher_id == teacher_id))

    def replace_windows(self, teacher_id: str, windows: List[Dict[str, Any]]) -> List[Availability]:
        """
        Replace the full window set for a teacher.

        Args:
            teacher_id: Teacher profile id
            windows: Row dictionaries without teacher_id

        Returns:
            The newly inserted rows
        """
        removed = self.delete_for_teacher(teacher_id)
        self.logger.debug(f"Removed {removed} availability windows for {teacher_id}")
        if not windows:
            return []
        return self.bulk_create([{**window, "teacher_id": teacher_id} for window in windows])
