# sportbook/services/account_service.py
"""
Account deletion.

Removes everything a profile owns in foreign-key order inside one
transaction, then deletes the user at the identity provider. The auth
user is deleted even when no profile exists for it.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import DomainException, ServiceException
from ..integrations.identity_client import IdentityAdminClient, IdentityProvider, IdentityProviderError
from ..repositories import RepositoryFactory
from ..schemas.base import ActionResult
from .base import BaseService

logger = logging.getLogger(__name__)


def build_default_identity_provider() -> Optional[IdentityProvider]:
    if settings.identity_admin_url and settings.identity_service_key is not None:
        return IdentityAdminClient(
            base_url=settings.identity_admin_url,
            service_key=settings.identity_service_key,
        )
    return None


class AccountService(BaseService):
    def __init__(self, db: Session, identity_provider: Optional[IdentityProvider] = None):
        super().__init__(db)
        self.identity_provider = identity_provider or build_default_identity_provider()
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.chat_repository = RepositoryFactory.create_chat_repository(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)

    def _purge_profile(self, profile_id: str) -> Dict[str, int]:
        return {
            "messages": self.chat_repository.delete_messages_by_sender(profile_id),
            "chat_rooms": self.chat_repository.delete_rooms_for_profile(profile_id),
            "reviews": self.review_repository.delete_for_profile(profile_id),
            "bookings": self.booking_repository.delete_for_profile(profile_id),
            "availability": self.availability_repository.delete_for_teacher(profile_id),
            "profiles": self.profile_repository.delete_profile(profile_id),
        }

    @BaseService.measure_operation("delete_account")
    def delete_account(self, user_id: str) -> ActionResult:
        """
        Delete a user's data and identity.

        Args:
            user_id: Identity provider user id

        Returns:
            ActionResult with ``entity_id`` set to the user id
        """
        try:
            with self.transaction():
                profile = self.profile_repository.get_by_user_id(user_id)
                if profile is not None:
                    removed = self._purge_profile(profile.id)
                    self.logger.info(f"Deleted data for profile {profile.id}: {removed}")
                else:
                    self.logger.info(f"No profile for user {user_id}; deleting identity only")

            if self.identity_provider is None:
                self.logger.warning(f"No identity provider configured; auth user {user_id} was not deleted")
            else:
                try:
                    self.identity_provider.delete_user(user_id)
                except IdentityProviderError as exc:
                    raise ServiceException("Failed to delete account", code="IDENTITY_DELETE_FAILED") from exc
        except DomainException as exc:
            self.logger.error(f"Account deletion failed for {user_id}: {exc.message}")
            return ActionResult.failure_from(exc, entity_id=user_id)

        return ActionResult(success=True, entity_id=user_id)
