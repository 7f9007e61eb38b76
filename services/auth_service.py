"""
Auth Service Module

This module handles account creation, sessions, and the user profile
documents that hold display names. Unlike the content service it prefers
placeholder or None results over raising, except for account creation whose
failures must reach the user.
"""

from typing import Optional, Dict, Any

from config import settings
from data.models import Filter, UserProfile
from data.protocols import AccountGateway, DocumentStore
from utils.exceptions import TravelBlogError, NotFoundError, ValidationError
from utils.helpers import first_successful
from utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:
    """Service for accounts, sessions and user profiles."""

    def __init__(self, accounts: AccountGateway, documents: DocumentStore,
                 users_collection_id: Optional[str] = None,
                 stats_collection_id: Optional[str] = None):
        """
        Initialize the auth service.

        Args:
            accounts: Auth account and session gateway.
            documents: Document store holding the users and stats collections.
            users_collection_id: Defaults to settings.APPWRITE_USERS_COLLECTION_ID.
            stats_collection_id: Defaults to settings.APPWRITE_STATS_COLLECTION_ID.
        """
        self.accounts = accounts
        self.documents = documents
        self.users_collection_id = users_collection_id or settings.APPWRITE_USERS_COLLECTION_ID
        self.stats_collection_id = stats_collection_id or settings.APPWRITE_STATS_COLLECTION_ID

    def create_account(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """
        Register a new account and log it in.

        Steps: create the auth account, create its profile document, bump the
        registration counter, log in. If the profile cannot be created the new
        account is deleted (best effort) and the profile error is raised. A
        crash between the two steps still leaves an orphaned account.

        Returns:
            The new session.

        Raises:
            ValidationError: If email, password or name is missing.
            ConflictError: If the email is already registered.
        """
        if not email or not password or not name:
            raise ValidationError("Email, password and name are required")

        account = self.accounts.create_account(email, password, name)
        user_id = account["$id"]
        logger.info(f"Created account {user_id} for {email}")

        profile = UserProfile(user_id=user_id, name=name, email=email)
        try:
            self.documents.create_document(self.users_collection_id, user_id, profile.to_document())
        except TravelBlogError as profile_error:
            logger.error(f"Error creating profile for {user_id}, rolling back account: {profile_error}")
            try:
                self.accounts.delete_account(user_id)
            except TravelBlogError as e:
                logger.error(f"Rollback failed, account {user_id} is orphaned: {e}")
            raise

        self._increment_user_count()
        return self.login(email, password)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.accounts.create_session(email, password)

    def logout(self) -> bool:
        try:
            self.accounts.delete_sessions()
            return True
        except TravelBlogError as e:
            logger.warning(f"Error logging out: {e}")
            return False

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        """Return the logged in account, or None when there is no session."""
        try:
            return self.accounts.get_current_account()
        except TravelBlogError as e:
            logger.debug(f"No current user: {e}")
            return None

    def get_user_profile(self, user_id: str) -> UserProfile:
        """
        Look up a user's display profile.

        Tries the document whose id is the user id, then a query on the
        userId field, and finally returns an anonymous placeholder. Never
        returns None.
        """
        return first_successful(
            [
                ("profile by id", lambda: self._profile_by_id(user_id)),
                ("profile by userId", lambda: self._profile_by_query(user_id)),
            ],
            fallback=lambda: UserProfile(user_id=user_id, name=settings.ANONYMOUS_USER_NAME, email=""),
            exceptions=(TravelBlogError,),
        )

    def get_total_users(self) -> int:
        """
        Number of registered users, for display only.

        Reads the stats counter document, then the users collection total,
        and falls back to a fixed demo number.
        """
        return first_successful(
            [
                ("stats document", self._count_from_stats),
                ("users collection", self._count_from_profiles),
            ],
            fallback=lambda: settings.DEMO_TOTAL_USERS,
            exceptions=(TravelBlogError, KeyError, TypeError, ValueError),
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _profile_by_id(self, user_id: str) -> UserProfile:
        return UserProfile.from_document(self.documents.get_document(self.users_collection_id, user_id))

    def _profile_by_query(self, user_id: str) -> Optional[UserProfile]:
        response = self.documents.list_documents(
            self.users_collection_id, [Filter.equal("userId", user_id), Filter.limit(1)]
        )
        documents = response.get("documents", [])
        if not documents:
            return None
        return UserProfile.from_document(documents[0])

    def _count_from_stats(self) -> int:
        document = self.documents.get_document(self.stats_collection_id, settings.STATS_DOCUMENT_ID)
        return int(document["totalUsers"])

    def _count_from_profiles(self) -> Optional[int]:
        response = self.documents.list_documents(self.users_collection_id, [Filter.limit(1)])
        total = response.get("total")
        return int(total) if total is not None else None

    def _increment_user_count(self) -> None:
        """Bump the registration counter; failures are logged and ignored."""
        try:
            try:
                document = self.documents.get_document(self.stats_collection_id, settings.STATS_DOCUMENT_ID)
            except NotFoundError:
                self.documents.create_document(
                    self.stats_collection_id, settings.STATS_DOCUMENT_ID, {"totalUsers": 1}
                )
                return
            total = int(document.get("totalUsers") or 0) + 1
            self.documents.update_document(
                self.stats_collection_id, settings.STATS_DOCUMENT_ID, {"totalUsers": total}
            )
        except (TravelBlogError, TypeError, ValueError) as e:
            logger.warning(f"Could not update registration counter: {e}")
