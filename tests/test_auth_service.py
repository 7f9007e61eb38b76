"""
Tests for Auth Service - Accounts, Sessions, Profiles and User Counts

Tests cover the registration sequence and its rollback, session helpers,
the profile lookup fallbacks, and the user count fallback tiers.
"""

import pytest
from unittest.mock import MagicMock
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from data.models import Filter, UserProfile
from services.auth_service import AuthService
from utils.exceptions import (
    AuthenticationError, ConflictError, NotFoundError, UpstreamUnavailableError, ValidationError
)
from conftest import USERS, STATS


@pytest.fixture
def mock_accounts():
    """A MagicMock AccountGateway that creates account 'user-1'."""
    accounts = MagicMock()
    accounts.create_account.return_value = {"$id": "user-1", "email": "ana@example.com", "name": "Ana"}
    accounts.create_session.return_value = {"$id": "session-1", "userId": "user-1"}
    return accounts


# =============================================================================
# Registration Tests
# =============================================================================

class TestCreateAccount:
    """Tests for the account, profile, counter, login sequence."""

    def test_creates_profile_counter_and_session(self, auth_service, document_store, account_gateway):
        session = auth_service.create_account("ana@example.com", "pa55word!", "Ana")

        user_id = account_gateway.accounts["ana@example.com"]["$id"]
        assert session["userId"] == user_id
        assert document_store.collections[USERS][user_id]["name"] == "Ana"
        assert document_store.collections[USERS][user_id]["email"] == "ana@example.com"
        assert document_store.collections[STATS][settings.STATS_DOCUMENT_ID]["totalUsers"] == 1
        assert auth_service.get_current_user()["$id"] == user_id

    def test_counter_increments_per_registration(self, auth_service, document_store):
        auth_service.create_account("ana@example.com", "pa55word!", "Ana")
        auth_service.create_account("ben@example.com", "pa55word!", "Ben")

        assert document_store.collections[STATS][settings.STATS_DOCUMENT_ID]["totalUsers"] == 2
        assert auth_service.get_total_users() == 2

    def test_duplicate_email_conflicts_without_side_effects(self, auth_service, document_store):
        auth_service.create_account("ana@example.com", "pa55word!", "Ana")

        with pytest.raises(ConflictError):
            auth_service.create_account("ana@example.com", "other-pass", "Imposter")

        assert len(document_store.collections[USERS]) == 1
        assert document_store.collections[STATS][settings.STATS_DOCUMENT_ID]["totalUsers"] == 1

    def test_profile_failure_rolls_back_account(self, mock_accounts, mock_documents):
        mock_documents.create_document.side_effect = UpstreamUnavailableError("db down")
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        with pytest.raises(UpstreamUnavailableError):
            service.create_account("ana@example.com", "pa55word!", "Ana")

        mock_accounts.delete_account.assert_called_once_with("user-1")
        mock_accounts.create_session.assert_not_called()

    def test_rollback_failure_still_raises_profile_error(self, mock_accounts, mock_documents):
        mock_documents.create_document.side_effect = UpstreamUnavailableError("db down")
        mock_accounts.delete_account.side_effect = AuthenticationError("no key", code=401)
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        with pytest.raises(UpstreamUnavailableError):
            service.create_account("ana@example.com", "pa55word!", "Ana")

    def test_counter_failure_does_not_block_registration(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = UpstreamUnavailableError("stats down")
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        session = service.create_account("ana@example.com", "pa55word!", "Ana")

        assert session == {"$id": "session-1", "userId": "user-1"}
        mock_accounts.delete_account.assert_not_called()

    def test_counter_document_updated_when_present(self, mock_accounts, mock_documents):
        mock_documents.get_document.return_value = {"$id": settings.STATS_DOCUMENT_ID, "totalUsers": 41}
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        service.create_account("ana@example.com", "pa55word!", "Ana")

        mock_documents.update_document.assert_called_once_with(
            STATS, settings.STATS_DOCUMENT_ID, {"totalUsers": 42}
        )

    def test_profile_uses_account_id_as_document_id(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = NotFoundError("no stats")
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        service.create_account("ana@example.com", "pa55word!", "Ana")

        mock_documents.create_document.assert_any_call(
            USERS, "user-1", {"userId": "user-1", "name": "Ana", "email": "ana@example.com"}
        )

    @pytest.mark.parametrize("email,password,name", [
        ("", "pw", "Ana"),
        ("ana@example.com", "", "Ana"),
        ("ana@example.com", "pw", ""),
    ])
    def test_missing_fields_rejected(self, email, password, name, mock_accounts, mock_documents):
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        with pytest.raises(ValidationError):
            service.create_account(email, password, name)

        mock_accounts.create_account.assert_not_called()


# =============================================================================
# Session Tests
# =============================================================================

class TestSessions:
    """Tests for login, logout and the current user."""

    def test_login_wrong_password_raises(self, auth_service):
        auth_service.create_account("ana@example.com", "pa55word!", "Ana")
        auth_service.logout()

        with pytest.raises(AuthenticationError):
            auth_service.login("ana@example.com", "wrong")

    def test_get_current_user_none_without_session(self, auth_service):
        assert auth_service.get_current_user() is None

    def test_logout_clears_session(self, auth_service):
        auth_service.create_account("ana@example.com", "pa55word!", "Ana")

        assert auth_service.logout() is True
        assert auth_service.get_current_user() is None

    def test_logout_without_session_returns_false(self, auth_service):
        assert auth_service.logout() is False


# =============================================================================
# Profile Lookup Tests
# =============================================================================

class TestGetUserProfile:
    """Tests for the profile lookup fallbacks."""

    def test_profile_by_document_id(self, auth_service):
        auth_service.create_account("ana@example.com", "pa55word!", "Ana")
        user_id = auth_service.get_current_user()["$id"]

        profile = auth_service.get_user_profile(user_id)

        assert profile == UserProfile(user_id=user_id, name="Ana", email="ana@example.com")

    def test_profile_by_user_id_field(self, auth_service, document_store):
        document_store.create_document(USERS, "legacy-doc", {"userId": "u-77", "name": "Cai", "email": "c@x.io"})

        profile = auth_service.get_user_profile("u-77")

        assert profile.name == "Cai"
        assert profile.user_id == "u-77"

    def test_placeholder_when_missing(self, auth_service):
        profile = auth_service.get_user_profile("ghost")

        assert profile == UserProfile(user_id="ghost", name="Anonymous User", email="")

    def test_placeholder_when_backend_fails(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = UpstreamUnavailableError("down")
        mock_documents.list_documents.side_effect = UpstreamUnavailableError("down")
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        profile = service.get_user_profile("u1")

        assert profile is not None
        assert profile.name == "Anonymous User"
        assert profile.email == ""
        assert profile.user_id == "u1"

    def test_query_fallback_filters_on_user_id(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = NotFoundError("no doc")
        mock_documents.list_documents.return_value = {"documents": [], "total": 0}
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        service.get_user_profile("u1")

        mock_documents.list_documents.assert_called_once_with(
            USERS, [Filter.equal("userId", "u1"), Filter.limit(1)]
        )


# =============================================================================
# User Count Tests
# =============================================================================

class TestGetTotalUsers:
    """Tests for the three user count tiers."""

    def test_reads_stats_document(self, mock_accounts, mock_documents):
        mock_documents.get_document.return_value = {"totalUsers": 12}
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        assert service.get_total_users() == 12
        mock_documents.list_documents.assert_not_called()

    def test_falls_back_to_collection_total(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = NotFoundError("no stats")
        mock_documents.list_documents.return_value = {"documents": [{}], "total": 31}
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        assert service.get_total_users() == 31

    def test_malformed_stats_document_falls_through(self, mock_accounts, mock_documents):
        mock_documents.get_document.return_value = {"$id": "user_stats"}
        mock_documents.list_documents.return_value = {"documents": [], "total": 3}
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        assert service.get_total_users() == 3

    def test_demo_constant_when_everything_fails(self, mock_accounts, mock_documents):
        mock_documents.get_document.side_effect = UpstreamUnavailableError("down")
        mock_documents.list_documents.side_effect = UpstreamUnavailableError("down")
        service = AuthService(mock_accounts, mock_documents, USERS, STATS)

        assert service.get_total_users() == 2438
