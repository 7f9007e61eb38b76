"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the services used by the
Travel Blog application. These protocols enable loose coupling, dependency
injection, and easier testing.

Protocols defined:
- ContentServiceProtocol: Interface for posts, likes, views and files
- AuthServiceProtocol: Interface for accounts, sessions and profiles
- ContentGeneratorProtocol: Interface for AI post drafting
"""

from typing import Protocol, Optional, List, Dict, Any

from data.models import Filter, Post, PostList, StoredFile, PermissionRepairReport, UserProfile


class ContentServiceProtocol(Protocol):
    """Protocol defining the interface for post and file operations."""

    def create_post(self, title: str, slug: str, content: str, featured_image: Optional[str],
                    user_id: str, status: str = "active", category: str = "Destination") -> Post:
        ...

    def update_post(self, post_id: str, title: Optional[str] = None, content: Optional[str] = None,
                    featured_image: Optional[str] = None, status: Optional[str] = None,
                    category: Optional[str] = None) -> Post:
        ...

    def delete_post(self, post_id: str) -> bool:
        ...

    def get_post(self, post_id: str) -> Post:
        """Fetch a post with its full content when it can be loaded."""
        ...

    def get_posts(self, filters: Optional[List[Filter]] = None) -> PostList:
        """List posts, active ones when no filters are given."""
        ...

    def get_posts_by_category(self, category: str) -> PostList:
        ...

    def get_user_posts(self, user_id: str) -> PostList:
        ...

    def search_posts(self, term: Optional[str]) -> PostList:
        """Active posts whose title or content matches, without duplicates."""
        ...

    def toggle_like(self, post_id: str, user_id: str) -> Post:
        ...

    def has_user_liked(self, post_id: str, user_id: str) -> bool:
        ...

    def increment_post_views(self, post_id: str, current_views: Optional[int] = None) -> int:
        ...

    def upload_file(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> StoredFile:
        ...

    def delete_file(self, file_id: str) -> bool:
        ...

    def upload_editor_image(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> str:
        ...

    def fix_all_file_permissions(self) -> PermissionRepairReport:
        ...


class AuthServiceProtocol(Protocol):
    """Protocol defining the interface for account operations."""

    def create_account(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """Register, create the profile, and log in. Returns the session."""
        ...

    def login(self, email: str, password: str) -> Dict[str, Any]:
        ...

    def logout(self) -> bool:
        ...

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        """The current account, or None without a session."""
        ...

    def get_user_profile(self, user_id: str) -> UserProfile:
        """A profile, or an anonymous placeholder. Never None."""
        ...

    def get_total_users(self) -> int:
        ...


class ContentGeneratorProtocol(Protocol):
    """Protocol defining the interface for AI content drafting."""

    def generate_post_content(self, topic: str) -> str:
        """HTML content for the topic within the configured word cap."""
        ...
