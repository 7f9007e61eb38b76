"""
Data Models for the Travel Blog

This module contains data classes and models used throughout the application,
plus the conversions between them and backend documents.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Post:
    """A blog post; ``id`` is the slug and doubles as the document id."""
    id: str
    title: str
    content: str
    user_id: str
    featured_image: Optional[str] = None
    content_id: Optional[str] = None   # Overflow file holding the full content
    status: str = "active"             # 'active' or 'inactive'
    category: str = "Destination"
    like_count: int = 0
    likes: List[str] = field(default_factory=list)
    views: int = 0
    read_time: int = 1                 # Minutes
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Post":
        """Build a Post from a backend document dictionary."""
        likes = list(document.get("likes") or [])
        return cls(
            id=document.get("$id", ""),
            title=document.get("title", ""),
            content=document.get("content") or "",
            user_id=document.get("userId", ""),
            featured_image=document.get("featuredImage"),
            content_id=document.get("contentId") or None,
            status=document.get("status", "active"),
            category=document.get("category", "Destination"),
            like_count=document.get("likeCount") or len(likes),
            likes=likes,
            views=document.get("views") or 0,
            read_time=document.get("readTime") or 1,
            created_at=document.get("$createdAt"),
            updated_at=document.get("$updatedAt"),
        )

    def to_document(self) -> Dict[str, Any]:
        """Document fields for this post, without system ($) keys."""
        return {
            "title": self.title,
            "content": self.content,
            "contentId": self.content_id,
            "featuredImage": self.featured_image,
            "status": self.status,
            "userId": self.user_id,
            "category": self.category,
            "likeCount": self.like_count,
            "likes": list(self.likes),
            "views": self.views,
            "readTime": self.read_time,
        }


@dataclass
class PostList:
    """Result of a list or search query."""
    documents: List[Post]
    total: int

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "PostList":
        documents = [Post.from_document(d) for d in response.get("documents", [])]
        return cls(documents=documents, total=response.get("total", len(documents)))

    @property
    def ids(self) -> List[str]:
        return [post.id for post in self.documents]


@dataclass
class UserProfile:
    """Display profile stored next to each auth account."""
    user_id: str
    name: str
    email: str = ""

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserProfile":
        return cls(
            user_id=document.get("userId") or document.get("$id", ""),
            name=document.get("name", ""),
            email=document.get("email", ""),
        )

    def to_document(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "name": self.name, "email": self.email}


@dataclass
class StoredFile:
    """Metadata of a file in the object store bucket."""
    id: str
    name: str = ""
    mime_type: Optional[str] = None
    size: int = 0

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "StoredFile":
        return cls(
            id=response.get("$id", ""),
            name=response.get("name", ""),
            mime_type=response.get("mimeType"),
            size=response.get("sizeOriginal", 0),
        )


@dataclass
class PermissionRepairReport:
    """Per-file tally of a bulk permission repair."""
    total: int = 0
    fixed: int = 0
    failed: int = 0
    errors: Dict[str, str] = field(default_factory=dict)  # file id -> message


@dataclass(frozen=True)
class Filter:
    """
    Backend-neutral list query clause.

    The storage adapter translates each clause to the SDK's query syntax.
    """
    method: str
    attribute: Optional[str] = None
    value: Any = None

    @classmethod
    def equal(cls, attribute: str, value: Any) -> "Filter":
        return cls("equal", attribute, value)

    @classmethod
    def search(cls, attribute: str, value: str) -> "Filter":
        return cls("search", attribute, value)

    @classmethod
    def order_desc(cls, attribute: str) -> "Filter":
        return cls("orderDesc", attribute)

    @classmethod
    def order_asc(cls, attribute: str) -> "Filter":
        return cls("orderAsc", attribute)

    @classmethod
    def limit(cls, value: int) -> "Filter":
        return cls("limit", value=value)

    @classmethod
    def offset(cls, value: int) -> "Filter":
        return cls("offset", value=value)
