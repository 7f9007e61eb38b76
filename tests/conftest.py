"""
Shared Test Fixtures for the Travel Blog

This module provides common fixtures used across all test modules.
Fixtures include an in-memory backend implementing the storage protocols,
service instances wired to it, HTTP response mocks, log capture, and data
factories for test objects.
"""

import pytest
from unittest.mock import MagicMock
from itertools import count
from typing import Optional, Dict, Any, List
import copy
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import Filter
from utils.exceptions import ConflictError, NotFoundError, AuthenticationError, UpstreamUnavailableError


POSTS = "posts"
USERS = "users"
STATS = "stats"


# =============================================================================
# In-memory Backend
# =============================================================================

class InMemoryDocumentStore:
    """DocumentStore keeping collections in dictionaries."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._clock = count(1)
        self.calls: List[str] = []

    def _timestamp(self) -> str:
        tick = next(self._clock)
        return f"2024-01-01T00:{tick // 60:02d}:{tick % 60:02d}.000+00:00"

    def create_document(self, collection_id, document_id, data):
        self.calls.append("create_document")
        collection = self.collections.setdefault(collection_id, {})
        if document_id in collection:
            raise ConflictError(f"Document {document_id} already exists", code=409)
        now = self._timestamp()
        document = dict(copy.deepcopy(data), **{"$id": document_id, "$createdAt": now, "$updatedAt": now})
        collection[document_id] = document
        return copy.deepcopy(document)

    def get_document(self, collection_id, document_id):
        self.calls.append("get_document")
        try:
            return copy.deepcopy(self.collections[collection_id][document_id])
        except KeyError:
            raise NotFoundError(f"Document {document_id} not found", code=404)

    def list_documents(self, collection_id, filters=None):
        self.calls.append("list_documents")
        documents = [copy.deepcopy(d) for d in self.collections.get(collection_id, {}).values()]
        limit = None
        offset = 0
        for flt in filters or []:
            if flt.method == "equal":
                allowed = flt.value if isinstance(flt.value, list) else [flt.value]
                documents = [d for d in documents if d.get(flt.attribute) in allowed]
            elif flt.method == "search":
                needle = flt.value.lower()
                documents = [d for d in documents if needle in str(d.get(flt.attribute) or "").lower()]
            elif flt.method == "orderDesc":
                documents.sort(key=lambda d: d.get(flt.attribute) or "", reverse=True)
            elif flt.method == "orderAsc":
                documents.sort(key=lambda d: d.get(flt.attribute) or "")
            elif flt.method == "limit":
                limit = flt.value
            elif flt.method == "offset":
                offset = flt.value
        total = len(documents)
        documents = documents[offset:]
        if limit is not None:
            documents = documents[:limit]
        return {"documents": documents, "total": total}

    def update_document(self, collection_id, document_id, data):
        self.calls.append("update_document")
        try:
            document = self.collections[collection_id][document_id]
        except KeyError:
            raise NotFoundError(f"Document {document_id} not found", code=404)
        document.update(copy.deepcopy(data))
        document["$updatedAt"] = self._timestamp()
        return copy.deepcopy(document)

    def delete_document(self, collection_id, document_id):
        self.calls.append("delete_document")
        try:
            del self.collections[collection_id][document_id]
        except KeyError:
            raise NotFoundError(f"Document {document_id} not found", code=404)


class InMemoryFileStore:
    """FileStore keeping file bytes in a dictionary."""

    def __init__(self):
        self.files: Dict[str, Dict[str, Any]] = {}
        self.public: set = set()
        self._ids = count(1)
        self.calls: List[str] = []

    def create_file(self, data, filename, mime_type=None):
        self.calls.append("create_file")
        file_id = f"file{next(self._ids)}"
        self.files[file_id] = {"$id": file_id, "name": filename, "mimeType": mime_type,
                               "sizeOriginal": len(data), "data": bytes(data)}
        return {k: v for k, v in self.files[file_id].items() if k != "data"}

    def delete_file(self, file_id):
        self.calls.append("delete_file")
        if file_id not in self.files:
            raise NotFoundError(f"File {file_id} not found", code=404)
        del self.files[file_id]

    def download_file(self, file_id):
        self.calls.append("download_file")
        if file_id not in self.files:
            raise NotFoundError(f"File {file_id} not found", code=404)
        return self.files[file_id]["data"]

    def list_files(self):
        return [{k: v for k, v in f.items() if k != "data"} for f in self.files.values()]

    def set_public_read(self, file_id):
        if file_id not in self.files:
            raise NotFoundError(f"File {file_id} not found", code=404)
        self.public.add(file_id)
        return {"$id": file_id}

    def file_view_url(self, file_id):
        return f"https://cloud.test/v1/storage/buckets/bucket/files/{file_id}/view?project=proj"


class InMemoryAccountGateway:
    """AccountGateway with accounts keyed by email."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.current: Optional[Dict[str, Any]] = None
        self._ids = count(1)

    def create_account(self, email, password, name):
        if email in self.accounts:
            raise ConflictError("A user with the same email already exists", code=409)
        account = {"$id": f"user{next(self._ids)}", "email": email, "name": name, "password": password}
        self.accounts[email] = account
        return {k: v for k, v in account.items() if k != "password"}

    def delete_account(self, user_id):
        for email, account in list(self.accounts.items()):
            if account["$id"] == user_id:
                del self.accounts[email]
                return
        raise NotFoundError(f"User {user_id} not found", code=404)

    def create_session(self, email, password):
        account = self.accounts.get(email)
        if not account or account["password"] != password:
            raise AuthenticationError("Invalid credentials", code=401)
        self.current = account
        return {"$id": f"session-{account['$id']}", "userId": account["$id"], "secret": "s3cret"}

    def delete_sessions(self):
        if self.current is None:
            raise AuthenticationError("No session", code=401)
        self.current = None

    def get_current_account(self):
        if self.current is None:
            raise AuthenticationError("User (role: guests) missing scope (account)", code=401)
        return {k: v for k, v in self.current.items() if k != "password"}


# =============================================================================
# Backend and Service Fixtures
# =============================================================================

@pytest.fixture
def document_store():
    """An empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def file_store():
    """An empty in-memory storage bucket."""
    return InMemoryFileStore()


@pytest.fixture
def account_gateway():
    """An in-memory account gateway with no accounts."""
    return InMemoryAccountGateway()


@pytest.fixture
def content_service(document_store, file_store):
    """ContentService wired to the in-memory backend, one fetch attempt."""
    from services.content_service import ContentService
    return ContentService(document_store, file_store, collection_id=POSTS, fetch_attempts=1)


@pytest.fixture
def auth_service(account_gateway, document_store):
    """AuthService wired to the in-memory backend."""
    from services.auth_service import AuthService
    return AuthService(account_gateway, document_store,
                       users_collection_id=USERS, stats_collection_id=STATS)


@pytest.fixture
def mock_documents():
    """A MagicMock standing in for a DocumentStore."""
    return MagicMock()


@pytest.fixture
def mock_files():
    """A MagicMock standing in for a FileStore."""
    files = MagicMock()
    files.create_file.return_value = {"$id": "overflow-1", "name": "x-content.html", "mimeType": "text/html"}
    files.file_view_url.side_effect = lambda file_id: f"https://cloud.test/files/{file_id}/view"
    return files


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging
    from utils.logger import get_logger

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    app_logger = get_logger()
    original_level = app_logger.level
    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(handler)

    yield handler.records

    app_logger.removeHandler(handler)
    app_logger.setLevel(original_level)


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(status_code=200, text='<p>Hello</p>')

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        text: str = '',
        headers: Optional[Dict[str, str]] = None,
        url: str = 'https://cloud.test'
    ) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.text = text
        mock_response.content = text.encode('utf-8')
        mock_response.url = url
        mock_response.headers = headers or {'Content-Type': 'text/html'}
        mock_response.ok = 200 <= status_code < 300

        if status_code >= 400:
            from requests.exceptions import HTTPError
            mock_response.raise_for_status.side_effect = HTTPError(
                f"{status_code} Error",
                response=mock_response
            )
        else:
            mock_response.raise_for_status.return_value = None

        return mock_response

    return _create_response


# =============================================================================
# Data Factories
# =============================================================================

@pytest.fixture
def post_document_factory():
    """
    Factory fixture for creating post documents as the backend returns them.

    Usage:
        def test_post(post_document_factory):
            doc = post_document_factory(slug='lisbon', likes=['u1'])
    """
    def _create_post_document(
        slug: str = 'lisbon-trams',
        title: str = 'Riding the Trams of Lisbon',
        content: str = '<p>Tram 28 climbs through Alfama.</p>',
        content_id: Optional[str] = None,
        featured_image: Optional[str] = 'image-1',
        status: str = 'active',
        user_id: str = 'user-1',
        category: str = 'Destination',
        likes: Optional[List[str]] = None,
        views: int = 0,
        **extra
    ) -> Dict[str, Any]:
        likes = list(likes or [])
        document = {
            '$id': slug,
            '$createdAt': '2024-01-15T10:00:00.000+00:00',
            '$updatedAt': '2024-01-15T10:00:00.000+00:00',
            'title': title,
            'content': content,
            'contentId': content_id,
            'featuredImage': featured_image,
            'status': status,
            'userId': user_id,
            'category': category,
            'likes': likes,
            'likeCount': len(likes),
            'views': views,
            'readTime': 1,
        }
        document.update(extra)
        return document

    return _create_post_document


@pytest.fixture
def create_post(content_service):
    """Create a post through the content service with sensible defaults."""
    def _create(slug: str = 'lisbon-trams', title: str = 'Riding the Trams of Lisbon',
                content: str = '<p>Tram 28 climbs through Alfama.</p>', **kwargs):
        kwargs.setdefault('featured_image', 'image-1')
        kwargs.setdefault('user_id', 'user-1')
        return content_service.create_post(title=title, slug=slug, content=content, **kwargs)

    return _create
