"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for the backend storage
primitives. These protocols enable dependency injection for document, file and
account operations, making services testable without a real backend.

Protocols defined:
- DocumentStore: Interface for document CRUD and filtered listing
- FileStore: Interface for the object store bucket
- AccountGateway: Interface for auth accounts and sessions

Every method raises a utils.exceptions.TravelBlogError subclass on failure.
"""

from typing import Protocol, Optional, List, Dict, Any

from data.models import Filter


class DocumentStore(Protocol):
    """Protocol defining the interface for document database operations.

    Documents are plain dictionaries carrying their id under ``$id``. The
    database is fixed by the implementation; callers address collections.
    """

    def create_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a document.

        Args:
            collection_id: Target collection.
            document_id: Id for the new document.
            data: Document fields.

        Returns:
            The created document.

        Raises:
            ConflictError: If the id is already taken.
        """
        ...

    def get_document(self, collection_id: str, document_id: str) -> Dict[str, Any]:
        """Fetch one document.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    def list_documents(self, collection_id: str,
                       filters: Optional[List[Filter]] = None) -> Dict[str, Any]:
        """List documents matching every filter.

        Returns:
            A dictionary with ``documents`` (list) and ``total`` (int).
        """
        ...

    def update_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        """Update the given fields of a document and return it."""
        ...

    def delete_document(self, collection_id: str, document_id: str) -> None:
        """Delete a document."""
        ...


class FileStore(Protocol):
    """Protocol defining the interface for the configured storage bucket."""

    def create_file(self, data: bytes, filename: str,
                    mime_type: Optional[str] = None) -> Dict[str, Any]:
        """Upload bytes as a new file with a generated id and return its metadata."""
        ...

    def delete_file(self, file_id: str) -> None:
        """Delete a file."""
        ...

    def download_file(self, file_id: str) -> bytes:
        """Download a file's contents through the authenticated API."""
        ...

    def list_files(self) -> List[Dict[str, Any]]:
        """Return metadata for every file in the bucket."""
        ...

    def set_public_read(self, file_id: str) -> Dict[str, Any]:
        """Grant read access on a file to anyone."""
        ...

    def file_view_url(self, file_id: str) -> str:
        """Public URL that serves the file's contents."""
        ...


class AccountGateway(Protocol):
    """Protocol defining the interface for auth accounts and sessions."""

    def create_account(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """Create an account with a generated id.

        Raises:
            ConflictError: If the email is already registered.
        """
        ...

    def delete_account(self, user_id: str) -> None:
        """Delete an account."""
        ...

    def create_session(self, email: str, password: str) -> Dict[str, Any]:
        """Log in with email and password and return the session."""
        ...

    def delete_sessions(self) -> None:
        """Log out of every session of the current account."""
        ...

    def get_current_account(self) -> Dict[str, Any]:
        """Return the account of the current session.

        Raises:
            AuthenticationError: If there is no session.
        """
        ...
