"""
Appwrite Backend Module

This module adapts the Appwrite Python SDK to the storage protocols in
data.protocols. It is the only place that talks to the SDK and the only place
that inspects raw status codes: every AppwriteException is translated to the
matching utils.exceptions kind before it leaves this module.
"""

from contextlib import contextmanager
from typing import Optional, List, Dict, Any
from urllib.parse import quote

import requests
from appwrite.client import Client
from appwrite.exception import AppwriteException
from appwrite.id import ID
from appwrite.input_file import InputFile
from appwrite.permission import Permission
from appwrite.query import Query
from appwrite.role import Role
from appwrite.services.account import Account
from appwrite.services.databases import Databases
from appwrite.services.storage import Storage
from appwrite.services.users import Users

from config import settings
from data.models import Filter
from utils.exceptions import error_for_status, ValidationError, UpstreamUnavailableError
from utils.logger import get_logger

logger = get_logger(__name__)

LIST_PAGE_SIZE = 100


@contextmanager
def _sdk_call(operation: str):
    """Translate SDK and transport failures raised inside the block."""
    try:
        yield
    except AppwriteException as e:
        logger.debug(f"Appwrite {operation} failed with code {e.code}: {e.message}")
        raise error_for_status(e.code, f"{operation}: {e.message}") from e
    except requests.RequestException as e:
        logger.debug(f"Appwrite {operation} transport error: {e}")
        raise UpstreamUnavailableError(f"{operation}: {e}") from e


def build_query(flt: Filter) -> str:
    """
    Translate a Filter clause into an Appwrite query string.

    Raises:
        ValidationError: For an unknown filter method.
    """
    if flt.method == "equal":
        return Query.equal(flt.attribute, flt.value)
    if flt.method == "search":
        return Query.search(flt.attribute, flt.value)
    if flt.method == "orderDesc":
        return Query.order_desc(flt.attribute)
    if flt.method == "orderAsc":
        return Query.order_asc(flt.attribute)
    if flt.method == "limit":
        return Query.limit(flt.value)
    if flt.method == "offset":
        return Query.offset(flt.value)
    raise ValidationError(f"Unsupported filter method: {flt.method}")


def create_client(endpoint: str, project_id: str, api_key: Optional[str] = None) -> Client:
    """Create an Appwrite client, keyed when an API key is given."""
    client = Client()
    client.set_endpoint(endpoint)
    client.set_project(project_id)
    if api_key:
        client.set_key(api_key)
    return client


class AppwriteDocumentStore:
    """DocumentStore backed by one Appwrite database."""

    def __init__(self, client: Client, database_id: str):
        self.databases = Databases(client)
        self.database_id = database_id

    def create_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        with _sdk_call("create_document"):
            return self.databases.create_document(self.database_id, collection_id, document_id, data)

    def get_document(self, collection_id: str, document_id: str) -> Dict[str, Any]:
        with _sdk_call("get_document"):
            return self.databases.get_document(self.database_id, collection_id, document_id)

    def list_documents(self, collection_id: str,
                       filters: Optional[List[Filter]] = None) -> Dict[str, Any]:
        queries = [build_query(f) for f in (filters or [])]
        with _sdk_call("list_documents"):
            return self.databases.list_documents(self.database_id, collection_id, queries)

    def update_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        with _sdk_call("update_document"):
            return self.databases.update_document(self.database_id, collection_id, document_id, data)

    def delete_document(self, collection_id: str, document_id: str) -> None:
        with _sdk_call("delete_document"):
            self.databases.delete_document(self.database_id, collection_id, document_id)


class AppwriteFileStore:
    """FileStore backed by one Appwrite storage bucket."""

    def __init__(self, client: Client, bucket_id: str, endpoint: str, project_id: str):
        self.storage = Storage(client)
        self.bucket_id = bucket_id
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id

    def create_file(self, data: bytes, filename: str,
                    mime_type: Optional[str] = None) -> Dict[str, Any]:
        input_file = InputFile.from_bytes(data, filename, mime_type)
        with _sdk_call("create_file"):
            return self.storage.create_file(self.bucket_id, ID.unique(), input_file)

    def delete_file(self, file_id: str) -> None:
        with _sdk_call("delete_file"):
            self.storage.delete_file(self.bucket_id, file_id)

    def download_file(self, file_id: str) -> bytes:
        with _sdk_call("download_file"):
            return self.storage.get_file_download(self.bucket_id, file_id)

    def list_files(self) -> List[Dict[str, Any]]:
        """Page through the whole bucket with cursor pagination."""
        files = []
        cursor = None
        while True:
            queries = [Query.limit(LIST_PAGE_SIZE)]
            if cursor:
                queries.append(Query.cursor_after(cursor))
            with _sdk_call("list_files"):
                page = self.storage.list_files(self.bucket_id, queries)
            batch = page.get("files", [])
            files.extend(batch)
            if len(batch) < LIST_PAGE_SIZE:
                return files
            cursor = batch[-1]["$id"]

    def set_public_read(self, file_id: str) -> Dict[str, Any]:
        with _sdk_call("set_public_read"):
            return self.storage.update_file(
                self.bucket_id, file_id, permissions=[Permission.read(Role.any())]
            )

    def file_view_url(self, file_id: str) -> str:
        return (f"{self.endpoint}/storage/buckets/{quote(self.bucket_id)}"
                f"/files/{quote(file_id)}/view?project={quote(self.project_id)}")


class AppwriteAccountGateway:
    """
    AccountGateway over Appwrite's account and users APIs.

    Sessions are created with the admin client so the session secret is
    returned; the secret is then attached to a separate session client used
    for the current-account calls.
    """

    def __init__(self, admin_client: Client, session_client: Client):
        self.admin_account = Account(admin_client)
        self.users = Users(admin_client)
        self.session_client = session_client
        self.session_account = Account(session_client)

    def create_account(self, email: str, password: str, name: str) -> Dict[str, Any]:
        with _sdk_call("create_account"):
            return self.admin_account.create(ID.unique(), email, password, name)

    def delete_account(self, user_id: str) -> None:
        with _sdk_call("delete_account"):
            self.users.delete(user_id)

    def create_session(self, email: str, password: str) -> Dict[str, Any]:
        with _sdk_call("create_session"):
            session = self.admin_account.create_email_password_session(email, password)
        secret = session.get("secret")
        if secret:
            self.session_client.set_session(secret)
        return session

    def delete_sessions(self) -> None:
        with _sdk_call("delete_sessions"):
            self.session_account.delete_sessions()

    def get_current_account(self) -> Dict[str, Any]:
        with _sdk_call("get_current_account"):
            return self.session_account.get()


class AppwriteBackend:
    """Bundle of the three Appwrite adapters sharing one configuration."""

    def __init__(self, endpoint: str, project_id: str, database_id: str,
                 bucket_id: str, api_key: Optional[str] = None):
        admin_client = create_client(endpoint, project_id, api_key)
        session_client = create_client(endpoint, project_id)

        self.documents = AppwriteDocumentStore(admin_client, database_id)
        self.files = AppwriteFileStore(admin_client, bucket_id, endpoint, project_id)
        self.accounts = AppwriteAccountGateway(admin_client, session_client)
        logger.info(f"Appwrite backend ready for project {project_id} at {endpoint}")


def build_backend() -> AppwriteBackend:
    """Create the Appwrite backend from config.settings."""
    return AppwriteBackend(
        endpoint=settings.APPWRITE_ENDPOINT,
        project_id=settings.APPWRITE_PROJECT_ID,
        database_id=settings.APPWRITE_DATABASE_ID,
        bucket_id=settings.APPWRITE_BUCKET_ID,
        api_key=settings.APPWRITE_API_KEY or None,
    )
