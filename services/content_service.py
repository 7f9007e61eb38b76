"""
Content Service Module

This module handles post and file operations against the document store and
the storage bucket. Besides plain CRUD it keeps long post content in overflow
files, hydrates it back on read, merges title and content searches, and keeps
like and view counters on the post documents.
"""

import re
from typing import Optional, List, Dict, Any

import requests

from config import settings
from data.models import Filter, Post, PostList, StoredFile, PermissionRepairReport
from data.protocols import DocumentStore, FileStore
from utils.exceptions import TravelBlogError, ValidationError, UpstreamUnavailableError
from utils.helpers import estimate_read_time, first_successful, retry, truncate_text
from utils.logger import get_logger

logger = get_logger(__name__)

SLUG_RE = re.compile(settings.SLUG_PATTERN)


def is_valid_slug(slug: str) -> bool:
    """Check a slug against the document id rules."""
    return bool(slug) and isinstance(slug, str) and SLUG_RE.match(slug) is not None


class ContentService:
    """Service for posts and their files."""

    def __init__(self, documents: DocumentStore, files: FileStore,
                 collection_id: Optional[str] = None,
                 fetch_attempts: Optional[int] = None):
        """
        Initialize the content service.

        Args:
            documents: Document store holding the posts collection.
            files: Storage bucket for images and overflow content.
            collection_id: Posts collection, defaults to settings.APPWRITE_COLLECTION_ID.
            fetch_attempts: Attempts on the public view URL when hydrating content.
        """
        self.documents = documents
        self.files = files
        self.collection_id = collection_id or settings.APPWRITE_COLLECTION_ID
        self.fetch_attempts = fetch_attempts or settings.CONTENT_FETCH_ATTEMPTS
        self.threshold = settings.CONTENT_PREVIEW_THRESHOLD
        self.preview_length = settings.CONTENT_PREVIEW_LENGTH

    # -------------------------------------------------------------------------
    # Posts
    # -------------------------------------------------------------------------

    def create_post(self, title: str, slug: str, content: str, featured_image: Optional[str],
                    user_id: str, status: str = settings.DEFAULT_POST_STATUS,
                    category: str = settings.DEFAULT_POST_CATEGORY) -> Post:
        """
        Create a post whose document id is its slug.

        Content longer than the preview threshold is uploaded as an HTML
        overflow file and only a preview is stored on the document.

        Args:
            title: Post title.
            slug: Document id, see settings.SLUG_PATTERN.
            content: Full HTML content.
            featured_image: File id of the featured image.
            user_id: Id of the authoring account.
            status: 'active' or 'inactive'.
            category: One of settings.POST_CATEGORIES.

        Returns:
            Post: The created post as stored (preview content when offloaded).

        Raises:
            ValidationError: If slug, status or category is invalid.
        """
        if not is_valid_slug(slug):
            raise ValidationError(
                f"Invalid slug '{slug}': use at most {settings.MAX_SLUG_LENGTH} letters, numbers, "
                f"periods, hyphens or underscores, starting with a letter or number"
            )
        self._validate_status(status)
        self._validate_category(category)

        content = content or ""
        stored_content, content_id = self._store_content(slug, content)

        post = Post(
            id=slug,
            title=title,
            content=stored_content,
            content_id=content_id,
            featured_image=featured_image,
            status=status,
            user_id=user_id,
            category=category,
            read_time=estimate_read_time(content, settings.WORDS_PER_MINUTE),
        )

        try:
            document = self.documents.create_document(self.collection_id, slug, post.to_document())
        except TravelBlogError as e:
            logger.error(f"Error creating post '{slug}': {e}")
            if content_id:
                self.delete_file(content_id)
            raise

        logger.info(f"Created post '{slug}'" + (f" with overflow file {content_id}" if content_id else ""))
        return Post.from_document(document)

    def update_post(self, post_id: str, title: Optional[str] = None, content: Optional[str] = None,
                    featured_image: Optional[str] = None, status: Optional[str] = None,
                    category: Optional[str] = None) -> Post:
        """
        Update the supplied fields of a post.

        When content is supplied the overflow decision is made again: the old
        overflow file is removed when the content no longer needs one, or
        replaced when the new content is still too long. Failure to delete an
        old overflow file does not abort the update.

        Returns:
            Post: The updated post as stored.
        """
        existing = Post.from_document(self.documents.get_document(self.collection_id, post_id))

        data: Dict[str, Any] = {}
        if title is not None:
            data["title"] = title
        if featured_image is not None:
            data["featuredImage"] = featured_image
        if status is not None:
            self._validate_status(status)
            data["status"] = status
        if category is not None:
            self._validate_category(category)
            data["category"] = category

        content_id = None
        if content is not None:
            stored_content, content_id = self._store_content(post_id, content)
            data["content"] = stored_content
            data["contentId"] = content_id
            data["readTime"] = estimate_read_time(content, settings.WORDS_PER_MINUTE)

        try:
            document = self.documents.update_document(self.collection_id, post_id, data)
        except TravelBlogError as e:
            logger.error(f"Error updating post '{post_id}': {e}")
            if content_id:
                self.delete_file(content_id)
            raise

        # The old overflow file goes only once the document no longer points at it
        if content is not None and existing.content_id:
            if not self.delete_file(existing.content_id):
                logger.warning(f"Old overflow file {existing.content_id} of '{post_id}' "
                               f"could not be deleted, continuing")

        logger.info(f"Updated post '{post_id}' fields: {', '.join(sorted(data)) or 'none'}")
        return Post.from_document(document)

    def delete_post(self, post_id: str) -> bool:
        """
        Delete a post together with its overflow file and featured image.

        File deletes are best effort; the document delete raises on failure.
        """
        post = Post.from_document(self.documents.get_document(self.collection_id, post_id))

        if post.content_id and not self.delete_file(post.content_id):
            logger.warning(f"Overflow file {post.content_id} of '{post_id}' was not deleted")
        if post.featured_image and not self.delete_file(post.featured_image):
            logger.warning(f"Featured image {post.featured_image} of '{post_id}' was not deleted")

        try:
            self.documents.delete_document(self.collection_id, post_id)
        except TravelBlogError as e:
            logger.error(f"Error deleting post '{post_id}': {e}")
            raise

        logger.info(f"Deleted post '{post_id}'")
        return True

    def get_post(self, post_id: str) -> Post:
        """
        Fetch a post, hydrating offloaded content when possible.

        The full text is read from the public view URL, then from the
        authenticated download. If both fail the preview is kept.
        """
        post = Post.from_document(self.documents.get_document(self.collection_id, post_id))
        if not post.content_id:
            return post

        content_id = post.content_id
        full_content = first_successful(
            [
                ("public view", lambda: self._fetch_public_content(content_id)),
                ("authenticated download", lambda: self._download_content(content_id)),
            ],
            fallback=lambda: None,
            exceptions=(TravelBlogError, UnicodeDecodeError),
        )
        if full_content is None:
            logger.warning(f"Could not load overflow content {content_id} for '{post_id}', showing preview")
        else:
            post.content = full_content
        return post

    def get_posts(self, filters: Optional[List[Filter]] = None) -> PostList:
        """List posts; without filters only active posts are returned."""
        if filters is None:
            filters = [Filter.equal("status", "active")]
        response = self.documents.list_documents(self.collection_id, filters)
        return PostList.from_response(response)

    def get_posts_by_category(self, category: str) -> PostList:
        """Active posts of one category, newest first."""
        self._validate_category(category)
        return self.get_posts([
            Filter.equal("status", "active"),
            Filter.equal("category", category),
            Filter.order_desc("$createdAt"),
        ])

    def get_user_posts(self, user_id: str) -> PostList:
        """Every post of one author, including inactive ones, newest first."""
        return self.get_posts([
            Filter.equal("userId", user_id),
            Filter.order_desc("$createdAt"),
        ])

    def get_recent_posts(self, limit: int = settings.RECENT_POSTS_LIMIT) -> PostList:
        """The newest active posts."""
        return self.get_posts([
            Filter.equal("status", "active"),
            Filter.order_desc("$createdAt"),
            Filter.limit(limit),
        ])

    def search_posts(self, term: Optional[str]) -> PostList:
        """
        Search active posts by title and by content.

        A blank term returns every active post. Title matches come first,
        followed by content matches that were not already found. There is
        no relevance ranking.
        """
        if not term or not term.strip():
            return self.get_posts()

        title_matches = self.get_posts([Filter.equal("status", "active"), Filter.search("title", term)])
        content_matches = self.get_posts([Filter.equal("status", "active"), Filter.search("content", term)])

        results = list(title_matches.documents)
        seen = {post.id for post in results}
        for post in content_matches.documents:
            if post.id not in seen:
                seen.add(post.id)
                results.append(post)

        logger.info(f"Search '{term}' matched {len(results)} posts "
                    f"({len(title_matches.documents)} by title)")
        return PostList(documents=results, total=len(results))

    # -------------------------------------------------------------------------
    # Likes and views
    # -------------------------------------------------------------------------

    def toggle_like(self, post_id: str, user_id: str) -> Post:
        """
        Add or remove a user from a post's likers.

        This is a read-then-write without version checks, so concurrent
        toggles on the same post can lose updates.
        """
        post = Post.from_document(self.documents.get_document(self.collection_id, post_id))
        likes = list(post.likes)
        if user_id in likes:
            likes = [liker for liker in likes if liker != user_id]
        else:
            likes.append(user_id)

        document = self.documents.update_document(
            self.collection_id, post_id, {"likes": likes, "likeCount": len(likes)}
        )
        logger.debug(f"Post '{post_id}' now has {len(likes)} likes")
        return Post.from_document(document)

    def has_user_liked(self, post_id: str, user_id: str) -> bool:
        post = Post.from_document(self.documents.get_document(self.collection_id, post_id))
        return user_id in post.likes

    def increment_post_views(self, post_id: str, current_views: Optional[int] = None) -> int:
        """
        Write ``current_views + 1`` as the post's view count.

        Reads the current count when it is not given. Like toggling, this is
        an unguarded read-modify-write.

        Returns:
            int: The new view count.
        """
        if current_views is None:
            current_views = Post.from_document(self.documents.get_document(self.collection_id, post_id)).views
        views = (current_views or 0) + 1
        self.documents.update_document(self.collection_id, post_id, {"views": views})
        return views

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def upload_file(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> StoredFile:
        try:
            response = self.files.create_file(data, filename, mime_type)
        except TravelBlogError as e:
            logger.error(f"Error uploading file '{filename}': {e}")
            raise
        return StoredFile.from_response(response)

    def delete_file(self, file_id: str) -> bool:
        """Delete a file, returning False instead of raising on failure."""
        try:
            self.files.delete_file(file_id)
            return True
        except TravelBlogError as e:
            logger.warning(f"Error deleting file {file_id}: {e}")
            return False

    def file_view_url(self, file_id: str) -> str:
        return self.files.file_view_url(file_id)

    def upload_editor_image(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> str:
        """
        Image upload callback for the rich-text editor.

        Returns:
            str: Public URL of the uploaded image for the editor to embed.
        """
        stored = self.upload_file(data, filename, mime_type)
        url = self.file_view_url(stored.id)
        logger.debug(f"Uploaded editor image {filename} to {url}")
        return url

    def fix_file_permissions(self, file_id: str) -> bool:
        """Make one file publicly readable, returning False on failure."""
        try:
            self.files.set_public_read(file_id)
            return True
        except TravelBlogError as e:
            logger.warning(f"Could not set public read on file {file_id}: {e}")
            return False

    def fix_all_file_permissions(self) -> PermissionRepairReport:
        """
        Make every file in the bucket publicly readable.

        Individual failures are tallied in the report rather than aborting.
        """
        report = PermissionRepairReport()
        for file_info in self.files.list_files():
            file_id = file_info["$id"]
            report.total += 1
            try:
                self.files.set_public_read(file_id)
                report.fixed += 1
            except TravelBlogError as e:
                report.failed += 1
                report.errors[file_id] = str(e)

        logger.info(f"Permission repair: {report.fixed}/{report.total} files fixed, {report.failed} failed")
        return report

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _store_content(self, slug: str, content: str):
        """Return (inline content, overflow file id or None) for a post body."""
        if len(content) <= self.threshold:
            return content, None

        stored = self.upload_file(
            content.encode("utf-8"), f"{slug}-content.html", settings.CONTENT_FILE_MIME_TYPE
        )
        return truncate_text(content, self.preview_length), stored.id

    def _fetch_public_content(self, file_id: str) -> str:
        url = self.files.file_view_url(file_id)

        def _get():
            response = requests.get(url, timeout=settings.CONTENT_FETCH_TIMEOUT)
            response.raise_for_status()
            return response.text

        try:
            return retry(_get, max_attempts=self.fetch_attempts,
                         delay=settings.CONTENT_FETCH_RETRY_DELAY,
                         exceptions=(requests.RequestException,))
        except requests.RequestException as e:
            raise UpstreamUnavailableError(f"view URL for {file_id}: {e}") from e

    def _download_content(self, file_id: str) -> str:
        return self.files.download_file(file_id).decode("utf-8")

    def _validate_status(self, status: str) -> None:
        if status not in settings.POST_STATUSES:
            raise ValidationError(f"Invalid status '{status}', expected one of {settings.POST_STATUSES}")

    def _validate_category(self, category: str) -> None:
        if category not in settings.POST_CATEGORIES:
            raise ValidationError(f"Invalid category '{category}', expected one of {settings.POST_CATEGORIES}")
