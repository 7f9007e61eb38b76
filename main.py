"""
Travel Blog Application

This is the main entry point for the Travel Blog service layer.
It wires the Appwrite backend into the content, auth and AI services and
offers a small administrative command line for listing, searching and
inspecting posts, repairing file permissions, and drafting content.
"""

import sys
import argparse
import logging
from typing import Optional, List

from config import settings
from data.models import Post, PostList
from services.ai_service import ContentGenerator
from services.auth_service import AuthService
from services.content_service import ContentService
from services.protocols import AuthServiceProtocol, ContentGeneratorProtocol, ContentServiceProtocol
from utils.exceptions import TravelBlogError
from utils.logger import get_logger, setup_file_logging

# Set up logging
logger = get_logger(__name__)


class TravelBlog:
    """
    Application container for the Travel Blog.

    Holds one instance of each service. Services are passed in explicitly so
    consumers and tests can swap them; create_travel_blog() builds the real
    ones from settings.
    """

    def __init__(self, content_service: ContentServiceProtocol, auth_service: AuthServiceProtocol,
                 content_generator: Optional[ContentGeneratorProtocol] = None):
        self.content_service = content_service
        self.auth_service = auth_service
        self.content_generator = content_generator

    def list_posts(self, category: Optional[str] = None, user_id: Optional[str] = None) -> PostList:
        if user_id:
            return self.content_service.get_user_posts(user_id)
        if category:
            return self.content_service.get_posts_by_category(category)
        return self.content_service.get_posts()

    def read_post(self, slug: str) -> Post:
        """Fetch a post for reading and count the view."""
        post = self.content_service.get_post(slug)
        post.views = self.content_service.increment_post_views(slug, post.views)
        return post

    def generate_content(self, topic: str) -> str:
        if self.content_generator is None:
            raise TravelBlogError("AI content generation is not configured (set GEMINI_API_KEY)")
        return self.content_generator.generate_post_content(topic)


def create_travel_blog(validate: bool = True, with_ai: bool = False) -> TravelBlog:
    """
    Build a TravelBlog backed by Appwrite using config.settings.

    Args:
        validate: Run settings validation first.
        with_ai: Also create the Gemini content generator.
    """
    # Imported here so the SDK is only loaded when a real backend is needed
    from data.appwrite_backend import build_backend

    if validate:
        settings.validate_settings(require_ai=with_ai)

    backend = build_backend()
    content_service = ContentService(backend.documents, backend.files)
    auth_service = AuthService(backend.accounts, backend.documents)
    content_generator = ContentGenerator() if with_ai else None
    return TravelBlog(content_service, auth_service, content_generator)


def format_post_line(post: Post) -> str:
    return (f"{post.id:<36}  {post.category:<12}  {post.status:<8}  "
            f"{post.like_count:>4} likes  {post.views:>5} views  {post.title}")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Travel Blog administration')
    parser.add_argument('--log-file', type=str, default=None, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')

    subparsers = parser.add_subparsers(dest='command', required=True)

    list_parser = subparsers.add_parser('list', help='List active posts')
    list_parser.add_argument('--category', choices=settings.POST_CATEGORIES, default=None)
    list_parser.add_argument('--user', type=str, default=None, help="List one author's posts")

    search_parser = subparsers.add_parser('search', help='Search posts by title and content')
    search_parser.add_argument('term', type=str)

    show_parser = subparsers.add_parser('show', help='Print a post with its full content')
    show_parser.add_argument('slug', type=str)

    subparsers.add_parser('fix-permissions', help='Make every bucket file publicly readable')
    subparsers.add_parser('total-users', help='Print the registered user count')

    generate_parser = subparsers.add_parser('generate', help='Draft post content with Gemini')
    generate_parser.add_argument('topic', type=str)

    return parser.parse_args(argv)


def run_command(app: TravelBlog, args) -> int:
    """Run one parsed command against the app and return the exit code."""
    if args.command == 'list':
        posts = app.list_posts(category=args.category, user_id=args.user)
        for post in posts.documents:
            print(format_post_line(post))
        logger.info(f"Listed {posts.total} posts")
    elif args.command == 'search':
        posts = app.content_service.search_posts(args.term)
        for post in posts.documents:
            print(format_post_line(post))
        logger.info(f"Search '{args.term}' returned {posts.total} posts")
    elif args.command == 'show':
        post = app.read_post(args.slug)
        print(f"{post.title}\n{post.category} | {post.read_time} min read | {post.views} views\n")
        print(post.content)
    elif args.command == 'fix-permissions':
        report = app.content_service.fix_all_file_permissions()
        print(f"Fixed {report.fixed} of {report.total} files, {report.failed} failed")
        for file_id, error in report.errors.items():
            print(f"  {file_id}: {error}")
        return 0 if report.failed == 0 else 1
    elif args.command == 'total-users':
        print(app.auth_service.get_total_users())
    elif args.command == 'generate':
        print(app.generate_content(args.topic))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    if args.log_file:
        setup_file_logging(args.log_file, log_level)
    else:
        get_logger().setLevel(log_level)

    logger.debug(f"Configuration: {settings.get_config_summary()}")

    try:
        app = create_travel_blog(with_ai=args.command == 'generate')
        exit_code = run_command(app, args)
    except TravelBlogError as e:
        logger.error(f"{type(e).__name__}: {e}")
        exit_code = 1
    except Exception as e:
        logger.error(f"Unhandled exception in Travel Blog: {e}", exc_info=True)
        exit_code = 2

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
