"""
Helper Utility Module

This module provides various helper functions used throughout the Travel Blog application.
"""

import math
import re
import time
from typing import Callable, Iterable, Tuple, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry(func, max_attempts: int = 3, delay: float = 2,
          exceptions: Tuple = (Exception,), backoff: int = 2):
    """
    Retry a function multiple times if it fails.

    Args:
        func: The function to retry
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts in seconds
        exceptions: Tuple of exceptions to catch
        backoff: Multiplier for the delay between attempts

    Returns:
        The result of the function call

    Raises:
        The last exception raised by the function
    """
    attempt = 0
    while attempt < max_attempts:
        try:
            return func()
        except exceptions as e:
            attempt += 1
            if attempt >= max_attempts:
                raise e

            wait_time = delay * (backoff ** (attempt - 1))
            time.sleep(wait_time)


def first_successful(strategies: Iterable[Tuple[str, Callable[[], T]]],
                     fallback: Callable[[], T],
                     exceptions: Tuple = (Exception,)) -> T:
    """
    Try each named strategy in order and return the first result.

    A strategy fails by raising one of ``exceptions`` or by returning None.
    The fallback is called when every strategy has failed and must not raise.

    Args:
        strategies: Ordered (name, callable) pairs
        fallback: Final strategy, called with no arguments
        exceptions: Tuple of exceptions treated as a strategy failure

    Returns:
        The first non-None strategy result, or the fallback's result
    """
    for name, strategy in strategies:
        try:
            result = strategy()
        except exceptions as e:
            logger.debug(f"Strategy '{name}' failed: {e}")
            continue
        if result is not None:
            return result
        logger.debug(f"Strategy '{name}' returned nothing")
    return fallback()


def strip_html_tags(text: str, replacement: str = '') -> str:
    """
    Remove HTML tags from text.

    Args:
        text: The text to clean
        replacement: String put in place of each tag

    Returns:
        str: Text with HTML tags removed
    """
    clean = re.compile('<[^>]*>')
    return re.sub(clean, replacement, text)


def count_words(text: str) -> int:
    """
    Count the words in a piece of HTML or plain text, ignoring tags.

    Args:
        text: The text to count

    Returns:
        int: Number of whitespace separated words
    """
    if not text:
        return 0
    # Tags are replaced by a space so "<p>a</p><p>b</p>" counts two words
    return len(strip_html_tags(text, replacement=' ').split())


def estimate_read_time(text: str, words_per_minute: int = 200) -> int:
    """
    Estimate reading time in whole minutes, never less than one.

    Args:
        text: Post content, HTML allowed
        words_per_minute: Reading speed

    Returns:
        int: Minutes rounded up
    """
    words = count_words(text)
    return max(1, math.ceil(words / words_per_minute))


def truncate_text(text: str, max_length: int = 100, add_ellipsis: bool = True) -> str:
    """
    Truncate text to a maximum length.

    The cut is exact, so ``truncate_text(s, 397)`` is always ``s[:397] + "..."``
    for longer input.

    Args:
        text: The text to truncate
        max_length: Maximum length kept before the ellipsis
        add_ellipsis: Whether to add an ellipsis if text is truncated

    Returns:
        str: Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    truncated = text[:max_length]
    if add_ellipsis:
        truncated += "..."

    return truncated
