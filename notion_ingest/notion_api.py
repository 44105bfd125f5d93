"""
Bookmarks2Notion - Notion API Client

Creates one Notion database page per bookmark. Rate limiting (429), server
errors and network failures are retried, honouring Retry-After when Notion
sends one and backing off exponentially otherwise.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from config import NotionSettings

from .google_parser import Bookmark

logger = logging.getLogger(__name__)

JST = timezone(timedelta(hours=9))

# Notion rejects rich text segments longer than this
MAX_TEXT_LENGTH = 2000


class NotionAPIError(Exception):
    """A Notion request failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable
        self.retry_after = retry_after


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header, or None if absent or not a number"""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class wait_retry_after(wait_base):
    """Wait as long as the server's Retry-After asks, else defer to fallback."""

    def __init__(self, fallback: wait_base):
        self.fallback = fallback

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, NotionAPIError) and exc.retry_after is not None:
            return exc.retry_after
        return self.fallback(retry_state)


def to_jst_string(date: datetime) -> str:
    """Format a datetime as ISO-8601 with milliseconds in UTC+9, e.g. 2021-01-01T09:00:00.000+09:00"""
    return date.astimezone(JST).isoformat(timespec="milliseconds")


def _text(content: str) -> list[dict]:
    return [{"type": "text", "text": {"content": content[:MAX_TEXT_LENGTH]}}]


def build_page_properties(bookmark: Bookmark) -> dict:
    """Map a bookmark onto the database's Title/URL/Tags/Date/Memo properties"""
    return {
        "Title": {"type": "title", "title": _text(bookmark.title)},
        "URL": {"type": "url", "url": bookmark.url},
        "Tags": {
            "type": "multi_select",
            "multi_select": [{"name": tag} for tag in bookmark.tags],
        },
        "Date": {"type": "date", "date": {"start": to_jst_string(bookmark.date)}},
        "Memo": {"type": "rich_text", "rich_text": _text(bookmark.memo or "")},
    }


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, NotionAPIError) and exc.retryable


class NotionClient:
    """
    Minimal Notion API client for page creation.

    Usage:
        with NotionClient(settings) as notion:
            page_id = notion.create_page(bookmark)
    """

    def __init__(
        self,
        settings: NotionSettings,
        client: Optional[httpx.Client] = None,
        backoff: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            settings: Notion credentials and connection options
            client: Pre-built HTTP client, mainly for tests
            backoff: Base delay in seconds for exponential retry backoff
            sleep: Delay function between attempts, replaceable in tests
        """
        self.settings = settings
        self._client = client or httpx.Client(timeout=settings.timeout)
        self._retrying = Retrying(
            stop=stop_after_attempt(settings.max_retries),
            wait=wait_retry_after(wait_exponential(multiplier=backoff, max=60)),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=sleep,
            reraise=True,
        )

    def __enter__(self) -> "NotionClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.settings.token}",
            "Notion-Version": self.settings.api_version,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict) -> dict:
        response = self._client.post(
            f"{self.settings.api_base.rstrip('/')}{path}",
            headers=self.headers,
            json=payload,
        )
        if response.is_success:
            try:
                return response.json()
            except ValueError:
                raise NotionAPIError(
                    f"HTTP {response.status_code}: response is not JSON: {response.text[:200]}",
                    status_code=response.status_code,
                ) from None

        try:
            message = response.json().get("message", response.text[:500])
        except ValueError:
            message = response.text[:500]

        raise NotionAPIError(
            f"HTTP {response.status_code}: {message}",
            status_code=response.status_code,
            retryable=response.status_code == 429 or response.status_code >= 500,
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
        )

    def request(self, path: str, payload: dict) -> dict:
        """
        POST to the Notion API, retrying transient failures.

        Raises:
            NotionAPIError: If the request still fails after all attempts
        """
        try:
            return self._retrying.copy()(self._post, path, payload)
        except httpx.TransportError as e:
            raise NotionAPIError(f"Network error: {e}") from e

    def create_page(self, bookmark: Bookmark) -> str:
        """
        Create a database page for a bookmark.

        Returns:
            ID of the created page
        """
        data = self.request(
            "/v1/pages",
            {
                "parent": {"database_id": self.settings.database_id},
                "properties": build_page_properties(bookmark),
            },
        )
        logger.debug(f"Created page {data.get('id')} for {bookmark.url}")
        return data.get("id", "")
