"""
Bookmarks2Notion - Bookmark Uploader

Walks the sorted bookmark list from a resume offset and creates one Notion
page per bookmark, pausing a fixed delay between requests. Each request is
awaited; a request that fails after its retries stops the run so the
checkpoint always points at the last bookmark actually imported.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from .checkpoint import CheckpointStore
from .google_parser import Bookmark
from .notion_api import NotionAPIError

logger = logging.getLogger(__name__)


class PageCreator(Protocol):
    def create_page(self, bookmark: Bookmark) -> str: ...


@dataclass
class UploadResult:
    """Result of an upload run"""
    total: int = 0
    skipped: int = 0
    created: int = 0
    last_index: Optional[int] = None
    failed_index: Optional[int] = None
    error_message: Optional[str] = None
    page_ids: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_index is None


class Uploader:
    """
    Sequential, rate-limited page creation.

    Args:
        client: Anything with create_page(bookmark), normally a NotionClient
        delay: Seconds to wait after each dispatched request
        checkpoint: Store updated after every created page
        on_dispatch: Called with (index, bookmark) before each request
        sleep: Delay function, replaceable in tests
    """

    def __init__(
        self,
        client: PageCreator,
        delay: float = 1.0,
        checkpoint: Optional[CheckpointStore] = None,
        on_dispatch: Optional[Callable[[int, Bookmark], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.delay = delay
        self.checkpoint = checkpoint
        self.on_dispatch = on_dispatch
        self.sleep = sleep

    def upload(self, bookmarks: Sequence[Bookmark], resume_from: int = 0) -> UploadResult:
        """
        Create pages for bookmarks[resume_from:], in order.

        Returns:
            UploadResult; failed_index is set if a request failed
        """
        result = UploadResult(total=len(bookmarks))
        result.skipped = min(max(resume_from, 0), len(bookmarks))

        pending = list(enumerate(bookmarks))[result.skipped:]
        if result.skipped:
            logger.info(f"Skipping {result.skipped} already imported bookmarks")

        for position, (index, bookmark) in enumerate(pending):
            if self.on_dispatch:
                self.on_dispatch(index, bookmark)

            try:
                page_id = self.client.create_page(bookmark)
            except NotionAPIError as e:
                logger.error(f"Failed to import #{index} {bookmark.url}: {e}")
                result.failed_index = index
                result.error_message = str(e)
                break

            result.created += 1
            result.last_index = index
            result.page_ids.append(page_id)
            if self.checkpoint:
                self.checkpoint.save(index, bookmark.url)

            if position < len(pending) - 1:
                self.sleep(self.delay)

        return result


def upload_bookmarks(
    bookmarks: Sequence[Bookmark],
    client: PageCreator,
    resume_from: int = 0,
    delay: float = 1.0,
    checkpoint: Optional[CheckpointStore] = None,
    on_dispatch: Optional[Callable[[int, Bookmark], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> UploadResult:
    """Convenience wrapper around Uploader.upload"""
    uploader = Uploader(client, delay, checkpoint, on_dispatch, sleep)
    return uploader.upload(bookmarks, resume_from)
