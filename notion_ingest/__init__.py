"""
Bookmarks2Notion - Ingest Module

This module provides functionality to parse Google Bookmarks exports
and import them into a Notion database.
"""

__version__ = "1.0.0"

from .checkpoint import Checkpoint, CheckpointMismatchError, CheckpointStore
from .google_parser import (
    Bookmark,
    BookmarkParseError,
    DocumentUnreadableError,
    GoogleBookmarksParser,
    InvalidDateError,
    MissingDateError,
    MissingURLError,
    extract_bookmarks,
)
from .notion_api import NotionAPIError, NotionClient, to_jst_string
from .uploader import UploadResult, Uploader, upload_bookmarks

__all__ = [
    "Bookmark",
    "BookmarkParseError",
    "Checkpoint",
    "CheckpointMismatchError",
    "CheckpointStore",
    "DocumentUnreadableError",
    "GoogleBookmarksParser",
    "InvalidDateError",
    "MissingDateError",
    "MissingURLError",
    "NotionAPIError",
    "NotionClient",
    "UploadResult",
    "Uploader",
    "extract_bookmarks",
    "to_jst_string",
    "upload_bookmarks",
]
