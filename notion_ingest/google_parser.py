"""
Bookmarks2Notion - Google Bookmarks Parser

Parses Google Bookmarks HTML export files into deduplicated, tagged bookmarks.
Each top-level folder is a label; its name becomes a tag on every bookmark
found anywhere inside it.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from bs4 import BeautifulSoup, Tag

from config import DEFAULT_NO_LABEL_TAG

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class BookmarkParseError(Exception):
    """Base exception for malformed bookmark exports."""


class DocumentUnreadableError(BookmarkParseError):
    """The top-level folder list could not be located."""


class MissingURLError(BookmarkParseError):
    """A link entry has no HREF."""


class MissingDateError(BookmarkParseError):
    """A link entry has no ADD_DATE."""


class InvalidDateError(BookmarkParseError):
    """A link entry's ADD_DATE is not a usable microsecond timestamp."""


@dataclass
class Bookmark:
    """A single deduplicated bookmark"""
    title: str
    url: str
    date: datetime
    tags: list[str] = field(default_factory=list)
    memo: str = ""


def parse_add_date(value: str) -> datetime:
    """
    Convert an ADD_DATE attribute to an aware UTC datetime.

    Google stores microseconds since the epoch; the value is truncated to
    millisecond precision.

    Raises:
        InvalidDateError: If the value is not an integer or is out of range
    """
    try:
        microseconds = int(value)
    except ValueError:
        raise InvalidDateError(f"Invalid ADD_DATE: {value!r}") from None

    try:
        return EPOCH + timedelta(milliseconds=int(microseconds / 1000))
    except OverflowError:
        raise InvalidDateError(f"ADD_DATE out of range: {value!r}") from None


def folder_tag(folder: Tag, no_label: str = DEFAULT_NO_LABEL_TAG) -> str:
    """Return the tag for a top-level folder, or "" when it contributes none"""
    heading = folder.find("h3")
    if heading is None:
        return ""

    tag = heading.get_text(strip=True)
    if not tag or tag == no_label:
        return ""
    return tag


def _link_entries(folder: Tag) -> list[Tag]:
    """
    All link entries (DT elements with a direct anchor) within a top-level DT.

    Sub-folder DTs carry an H3 instead of an anchor and are skipped; their
    contents are picked up by the descendant selector.
    """
    entries = [folder] + folder.select("dl > dt")
    return [dt for dt in entries if dt.find("a", recursive=False) is not None]


def _extract_bookmark(dt: Tag) -> Bookmark:
    link = dt.find("a", recursive=False)

    url = link.get("href")
    if not url:
        raise MissingURLError(f"No URL for link {link.get_text()!r}")

    date_str = link.get("add_date")
    if not date_str:
        raise MissingDateError(f"No date for link {url}")

    # A note is a DD immediately following the entry
    sibling = dt.find_next_sibling()
    memo = sibling.get_text().strip() if sibling is not None and sibling.name == "dd" else ""

    return Bookmark(
        title=link.get_text(),
        url=url,
        date=parse_add_date(date_str),
        memo=memo,
    )


def _iter_entries(soup: BeautifulSoup, no_label: str) -> Iterator[tuple[str, Tag]]:
    """Yield (tag, link entry) pairs in document order"""
    root = soup.select_one("body > dl")
    if root is None:
        raise DocumentUnreadableError("Top-level bookmark list not found")

    for folder in root.find_all("dt", recursive=False):
        tag = folder_tag(folder, no_label)
        for dt in _link_entries(folder):
            yield tag, dt


def _collect(soup: BeautifulSoup, no_label: str) -> list[Bookmark]:
    by_url: dict[str, Bookmark] = {}

    for tag, dt in _iter_entries(soup, no_label):
        bookmark = _extract_bookmark(dt)
        bookmark = by_url.setdefault(bookmark.url, bookmark)
        if tag:
            bookmark.tags.append(tag)

    return sorted(by_url.values(), key=lambda b: b.date)


def extract_bookmarks(html: str, no_label: str = DEFAULT_NO_LABEL_TAG) -> list[Bookmark]:
    """
    Parse a bookmarks export into bookmarks sorted by creation date.

    A URL seen more than once keeps its first title, date and memo; every
    occurrence under a labeled folder appends that folder's tag.

    Args:
        html: Bookmarks HTML export content
        no_label: Folder name treated as "no tag"

    Returns:
        List of Bookmark objects, oldest first

    Raises:
        BookmarkParseError: On the first malformed entry
    """
    return _collect(BeautifulSoup(html, "html5lib"), no_label)


class GoogleBookmarksParser:
    """
    Parser for Google Bookmarks HTML export files.

    Example folder structure:
        Research            -> tag "Research"
            - bookmark1
            Papers          -> still tag "Research"
                - bookmark2
        ラベルなし           -> no tag
            - bookmark3
    """

    def __init__(self, file_path: str | Path, no_label: str = DEFAULT_NO_LABEL_TAG):
        self.file_path = Path(file_path)
        self.no_label = no_label
        if not self.file_path.exists():
            raise FileNotFoundError(f"Bookmarks file not found: {self.file_path}")

    def read(self) -> str:
        return self.file_path.read_text(encoding="utf-8")

    def parse(self) -> list[Bookmark]:
        """
        Parse the bookmarks file.

        Returns:
            List of Bookmark objects sorted by date
        """
        return extract_bookmarks(self.read(), self.no_label)

    def get_stats(self) -> dict:
        """
        Get statistics about the bookmarks file.

        Returns:
            Dictionary with total_links, unique_urls, duplicates, untagged and tags
        """
        soup = BeautifulSoup(self.read(), "html5lib")
        bookmarks = _collect(soup, self.no_label)

        total_links = 0
        tags: Counter[str] = Counter()
        for tag, _ in _iter_entries(soup, self.no_label):
            total_links += 1
            if tag:
                tags[tag] += 1

        return {
            "file_path": str(self.file_path),
            "total_links": total_links,
            "unique_urls": len(bookmarks),
            "duplicates": total_links - len(bookmarks),
            "untagged": sum(1 for b in bookmarks if not b.tags),
            "tags": [{"label": label, "count": count} for label, count in tags.most_common()],
        }


def parse_bookmarks_file(file_path: str | Path, no_label: str = DEFAULT_NO_LABEL_TAG) -> list[Bookmark]:
    """
    Convenience function to parse a Google Bookmarks file.

    Args:
        file_path: Path to the bookmarks HTML file
        no_label: Folder name treated as "no tag"

    Returns:
        List of Bookmark objects sorted by date
    """
    parser = GoogleBookmarksParser(file_path, no_label)
    return parser.parse()
