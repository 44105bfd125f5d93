"""
Bookmarks2Notion - Test Configuration and Fixtures

Shared fixtures for both unit and e2e tests.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from config import NotionSettings
from notion_ingest.google_parser import Bookmark
from notion_ingest.notion_api import NotionAPIError


def add_date(year: int, month: int, day: int) -> str:
    """ADD_DATE attribute value (microseconds since epoch) for a UTC date."""
    return str(int(datetime(year, month, day, tzinfo=timezone.utc).timestamp()) * 1_000_000)


SAMPLE_EXPORT = f"""<!DOCTYPE NETSCAPE-Bookmark-file-1>
<!-- This is an automatically generated file.
It will be read and overwritten.
Do Not Edit! -->
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
<DT><H3 ADD_DATE="{add_date(2019, 1, 1)}">Python</H3>
<DL><p>
<DT><A HREF="https://docs.python.org/" ADD_DATE="{add_date(2021, 1, 1)}">Python Docs</A>
<DD>Official documentation
<DT><H3>Libraries</H3>
<DL><p>
<DT><A HREF="https://www.crummy.com/software/BeautifulSoup/" ADD_DATE="{add_date(2021, 2, 1)}">Beautiful Soup</A>
</DL><p>
</DL><p>
<DT><H3>Reading</H3>
<DL><p>
<DT><A HREF="https://docs.python.org/" ADD_DATE="{add_date(2022, 1, 1)}">Python docs again</A>
<DD>second memo
<DT><A HREF="https://example.com/" ADD_DATE="{add_date(2020, 1, 1)}">Example</A>
</DL><p>
<DT><H3>ラベルなし</H3>
<DL><p>
<DT><A HREF="https://docs.python.org/" ADD_DATE="{add_date(2023, 1, 1)}">Docs without label</A>
<DT><A HREF="https://news.ycombinator.com/" ADD_DATE="{add_date(2020, 7, 1)}">Hacker News</A>
</DL><p>
</DL><p>
"""


def export_with(*entries: str) -> str:
    """Wrap folder/link markup in a minimal bookmarks export."""
    body = "\n".join(entries)
    return f"<!DOCTYPE NETSCAPE-Bookmark-file-1>\n<TITLE>Bookmarks</TITLE>\n<H1>Bookmarks</H1>\n<DL><p>\n{body}\n</DL><p>\n"


@pytest.fixture
def sample_export() -> str:
    return SAMPLE_EXPORT


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "GoogleBookmarks.html"
    path.write_text(SAMPLE_EXPORT, encoding="utf-8")
    return path


@pytest.fixture
def notion_settings() -> NotionSettings:
    return NotionSettings(
        NOTION_TOKEN="secret-token",
        NOTION_DATABASE_ID="database-123",
        NOTION_API_BASE="https://api.notion.test",
        MAX_RETRIES=3,
    )


@pytest.fixture
def bookmarks() -> list[Bookmark]:
    return [
        Bookmark(
            title=f"Bookmark {i}",
            url=f"https://example.com/{i}",
            date=datetime(2021, 1, i + 1, tzinfo=timezone.utc),
            tags=["Reading"] if i % 2 else [],
        )
        for i in range(5)
    ]


class FakeNotion:
    """Records create_page calls; raises NotionAPIError for URLs in fail_urls."""

    def __init__(self, fail_urls: set[str] | None = None):
        self.fail_urls = fail_urls or set()
        self.created: list[Bookmark] = []

    def create_page(self, bookmark: Bookmark) -> str:
        if bookmark.url in self.fail_urls:
            raise NotionAPIError("HTTP 400: validation failed", status_code=400)
        self.created.append(bookmark)
        return f"page-{len(self.created)}"


@pytest.fixture
def fake_notion() -> FakeNotion:
    return FakeNotion()
