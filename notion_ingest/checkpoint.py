"""
Bookmarks2Notion - Import Checkpoint

Persists the index of the last bookmark successfully created in Notion so an
interrupted import can resume where it stopped.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from .google_parser import Bookmark

logger = logging.getLogger(__name__)


class CheckpointMismatchError(Exception):
    """The checkpoint does not line up with the bookmark list being imported."""


@dataclass
class Checkpoint:
    """Last successfully processed position in the sorted bookmark list"""
    last_index: int
    url: str
    updated_at: datetime

    @property
    def next_index(self) -> int:
        return self.last_index + 1


class CheckpointStore:
    """JSON file holding a single Checkpoint"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[Checkpoint]:
        """Read the checkpoint, or None if there is none or it is unreadable"""
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Checkpoint(
                last_index=int(data["last_index"]),
                url=data.get("url", ""),
                updated_at=datetime.fromisoformat(data["updated_at"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupted checkpoint {self.path}: {e}")
            return None

    def save(self, index: int, url: str) -> Checkpoint:
        checkpoint = Checkpoint(
            last_index=index,
            url=url,
            updated_at=datetime.now(timezone.utc),
        )
        data = {
            "last_index": checkpoint.last_index,
            "url": checkpoint.url,
            "updated_at": checkpoint.updated_at.isoformat(),
        }

        # Atomic replace
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)
        return checkpoint

    def clear(self) -> bool:
        """Delete the checkpoint, returning whether one existed"""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True

    def resume_index(self, bookmarks: Optional[Sequence[Bookmark]] = None) -> int:
        """
        Index of the first bookmark not yet imported.

        Args:
            bookmarks: The list about to be imported; when given, the
                checkpointed index must still point at the checkpointed URL

        Raises:
            CheckpointMismatchError: If the list no longer lines up with the checkpoint
        """
        checkpoint = self.load()
        if checkpoint is None:
            return 0

        if bookmarks is not None:
            index = checkpoint.last_index
            found = bookmarks[index].url if 0 <= index < len(bookmarks) else None
            if found != checkpoint.url:
                raise CheckpointMismatchError(
                    f"Checkpoint index {index} was {checkpoint.url}, "
                    f"but the bookmarks file has {found or 'no entry'} there"
                )

        return checkpoint.next_index
