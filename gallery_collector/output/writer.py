"""Write the gallery JSON file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from gallery_collector.config import Settings
from gallery_collector.models import OutputItem

logger = logging.getLogger(__name__)


class OutputWriteError(RuntimeError):
    """Raised when the output file cannot be written."""
    pass


class GalleryWriter:
    """
    Serializes gallery items to a flat JSON array.

    Keeps the previous file when the new result set is suspiciously small:
    fewer than ``min_items`` items, or fewer than ``min_ratio`` times the
    previous file's item count.
    """

    def __init__(self, path: str | Path, min_items: int = 1, min_ratio: float = 0.0):
        self.path = Path(path)
        self.min_items = max(0, min_items)
        self.min_ratio = max(0.0, min_ratio)

    @classmethod
    def from_settings(cls, config: Settings) -> "GalleryWriter":
        return cls(
            config.output_path,
            min_items=config.min_items_to_overwrite,
            min_ratio=config.min_ratio_of_previous,
        )

    def previous_count(self) -> Optional[int]:
        """Item count of the existing file, or None if absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Existing output {self.path} unreadable: {e}")
            return None
        return len(data) if isinstance(data, list) else None

    def should_keep_previous(self, new_count: int) -> Optional[str]:
        """Reason for keeping the previous file, or None to overwrite."""
        if not self.path.exists():
            return None
        if new_count < self.min_items:
            return f"only {new_count} items (minimum {self.min_items})"
        if self.min_ratio > 0:
            previous = self.previous_count()
            if previous and new_count < previous * self.min_ratio:
                return f"{new_count} items is below {self.min_ratio:.0%} of previous {previous}"
        return None

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove {tmp_path}: {e}")

    def write(self, items: Sequence[OutputItem]) -> bool:
        """
        Write ``items`` to the output path.

        Returns:
            True if the file was written, False if the previous file was kept

        Raises:
            OutputWriteError: If the file cannot be written
        """
        reason = self.should_keep_previous(len(items))
        if reason:
            logger.warning(f"Keeping previous {self.path}: {reason}")
            return False

        payload: List[dict] = [item.to_dict() for item in items]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            self._discard(tmp_path)
            raise OutputWriteError(f"Cannot write {self.path}: {e}") from e

        logger.info(f"Wrote {len(payload)} items to {self.path}")
        return True
