"""Debug snapshots for post-run inspection.

Everything written here is diagnostic: failures are logged, never raised.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from gallery_collector.config import Settings

logger = logging.getLogger(__name__)


class DebugStore:
    """
    Writes raw response snapshots and the processed-decision log.

    Files:
    - ``<backend>_q<query>_p<page>.html``: raw search response body (truncated)
    - ``processed.json``: one entry per candidate with the filter decision
    """

    def __init__(self, config: Settings, base_path: Optional[str] = None):
        self.enabled = config.debug_snapshots
        self.base_path = Path(base_path or config.debug_dir)
        self.max_chars = config.snapshot_max_chars
        self.processed_limit = config.processed_log_limit
        self.processed: List[Dict[str, Any]] = []

    @staticmethod
    def _safe_name(name: str) -> str:
        return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "snapshot"

    def _write(self, name: str, content: str) -> Optional[Path]:
        path = self.base_path / self._safe_name(name)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write debug file {path}: {e}")
            return None
        return path

    def write_snapshot(self, backend: str, query_index: int, page: int, body: str) -> Optional[Path]:
        """Persist the start of a raw response body."""
        if not self.enabled or not body:
            return None
        return self._write(f"{backend}_q{query_index}_p{page}.html", body[: self.max_chars])

    def record(
        self,
        action: str,
        product_url: str,
        image_url: str,
        retailer: Optional[str] = None,
        reason: str = "",
    ) -> None:
        """Record the decision taken for one candidate."""
        if len(self.processed) >= self.processed_limit:
            return
        self.processed.append({
            "retailer": retailer,
            "action": action,
            "reason": reason,
            "product_url": product_url,
            "image_url": image_url,
        })

    def flush(self) -> Optional[Path]:
        """Write ``processed.json``."""
        if not self.enabled:
            return None
        return self._write("processed.json", json.dumps(self.processed, indent=2, ensure_ascii=False))
