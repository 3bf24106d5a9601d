"""Data carried through a collection run."""

from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass
class Candidate:
    """A (product URL, image URL) pair pulled out of a search result."""

    product_url: str
    image_url: str
    retailer: Optional[str] = None
    title: str = ""  # Result title / snippet text
    page_text: Optional[str] = None  # Set only when the product page was fetched


@dataclass(frozen=True)
class OutputItem:
    """One gallery tile as written to the output file."""

    retailer: str
    product_url: str
    image_url: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class SearchResponse:
    """Raw search-engine response. ``status_code`` is 0 when no response arrived."""

    url: str
    status_code: int = 0
    raw_body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and bool(self.raw_body)


@dataclass
class RelevanceDecision:
    """Decision result from a relevance filter."""

    allowed: bool
    retailer: Optional[str] = None
    reason: str = ""


@dataclass
class RunSummary:
    """Counters reported at the end of a run."""

    queries: int = 0
    pages_fetched: int = 0
    product_pages_fetched: int = 0
    candidates_seen: int = 0
    candidates_kept: int = 0
    items_written: int = 0
    output_written: bool = False
    retailer_counts: dict[str, int] = field(default_factory=dict)
