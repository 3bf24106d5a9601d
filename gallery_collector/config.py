"""Collector configuration using Pydantic settings."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetailerRule(BaseModel):
    """Maps a normalized retailer key to the domain substrings that identify it."""

    model_config = ConfigDict(frozen=True)

    key: str
    domain_matchers: tuple[str, ...]

    @property
    def primary_domain(self) -> str:
        return self.domain_matchers[0]


def default_retailers() -> list[RetailerRule]:
    return [
        RetailerRule(key="next", domain_matchers=("next.co.uk",)),
        RetailerRule(key="hm", domain_matchers=("hm.com", "www2.hm.com")),
        RetailerRule(key="zara", domain_matchers=("zara.com",)),
        RetailerRule(key="asos", domain_matchers=("asos.com",)),
        RetailerRule(key="zalando", domain_matchers=("zalando.co.uk", "zalando.com")),
        RetailerRule(
            key="pinterest",
            domain_matchers=("pinterest.com", "pinterest.co.uk", "pinterest.fr"),
        ),
    ]


class Settings(BaseSettings):
    """Collector settings."""

    # Brand / queries
    brand: str = "Hot Wheels"
    brand_variants: list[str] = Field(default_factory=list)  # Extra spellings for the brand gate
    audience_term: str = "kids"
    apparel_keywords: list[str] = Field(
        default_factory=lambda: [
            "t-shirt",
            "tee",
            "hoodie",
            "sweatshirt",
            "joggers",
            "pyjamas",
            "pajamas",
            "shorts",
            "jacket",
            "top",
        ]
    )
    search_queries: list[str] = Field(default_factory=list)  # Overrides generated queries
    per_keyword_queries: bool = True
    per_site_queries: bool = True
    max_queries: int = 20

    # Retailers
    retailers: list[RetailerRule] = Field(default_factory=default_retailers)
    unknown_domain_policy: Literal["drop", "other"] = "drop"
    other_retailer_key: str = "other"

    # Search backend / relevance strategy
    search_backend: Literal["bing_images", "bing_rss", "duckduckgo"] = "bing_images"
    relevance_mode: Literal["domain", "brand", "strict"] = "brand"
    fetch_product_pages: bool = False  # Always on for duckduckgo
    page_text_max_chars: int = 20000

    # HTTP
    max_pages_per_query: int = 12
    request_delay_seconds: float = 0.25  # Fixed delay between requests
    request_timeout_seconds: float = 20.0
    max_attempts: int = 2
    retry_backoff_seconds: float = 1.0
    max_retry_after_seconds: float = 30.0
    accept_language: str = "en-GB,en;q=0.9"

    # Collection limits / dedupe
    max_items: int = 200
    max_candidates: int = 2000
    max_per_retailer: Optional[int] = None
    sort_by_image_score: bool = False
    strip_image_query: bool = True

    # Output
    output_path: str = "data/hot-wheels.json"
    min_items_to_overwrite: int = 1  # Keep previous file when fewer items were found
    min_ratio_of_previous: float = 0.0  # 0 disables the ratio check

    # Debug / logging
    debug_dir: str = "debug"
    debug_snapshots: bool = True
    snapshot_max_chars: int = 250000
    processed_log_limit: int = 2000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GALLERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def retailer_keys(self) -> set[str]:
        """Retailer keys that may appear in the output."""
        keys = {rule.key for rule in self.retailers}
        if self.unknown_domain_policy == "other":
            keys.add(self.other_retailer_key)
        return keys

    @property
    def target_domains(self) -> list[str]:
        return [rule.primary_domain for rule in self.retailers]

    @property
    def needs_page_fetch(self) -> bool:
        return self.fetch_product_pages or self.search_backend == "duckduckgo"


settings = Settings()
