"""
Search query generation.

Builds the list of search-engine queries for a brand:
- one combined query with every apparel keyword
- one query per target retailer domain (``site:`` restriction)
- one query per apparel keyword
"""

import logging
import re
from typing import List, Optional, Sequence

from gallery_collector.config import Settings

logger = logging.getLogger(__name__)


class SearchQueryBuilder:
    """Build search-engine query strings from brand and keyword configuration."""

    MAX_QUERY_LENGTH = 400

    def normalize_query(self, query: str) -> str:
        """Trim and collapse whitespace, capping the length."""
        if not query:
            return ""
        normalized = re.sub(r"\s+", " ", query.strip())
        if len(normalized) > self.MAX_QUERY_LENGTH:
            logger.warning(f"Query too long, truncating: {len(normalized)} chars")
            normalized = normalized[: self.MAX_QUERY_LENGTH].rstrip()
        return normalized

    @staticmethod
    def quote_brand(brand: str) -> str:
        brand = brand.strip().strip('"')
        return f'"{brand}"' if brand else ""

    def compose(
        self,
        brand: str,
        keywords: Sequence[str] = (),
        site: Optional[str] = None,
        audience: str = "",
    ) -> str:
        """Compose one query: quoted brand, audience term, keywords, optional site restriction."""
        parts = [self.quote_brand(brand), audience]
        parts.extend(keywords)
        if site:
            parts.append(f"site:{site}")
        return self.normalize_query(" ".join(p for p in parts if p))

    def build_queries(
        self,
        brand: str,
        keywords: Sequence[str],
        domains: Sequence[str] = (),
        audience: str = "",
        per_keyword: bool = True,
        per_site: bool = True,
        max_queries: Optional[int] = None,
    ) -> List[str]:
        """
        Build the ordered, duplicate-free query list.

        Args:
            brand: Brand name (quoted in every query)
            keywords: Apparel keyword phrases
            domains: Retailer domains for ``site:`` queries
            audience: Optional audience term added to every query (e.g. "kids")
            per_keyword: Add one query per keyword
            per_site: Add one query per domain
            max_queries: Cap on the number of queries

        Returns:
            List of query strings
        """
        queries = [self.compose(brand, keywords, audience=audience)]

        if per_site:
            queries.extend(self.compose(brand, site=domain, audience=audience) for domain in domains)

        if per_keyword:
            queries.extend(self.compose(brand, [kw], audience=audience) for kw in keywords)

        seen = set()
        unique = []
        for query in queries:
            if query and query not in seen:
                seen.add(query)
                unique.append(query)

        if max_queries is not None:
            unique = unique[:max_queries]
        return unique

    def from_settings(self, config: Settings) -> List[str]:
        """Queries for a run: explicit ``search_queries`` win over generated ones."""
        if config.search_queries:
            explicit = [self.normalize_query(q) for q in config.search_queries]
            return [q for q in explicit if q][: config.max_queries]

        return self.build_queries(
            brand=config.brand,
            keywords=config.apparel_keywords,
            domains=config.target_domains,
            audience=config.audience_term,
            per_keyword=config.per_keyword_queries,
            per_site=config.per_site_queries,
            max_queries=config.max_queries,
        )


query_builder = SearchQueryBuilder()
