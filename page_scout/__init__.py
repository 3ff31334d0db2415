# page_scout/__init__.py
"""
PageScout package initializer.
Defines package version and exposes the discovery pipeline API.
"""
__version__ = "0.1.0"

from page_scout.config import DiscoveryConfig, LLMConfig, load_config
from page_scout.crawler.crawler import LinkCrawler, crawl_links
from page_scout.crawler.fetcher import Fetcher
from page_scout.crawler.models import ChannelContext, DiscoveredPage, PageInfo, ScoredPage, ScrapedPage
from page_scout.crawler.rate_limit import Pacer
from page_scout.engine import Engine, discover_pages
from page_scout.filters import filter_content_pages, sort_by_content_likelihood
from page_scout.parser.content_extractor import ExtractedContent, extract_content
from page_scout.relevance import RELEVANCE_THRESHOLD, RelevanceScorer, score_page_relevance
from page_scout.scraper import scrape_page
from page_scout.sitemap import SitemapResolver, resolve_sitemap
from page_scout.utils import hash_content

__all__ = [
    "__version__",
    "ChannelContext",
    "DiscoveredPage",
    "DiscoveryConfig",
    "Engine",
    "ExtractedContent",
    "Fetcher",
    "LLMConfig",
    "LinkCrawler",
    "Pacer",
    "PageInfo",
    "RELEVANCE_THRESHOLD",
    "RelevanceScorer",
    "ScoredPage",
    "ScrapedPage",
    "SitemapResolver",
    "crawl_links",
    "discover_pages",
    "extract_content",
    "filter_content_pages",
    "hash_content",
    "load_config",
    "resolve_sitemap",
    "score_page_relevance",
    "scrape_page",
    "sort_by_content_likelihood",
]
