"""
Shared types for scraped news sources
A site profile bundles the markup heuristics for one publisher
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass
class ArticleDraft:
    """Extracted article that has not been persisted yet"""
    url: str
    title: str
    content: str
    published_at: Optional[datetime] = None


@dataclass(frozen=True)
class SiteProfile:
    """Selectors and URL rules for one news site"""
    name: str
    base_url: str
    host: str
    listing_selector: str
    offline_listing_selector: str
    title_selector: str
    content_selectors: Tuple[str, ...]
    date_selector: str
    content_url_marker: str
    excluded_segments: Tuple[str, ...] = ("video",)
    max_url_length: int = 200
    min_paragraph_length: int = 30
    title_classes: List[str] = field(default_factory=lambda: ["title"])
