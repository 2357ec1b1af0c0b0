"""News API request schemas"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ScrapeRequest(BaseModel):
    """Manual scrape trigger, optionally for a single listing page"""
    url: Optional[str] = Field(
        default=None,
        description="Listing page to scan instead of the configured sources"
    )


class ArticleIdsRequest(BaseModel):
    """Batch reprocess/delete request"""
    ids: List[int] = Field(..., min_length=1, description="Article IDs")
