"""News API response schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class EnrichmentResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    summary_text: str
    prompt_used: str
    processed_at: datetime


class ArticleResponse(BaseModel):
    """Article list item"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    published_at: Optional[datetime] = None
    scraped_at: datetime
    is_processed: bool
    processing_attempts: int
    last_processing_attempt: Optional[datetime] = None
    enrichment_result: Optional[EnrichmentResultResponse] = None


class ArticleDetailResponse(ArticleResponse):
    content: str
    last_processing_error: Optional[str] = None


class ArticleListResponse(BaseModel):
    articles: List[ArticleResponse]
    total: int
    limit: int
    offset: int


class FailedArticleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    processing_attempts: int
    last_processing_error: Optional[str] = None
    last_processing_attempt: Optional[datetime] = None


class FailedArticleListResponse(BaseModel):
    articles: List[FailedArticleResponse]
    total: int
    limit: int
    offset: int


class ScrapeResponse(BaseModel):
    success: bool
    new_articles: int
    message: str


class ProcessResponse(BaseModel):
    success: bool
    processed: int
    message: str


class ReprocessResponse(BaseModel):
    success: bool
    article_id: int
    message: str


class BatchReprocessResponse(BaseModel):
    total: int
    succeeded: int
    failed: int


class DeleteResponse(BaseModel):
    success: bool
    deleted: int


class PipelineStatusResponse(BaseModel):
    total_articles: int
    processed_articles: int
    unprocessed_articles: int
    failed_articles: int
    results_last_24h: int
    recent_failures: List[FailedArticleResponse]
    llm_configured: bool
    sources: List[str]
    scheduler: Dict[str, Any]
    last_cycle: Optional[Dict[str, Any]] = None
    logs: Dict[str, List[str]]
    timestamp: datetime
