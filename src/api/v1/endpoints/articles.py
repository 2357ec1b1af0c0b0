from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_article_repository, get_manual_cron_service, get_news_cron_service
from ....exceptions import ArticleNotFoundError, ConfigurationError
from ....news.schemas.requests import ArticleIdsRequest, ScrapeRequest
from ....news.schemas.responses import (
    ArticleDetailResponse,
    ArticleListResponse,
    ArticleResponse,
    BatchReprocessResponse,
    DeleteResponse,
    ProcessResponse,
    ReprocessResponse,
    ScrapeResponse,
)
from ....news.services.article_summarizer import ArticleSummarizerService
from ....news.services.news_cron_service import NewsCronService
from ....repositories.article_repository import ArticleRepository

logger = structlog.get_logger(__name__)

router = APIRouter()

LLM_UNAVAILABLE = "Summarization service is not configured"


def _list_response(repository: ArticleRepository, limit: int, offset: int, processed: Optional[bool], order_by: str):
    articles = repository.list_articles(limit=limit, offset=offset, processed=processed, order_by=order_by)
    return ArticleListResponse(
        articles=[ArticleResponse.model_validate(a) for a in articles],
        total=repository.count(processed=processed),
        limit=limit,
        offset=offset,
    )


@router.get("/", response_model=ArticleListResponse)
async def list_articles(
    limit: int = Query(20, ge=1, le=100, description="Number of articles (max 100)"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    processed: Optional[bool] = Query(None, description="Filter by summarization state"),
    repository: ArticleRepository = Depends(get_article_repository)
):
    """Articles, newest publication first"""
    return _list_response(repository, limit, offset, processed, "published")


@router.get("/collected", response_model=ArticleListResponse)
async def list_collected_articles(
    limit: int = Query(20, ge=1, le=100, description="Number of articles (max 100)"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    repository: ArticleRepository = Depends(get_article_repository)
):
    """Articles in the order they were scraped"""
    return _list_response(repository, limit, offset, None, "scraped")


@router.get("/processed", response_model=ArticleListResponse)
async def list_processed_articles(
    limit: int = Query(20, ge=1, le=100, description="Number of articles (max 100)"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    repository: ArticleRepository = Depends(get_article_repository)
):
    return _list_response(repository, limit, offset, True, "published")


# Scrape and summarize run on the request thread and block until done
@router.post("/scrape", response_model=ScrapeResponse)
def trigger_scrape(
    request: Optional[ScrapeRequest] = None,
    repository: ArticleRepository = Depends(get_article_repository),
    cron_service: NewsCronService = Depends(get_manual_cron_service)
):
    source_urls = [request.url] if request and request.url else None
    try:
        stats = cron_service.run_ingestion(repository, source_urls=source_urls)
    except Exception as e:
        logger.error("Manual scrape failed", error=str(e))
        raise HTTPException(status_code=500, detail="Scraping failed")

    new_articles = stats["new_articles"]
    return ScrapeResponse(
        success=True,
        new_articles=new_articles,
        message=f"Found {new_articles} new articles",
    )


@router.post("/process", response_model=ProcessResponse)
def trigger_process(
    repository: ArticleRepository = Depends(get_article_repository),
    cron_service: NewsCronService = Depends(get_news_cron_service)
):
    try:
        processed = cron_service.run_enrichment(repository)
    except ConfigurationError as e:
        logger.error("Manual processing unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=LLM_UNAVAILABLE)
    except Exception as e:
        logger.error("Manual processing failed", error=str(e))
        raise HTTPException(status_code=500, detail="Processing failed")

    return ProcessResponse(
        success=True,
        processed=processed,
        message=f"Processed {processed} articles",
    )


@router.post("/reprocess-batch", response_model=BatchReprocessResponse)
def reprocess_articles(
    request: ArticleIdsRequest,
    repository: ArticleRepository = Depends(get_article_repository),
    cron_service: NewsCronService = Depends(get_news_cron_service)
):
    summarizer = ArticleSummarizerService(cron_service.llm_service, repository)
    try:
        outcome = summarizer.reprocess_many(request.ids)
    except ConfigurationError as e:
        logger.error("Batch reprocess unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=LLM_UNAVAILABLE)
    except Exception as e:
        logger.error("Batch reprocess failed", error=str(e))
        raise HTTPException(status_code=500, detail="Reprocessing failed")

    return BatchReprocessResponse(
        total=outcome["total"],
        succeeded=outcome["succeeded"],
        failed=outcome["failed"],
    )


@router.post("/delete-batch", response_model=DeleteResponse)
async def delete_articles(
    request: ArticleIdsRequest,
    repository: ArticleRepository = Depends(get_article_repository)
):
    try:
        deleted = repository.delete_many(request.ids)
    except Exception as e:
        logger.error("Batch delete failed", error=str(e))
        raise HTTPException(status_code=500, detail="Delete failed")
    logger.info("Articles deleted", requested=len(request.ids), deleted=deleted)
    return DeleteResponse(success=True, deleted=deleted)


@router.get("/{article_id}", response_model=ArticleDetailResponse)
async def get_article(
    article_id: int,
    repository: ArticleRepository = Depends(get_article_repository)
):
    article = repository.get(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.post("/{article_id}/reprocess", response_model=ReprocessResponse)
def reprocess_article(
    article_id: int,
    repository: ArticleRepository = Depends(get_article_repository),
    cron_service: NewsCronService = Depends(get_news_cron_service)
):
    summarizer = ArticleSummarizerService(cron_service.llm_service, repository)
    try:
        result = summarizer.reprocess(article_id)
    except ArticleNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    except ConfigurationError as e:
        logger.error("Reprocess unavailable", article_id=article_id, error=str(e))
        raise HTTPException(status_code=503, detail=LLM_UNAVAILABLE)
    except Exception as e:
        logger.error("Reprocess failed", article_id=article_id, error=str(e))
        raise HTTPException(status_code=500, detail="Reprocessing failed")

    message = "Article reprocessed" if result.success else "Reprocessing failed, see failed articles"
    return ReprocessResponse(success=result.success, article_id=article_id, message=message)


@router.delete("/{article_id}", response_model=DeleteResponse)
async def delete_article(
    article_id: int,
    repository: ArticleRepository = Depends(get_article_repository)
):
    if not repository.delete(article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    logger.info("Article deleted", article_id=article_id)
    return DeleteResponse(success=True, deleted=1)
