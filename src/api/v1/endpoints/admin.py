from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from ...dependencies import get_article_repository, get_news_cron_service, get_news_scheduler
from ....config import get_settings
from ....news.schemas.responses import FailedArticleListResponse, FailedArticleResponse, PipelineStatusResponse
from ....news.services.news_cron_service import NewsCronService
from ....news.services.news_scheduler import NewsScheduler
from ....repositories.article_repository import ArticleRepository
from ....utils.logging_utils import read_pipeline_logs

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/status", response_model=PipelineStatusResponse)
async def get_pipeline_status(
    repository: ArticleRepository = Depends(get_article_repository),
    cron_service: NewsCronService = Depends(get_news_cron_service),
    scheduler: Optional[NewsScheduler] = Depends(get_news_scheduler)
):
    """Article counts, recent failures, scheduler state and log tails"""
    settings = get_settings()
    health = cron_service.get_pipeline_health(repository)
    health["recent_failures"] = [FailedArticleResponse.model_validate(a) for a in health["recent_failures"]]

    logs = {}
    if settings.log_to_file:
        logs = read_pipeline_logs(settings.log_dir, settings.log_tail_lines)

    return PipelineStatusResponse(
        **health,
        scheduler=scheduler.get_status() if scheduler else {"running": False},
        logs=logs,
    )


@router.get("/failed-articles", response_model=FailedArticleListResponse)
async def get_failed_articles(
    limit: int = Query(20, ge=1, le=100, description="Number of articles (max 100)"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    repository: ArticleRepository = Depends(get_article_repository)
):
    return FailedArticleListResponse(
        articles=[FailedArticleResponse.model_validate(a) for a in repository.list_failed(limit=limit, offset=offset)],
        total=repository.count_failed(),
        limit=limit,
        offset=offset,
    )
