from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.database import get_db, SessionLocal
from ..repositories.article_repository import ArticleRepository
from ..news.services.content_scraper import ContentScraperService
from ..news.services.news_cron_service import NewsCronService
from ..news.services.news_scheduler import NewsScheduler
from ..services.llm_service import LLMService
from ..config import Settings, get_settings


def get_article_repository(db: Session = Depends(get_db)) -> ArticleRepository:
    return ArticleRepository(db)


def get_llm_service() -> LLMService:
    settings = get_settings()
    return LLMService(
        openai_api_key=settings.openai_api_key,
        openai_model_name=settings.openai_model_name,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
        timeout=settings.openai_timeout_seconds,
    )


def create_news_cron_service(settings: Settings) -> NewsCronService:
    scraper = ContentScraperService(
        timeout=settings.request_timeout_seconds,
        max_redirects=settings.max_redirects,
    )
    return NewsCronService(
        scraper=scraper,
        llm_service=get_llm_service(),
        settings=settings,
        session_factory=SessionLocal,
    )


def get_news_cron_service(request: Request) -> NewsCronService:
    service = getattr(request.app.state, "news_cron_service", None)
    if service is None:
        service = create_news_cron_service(get_settings())
        request.app.state.news_cron_service = service
    return service


def get_news_scheduler(request: Request) -> Optional[NewsScheduler]:
    return getattr(request.app.state, "news_scheduler", None)


def get_manual_cron_service(cron_service: NewsCronService = Depends(get_news_cron_service)) -> NewsCronService:
    """Manual scrapes run on request threads, so they get their own HTTP session"""
    return NewsCronService(
        scraper=cron_service.scraper.fork(),
        llm_service=cron_service.llm_service,
        settings=cron_service.settings,
        session_factory=cron_service.session_factory,
        sleep=cron_service.sleep,
    )
