"""
News Cron Service
Background pipeline for news articles:
1. Discover article links on every configured listing page
2. Extract and store articles that are not in the database yet
3. Summarize unprocessed articles (only when step 2 found something new)

Every remote call is retried with linear backoff before its unit of work is dropped.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from .article_summarizer import ArticleSummarizerService
from .content_scraper import ContentScraperService
from ...config import Settings
from ...exceptions import ConfigurationError, DatabaseError, NetworkError, RetryExhaustedError
from ...repositories.article_repository import ArticleRepository
from ...services.llm_service import LLMService
from ...utils.retry_utils import RetryPolicy, run_with_retry

scrape_logger = logging.getLogger("news.scrape")
processing_logger = logging.getLogger("news.processing")


class NewsCronService:
    """Runs scrape and summarize cycles against an injected scraper, LLM and session factory"""

    def __init__(
        self,
        scraper: ContentScraperService,
        llm_service: LLMService,
        settings: Settings,
        session_factory: Callable[[], Session],
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.scraper = scraper
        self.llm_service = llm_service
        self.settings = settings
        self.session_factory = session_factory
        self.sleep = sleep
        self.scrape_policy = RetryPolicy(settings.scrape_max_retries, settings.scrape_retry_base_delay)
        self.enrichment_policy = RetryPolicy(settings.enrichment_max_retries, settings.enrichment_retry_base_delay)
        self.last_cycle: Optional[Dict[str, Any]] = None

    def run_cycle(self) -> Dict[str, Any]:
        """
        Run one full cycle. Called by the scheduler, never raises.

        Returns:
            Dict with cycle statistics
        """
        cycle_start = datetime.now()
        scrape_logger.info(f"🚀 Starting news cycle at {cycle_start}")

        stats = {
            "cycle_start": cycle_start.isoformat(),
            "ingestion": {},
            "enrichment": {},
            "total_processing_time": 0,
            "success": True,
            "errors": []
        }

        session = self.session_factory()
        try:
            repository = ArticleRepository(session)

            try:
                ingestion = self.run_ingestion(repository)
                stats["ingestion"] = ingestion
            except Exception as e:
                scrape_logger.error(f"❌ Ingestion failed: {e}")
                stats["success"] = False
                stats["errors"].append(f"ingestion: {e}")
                return stats

            if self._should_enrich(repository, ingestion["new_articles"]):
                try:
                    processed = self.run_enrichment(repository)
                    stats["enrichment"] = {"processed": processed}
                except ConfigurationError as e:
                    processing_logger.error(f"❌ Summarization disabled: {e}")
                    stats["success"] = False
                    stats["errors"].append(f"enrichment: {e}")
                except Exception as e:
                    processing_logger.error(f"❌ Summarization failed: {e}")
                    stats["success"] = False
                    stats["errors"].append(f"enrichment: {e}")
            else:
                processing_logger.info("No new articles, skipping summarization")
                stats["enrichment"] = {"skipped": True}

        finally:
            session.close()
            stats["total_processing_time"] = (datetime.now() - cycle_start).total_seconds()
            self.last_cycle = stats

        scrape_logger.info(f"✅ Cycle finished in {stats['total_processing_time']:.2f} seconds")
        return stats

    def run_ingestion(self, repository: ArticleRepository, source_urls: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Scrape listing pages and store new articles.

        Args:
            repository: Article store for this run
            source_urls: Listing pages to scan instead of the configured ones
        """
        sources = source_urls or self.settings.scrape_sources
        stats = {
            "sources": len(sources),
            "failed_sources": [],
            "links_found": 0,
            "new_articles": 0,
            "already_stored": 0,
            "duplicates": 0,
            "no_content": 0,
            "fetch_failures": 0,
        }

        for source_url in sources:
            scrape_logger.info(f"📰 Scanning {source_url}")
            try:
                html = run_with_retry(
                    lambda: self.scraper.fetch_listing(source_url),
                    self.scrape_policy,
                    retry_on=(NetworkError,),
                    description=f"Fetching listing {source_url}",
                    sleep=self.sleep,
                    log=scrape_logger,
                )
            except RetryExhaustedError:
                stats["failed_sources"].append(source_url)
                continue

            links = self.scraper.parse_links(html)
            stats["links_found"] += len(links)
            self._store_new_articles(repository, links, stats)

        scrape_logger.info(
            f"📰 Ingestion done: {stats['new_articles']} new, {stats['already_stored']} known, "
            f"{stats['no_content']} without content, {len(stats['failed_sources'])} sources failed"
        )
        return stats

    def _store_new_articles(self, repository: ArticleRepository, links: List[str], stats: Dict[str, Any]) -> None:
        for url in links:
            if repository.exists(url):
                stats["already_stored"] += 1
                continue

            try:
                draft = run_with_retry(
                    lambda: self.scraper.extract_content(url),
                    self.scrape_policy,
                    retry_on=(NetworkError,),
                    description=f"Fetching article {url}",
                    sleep=self.sleep,
                    log=scrape_logger,
                )
            except RetryExhaustedError:
                stats["fetch_failures"] += 1
                continue

            if draft is None:
                stats["no_content"] += 1
                continue

            article = repository.create(draft)
            if article is None:
                stats["duplicates"] += 1
            else:
                stats["new_articles"] += 1
                scrape_logger.info(f"Stored article {article.id}: {article.title[:60]}")

    def run_enrichment(self, repository: ArticleRepository) -> int:
        """
        Summarize everything that is still unprocessed.

        Returns:
            Number of articles summarized
        """
        summarizer = ArticleSummarizerService(self.llm_service, repository)
        return run_with_retry(
            summarizer.process_unprocessed,
            self.enrichment_policy,
            retry_on=(DatabaseError,),
            description="Summarizing unprocessed articles",
            sleep=self.sleep,
            log=processing_logger,
        )

    def _should_enrich(self, repository: ArticleRepository, new_articles: int) -> bool:
        if new_articles > 0:
            return True
        return self.settings.retry_failed_when_idle and repository.count_failed() > 0

    def get_pipeline_health(self, repository: ArticleRepository) -> Dict[str, Any]:
        """Store counts, recent failures and the outcome of the last cycle"""
        return {
            **repository.get_status(),
            "llm_configured": self.llm_service.is_configured,
            "sources": list(self.settings.scrape_sources),
            "last_cycle": self.last_cycle,
            "timestamp": datetime.now(),
        }
