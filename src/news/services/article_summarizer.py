"""
Article Summarizer Service
Generates short summaries for scraped articles and records the outcome
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .content_cleaner import ContentCleaner
from ..models import Article
from ...exceptions import (
    ArticleNotFoundError,
    ConfigurationError,
    EmptyContentError,
    EmptyResponseError,
    EnrichmentError,
)
from ...repositories.article_repository import ArticleRepository
from ...services.llm_service import LLMService

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "Summarize the news article below in the same language as the article. "
    "The summary must be between 250 and 300 characters long, counting spaces. "
    "Write only the key facts of the story. "
    "Do not add an introduction or a concluding sentence, "
    "and never begin with phrases such as \"This article\" or \"The article\"."
)


class SummaryResult:
    def __init__(
        self,
        article_id: int,
        summary: Optional[str] = None,
        error: Optional[str] = None,
        error_type: Optional[str] = None
    ):
        self.article_id = article_id
        self.summary = summary
        self.error = error
        self.error_type = error_type
        self.success = error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "article_id": self.article_id,
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type,
        }

    def __repr__(self):
        status = "Success" if self.success else f"{self.error_type}: {self.error}"
        return f"SummaryResult(article_id={self.article_id}, {status})"


def build_prompt(title: str, body: str) -> str:
    return f"{SUMMARY_INSTRUCTION}\n\nTitle: {title}\n\nArticle content: {body}"


class ArticleSummarizerService:
    """Summarizes articles one at a time; the repository is the work queue"""

    def __init__(self, llm_service: LLMService, repository: ArticleRepository):
        self.llm_service = llm_service
        self.repository = repository

    def enrich(self, article: Article) -> SummaryResult:
        """
        Produce a summary without touching the article's lifecycle fields.

        Content and service failures come back as an unsuccessful result.
        ConfigurationError propagates because no other article can succeed either.
        """
        try:
            body = ContentCleaner.normalize_article_body(article.content)
            if not body:
                raise EmptyContentError("Article content is empty")

            summary = self.llm_service.complete(build_prompt(article.title, body)).strip()
            if not summary:
                raise EmptyResponseError("No response from summarization service")

        except EnrichmentError as e:
            return SummaryResult(article.id, error=str(e), error_type=type(e).__name__)

        if not 250 <= len(summary) <= 300:
            logger.debug(f"Summary for article {article.id} is {len(summary)} characters")
        return SummaryResult(article.id, summary=summary)

    def process_article(self, article: Article) -> SummaryResult:
        # Counted before the remote call so attempts reflect calls that blew up
        self.repository.record_attempt(article)

        try:
            result = self.enrich(article)
        except ConfigurationError as e:
            # Phase-level failure, not recorded as the article's error
            logger.error(f"❌ Summarization unavailable while processing article {article.id}: {e}")
            raise

        if result.success:
            self.repository.record_success(article, result.summary, SUMMARY_INSTRUCTION)
            logger.info(f"✅ Summarized article {article.id}: {article.title[:60]}")
        else:
            self.repository.record_failure(article, result.error)
            logger.warning(f"❌ Article {article.id} failed ({result.error_type}): {result.error}")
        return result

    def _require_configured(self) -> None:
        if not self.llm_service.is_configured:
            raise ConfigurationError("OpenAI API key is not configured")

    def process_unprocessed(self) -> int:
        """
        Summarize every unprocessed article, fewest attempts first.

        Returns:
            Number of articles summarized successfully
        """
        self._require_configured()

        articles = self.repository.list_unprocessed()
        logger.info(f"📝 Summarizing {len(articles)} unprocessed articles")

        processed = 0
        for article in articles:
            if self.process_article(article).success:
                processed += 1

        logger.info(f"📝 Summarized {processed}/{len(articles)} articles")
        return processed

    def reprocess(self, article_id: int) -> SummaryResult:
        article = self.repository.get(article_id)
        if not article:
            raise ArticleNotFoundError(f"Article {article_id} not found")
        self._require_configured()
        return self.process_article(article)

    def reprocess_many(self, article_ids: Iterable[int]) -> Dict[str, Any]:
        results = []
        for article_id in article_ids:
            try:
                results.append(self.reprocess(article_id).to_dict())
            except ArticleNotFoundError as e:
                results.append(SummaryResult(article_id, error=str(e), error_type=type(e).__name__).to_dict())

        succeeded = sum(1 for r in results if r["success"])
        return {
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "results": results,
        }
