from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..exceptions import DatabaseError
from ..news.models import Article, EnrichmentResult
from ..news.services.sources import ArticleDraft


class ArticleRepository:
    """
    Persistence and lifecycle queries for scraped articles.

    Every mutation commits on its own so a failure halfway through a batch
    never rolls back articles that were already handled.
    """

    def __init__(self, session: Session):
        self.session = session

    def exists(self, url: str) -> bool:
        return self.session.query(Article.id).filter(Article.url == url).first() is not None

    def get(self, article_id: int) -> Optional[Article]:
        return self.session.query(Article).filter(Article.id == article_id).first()

    def get_by_url(self, url: str) -> Optional[Article]:
        return self.session.query(Article).filter(Article.url == url).first()

    def create(self, draft: ArticleDraft) -> Optional[Article]:
        """
        Persist a new article.

        Returns None when another writer already stored the same URL.
        """
        article = Article(
            url=draft.url,
            title=draft.title,
            content=draft.content,
            published_at=draft.published_at,
            scraped_at=datetime.now(),
            is_processed=False,
            processing_attempts=0,
            last_processing_error=None,
            last_processing_attempt=None,
        )
        self.session.add(article)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            if self.get_by_url(draft.url) is not None:
                return None
            raise DatabaseError(f"Could not insert article {draft.url}")
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Could not insert article {draft.url}: {e}") from e
        self.session.refresh(article)
        return article

    def list_unprocessed(self) -> List[Article]:
        return (
            self.session.query(Article)
            .filter(Article.is_processed.is_(False))
            .order_by(asc(Article.processing_attempts), asc(Article.id))
            .all()
        )

    def list_failed(self, limit: Optional[int] = None, offset: int = 0) -> List[Article]:
        query = (
            self.session.query(Article)
            .filter(Article.is_processed.is_(False), Article.processing_attempts > 0)
            .order_by(desc(Article.last_processing_attempt), desc(Article.id))
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_failed(self) -> int:
        return (
            self.session.query(Article)
            .filter(Article.is_processed.is_(False), Article.processing_attempts > 0)
            .count()
        )

    def list_articles(
        self,
        limit: int = 20,
        offset: int = 0,
        processed: Optional[bool] = None,
        order_by: str = "published",
    ) -> List[Article]:
        query = self.session.query(Article).options(joinedload(Article.enrichment_result))
        if processed is not None:
            query = query.filter(Article.is_processed.is_(processed))

        if order_by == "scraped":
            query = query.order_by(desc(Article.scraped_at), desc(Article.id))
        else:
            query = query.order_by(desc(Article.published_at), desc(Article.scraped_at), desc(Article.id))

        return query.offset(offset).limit(limit).all()

    def count(self, processed: Optional[bool] = None) -> int:
        query = self.session.query(Article)
        if processed is not None:
            query = query.filter(Article.is_processed.is_(processed))
        return query.count()

    def record_attempt(self, article: Article) -> Article:
        article.processing_attempts = (article.processing_attempts or 0) + 1
        article.last_processing_attempt = datetime.now()
        return self._commit(article)

    def record_success(self, article: Article, summary_text: str, prompt_used: str) -> EnrichmentResult:
        now = datetime.now()
        result = article.enrichment_result
        if result is None:
            result = EnrichmentResult(article=article, summary_text=summary_text, prompt_used=prompt_used, processed_at=now)
            self.session.add(result)
        else:
            result.summary_text = summary_text
            result.prompt_used = prompt_used
            result.processed_at = now

        article.is_processed = True
        article.last_processing_error = None
        self._commit(article)
        self.session.refresh(result)
        return result

    def record_failure(self, article: Article, error: str) -> Article:
        # A processed article keeps its summary, so it must not carry an error
        if not article.is_processed:
            article.last_processing_error = error
        return self._commit(article)

    def delete(self, article_id: int) -> bool:
        article = self.get(article_id)
        if not article:
            return False
        self.session.delete(article)
        self._commit()
        return True

    def delete_many(self, article_ids: Iterable[int]) -> int:
        articles = self.session.query(Article).filter(Article.id.in_(list(article_ids))).all()
        for article in articles:
            self.session.delete(article)
        self._commit()
        return len(articles)

    def get_status(self, recent_failed_limit: int = 10) -> Dict[str, Any]:
        total = self.count()
        processed = self.count(processed=True)
        since = datetime.now() - timedelta(hours=24)

        recent_failures = (
            self.session.query(Article)
            .filter(
                Article.is_processed.is_(False),
                Article.processing_attempts > 0,
                Article.last_processing_error.isnot(None),
            )
            .order_by(desc(Article.last_processing_attempt), desc(Article.id))
            .limit(recent_failed_limit)
            .all()
        )

        return {
            "total_articles": total,
            "processed_articles": processed,
            "unprocessed_articles": total - processed,
            "failed_articles": self.count_failed(),
            "results_last_24h": (
                self.session.query(EnrichmentResult)
                .filter(EnrichmentResult.processed_at >= since)
                .count()
            ),
            "recent_failures": recent_failures,
        }

    def _commit(self, article: Optional[Article] = None) -> Optional[Article]:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(str(e)) from e
        if article is not None:
            self.session.refresh(article)
        return article
