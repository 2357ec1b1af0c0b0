import pytest
from unittest.mock import MagicMock

import requests

from src.exceptions import ConfigurationError, DatabaseError, RetryExhaustedError
from src.news.models import Article, EnrichmentResult
from src.repositories.article_repository import ArticleRepository
from tests.conftest import (
    ARTICLE_1_URL,
    ARTICLE_2_URL,
    ARTICLE_3_URL,
    LISTING_HTML,
    SOURCE_URL,
    make_http_session,
)


def fetched_urls(session):
    return [c.args[0] for c in session.get.call_args_list]


class TestIngestion:
    @pytest.fixture(autouse=True)
    def setup_service(self, cron_service, article_repository, mock_http_session, sleeps):
        self.service = cron_service
        self.repository = article_repository
        self.session = mock_http_session
        self.sleeps = sleeps

    def test_end_to_end_scenario(self, test_db, mock_llm_service):
        stats = self.service.run_ingestion(self.repository)

        assert stats["links_found"] == 3
        assert stats["new_articles"] == 2
        assert stats["no_content"] == 1
        assert {a.url for a in test_db.query(Article).all()} == {ARTICLE_1_URL, ARTICLE_3_URL}

        processed = self.service.run_enrichment(self.repository)

        assert processed == 2
        articles = test_db.query(Article).all()
        assert all(a.is_processed for a in articles)
        assert all(a.processing_attempts == 1 for a in articles)
        assert test_db.query(EnrichmentResult).count() == 2
        assert mock_llm_service.complete.call_count == 2

    def test_second_run_skips_known_urls(self, test_db):
        self.service.run_ingestion(self.repository)
        self.session.get.reset_mock()

        stats = self.service.run_ingestion(self.repository)

        assert stats["new_articles"] == 0
        assert stats["already_stored"] == 2
        assert test_db.query(Article).count() == 2
        # Only the page without content is fetched again
        assert fetched_urls(self.session) == [SOURCE_URL, ARTICLE_2_URL]

    def test_source_override(self):
        other_source = "https://cafef.vn/doanh-nghiep.chn"
        self.session.get.side_effect = make_http_session({other_source: "<html></html>"}).get.side_effect

        stats = self.service.run_ingestion(self.repository, source_urls=[other_source])

        assert stats["sources"] == 1
        assert fetched_urls(self.session) == [other_source]

    def test_unreachable_source_is_tried_max_times(self):
        dead_source = "https://cafef.vn/nguon-loi.chn"

        stats = self.service.run_ingestion(self.repository, source_urls=[dead_source, SOURCE_URL])

        assert fetched_urls(self.session).count(dead_source) == 3
        assert self.sleeps[:2] == [1.0, 2.0]
        assert stats["failed_sources"] == [dead_source]
        assert stats["new_articles"] == 2

    def test_flaky_article_fetch_is_retried(self, sample_pages):
        attempts = {"n": 0}
        original = self.session.get.side_effect

        def flaky(url, **kwargs):
            if url == ARTICLE_1_URL and attempts["n"] < 1:
                attempts["n"] += 1
                raise requests.Timeout("read timed out")
            return original(url, **kwargs)

        self.session.get.side_effect = flaky

        stats = self.service.run_ingestion(self.repository)

        assert stats["new_articles"] == 2
        assert stats["fetch_failures"] == 0
        assert self.sleeps == [1.0]

    def test_concurrent_insert_counts_as_duplicate(self):
        self.repository.exists = MagicMock(return_value=False)
        self.service.run_ingestion(self.repository)

        stats = self.service.run_ingestion(self.repository)

        assert stats["new_articles"] == 0
        assert stats["duplicates"] == 2


class TestEnrichmentPhase:
    @pytest.fixture(autouse=True)
    def setup_service(self, cron_service, mock_llm_service, sleeps):
        self.service = cron_service
        self.llm = mock_llm_service
        self.sleeps = sleeps

    def test_batch_retried_on_database_error(self):
        repository = MagicMock()
        repository.list_unprocessed.side_effect = [DatabaseError("database is locked"), []]

        assert self.service.run_enrichment(repository) == 0
        assert self.sleeps == [2.0]

    def test_batch_abandoned_after_max_attempts(self):
        repository = MagicMock()
        repository.list_unprocessed.side_effect = DatabaseError("database is locked")

        with pytest.raises(RetryExhaustedError):
            self.service.run_enrichment(repository)

        assert repository.list_unprocessed.call_count == 3
        assert self.sleeps == [2.0, 4.0]

    def test_missing_credential_is_not_retried(self):
        self.llm.is_configured = False
        repository = MagicMock()

        with pytest.raises(ConfigurationError):
            self.service.run_enrichment(repository)

        assert self.sleeps == []
        repository.list_unprocessed.assert_not_called()


class TestCycle:
    @pytest.fixture(autouse=True)
    def setup_service(self, cron_service, mock_llm_service, article_repository):
        self.service = cron_service
        self.llm = mock_llm_service
        self.repository = article_repository

    def test_cycle_ingests_then_enriches(self, test_db):
        stats = self.service.run_cycle()

        assert stats["success"] is True
        assert stats["ingestion"]["new_articles"] == 2
        assert stats["enrichment"] == {"processed": 2}
        assert self.service.last_cycle is stats
        assert ArticleRepository(test_db).count(processed=True) == 2

    def test_cycle_without_new_articles_skips_enrichment(self, make_article):
        self.service.run_cycle()
        failed = make_article(content="TIN MỚI")
        self.repository.record_attempt(failed)
        self.repository.record_failure(failed, "Article content is empty")
        self.llm.complete.reset_mock()

        stats = self.service.run_cycle()

        assert stats["ingestion"]["new_articles"] == 0
        assert stats["enrichment"] == {"skipped": True}
        self.llm.complete.assert_not_called()
        assert failed.processing_attempts == 1

    def test_idle_cycle_retries_failed_when_enabled(self, make_article):
        self.service.settings.retry_failed_when_idle = True
        self.service.run_cycle()
        failed = make_article(content="Nội dung đã được sửa lại để tóm tắt.")
        self.repository.record_attempt(failed)
        self.repository.record_failure(failed, "Connection error.")

        stats = self.service.run_cycle()

        assert stats["enrichment"] == {"processed": 1}
        assert failed.is_processed is True
        assert failed.processing_attempts == 2

    def test_missing_credential_keeps_ingested_articles(self, test_db):
        self.llm.is_configured = False

        stats = self.service.run_cycle()

        assert stats["success"] is False
        assert stats["ingestion"]["new_articles"] == 2
        assert any(e.startswith("enrichment:") for e in stats["errors"])
        assert test_db.query(Article).count() == 2

    def test_dead_source_does_not_abort_the_cycle(self, sleeps):
        dead_source = "https://cafef.vn/nguon-loi.chn"
        self.service.settings.scrape_sources = [dead_source, SOURCE_URL]

        stats = self.service.run_cycle()

        assert stats["success"] is True
        assert stats["errors"] == []
        assert stats["ingestion"]["failed_sources"] == [dead_source]
        assert stats["ingestion"]["new_articles"] == 2
        assert sleeps == [1.0, 2.0]

    def test_cycle_never_raises(self):
        self.service.scraper = MagicMock()
        self.service.scraper.fetch_listing.return_value = LISTING_HTML
        self.service.scraper.parse_links.side_effect = RuntimeError("parser exploded")

        stats = self.service.run_cycle()

        assert stats["success"] is False
        assert stats["errors"] == ["ingestion: parser exploded"]
        self.llm.complete.assert_not_called()

    def test_pipeline_health(self):
        self.service.run_cycle()

        health = self.service.get_pipeline_health(self.repository)

        assert health["total_articles"] == 2
        assert health["processed_articles"] == 2
        assert health["llm_configured"] is True
        assert health["sources"] == [SOURCE_URL]
        assert health["last_cycle"]["success"] is True
        assert health["recent_failures"] == []
