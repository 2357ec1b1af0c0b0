import pytest
from unittest.mock import MagicMock

import requests

SOURCE_URL = "https://cafef.vn/thi-truong-chung-khoan.chn"
ARTICLE_1_URL = "https://cafef.vn/co-phieu-ngan-hang-tang-manh-188241019093000001.chn"
ARTICLE_2_URL = "https://cafef.vn/thi-truong-dau-tu-188241019093000002.chn"
ARTICLE_3_URL = "https://cafef.vn/gia-vang-hom-nay-188241019093000003.chn"

LISTING_HTML = """
<html><body>
<div class="list-news-main">
  <div class="tlitem"><h3><a href="/co-phieu-ngan-hang-tang-manh-188241019093000001.chn">Co phieu ngan hang</a></h3></div>
  <div class="tlitem"><h3><a href="https://cafef.vn/thi-truong-dau-tu-188241019093000002.chn">Thi truong</a></h3></div>
  <div class="tlitem"><h3><a href="gia-vang-hom-nay-188241019093000003.chn">Gia vang</a></h3></div>
  <div class="tlitem"><h3><a href="/co-phieu-ngan-hang-tang-manh-188241019093000001.chn">Co phieu ngan hang (lap lai)</a></h3></div>
  <div class="tlitem"><a href="/khong-phai-tieu-de-188241019093000004.chn">Not a headline</a></div>
  <div class="tlitem"><h3><a href="/video/clip-thi-truong-188241019093000005.chn">Video</a></h3></div>
  <div class="tlitem"><h3><a href="https://example.com/bai-viet-188241019093000006.chn">Other site</a></h3></div>
  <div class="tlitem"><h3><a href="/chuyen-muc/chung-khoan.html">Category</a></h3></div>
</div>
<div class="box-category-item">
  <a class="title" href="/co-phieu-ngan-hang-tang-manh-188241019093000001.chn">Featured duplicate</a>
</div>
</body></html>
"""

ARTICLE_HTML = """
<html><body>
<h1 class="title">Cổ phiếu ngân hàng tăng mạnh</h1>
<div class="date">19/10/2024 - 09:30</div>
<div class="detail-content">
  <p>Nhóm cổ phiếu ngân hàng dẫn dắt thị trường trong phiên sáng nay với thanh khoản cao.</p>
  <p>VN-Index tăng hơn 10 điểm.</p>
</div>
</body></html>
"""

SECOND_ARTICLE_HTML = """
<html><body>
<h1 class="kbwc-title">Giá vàng hôm nay</h1>
<span class="kbwc-time">18/10/2024 - 16:05</span>
<div class="knc-content">Giá vàng miếng tiếp tục lập đỉnh mới trong phiên giao dịch chiều nay.</div>
</body></html>
"""

PARAGRAPH_ONLY_HTML = """
<html><body>
<h1 class="title">Tin nhanh thị trường</h1>
<p>Ngắn.</p>
<p>Đoạn văn thứ nhất đủ dài để được giữ lại trong nội dung.</p>
<p>Đoạn văn thứ hai cũng đủ dài để được giữ lại trong nội dung.</p>
</body></html>
"""

NO_CONTENT_HTML = """
<html><body>
<h1 class="title">Trang không có nội dung</h1>
<p>Quá ngắn.</p>
<p>Cũng ngắn.</p>
</body></html>
"""

SUMMARY_280 = ("Nhóm ngân hàng dẫn dắt thị trường, VN-Index tăng hơn 10 điểm. " * 6)[:279] + "."


def make_response(html: str):
    response = MagicMock()
    response.content = html.encode("utf-8")
    response.raise_for_status = MagicMock()
    return response


def make_http_session(pages):
    """
    Fake requests session; pages maps URL -> HTML string or an exception to raise.
    Unknown URLs raise ConnectionError.
    """
    session = MagicMock()
    session.headers = {}

    def get(url, **kwargs):
        page = pages.get(url)
        if page is None:
            raise requests.ConnectionError(f"Unknown host for {url}")
        if isinstance(page, Exception):
            raise page
        return make_response(page)

    session.get = MagicMock(side_effect=get)
    return session


@pytest.fixture
def sample_pages():
    return {
        SOURCE_URL: LISTING_HTML,
        ARTICLE_1_URL: ARTICLE_HTML,
        ARTICLE_2_URL: NO_CONTENT_HTML,
        ARTICLE_3_URL: SECOND_ARTICLE_HTML,
    }


@pytest.fixture
def mock_http_session(sample_pages):
    return make_http_session(sample_pages)


@pytest.fixture
def scraper(mock_http_session):
    from src.news.services.content_scraper import ContentScraperService
    return ContentScraperService(session=mock_http_session)


@pytest.fixture
def mock_llm_service():
    service = MagicMock()
    service.is_configured = True
    service.complete = MagicMock(return_value=SUMMARY_280)
    return service


@pytest.fixture
def pipeline_settings():
    from src.config import Settings
    return Settings(
        scrape_sources=[SOURCE_URL],
        scrape_max_retries=3,
        scrape_retry_base_delay=1.0,
        enrichment_max_retries=3,
        enrichment_retry_base_delay=2.0,
        retry_failed_when_idle=False,
        scrape_interval_minutes=30,
        startup_delay_seconds=5,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def cron_service(scraper, mock_llm_service, pipeline_settings, test_db, sleeps):
    from src.news.services.news_cron_service import NewsCronService
    return NewsCronService(
        scraper=scraper,
        llm_service=mock_llm_service,
        settings=pipeline_settings,
        session_factory=lambda: test_db,
        sleep=sleeps.append,
    )


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from src.core.database import Base
    from src.news.models import Article, EnrichmentResult  # noqa: F401

    # Use in-memory SQLite for tests; StaticPool shares it with the request threadpool
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def article_repository(test_db):
    from src.repositories.article_repository import ArticleRepository
    return ArticleRepository(test_db)


@pytest.fixture
def make_article(article_repository):
    from src.news.services.sources import ArticleDraft

    counter = {"n": 0}

    def _make(content="Nội dung bài viết về thị trường chứng khoán hôm nay.", title=None, url=None):
        counter["n"] += 1
        draft = ArticleDraft(
            url=url or f"https://cafef.vn/bai-viet-{counter['n']}-18824101900000{counter['n']}.chn",
            title=title or f"Bài viết {counter['n']}",
            content=content,
        )
        return article_repository.create(draft)

    return _make


@pytest.fixture
async def async_client(test_db, cron_service):
    from httpx import AsyncClient, ASGITransport
    from src.main import app
    from src.core.database import get_db
    from src.api.dependencies import get_manual_cron_service, get_news_cron_service, get_news_scheduler

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_news_cron_service] = lambda: cron_service
    app.dependency_overrides[get_manual_cron_service] = lambda: cron_service
    app.dependency_overrides[get_news_scheduler] = lambda: None

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
