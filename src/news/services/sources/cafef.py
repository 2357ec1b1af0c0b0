from .base import SiteProfile

CAFEF_PROFILE = SiteProfile(
    name="CafeF",
    base_url="https://cafef.vn",
    host="cafef.vn",
    listing_selector=(
        "div.list-news-main .tlitem a, "
        "div.listchungkhoannew .tlitem a, "
        ".featured-news a, "
        ".box-category-item a"
    ),
    offline_listing_selector=".tlitem h3 a",
    title_selector=".kbwc-title, .title, h1.title",
    content_selectors=(
        ".knc-content",
        ".detail-content",
        ".article-content",
        'div[id*="content"]',
        ".newscontent",
        ".maincontent",
        ".article-body",
        ".knc-body",
        "#mainContent",
    ),
    date_selector=".kbwc-time, .date, .time, .post-date",
    content_url_marker=".chn",
)
