"""
Content cleaning utilities for news articles
Strips site navigation left in scraped bodies before they are summarized
"""

import re

# Related-articles block appended after the story body
RELATED_BLOCK = re.compile(r'CÙNG CHUYÊN MỤC.*$', re.DOTALL)
# Archive calendar widget: "Xem theo ngày Ngày 1 2 ... Tháng ... Năm ... XEM"
CALENDAR_WIDGET = re.compile(r'Xem theo ngày.*?\bXEM\b', re.DOTALL)
LATEST_NEWS_LABEL = re.compile(r'TIN MỚI')


class ContentCleaner:
    """Utility class for normalizing scraped article text"""

    @staticmethod
    def normalize_article_body(content: str) -> str:
        """
        Remove navigation fragments and collapse whitespace.

        Returns an empty string when nothing but boilerplate is left.
        """
        if not content:
            return ""

        text = ContentCleaner._normalize_whitespace(content)
        text = CALENDAR_WIDGET.sub(' ', text)
        text = RELATED_BLOCK.sub(' ', text)
        text = LATEST_NEWS_LABEL.sub(' ', text)
        return ContentCleaner._normalize_whitespace(text)

    @staticmethod
    def _normalize_whitespace(text: str) -> str:
        return ' '.join(text.split())
