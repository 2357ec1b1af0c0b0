from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ...core.database import Base


class Article(Base):
    """
    A scraped news article and its summarization lifecycle.
    The table doubles as the work queue: unprocessed rows are picked up by the summarizer.
    """
    __tablename__ = "articles"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core article info
    title = Column(String(500), nullable=False)
    url = Column(String(1000), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    published_at = Column(DateTime)

    # Processing lifecycle
    scraped_at = Column(DateTime, nullable=False, default=func.now())
    is_processed = Column(Boolean, nullable=False, default=False, index=True)
    processing_attempts = Column(Integer, nullable=False, default=0)
    last_processing_error = Column(Text)
    last_processing_attempt = Column(DateTime)

    # Timestamps
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    enrichment_result = relationship(
        "EnrichmentResult",
        back_populates="article",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Article(id={self.id}, title='{(self.title or '')[:50]}...', processed={self.is_processed})>"
