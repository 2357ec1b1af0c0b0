from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ...core.database import Base


class EnrichmentResult(Base):
    __tablename__ = "enrichment_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    summary_text = Column(Text, nullable=False)
    prompt_used = Column(Text, nullable=False)  # Instruction text sent with the article
    processed_at = Column(DateTime, nullable=False, default=func.now())

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    article = relationship("Article", back_populates="enrichment_result")

    def __repr__(self):
        return f"<EnrichmentResult(id={self.id}, article_id={self.article_id})>"
