from .article import Article
from .enrichment_result import EnrichmentResult

__all__ = ["Article", "EnrichmentResult"]
