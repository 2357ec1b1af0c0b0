class NewsDigestError(Exception):
    pass


class ExtractionError(NewsDigestError):
    pass


class NetworkError(ExtractionError):
    pass


class EnrichmentError(NewsDigestError):
    pass


class EmptyContentError(EnrichmentError):
    pass


class EmptyResponseError(EnrichmentError):
    pass


class LLMServiceError(EnrichmentError):
    pass


class ConfigurationError(NewsDigestError):
    pass


class DatabaseError(NewsDigestError):
    pass


class ArticleNotFoundError(NewsDigestError):
    pass


class RetryExhaustedError(NewsDigestError):
    def __init__(self, description: str, attempts: int, last_error: Exception):
        super().__init__(f"{description} failed after {attempts} attempts: {last_error}")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
