"""Custom exceptions for the search service."""


class SearchAppError(Exception):
    """Base exception for the search service."""

    pass


class ValidationFailure(SearchAppError):
    """Raised when a query cannot be searched, e.g. it is too short."""

    pass


class UpstreamUnavailable(SearchAppError):
    """Exception raised when the search engine call fails."""

    def __init__(self, message: str, status_code: int = 0, response_text: str = ""):
        self.status_code = status_code
        self.message = message
        self.response_text = response_text
        super().__init__(message)


class EngineTimeout(UpstreamUnavailable):
    """The search engine did not answer within the configured bound."""

    pass


class EngineResponseError(UpstreamUnavailable):
    """The search engine answered with an error status or an unreadable body."""

    def __init__(self, status_code: int, message: str, response_text: str = ""):
        super().__init__(f"Search engine error {status_code}: {message}", status_code, response_text)


class MalformedDocument(SearchAppError):
    """A raw hit could not be read at all."""

    pass


class ConfigurationError(SearchAppError):
    """Exception raised for configuration errors."""

    pass
