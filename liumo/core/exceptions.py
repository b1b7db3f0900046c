"""
Custom exception hierarchy for the Liumo corpus.

Provides specific exception types for different failure modes:
configuration errors, provisioning failures, corpus builds, and search problems.
"""


class LiumoError(Exception):
    """Base exception for all Liumo corpus errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LiumoError):
    """Raised when configuration is invalid or missing."""
    pass


class ProvisionError(LiumoError):
    """Raised when the corpus store cannot be materialized on startup."""

    def __init__(self, message: str, path: str = None, details: dict = None):
        """
        Initialize provisioning error.

        Args:
            message: Error description.
            path: Filesystem path involved in the failure.
            details: Additional context.
        """
        super().__init__(message, details)
        self.path = path


class CorpusBuildError(LiumoError):
    """Raised when the build pipeline cannot produce a corpus store."""
    pass


class SearchError(LiumoError):
    """Raised when search query execution fails."""

    def __init__(self, message: str, query: str = None, details: dict = None):
        """
        Initialize search error.

        Args:
            message: Error description.
            query: The problematic search keyword.
            details: Additional context.
        """
        super().__init__(message, details)
        self.query = query


class SearchConnectionError(SearchError):
    """Raised when the corpus store cannot be opened."""
    pass


class SearchQueryError(SearchError):
    """Raised when a generated statement fails to prepare or execute."""
    pass


class RecordDecodeError(SearchError):
    """Raised when a result row cannot be turned into a record."""

    def __init__(
        self,
        message: str,
        record_id: str = None,
        query: str = None,
        details: dict = None
    ):
        super().__init__(message, query=query, details=details)
        self.record_id = record_id


class SchemaMismatchError(SearchError):
    """Raised when the store's schema version is not one the engine understands."""

    def __init__(self, message: str, found_version: int = None, details: dict = None):
        super().__init__(message, details=details)
        self.found_version = found_version


class DatabaseError(LiumoError):
    """Raised when SQLite operations fail."""
    pass
