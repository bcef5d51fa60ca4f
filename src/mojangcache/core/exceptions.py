"""
Custom exceptions for mojangcache.
"""


class MojangCacheError(Exception):
    """Base exception for all mojangcache errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class CacheError(MojangCacheError):
    """Raised when a cache operation fails."""

    def __init__(self, operation: str, details: str | None = None):
        super().__init__(f"Cache error during {operation}", details=details)
        self.operation = operation


class StorageUnavailableError(CacheError):
    """Raised when the durable tier cannot be read or written.

    Distinct from a cache miss: an unavailable store never reports "absent".
    """


class CorruptRecordError(MojangCacheError):
    """Raised when a stored row cannot be decoded into an entry."""

    def __init__(self, table: str, key: str, reason: str):
        super().__init__(
            f"Corrupt record in {table}",
            details=f"Row '{key}' is unreadable: {reason}",
        )
        self.table = table
        self.key = key
        self.reason = reason


class UpstreamError(MojangCacheError):
    """Raised when the upstream service answers with a non-success status."""

    def __init__(self, key: str, status_code: int | None = None, details: str | None = None):
        message = f"Upstream lookup failed for {key}"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(message, details=details)
        self.key = key
        self.status_code = status_code


class UpstreamTimeoutError(MojangCacheError):
    """Raised when the upstream service does not answer in time."""

    def __init__(self, key: str, timeout: float | None = None):
        details = None
        if timeout:
            details = f"No response within {timeout:g} seconds."
        super().__init__(f"Upstream lookup timed out for {key}", details=details)
        self.key = key
        self.timeout = timeout


class NetworkError(MojangCacheError):
    """Raised when a network request fails."""

    def __init__(self, url: str, status_code: int | None = None, details: str | None = None):
        message = f"Network request failed: {url}"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(message, details=details)
        self.url = url
        self.status_code = status_code


class ValidationError(MojangCacheError):
    """Raised when data validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason
