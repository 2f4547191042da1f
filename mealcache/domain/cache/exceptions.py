"""
Cache Domain Exceptions

Error taxonomy for the read-through cache.
Store failures and compute contract violations propagate to callers;
shape mismatches on cache hits are internal and recovered from.
"""

from typing import Optional, Any, Dict


class CacheException(Exception):
    """Base exception for cache-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class CacheStoreException(CacheException):
    """Raised when the backing store fails (connectivity, timeout).

    The coordinator never retries or wraps these - retry policy belongs
    to the store adapter or the caller.
    """

    def __init__(
        self,
        message: str = "Cache store operation failed",
        error_code: Optional[str] = "CACHE_STORE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        details = dict(details or {})
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(message=message, error_code=error_code, details=details)
        if original_error:
            self.__cause__ = original_error


class CacheShapeMismatchError(CacheException):
    """Raised when a stored blob no longer fits the expected schema.

    Internal: get_or_compute treats it as a miss and recomputes.
    """

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Cached value for '{key}' does not match schema: {reason}",
            error_code="CACHE_SHAPE_MISMATCH",
            details={"key": key, "reason": reason},
        )
        self.key = key


class ComputedValueInvalidError(CacheException):
    """Raised when a freshly computed value fails its declared schema.

    Signals that the compute function and the schema are out of sync.
    Nothing is written to the store.
    """

    def __init__(self, key: str, errors: Optional[list] = None):
        errors = errors or []
        super().__init__(
            message=(
                f"Computed value for '{key}' failed schema validation "
                f"({len(errors)} error(s))"
            ),
            error_code="COMPUTED_VALUE_INVALID",
            details={"key": key, "errors": errors},
        )
        self.key = key
        self.errors = errors
