"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionFetchError(DomainException):
    """Transactions API returned an error or is unavailable"""

    pass


class OracleUnavailableError(DomainException):
    """Forecast oracle timed out, failed, or returned no text"""

    pass


class CacheUnavailableError(DomainException):
    """Forecast cache store could not be read or written"""

    pass
