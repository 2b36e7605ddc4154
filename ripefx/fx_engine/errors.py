"""
Error kinds for rate acquisition.

Adapters raise ``RateSourceError`` while fetching or parsing; the error is
converted into a failed ``ProviderResult`` before it leaves the adapter, so
nothing here ever reaches the caller of ``acquire_rates()`` as an exception.
"""

import enum


class FetchErrorKind(str, enum.Enum):
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"
    INVALID_DATA = "invalid_data"


class RateSourceError(Exception):
    """Raised inside an adapter when an attempt cannot produce a valid rate map."""

    def __init__(self, kind: FetchErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
